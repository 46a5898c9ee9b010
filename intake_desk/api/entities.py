"""Entity API Routes: the REST contract the HTTP repository talks to.

    GET    /{Entity}?{field}={value}&order={order}
    GET    /{Entity}/{id}
    POST   /{Entity}
    PATCH  /{Entity}/{id}
    DELETE /{Entity}/{id}
"""

from typing import Any

from fastapi import APIRouter, Body, HTTPException, Request, status

from ..core.exceptions import RecordNotFoundError
from ..repositories import matches_query
from .deps import EntitySetDep

router = APIRouter(tags=["entities"])


@router.get("/{entity_name}")
async def filter_records(
    entity_set: EntitySetDep,
    request: Request,
) -> list[dict[str, Any]]:
    """Exact-match filter on query parameters; ``order`` sorts (``-`` = descending)."""
    params = dict(request.query_params)
    order = params.pop("order", None)
    records = await entity_set.repository.filter({}, order)
    return [r for r in records if matches_query(r, params)]


@router.get("/{entity_name}/{record_id}")
async def get_record(entity_set: EntitySetDep, record_id: str) -> dict[str, Any]:
    record = await entity_set.repository.get(record_id)
    if record is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{entity_set.entity_name} {record_id} not found",
        )
    return record


@router.post("/{entity_name}", status_code=status.HTTP_200_OK)
async def create_record(
    entity_set: EntitySetDep,
    data: dict[str, Any] = Body(...),
) -> dict[str, Any]:
    created = await entity_set.create(data)
    return created.to_record()


@router.patch("/{entity_name}/{record_id}")
async def update_record(
    entity_set: EntitySetDep,
    record_id: str,
    patch: dict[str, Any] = Body(...),
) -> dict[str, Any]:
    try:
        updated = await entity_set.update(record_id, patch)
    except RecordNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{entity_set.entity_name} {record_id} not found",
        )
    return updated.to_record()


@router.delete("/{entity_name}/{record_id}")
async def delete_record(entity_set: EntitySetDep, record_id: str) -> dict[str, Any]:
    return await entity_set.delete(record_id)
