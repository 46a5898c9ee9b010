"""Function API Routes: ``POST /functions/{name}`` runs a named action."""

from typing import Any

from fastapi import APIRouter, Body

from .deps import ClientDep

router = APIRouter(prefix="/functions", tags=["functions"])


@router.post("/{name}")
async def invoke_function(
    name: str,
    client: ClientDep,
    payload: dict[str, Any] | None = Body(default=None),
) -> Any:
    """Run the action and return its result body unwrapped."""
    session = await client.auth.me()
    result = await client.functions.invoke(name, payload or {}, session)
    return result.data
