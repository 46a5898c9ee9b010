"""FastAPI dependencies for the gateway."""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from ..client import IntakeDeskClient
from ..core.exceptions import UnknownEntityError
from ..services.entity_store import EntitySet


def get_client(request: Request) -> IntakeDeskClient:
    """The client the app was started with."""
    client = getattr(request.app.state, "client", None)
    if client is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Store not initialized",
        )
    return client


ClientDep = Annotated[IntakeDeskClient, Depends(get_client)]


def get_entity_set(entity_name: str, client: ClientDep) -> EntitySet:
    try:
        return client.entities.entity(entity_name)
    except UnknownEntityError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Unknown entity type {entity_name}",
        )


EntitySetDep = Annotated[EntitySet, Depends(get_entity_set)]
