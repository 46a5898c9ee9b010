"""Auth API Routes for the demo session.

The gateway keeps one server-side session (the same stand-in the local
client uses), so every caller acts as that user.
"""

from typing import Any

from fastapi import APIRouter
from pydantic import BaseModel

from .deps import ClientDep

router = APIRouter(prefix="/auth", tags=["auth"])


class LoginRequest(BaseModel):
    """Identity to start a session with; missing fields fall back to the demo user."""
    email: str | None = None
    name: str | None = None


@router.get("/me")
async def get_me(client: ClientDep) -> dict[str, Any]:
    session = await client.auth.me()
    return session.user.model_dump(exclude_none=True)


@router.post("/login")
async def login(request: LoginRequest, client: ClientDep) -> dict[str, Any]:
    session = await client.auth.login(email=request.email, name=request.name)
    return session.user.model_dump(exclude_none=True)


@router.post("/logout")
async def logout(client: ClientDep) -> dict[str, Any]:
    await client.auth.logout(redirect=None)
    return {"ok": True}
