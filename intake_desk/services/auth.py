"""
Auth / Session stand-in.

A single local "current user" represents whoever holds this session. It is
not a security principal. Every identity that comes through ``me()`` or
``login()`` is guaranteed to own (or belong to) exactly one Firm:

1. Firm whose ``created_by`` equals the e-mail
2. Otherwise a firm listing the e-mail as a member
3. Otherwise a default Firm is created and persisted

Callers receive an explicit ``SessionContext`` and pass it on to the
operations that need an identity.
"""

import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass

from ..core.config import Settings
from ..core.exceptions import StoreError
from ..core.http import ApiClient
from ..core.storage import KeyValueStorage
from ..repositories import new_id, utc_now_iso
from ..schemas import Firm, User, default_enabled_fields
from .entity_store import EntityStore

logger = logging.getLogger(__name__)


@dataclass
class SessionContext:
    """The acting user and the firm they work in."""

    user: User
    firm: Firm | None = None

    @property
    def email(self) -> str:
        return self.user.email

    @property
    def display_name(self) -> str:
        return self.user.full_name or self.user.name or self.user.email


# =============================================================================
# FIRM PROVISIONING
# =============================================================================


async def find_firm_for_user(store: EntityStore, email: str) -> Firm | None:
    """Creator match first, then membership."""
    owned = await store.firms.filter({"created_by": email})
    if owned:
        return owned[0]
    for firm in await store.firms.filter():
        if firm.has_member(email):
            return firm
    return None


async def ensure_firm_for_user(
    store: EntityStore,
    email: str,
    settings: Settings,
) -> Firm:
    """Return the user's firm, creating the default one when none exists."""
    firm = await find_firm_for_user(store, email)
    if firm is not None:
        return firm

    firm = await store.firms.create(
        {
            "name": settings.default_firm_name,
            "slug": settings.default_firm_slug,
            "logo_url": "",
            "practice_areas": list(settings.default_practice_areas),
            "intro_text": "",
            "notification_emails": [email],
            "urgent_only_notifications": False,
            "email_template": "",
            "enabled_fields": default_enabled_fields(),
            "follow_up_days": settings.default_follow_up_days,
            "created_by": email,
        }
    )
    logger.info(f"Provisioned firm {firm.id} ({firm.slug}) for {email}")
    return firm


# =============================================================================
# AUTH SERVICES
# =============================================================================


class AuthService(ABC):
    """Session operations shared by the local and remote variants."""

    @abstractmethod
    async def me(self) -> SessionContext:
        pass

    @abstractmethod
    async def login(self, email: str | None = None, name: str | None = None) -> SessionContext:
        pass

    @abstractmethod
    async def logout(self, redirect: str | None = "/") -> str | None:
        """Clear the session. Returns where the caller should navigate, if anywhere."""
        pass


class LocalAuthService(AuthService):
    """Demo session persisted next to the entity document.

    Logging out forgets the session only; entity data is kept.
    """

    def __init__(self, store: EntityStore, storage: KeyValueStorage, settings: Settings):
        self._store = store
        self._storage = storage
        self._settings = settings

    def _load_user(self) -> User | None:
        raw = self._storage.get_item(self._settings.session_key)
        if not raw:
            return None
        try:
            return User.model_validate(json.loads(raw))
        except json.JSONDecodeError as e:
            raise StoreError(f"Stored session is not valid JSON: {e}") from e

    def _save_user(self, user: User) -> None:
        self._storage.set_item(
            self._settings.session_key,
            user.model_dump_json(exclude_none=True),
        )

    def _new_user(self, email: str | None, name: str | None) -> User:
        name = name or self._settings.demo_user_name
        return User(
            id=new_id(),
            email=email or self._settings.demo_user_email,
            name=name,
            full_name=name,
            created_date=utc_now_iso(),
        )

    async def me(self) -> SessionContext:
        user = self._load_user()
        if user is None:
            user = self._new_user(None, None)
            self._save_user(user)
            logger.info(f"Bootstrapped demo session for {user.email}")
        firm = await ensure_firm_for_user(self._store, user.email, self._settings)
        return SessionContext(user=user, firm=firm)

    async def login(self, email: str | None = None, name: str | None = None) -> SessionContext:
        user = self._new_user(email, name)
        self._save_user(user)
        logger.info(f"Logged in as {user.email}")
        firm = await ensure_firm_for_user(self._store, user.email, self._settings)
        return SessionContext(user=user, firm=firm)

    async def logout(self, redirect: str | None = "/") -> str | None:
        self._storage.remove_item(self._settings.session_key)
        return redirect or None


class RemoteAuthService(AuthService):
    """Session held by the remote backend (cookie based)."""

    def __init__(self, client: ApiClient, store: EntityStore, settings: Settings):
        self._client = client
        self._store = store
        self._prefix = settings.api_prefix.rstrip("/")

    async def _context(self, payload: dict) -> SessionContext:
        user = User.model_validate(payload)
        # The backend provisions the firm; here it is only looked up.
        firm = await find_firm_for_user(self._store, user.email)
        return SessionContext(user=user, firm=firm)

    async def me(self) -> SessionContext:
        return await self._context(await self._client.get(f"{self._prefix}/auth/me"))

    async def login(self, email: str | None = None, name: str | None = None) -> SessionContext:
        payload = await self._client.post(
            f"{self._prefix}/auth/login", {"email": email, "name": name}
        )
        return await self._context(payload)

    async def logout(self, redirect: str | None = "/") -> str | None:
        self._client.clear_cookies()
        return redirect or None
