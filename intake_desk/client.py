"""Client factory: picks the local or remote implementations once, at startup.

    client = await create_client()
    session = await client.auth.me()
    intakes = await client.entities.intakes.filter(
        {"firm_id": session.firm.id}, "-created_date"
    )
    await client.functions.invoke("processIntake", {"intake_id": intakes[0].id})

With ``INTAKE_API_URL`` set every call goes to that backend; otherwise the
store lives in local storage (file, memory) or an SQL database.
"""

import logging
from dataclasses import dataclass, field

import httpx
from sqlalchemy.ext.asyncio import AsyncEngine

from .core.config import Settings, get_settings
from .core.database import close_db, create_engine, create_session_factory, init_db
from .core.http import ApiClient
from .core.storage import FileStorage, KeyValueStorage, MemoryStorage
from .repositories import (
    DEFAULT_COLLECTIONS,
    DocumentRepository,
    EntityRepository,
    HttpRepository,
    JsonDocument,
    SqlRepository,
)
from .services.auth import AuthService, LocalAuthService, RemoteAuthService
from .services.entity_store import EntityStore
from .services.functions import (
    FunctionDispatcher,
    LocalFunctionDispatcher,
    RemoteFunctionDispatcher,
)
from .services.uploads import LocalUploader, RemoteUploader, Uploader
from .services.urgency import UrgencyClassifier
from .services.workflow import IntakeWorkflow

logger = logging.getLogger(__name__)


@dataclass
class IntakeDeskClient:
    """Entities, functions, auth and uploads behind one object."""

    settings: Settings
    entities: EntityStore
    functions: FunctionDispatcher
    auth: AuthService
    uploads: Uploader
    storage: KeyValueStorage | None = None
    api_client: ApiClient | None = None
    engine: AsyncEngine | None = None
    workflow: IntakeWorkflow = field(init=False)

    def __post_init__(self) -> None:
        self.workflow = IntakeWorkflow(self.entities, self.functions, self.settings)

    @property
    def is_remote(self) -> bool:
        return self.api_client is not None

    async def aclose(self) -> None:
        if self.api_client is not None:
            await self.api_client.aclose()
        if self.engine is not None:
            await close_db(self.engine)


def create_storage(settings: Settings) -> KeyValueStorage:
    if settings.storage_backend == "memory":
        return MemoryStorage()
    return FileStorage(settings.storage_dir)


async def create_client(
    settings: Settings | None = None,
    *,
    storage: KeyValueStorage | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> IntakeDeskClient:
    """Build the client for the configured backend.

    ``storage`` overrides the configured key/value storage for the document
    and the session; ``transport`` overrides the HTTP transport used to reach
    a remote backend.
    """
    settings = settings or get_settings()

    if settings.remote_enabled:
        api_client = ApiClient.from_settings(settings, transport=transport)
        repositories: dict[str, EntityRepository] = {
            name: HttpRepository(name, api_client, settings.api_prefix)
            for name in DEFAULT_COLLECTIONS
        }
        store = EntityStore(repositories)
        logger.info(f"Using remote backend at {settings.api_base_url}")
        return IntakeDeskClient(
            settings=settings,
            entities=store,
            functions=RemoteFunctionDispatcher(api_client, settings),
            auth=RemoteAuthService(api_client, store, settings),
            uploads=RemoteUploader(api_client, settings),
            api_client=api_client,
        )

    storage = storage or create_storage(settings)
    engine = None
    if settings.storage_backend == "sql":
        engine = create_engine(settings)
        await init_db(engine)
        session_factory = create_session_factory(engine)
        repositories = {
            name: SqlRepository(name, session_factory) for name in DEFAULT_COLLECTIONS
        }
        logger.info("Using SQL store")
    else:
        document = JsonDocument(storage, settings.storage_key)
        repositories = {
            name: DocumentRepository(name, document) for name in DEFAULT_COLLECTIONS
        }
        logger.info(f"Using local document store ({settings.storage_backend})")

    store = EntityStore(repositories)
    return IntakeDeskClient(
        settings=settings,
        entities=store,
        functions=LocalFunctionDispatcher(store, UrgencyClassifier.from_settings(settings)),
        auth=LocalAuthService(store, storage, settings),
        uploads=LocalUploader(),
        storage=storage,
        engine=engine,
    )
