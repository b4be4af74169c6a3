from typing import NamedTuple

import structlog
from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.exc import ArgumentError, NoSuchModuleError
from sqlalchemy.orm import sessionmaker

from errors import InvalidConnectionStringError
from models import RealEstateBase, UsersBase
from settings import Settings

DEFAULT_CONNECTION = "DefaultConnection"

logger = structlog.get_logger(__name__)


class DbContext:
    """An engine plus session factory bound to one set of mapped tables."""

    metadata = None

    def __init__(self, connection_string: str):
        self.connection_string = connection_string
        try:
            self.engine = create_engine(connection_string, **_engine_options(connection_string))
        except (ArgumentError, NoSuchModuleError) as exc:
            raise InvalidConnectionStringError(type(self).__name__, str(exc)) from exc
        self.session_factory = sessionmaker(autoflush=False, bind=self.engine)

    @property
    def url(self):
        return self.engine.url

    def ensure_created(self):
        self.metadata.create_all(bind=self.engine)

    def session(self):
        db = self.session_factory()
        try:
            yield db
        finally:
            db.close()

    def dispose(self):
        self.engine.dispose()


class UsersContext(DbContext):
    metadata = UsersBase.metadata


class RealEstateContext(DbContext):
    metadata = RealEstateBase.metadata


class DataContexts(NamedTuple):
    users: UsersContext
    real_estate: RealEstateContext

    def all(self):
        return (self.users, self.real_estate)


def _engine_options(connection_string: str) -> dict:
    if connection_string.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {"pool_pre_ping": True}


def register_contexts(settings: Settings) -> DataContexts:
    """Build both contexts from the same ``DefaultConnection`` value.

    Raises ``MissingConnectionStringError`` or ``InvalidConnectionStringError``;
    the caller must not start serving in that case.
    """
    connection_string = settings.get_connection_string(DEFAULT_CONNECTION)
    contexts = DataContexts(
        users=UsersContext(connection_string),
        real_estate=RealEstateContext(connection_string),
    )
    for context in contexts.all():
        logger.info(
            "data_context_registered",
            context=type(context).__name__,
            backend=context.url.get_backend_name(),
        )
    return contexts


def get_users_db(request: Request):
    yield from request.app.state.contexts.users.session()


def get_real_estate_db(request: Request):
    yield from request.app.state.contexts.real_estate.session()
