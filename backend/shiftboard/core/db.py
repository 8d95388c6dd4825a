from collections.abc import Iterable

from sqlalchemy import Engine, event
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine, select

from shiftboard.core.config import Settings
from shiftboard.core.observability import get_logger
from shiftboard.domain.scheduling.value_objects import Machine
from shiftboard.infrastructure.database.models import MachineLock

logger = get_logger(__name__)

# Execution option asking for a write transaction from the first statement
IMMEDIATE = "sqlite_immediate"


def _is_memory_url(url: str) -> bool:
    return url in ("sqlite://", "sqlite:///:memory:") or "mode=memory" in url


def _configure_sqlite(engine: Engine) -> None:
    """
    Let SQLAlchemy emit BEGIN itself so write scopes can ask for
    BEGIN IMMEDIATE and take the database write lock before reading.
    """

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        if conn.get_execution_options().get(IMMEDIATE):
            conn.exec_driver_sql("BEGIN IMMEDIATE")
        else:
            conn.exec_driver_sql("BEGIN")


def create_db_engine(
    database_url: str,
    echo: bool = False,
    lock_timeout_seconds: float = 10.0,
) -> Engine:
    engine_kwargs: dict = {"echo": echo}

    if database_url.startswith("sqlite"):
        engine_kwargs["connect_args"] = {
            "timeout": lock_timeout_seconds,
            "check_same_thread": False,
        }
        if _is_memory_url(database_url):
            engine_kwargs["poolclass"] = StaticPool
        engine = create_engine(database_url, **engine_kwargs)
        _configure_sqlite(engine)
        return engine

    engine_kwargs["pool_pre_ping"] = True
    engine_kwargs["pool_recycle"] = 3600
    engine_kwargs["connect_args"] = {"connect_timeout": int(lock_timeout_seconds)}
    return create_engine(database_url, **engine_kwargs)


def engine_from_settings(settings: Settings) -> Engine:
    return create_db_engine(
        settings.DATABASE_URL,
        echo=settings.DATABASE_ECHO,
        lock_timeout_seconds=settings.DATABASE_LOCK_TIMEOUT_SECONDS,
    )


def init_db(engine: Engine, machines: Iterable[Machine]) -> None:
    """Create tables and make sure every configured machine has a lock row."""
    SQLModel.metadata.create_all(engine)

    with Session(engine) as session:
        existing = set(session.exec(select(MachineLock.machine_id)).all())
        missing = [machine.id for machine in machines if machine.id not in existing]
        for machine_id in missing:
            session.add(MachineLock(machine_id=machine_id))
        session.commit()

    if missing:
        logger.info("Machine lock rows seeded", machines=missing)
