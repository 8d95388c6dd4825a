from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import Engine

from shiftboard.application.dtos import CreateJobRequest
from shiftboard.application.services import JobService
from shiftboard.core.config import Settings
from shiftboard.core.db import create_db_engine, init_db
from shiftboard.core.security import Principal, create_access_token
from shiftboard.domain.scheduling.value_objects import Machine, Role, SlotCalendar
from shiftboard.infrastructure.database.repositories import SqlJobRepository
from shiftboard.infrastructure.memory import InMemoryJobRepository
from shiftboard.main import create_app

TEST_SECRET = "test-secret-key-for-shiftboard-tests"


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        ENVIRONMENT="test",
        SECRET_KEY=TEST_SECRET,
        DATABASE_URL="sqlite://",
        LOG_FORMAT="console",
        LOG_LEVEL="WARNING",
        BACKEND_CORS_ORIGINS="http://localhost:5173",
    )


@pytest.fixture
def calendar() -> SlotCalendar:
    return SlotCalendar.for_shift("08:00", 60, 8)


@pytest.fixture
def machines() -> list[Machine]:
    return [
        Machine(id="PR-01", name="Heidelberg Speedmaster", department="Printing"),
        Machine(id="PR-02", name="Komori Lithrone", department="Printing"),
        Machine(id="FN-01", name="Polar Guillotine", department="Finishing"),
    ]


@pytest.fixture
def memory_repository() -> InMemoryJobRepository:
    return InMemoryJobRepository()


@pytest.fixture
def job_service(
    memory_repository: InMemoryJobRepository,
    machines: list[Machine],
    calendar: SlotCalendar,
) -> JobService:
    return JobService(memory_repository, machines, calendar)


@pytest.fixture
def manager() -> Principal:
    return Principal(user_id="manager-1", role=Role.MANAGER)


@pytest.fixture
def admin() -> Principal:
    return Principal(user_id="admin-1", role=Role.ADMIN)


@pytest.fixture
def employee() -> Principal:
    return Principal(user_id="employee-1", role=Role.EMPLOYEE)


@pytest.fixture
def sqlite_engine(tmp_path, machines: list[Machine]) -> Generator[Engine, None, None]:
    """File-backed database so several connections see the same data."""
    engine = create_db_engine(
        f"sqlite:///{tmp_path / 'shiftboard-test.db'}", lock_timeout_seconds=30.0
    )
    init_db(engine, machines)
    yield engine
    engine.dispose()


@pytest.fixture
def sql_repository(sqlite_engine: Engine) -> SqlJobRepository:
    return SqlJobRepository(sqlite_engine)


@pytest.fixture
def client(
    settings: Settings, machines: list[Machine]
) -> Generator[TestClient, None, None]:
    settings = settings.model_copy(update={"MACHINES": machines})
    app = create_app(settings, repository=InMemoryJobRepository())
    with TestClient(app) as c:
        yield c


def token_headers(settings: Settings, user_id: str, role: Role | str) -> dict[str, str]:
    token = create_access_token(user_id, role, settings)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def manager_headers(settings: Settings) -> dict[str, str]:
    return token_headers(settings, "manager-1", Role.MANAGER)


@pytest.fixture
def employee_headers(settings: Settings) -> dict[str, str]:
    return token_headers(settings, "employee-1", Role.EMPLOYEE)


@pytest.fixture
def job_request():
    """Build a create payload; keyword arguments override wire fields."""

    def _build(**overrides) -> CreateJobRequest:
        payload = {
            "jobId": "JOB-001",
            "name": "Brochure run",
            "machineId": "PR-01",
            "startSlot": 0,
            "durationSlots": 1,
        }
        payload.update(overrides)
        return CreateJobRequest.model_validate(payload)

    return _build
