import json
import secrets
import warnings
from functools import lru_cache
from typing import Annotated, Any, Literal

from pydantic import AnyUrl, BeforeValidator, computed_field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing_extensions import Self

from shiftboard.domain.scheduling.value_objects import Machine, SlotCalendar


def parse_cors(v: Any) -> list[str] | str:
    if isinstance(v, str) and not v.startswith("["):
        return [i.strip() for i in v.split(",")]
    elif isinstance(v, list | str):
        return v
    raise ValueError(v)


def parse_labels(v: Any) -> list[str]:
    if v is None:
        return []
    if isinstance(v, str):
        if v.startswith("["):
            return json.loads(v)
        return [i.strip() for i in v.split(",") if i.strip()]
    return v


DEFAULT_MACHINES: list[dict[str, str]] = [
    {"id": "PR-01", "name": "Heidelberg Speedmaster", "department": "Printing"},
    {"id": "PR-02", "name": "Komori Lithrone", "department": "Printing"},
    {"id": "PR-03", "name": "HP Indigo 7K", "department": "Printing"},
    {"id": "FN-01", "name": "Polar Guillotine", "department": "Finishing"},
    {"id": "FN-02", "name": "Horizon Folder", "department": "Finishing"},
]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_ignore_empty=True,
        extra="ignore",
    )
    PROJECT_NAME: str = "Shiftboard"
    ENVIRONMENT: Literal["local", "test", "staging", "production"] = "local"
    API_V1_STR: str = "/api/v1"

    SECRET_KEY: str = secrets.token_urlsafe(32)
    JWT_ALGORITHM: str = "HS256"

    BACKEND_CORS_ORIGINS: Annotated[
        list[AnyUrl] | str, BeforeValidator(parse_cors)
    ] = []

    @computed_field  # type: ignore[prop-decorator]
    @property
    def all_cors_origins(self) -> list[str]:
        return [str(origin).rstrip("/") for origin in self.BACKEND_CORS_ORIGINS]

    # Database
    DATABASE_URL: str = "sqlite:///./shiftboard.db"
    DATABASE_ECHO: bool = False
    DATABASE_LOCK_TIMEOUT_SECONDS: float = 10.0

    # Shift calendar
    SHIFT_START: str = "08:00"
    SLOT_MINUTES: int = 60
    SLOT_COUNT: int = 8  # 8-hour shift
    SLOT_LABELS: Annotated[list[str] | str, BeforeValidator(parse_labels)] = []

    # Reference data
    MACHINES: list[Machine] = [Machine(**machine) for machine in DEFAULT_MACHINES]

    # Observability Configuration
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: Literal["json", "console"] = "json"
    LOG_SQL: bool = False
    ENABLE_METRICS: bool = True

    @property
    def slot_calendar(self) -> SlotCalendar:
        """Calendar built from explicit labels when given, else generated."""
        if self.SLOT_LABELS:
            return SlotCalendar(self.SLOT_LABELS)
        return SlotCalendar.for_shift(
            start=self.SHIFT_START,
            slot_minutes=self.SLOT_MINUTES,
            slot_count=self.SLOT_COUNT,
        )

    def _check_default_secret(self, var_name: str, value: str | None) -> None:
        if value == "changethis":
            message = (
                f'The value of {var_name} is "changethis", '
                "for security, please change it, at least for deployments."
            )
            if self.ENVIRONMENT in ("local", "test"):
                warnings.warn(message, stacklevel=1)
            else:
                raise ValueError(message)

    @model_validator(mode="after")
    def _enforce_non_default_secrets(self) -> Self:
        self._check_default_secret("SECRET_KEY", self.SECRET_KEY)
        return self

    @model_validator(mode="after")
    def _check_reference_data(self) -> Self:
        machine_ids = [machine.id for machine in self.MACHINES]
        if len(set(machine_ids)) != len(machine_ids):
            raise ValueError("Machine ids must be unique")
        self.slot_calendar  # raises on a malformed shift definition
        return self


@lru_cache
def get_settings() -> Settings:
    return Settings()
