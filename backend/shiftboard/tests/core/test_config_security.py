import pytest
from pydantic import ValidationError

from shiftboard.core.config import Settings
from shiftboard.core.security import create_access_token, decode_access_token
from shiftboard.domain.scheduling.value_objects import Role
from shiftboard.domain.shared import UnauthenticatedError


class TestSettings:
    def test_default_calendar(self, settings):
        calendar = settings.slot_calendar
        assert calendar.size == 8
        assert calendar.label_for(0) == "08:00"

    def test_labels_from_comma_list(self):
        settings = Settings(_env_file=None, SLOT_LABELS="early, mid ,late")
        assert list(settings.slot_calendar.labels) == ["early", "mid", "late"]

    def test_generated_calendar_settings(self):
        settings = Settings(
            _env_file=None, SHIFT_START="06:00", SLOT_MINUTES=30, SLOT_COUNT=3
        )
        assert list(settings.slot_calendar.labels) == ["06:00", "06:30", "07:00"]

    def test_cors_origins(self, settings):
        assert settings.all_cors_origins == ["http://localhost:5173"]

    def test_duplicate_machine_ids_rejected(self):
        with pytest.raises(ValidationError, match="unique"):
            Settings(
                _env_file=None,
                MACHINES=[
                    {"id": "PR-01", "name": "A"},
                    {"id": "PR-01", "name": "B"},
                ],
            )

    def test_bad_shift_rejected(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, SLOT_COUNT=0)

    def test_default_secret_rejected_outside_local(self):
        with pytest.raises(ValidationError, match="changethis"):
            Settings(_env_file=None, ENVIRONMENT="production", SECRET_KEY="changethis")

    def test_default_secret_warns_locally(self):
        with pytest.warns(UserWarning, match="changethis"):
            Settings(_env_file=None, ENVIRONMENT="local", SECRET_KEY="changethis")

    def test_machines_from_environment(self, monkeypatch):
        monkeypatch.setenv(
            "MACHINES", '[{"id": "LZ-1", "name": "Laser", "department": "Cutting"}]'
        )
        settings = Settings(_env_file=None)
        assert [m.id for m in settings.MACHINES] == ["LZ-1"]
        assert settings.MACHINES[0].department == "Cutting"


class TestAccessTokens:
    def test_round_trip(self, settings):
        token = create_access_token("user-7", Role.MANAGER, settings)
        principal = decode_access_token(token, settings)
        assert principal.user_id == "user-7"
        assert principal.role is Role.MANAGER
        assert not principal.is_viewer

    def test_missing_role_is_viewer(self, settings):
        token = create_access_token("user-7", "", settings)
        assert decode_access_token(token, settings).is_viewer

    def test_missing_token(self, settings):
        with pytest.raises(UnauthenticatedError, match="Not authenticated"):
            decode_access_token(None, settings)

    def test_garbage_token(self, settings):
        with pytest.raises(UnauthenticatedError):
            decode_access_token("not.a.token", settings)
