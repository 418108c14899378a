import pytest
from pydantic import ValidationError

from horario.core.config import Settings


def test_cors_origins_accept_comma_separated_and_json_list():
    assert Settings(cors_origins="http://a.test, http://b.test,").cors_origins == ["http://a.test", "http://b.test"]
    assert Settings(cors_origins='["http://c.test"]').cors_origins == ["http://c.test"]


def test_log_level_is_normalized():
    assert Settings(log_level=" debug ").log_level == "DEBUG"

    with pytest.raises(ValidationError):
        Settings(log_level="chatty")


def test_populate_seed_from_environment(monkeypatch):
    monkeypatch.setenv("POPULATE_RANDOM_SEED", "99")
    assert Settings().populate_random_seed == 99
