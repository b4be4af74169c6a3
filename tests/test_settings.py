import pytest
from pydantic import ValidationError

from errors import MissingConnectionStringError
from settings import Settings


def test_listener_defaults_to_all_interfaces_on_port_80():
    settings = Settings()
    assert settings.host == "0.0.0.0"
    assert settings.port == 80


def test_environment_defaults_to_production():
    settings = Settings()
    assert settings.environment == "Production"
    assert not settings.is_development()


@pytest.mark.parametrize("name", ["Development", "development", " DEVELOPMENT "])
def test_is_development_ignores_case(name):
    assert Settings(environment=name).is_development()


def test_connection_string_lookup_ignores_key_case():
    settings = Settings(connection_strings={"defaultconnection": "sqlite:///x.db"})
    assert settings.get_connection_string("DefaultConnection") == "sqlite:///x.db"


def test_missing_connection_string_raises():
    with pytest.raises(MissingConnectionStringError) as exc_info:
        Settings().get_connection_string("DefaultConnection")
    assert exc_info.value.name == "DefaultConnection"


def test_blank_connection_string_counts_as_missing():
    settings = Settings(connection_strings={"DefaultConnection": "   "})
    with pytest.raises(MissingConnectionStringError):
        settings.get_connection_string("DefaultConnection")


def test_settings_are_immutable():
    settings = Settings()
    with pytest.raises(ValidationError):
        settings.port = 8080


def test_connection_strings_from_environment(monkeypatch):
    monkeypatch.setenv("CONNECTIONSTRINGS", '{"DefaultConnection": "sqlite:///env.db"}')
    monkeypatch.setenv("APP_ENVIRONMENT", "Development")
    settings = Settings()
    assert settings.get_connection_string("DefaultConnection") == "sqlite:///env.db"
    assert settings.is_development()


def test_appsettings_json_is_read(tmp_path):
    (tmp_path / "appsettings.json").write_text(
        '{"ConnectionStrings": {"DefaultConnection": "sqlite:///file.db"}, "port": 8080}'
    )
    settings = Settings()
    assert settings.get_connection_string("DefaultConnection") == "sqlite:///file.db"
    assert settings.port == 8080


def test_environment_variables_override_appsettings_json(tmp_path, monkeypatch):
    (tmp_path / "appsettings.json").write_text('{"port": 8080}')
    monkeypatch.setenv("PORT", "9090")
    assert Settings().port == 9090
