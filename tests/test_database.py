import pytest
from sqlalchemy import inspect, text

from application import create_app
from database import RealEstateContext, UsersContext, register_contexts
from errors import InvalidConnectionStringError, MissingConnectionStringError, StartupError


def test_both_contexts_share_the_configured_connection(make_settings):
    settings = make_settings()
    contexts = register_contexts(settings)

    expected = settings.get_connection_string("DefaultConnection")
    assert isinstance(contexts.users, UsersContext)
    assert isinstance(contexts.real_estate, RealEstateContext)
    assert contexts.users.connection_string == expected
    assert contexts.real_estate.connection_string == expected
    assert str(contexts.users.url) == str(contexts.real_estate.url)


def test_contexts_keep_separate_engines(make_settings):
    contexts = register_contexts(make_settings())
    assert contexts.users.engine is not contexts.real_estate.engine


def test_each_context_creates_only_its_own_tables(make_settings):
    contexts = register_contexts(make_settings())

    contexts.users.ensure_created()
    assert inspect(contexts.users.engine).get_table_names() == ["users"]

    contexts.real_estate.ensure_created()
    assert sorted(inspect(contexts.real_estate.engine).get_table_names()) == ["properties", "users"]


def test_session_is_closed_after_use(make_settings):
    contexts = register_contexts(make_settings())
    sessions = contexts.users.session()
    db = next(sessions)
    db.execute(text("SELECT 1"))
    assert db.in_transaction()
    sessions.close()
    assert not db.in_transaction()


def test_missing_connection_string_aborts_registration(make_settings):
    with pytest.raises(MissingConnectionStringError):
        register_contexts(make_settings(connection_strings={}))


def test_invalid_connection_string_aborts_registration(make_settings):
    settings = make_settings(connection_strings={"DefaultConnection": "definitely not a url"})
    with pytest.raises(InvalidConnectionStringError) as exc_info:
        register_contexts(settings)
    assert exc_info.value.context == "UsersContext"


def test_unknown_dialect_aborts_registration(make_settings):
    settings = make_settings(connection_strings={"DefaultConnection": "nosuchdb://host/db"})
    with pytest.raises(InvalidConnectionStringError):
        register_contexts(settings)


def test_create_app_fails_without_connection_string(make_settings):
    with pytest.raises(StartupError):
        create_app(make_settings(connection_strings={}))
