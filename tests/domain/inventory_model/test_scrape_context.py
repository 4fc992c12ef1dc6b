from __future__ import annotations

import pytest

from infragraph.domain.errors import ConnectionResolutionError
from infragraph.domain.model import EnvVar
from infragraph.domain.ports import Connection
from tests.helpers.inventory import FakeConnectionResolver, make_context, make_spec


def test_context_exposes_parsed_spec() -> None:
    ctx = make_context()

    assert ctx.spec == make_spec()
    assert ctx.volatile_keys == ("etag",)
    assert not ctx.is_cancelled


def test_hydrate_connection_returns_known_connection() -> None:
    connection = Connection(name="prod", username="u", password="p")
    ctx = make_context(connections=FakeConnectionResolver(connections={"prod": connection}))

    assert ctx.hydrate_connection("prod") is connection


def test_hydrate_connection_rejects_unknown_names() -> None:
    ctx = make_context()

    with pytest.raises(ConnectionResolutionError, match="connection missing not found"):
        ctx.hydrate_connection("missing")


def test_get_env_value_wraps_resolver_failures() -> None:
    ctx = make_context()

    with pytest.raises(ConnectionResolutionError, match="failed to get secret key"):
        ctx.get_env_value(EnvVar(from_env="UNSET"), label="secret key")


def test_get_env_value_reads_environment_placeholders() -> None:
    ctx = make_context(connections=FakeConnectionResolver(env={"KEY": "value"}))

    assert ctx.get_env_value(EnvVar(from_env="KEY"), label="key") == "value"
