"""Connection resolver backed by environment variables.

A connection named ``azure-prod`` is read from
``INFRAGRAPH_CONNECTION_AZURE_PROD_USERNAME``, ``..._PASSWORD``, ``..._URL``
and ``..._PROPERTIES`` (a JSON object).
"""

from __future__ import annotations

import json
import os
import re
from typing import TYPE_CHECKING

from infragraph.domain.errors import ConnectionResolutionError
from infragraph.domain.ports import Connection

if TYPE_CHECKING:
    from collections.abc import Mapping

    from infragraph.domain.model import EnvVar

CONNECTION_PREFIX = "INFRAGRAPH_CONNECTION_"
_FIELDS = ("USERNAME", "PASSWORD", "URL", "PROPERTIES")


def connection_env_prefix(name: str) -> str:
    slug = re.sub(r"[^A-Za-z0-9]+", "_", name.strip()).strip("_").upper()
    if not slug:
        raise ConnectionResolutionError(f"invalid connection name {name!r}")
    return f"{CONNECTION_PREFIX}{slug}_"


class EnvironmentConnectionResolver:
    def __init__(self, environ: Mapping[str, str] | None = None) -> None:
        self._environ = environ if environ is not None else os.environ

    def get_connection(self, name: str) -> Connection | None:
        prefix = connection_env_prefix(name)
        values = {field: self._environ.get(prefix + field) for field in _FIELDS}
        if all(value is None for value in values.values()):
            return None
        return Connection(
            name=name,
            username=values["USERNAME"] or "",
            password=values["PASSWORD"] or "",
            url=values["URL"] or None,
            properties=self._properties(prefix, values["PROPERTIES"]),
        )

    def get_env_value(self, var: EnvVar) -> str:
        if var.value is not None:
            return var.value
        if var.from_env is None:
            return ""
        value = self._environ.get(var.from_env)
        if value is None:
            raise ConnectionResolutionError(f"environment variable {var.from_env} is not set")
        return value

    @staticmethod
    def _properties(prefix: str, raw: str | None) -> dict[str, str]:
        if not raw:
            return {}
        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise ConnectionResolutionError(f"{prefix}PROPERTIES is not valid JSON") from exc
        if not isinstance(parsed, dict):
            raise ConnectionResolutionError(f"{prefix}PROPERTIES must be a JSON object")
        return {str(key): str(value) for key, value in parsed.items()}  # pyright: ignore[reportUnknownVariableType, reportUnknownArgumentType]
