"""Payload normalization: drop volatile bookkeeping keys before storage.

Provider APIs return values such as etags that change on every call; storing
them would register a change for every resource on every run.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import date, datetime
from typing import TYPE_CHECKING

from pydantic import BaseModel

from infragraph.domain.errors import NormalizationError

if TYPE_CHECKING:
    from collections.abc import Iterable

type JSONValue = dict[str, JSONValue] | list[JSONValue] | str | int | float | bool | None

DEFAULT_VOLATILE_KEYS: tuple[str, ...] = ("etag",)

log = logging.getLogger(__name__)


def to_tree(payload: object) -> JSONValue:
    """Convert ``payload`` into plain objects, arrays and scalars."""

    if payload is None or isinstance(payload, str | bool | int | float):
        return payload
    if isinstance(payload, BaseModel):
        return to_tree(payload.model_dump(mode="json", by_alias=True, exclude_unset=True))
    if isinstance(payload, datetime | date):
        return payload.isoformat()
    if isinstance(payload, Mapping):
        tree: dict[str, JSONValue] = {}
        for key, value in payload.items():  # pyright: ignore[reportUnknownVariableType]
            if not isinstance(key, str):
                raise NormalizationError(f"non-string object key {key!r}")
            tree[key] = to_tree(value)
        return tree
    if isinstance(payload, list | tuple):
        return [to_tree(value) for value in payload]  # pyright: ignore[reportUnknownVariableType]
    raise NormalizationError(f"cannot walk value of type {type(payload).__name__}")


def _strip(tree: JSONValue, patterns: tuple[str, ...]) -> JSONValue:
    if isinstance(tree, dict):
        return {
            key: _strip(value, patterns)
            for key, value in tree.items()
            if not any(pattern in key.lower() for pattern in patterns)
        }
    if isinstance(tree, list):
        return [_strip(value, patterns) for value in tree]
    return tree


def strip_volatile_keys(
    payload: object,
    patterns: Iterable[str] = DEFAULT_VOLATILE_KEYS,
) -> JSONValue:
    """Remove every object key containing one of ``patterns`` (case-insensitive), at any depth.

    Key order and array order are preserved. Raises :class:`NormalizationError`
    when the payload is not a walkable tree.
    """

    lowered = tuple(pattern.lower() for pattern in patterns if pattern)
    try:
        return _strip(to_tree(payload), lowered)
    except RecursionError as exc:
        raise NormalizationError("payload nesting too deep") from exc


def normalize_payload(
    payload: object,
    patterns: Iterable[str] = DEFAULT_VOLATILE_KEYS,
) -> object:
    """Like :func:`strip_volatile_keys`, but fall back to the original payload."""

    try:
        return strip_volatile_keys(payload, patterns)
    except NormalizationError as exc:
        log.debug("Storing payload unfiltered: %s", exc)
        return payload
