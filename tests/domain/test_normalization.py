from __future__ import annotations

from datetime import UTC, datetime

import pytest
from pydantic import BaseModel, Field

from infragraph.domain.errors import NormalizationError
from infragraph.domain.normalization import normalize_payload, strip_volatile_keys, to_tree


class _Resource(BaseModel):
    resource_id: str = Field(alias="resourceId")
    etag: str


def test_strip_removes_etag_keys_at_any_depth_and_case() -> None:
    payload = {
        "id": "/subscriptions/s/vm1",
        "etag": "W/1",
        "properties": {
            "ETag": "x",
            "zones": ["1", "2", "3"],
            "nics": [{"name": "nic0", "eTAG": "y", "order": 0}, {"name": "nic1", "order": 1}],
        },
        "location": "westeurope",
    }

    result = strip_volatile_keys(payload)

    assert result == {
        "id": "/subscriptions/s/vm1",
        "properties": {
            "zones": ["1", "2", "3"],
            "nics": [{"name": "nic0", "order": 0}, {"name": "nic1", "order": 1}],
        },
        "location": "westeurope",
    }
    assert isinstance(result, dict)
    assert list(result) == ["id", "properties", "location"]
    assert list(result["properties"]) == ["zones", "nics"]  # type: ignore[call-overload]


def test_strip_matches_substrings() -> None:
    payload = {"resourceEtagValue": 1, "keep": {"someEtag": 2, "value": 3}}

    assert strip_volatile_keys(payload) == {"keep": {"value": 3}}


def test_strip_honours_custom_patterns() -> None:
    payload = {"etag": "a", "lastModified": "b", "name": "c"}

    assert strip_volatile_keys(payload, ("lastmodified",)) == {"etag": "a", "name": "c"}


def test_strip_with_no_patterns_is_identity() -> None:
    payload = {"etag": "a", "list": [1, {"etag": 2}]}

    assert strip_volatile_keys(payload, ()) == payload


def test_to_tree_converts_datetimes_tuples_and_models() -> None:
    launched = datetime(2024, 5, 1, 12, 30, tzinfo=UTC)
    payload = {
        "LaunchTime": launched,
        "pair": ("a", "b"),
        "model": _Resource(resourceId="r1", etag="e"),
    }

    assert to_tree(payload) == {
        "LaunchTime": "2024-05-01T12:30:00+00:00",
        "pair": ["a", "b"],
        "model": {"resourceId": "r1", "etag": "e"},
    }


def test_strip_walks_pydantic_models_by_alias() -> None:
    assert strip_volatile_keys(_Resource(resourceId="r1", etag="e")) == {"resourceId": "r1"}


@pytest.mark.parametrize(
    "payload",
    [
        {1: "non-string key"},
        {"nested": {"value": object()}},
        {"raw": b"bytes"},
    ],
)
def test_strip_raises_for_unwalkable_payloads(payload: object) -> None:
    with pytest.raises(NormalizationError):
        strip_volatile_keys(payload)


def test_normalize_payload_falls_back_to_original() -> None:
    marker = object()
    payload = {"etag": "x", "value": marker}

    assert normalize_payload(payload) is payload


def test_normalize_payload_keeps_scalars() -> None:
    assert normalize_payload("plain") == "plain"
    assert normalize_payload(None) is None
