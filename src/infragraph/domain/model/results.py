"""Transient per-run scrape results and the result accumulator."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, NamedTuple

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from infragraph.domain.errors import InventoryError


class ExternalID(NamedTuple):
    """Provider-native identifier plus config type; the join key across scrapes."""

    external_id: str
    config_type: str


@dataclass(frozen=True, slots=True)
class RelationshipResult:
    config: ExternalID
    related: ExternalID
    relation: str


type ProtectedScope = tuple[str, str | None]


@dataclass(slots=True)
class ConfigResult:
    """One discovered resource, or an error standing in for a failed fetch."""

    id: str = ""
    name: str = ""
    config_class: str = ""
    type: str = ""
    config: object = None
    relationships: list[RelationshipResult] = field(default_factory=list["RelationshipResult"])
    error: InventoryError | None = None

    @property
    def external(self) -> ExternalID:
        return ExternalID(self.id, self.type)

    @property
    def is_error(self) -> bool:
        return self.error is not None


class ScrapeResults:
    """Append-only, ordered accumulator of config results.

    Duplicate external IDs are kept as separate entries; the store collapses
    them by identity when merging.
    """

    __slots__ = ("_results",)

    def __init__(self, results: Iterable[ConfigResult] = ()) -> None:
        self._results: list[ConfigResult] = list(results)

    def __iter__(self) -> Iterator[ConfigResult]:
        return iter(self._results)

    def __len__(self) -> int:
        return len(self._results)

    def __getitem__(self, index: int) -> ConfigResult:
        return self._results[index]

    def __repr__(self) -> str:
        return f"ScrapeResults(items={len(self.items())}, errors={len(self.errors())})"

    def append(self, result: ConfigResult) -> None:
        self._results.append(result)

    def extend(self, results: Iterable[ConfigResult]) -> None:
        self._results.extend(results)

    def add_error(
        self,
        error: InventoryError,
        *,
        config_class: str = "",
        type: str = "",  # noqa: A002
    ) -> ConfigResult:
        result = ConfigResult(config_class=config_class, type=type, error=error)
        self._results.append(result)
        return result

    def items(self) -> list[ConfigResult]:
        return [result for result in self._results if not result.is_error and result.id]

    def errors(self) -> list[ConfigResult]:
        return [result for result in self._results if result.is_error]

    def protected_scopes(self) -> frozenset[ProtectedScope]:
        """Scopes whose previously stored items must survive stale cleanup.

        Each failed category contributes ``(type prefix, config class)``; a failure
        without a class covers the whole type prefix, and one without a type
        covers everything.
        """

        return frozenset(
            (result.type, result.config_class or None) for result in self.errors()
        )


def in_protected_scope(
    config_type: str, config_class: str, scopes: Iterable[ProtectedScope]
) -> bool:
    return any(
        config_type.startswith(prefix) and (scope_class is None or scope_class == config_class)
        for prefix, scope_class in scopes
    )
