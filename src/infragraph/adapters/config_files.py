"""Load scrape configs from YAML or JSON files."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import TYPE_CHECKING

import yaml
from pydantic import ValidationError

from infragraph.config import ScrapeConfigDocumentError
from infragraph.domain.model import ScrapeConfig, ScraperSource, ScraperSpec

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

log = logging.getLogger(__name__)

SPEC_SUFFIXES = frozenset({".yaml", ".yml", ".json"})


def _documents(path: Path) -> Iterator[object]:
    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() == ".json":
        yield json.loads(text)
        return
    yield from yaml.safe_load_all(text)


def parse_scrape_config(document: object, *, origin: str = "<document>") -> ScrapeConfig:
    """Build a file-sourced scrape config from one document.

    The document is either ``{"name": ..., "spec": {...}}`` or the spec itself.
    """

    if not isinstance(document, Mapping):
        raise ScrapeConfigDocumentError(origin, "scrape config must be a mapping")
    body: Mapping[str, object] = document  # pyright: ignore[reportUnknownVariableType]
    name = body.get("name")
    raw_spec = body["spec"] if "spec" in body else {k: v for k, v in body.items() if k != "name"}
    try:
        spec = ScraperSpec.model_validate(raw_spec)
    except ValidationError as exc:
        raise ScrapeConfigDocumentError(origin, f"invalid scrape spec: {exc}") from exc
    return ScrapeConfig.from_spec(
        spec, name=str(name) if name else "", source=ScraperSource.FILE
    )


def iter_spec_files(paths: Iterable[str | Path]) -> Iterator[Path]:
    for raw in paths:
        path = Path(raw)
        if path.is_dir():
            yield from sorted(p for p in path.iterdir() if p.suffix.lower() in SPEC_SUFFIXES)
        else:
            yield path


def load_scrape_config_files(paths: Iterable[str | Path]) -> list[ScrapeConfig]:
    configs: list[ScrapeConfig] = []
    for path in iter_spec_files(paths):
        try:
            documents = list(_documents(path))
        except (OSError, yaml.YAMLError, json.JSONDecodeError) as exc:
            raise ScrapeConfigDocumentError(
                str(path), f"could not read scrape config: {exc}"
            ) from exc
        for index, document in enumerate(documents):
            if document is None:
                continue
            configs.append(parse_scrape_config(document, origin=f"{path}[{index}]"))
        log.debug("Loaded %d scrape config document(s) from %s", len(documents), path)
    return configs
