from __future__ import annotations

import json
from typing import TYPE_CHECKING

import pytest

from infragraph.adapters.config_files import load_scrape_config_files, parse_scrape_config
from infragraph.config import ConfigurationError, ScrapeConfigDocumentError
from infragraph.domain.model import ScraperSource

if TYPE_CHECKING:
    from pathlib import Path

MULTI_DOC = """\
name: azure-prod
spec:
  azure:
    - subscriptionID: sub-1
      connection: azure-prod
---
---
aws:
  - region: [eu-west-1, eu-central-1]
    exclude: [rds]
"""


def test_yaml_files_may_hold_several_documents(tmp_path: Path) -> None:
    path = tmp_path / "scrapers.yaml"
    path.write_text(MULTI_DOC, encoding="utf-8")

    configs = load_scrape_config_files([path])

    assert [config.name for config in configs] == ["azure-prod", ""]
    assert all(config.source is ScraperSource.FILE for config in configs)
    assert configs[0].parsed_spec.azure[0].connection == "azure-prod"
    assert configs[1].parsed_spec.aws[0].regions == ["eu-west-1", "eu-central-1"]


def test_directories_are_scanned_for_spec_files(tmp_path: Path) -> None:
    (tmp_path / "b.json").write_text(
        json.dumps({"name": "b", "spec": {"aws": [{}]}}), encoding="utf-8"
    )
    (tmp_path / "a.yml").write_text("name: a\nazure:\n  - subscriptionID: s\n", encoding="utf-8")
    (tmp_path / "notes.txt").write_text("ignored", encoding="utf-8")

    configs = load_scrape_config_files([tmp_path])

    assert [config.name for config in configs] == ["a", "b"]


def test_invalid_spec_raises_configuration_error() -> None:
    with pytest.raises(ConfigurationError, match="invalid scrape spec") as excinfo:
        parse_scrape_config({"spec": {"gcp": []}}, origin="inline")

    assert isinstance(excinfo.value, ScrapeConfigDocumentError)
    assert excinfo.value.origin == "inline"


def test_non_mapping_document_raises() -> None:
    with pytest.raises(ConfigurationError, match="must be a mapping"):
        parse_scrape_config(["azure"])


def test_unreadable_file_raises(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError, match="could not read"):
        load_scrape_config_files([tmp_path / "missing.yaml"])
