from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING
from uuid import uuid4

import pytest

from infragraph.domain.errors import ImmutableScrapeConfigError, ScrapeConfigNotFoundError
from infragraph.domain.model import ConfigItem, Evidence, ExternalID, ScraperSource
from infragraph.domain.reconciliation import (
    delete_scrape_config,
    persist_declarative_scrape_config,
    upsert_scrape_config,
)
from tests.helpers.inventory import make_scrape_config, make_spec

if TYPE_CHECKING:
    from collections.abc import Callable
    from uuid import UUID

    from infragraph.adapters.sqlalchemy.unit_of_work import SqlAlchemyUnitOfWork

    UowFactory = Callable[[], SqlAlchemyUnitOfWork]

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=UTC)


def _add_item(uow_factory: UowFactory, scraper_id: UUID, external_id: str) -> UUID:
    item = ConfigItem(external_id=external_id, type="Test::Thing", scraper_id=scraper_id)
    with uow_factory() as uow:
        uow.repositories.config_items.add(item)
        uow.commit()
    return item.id


def _load_item(uow_factory: UowFactory, external_id: str) -> ConfigItem:
    with uow_factory() as uow:
        item = uow.repositories.config_items.get_by_external_id(
            ExternalID(external_id, "Test::Thing")
        )
    assert item is not None
    return item


def test_upsert_is_idempotent_per_spec(sqlite_unit_of_work: UowFactory) -> None:
    first = upsert_scrape_config(sqlite_unit_of_work(), make_scrape_config())
    second = upsert_scrape_config(sqlite_unit_of_work(), make_scrape_config(name="other"))

    assert second.id == first.id
    assert first.name == make_spec().generate_name()
    with sqlite_unit_of_work() as uow:
        assert len(uow.repositories.scrapers.list_active()) == 1


def test_upsert_keeps_distinct_specs_apart(sqlite_unit_of_work: UowFactory) -> None:
    aws = make_scrape_config({"aws": [{"region": ["eu-west-1"]}]}, name="aws")

    upsert_scrape_config(sqlite_unit_of_work(), make_scrape_config(name="azure"))
    upsert_scrape_config(sqlite_unit_of_work(), aws)

    with sqlite_unit_of_work() as uow:
        names = [config.name for config in uow.repositories.scrapers.list_active()]
    assert [name.split("-")[0] for name in names] == ["azure", "aws"]


def test_upsert_names_stay_distinct_for_equal_display_names(
    sqlite_unit_of_work: UowFactory,
) -> None:
    azure = upsert_scrape_config(sqlite_unit_of_work(), make_scrape_config(name="prod"))
    aws = upsert_scrape_config(
        sqlite_unit_of_work(), make_scrape_config({"aws": [{}]}, name="prod")
    )

    assert azure.name.startswith("prod-")
    assert aws.name.startswith("prod-")
    assert azure.name != aws.name


def test_created_at_follows_insertion_order(sqlite_unit_of_work: UowFactory) -> None:
    built_first = make_scrape_config({"aws": [{"region": ["eu-west-1"]}]})
    built_second = make_scrape_config()

    second = upsert_scrape_config(sqlite_unit_of_work(), built_second)
    first = upsert_scrape_config(sqlite_unit_of_work(), built_first)

    assert second.created_at <= first.created_at
    with sqlite_unit_of_work() as uow:
        active = uow.repositories.scrapers.list_active()
    assert [config.id for config in active] == [second.id, first.id]


def test_declarative_insert_update_and_noop(sqlite_unit_of_work: UowFactory) -> None:
    uid = uuid4()
    spec = make_spec()
    changed_spec = make_spec({"azure": [{"subscriptionID": "sub-1", "exclude": ["dns"]}]})

    assert persist_declarative_scrape_config(sqlite_unit_of_work(), uid, "prod", spec)
    assert not persist_declarative_scrape_config(sqlite_unit_of_work(), uid, "prod", spec)
    assert persist_declarative_scrape_config(sqlite_unit_of_work(), uid, "prod", changed_spec)

    with sqlite_unit_of_work() as uow:
        stored = uow.repositories.scrapers.get(uid)
    assert stored is not None
    assert stored.source is ScraperSource.DECLARATIVE
    assert stored.parsed_spec == changed_spec


def test_declarative_update_rejects_file_configs(sqlite_unit_of_work: UowFactory) -> None:
    config = upsert_scrape_config(sqlite_unit_of_work(), make_scrape_config(name="file"))

    with pytest.raises(ImmutableScrapeConfigError):
        persist_declarative_scrape_config(sqlite_unit_of_work(), config.id, "file", make_spec())


def test_delete_detaches_referenced_items_and_deletes_the_rest(
    sqlite_unit_of_work: UowFactory,
) -> None:
    config = upsert_scrape_config(sqlite_unit_of_work(), make_scrape_config())
    referenced = _add_item(sqlite_unit_of_work, config.id, "kept")
    dropped = _add_item(sqlite_unit_of_work, config.id, "dropped")
    with sqlite_unit_of_work() as uow:
        uow.repositories.evidences.add(Evidence(config_id=referenced, description="audit"))
        uow.commit()

    plan = delete_scrape_config(sqlite_unit_of_work(), config.id, now=NOW)

    assert plan.detach == {referenced}
    assert plan.delete == {dropped}
    kept_item = _load_item(sqlite_unit_of_work, "kept")
    assert kept_item.scraper_id is None
    assert not kept_item.is_deleted
    dropped_item = _load_item(sqlite_unit_of_work, "dropped")
    assert dropped_item.deleted_at == NOW
    with sqlite_unit_of_work() as uow:
        stored = uow.repositories.scrapers.get(config.id)
        assert stored is not None
        assert stored.deleted_at == NOW
        assert uow.repositories.scrapers.list_active() == []
        assert len(uow.repositories.evidences.for_item(referenced)) == 1


def test_delete_twice_keeps_the_first_timestamp(sqlite_unit_of_work: UowFactory) -> None:
    config = upsert_scrape_config(sqlite_unit_of_work(), make_scrape_config())

    delete_scrape_config(sqlite_unit_of_work(), config.id, now=NOW)
    plan = delete_scrape_config(
        sqlite_unit_of_work(), config.id, now=datetime(2025, 1, 1, tzinfo=UTC)
    )

    assert not plan
    with sqlite_unit_of_work() as uow:
        stored = uow.repositories.scrapers.get(config.id)
    assert stored is not None
    assert stored.deleted_at == NOW


def test_delete_unknown_config_raises(sqlite_unit_of_work: UowFactory) -> None:
    with pytest.raises(ScrapeConfigNotFoundError):
        delete_scrape_config(sqlite_unit_of_work(), uuid4())


def test_deleted_spec_can_be_stored_again(sqlite_unit_of_work: UowFactory) -> None:
    config = upsert_scrape_config(sqlite_unit_of_work(), make_scrape_config())
    delete_scrape_config(sqlite_unit_of_work(), config.id, now=NOW)

    again = upsert_scrape_config(sqlite_unit_of_work(), make_scrape_config())

    assert again.id != config.id
