"""Unit tests for the deliberation infrastructure stubs."""

from __future__ import annotations

from dataclasses import replace

from src.domain.models.actor import SYSTEM_ACTOR, Actor
from src.domain.models.committee import Committee
from src.domain.models.execution_item import LinkedEntityType
from src.infrastructure.adapters.system_time_authority import SystemTimeAuthority
from src.infrastructure.stubs import (
    ActorProviderStub,
    CommitteeDirectoryStub,
    DeliberationRepositoryStub,
    EntityReferenceValidatorStub,
)
from tests.helpers.deliberation_factory import T0, make_item


class TestDeliberationRepositoryStub:
    async def test_save_replaces(self) -> None:
        repo = DeliberationRepositoryStub()
        item = make_item()

        await repo.save(item)
        await repo.save(replace(item, title="Renamed"))

        assert (await repo.get(item.item_id)).title == "Renamed"
        assert repo.save_count == 2
        assert await repo.get("missing") is None

    async def test_list_newest_first(self) -> None:
        repo = DeliberationRepositoryStub()
        old = make_item(created_at=T0.replace(year=2025))
        new = make_item(submitted_at=T0.replace(month=6))
        repo.add_item(old)
        repo.add_item(new)

        assert await repo.list_all() == [new, old]

        repo.clear()
        assert await repo.list_all() == []


class TestCommitteeDirectoryStub:
    async def test_standard_catalogue(self) -> None:
        directory = CommitteeDirectoryStub()

        assert (await directory.get_committee("finance")).name == "Finance Committee"
        assert await directory.get_voter_population("finance") == 5
        assert await directory.get_committee("marketing") is None
        assert await directory.get_voter_population("marketing") is None

    async def test_overrides(self) -> None:
        directory = CommitteeDirectoryStub()
        directory.add_committee(Committee("ops", "Ops Council", "OPS", voter_population=7))
        directory.set_voter_population("hr", 11)

        assert await directory.get_voter_population("ops") == 7
        assert await directory.get_voter_population("hr") == 11


class TestSmallStubs:
    def test_actor_provider(self) -> None:
        provider = ActorProviderStub()
        assert provider.current_actor() == SYSTEM_ACTOR

        provider.set_actor(Actor("u-1", "Una"))
        assert provider.current_actor().actor_id == "u-1"

    async def test_entity_validator(self) -> None:
        validator = EntityReferenceValidatorStub()
        validator.register(LinkedEntityType.CONTRACT, "C-9")

        assert await validator.exists(LinkedEntityType.CONTRACT, "C-9")
        assert not await validator.exists(LinkedEntityType.PROJECT, "C-9")

    def test_system_time_is_utc(self) -> None:
        assert SystemTimeAuthority().now().utcoffset().total_seconds() == 0
