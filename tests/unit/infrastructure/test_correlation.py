"""Unit tests for correlation ID management."""

import asyncio
import uuid

from src.infrastructure.observability.correlation import (
    correlation_id_processor,
    generate_correlation_id,
    get_correlation_id,
    set_correlation_id,
)


class TestGenerateCorrelationId:
    def test_generates_uuid7(self) -> None:
        assert uuid.UUID(generate_correlation_id()).version == 7

    def test_unique(self) -> None:
        assert len({generate_correlation_id() for _ in range(100)}) == 100


class TestCorrelationIdContext:
    def test_set_and_get(self) -> None:
        set_correlation_id("req-1")

        assert get_correlation_id() == "req-1"

    async def test_isolated_between_tasks(self) -> None:
        async def worker(value: str) -> str:
            set_correlation_id(value)
            await asyncio.sleep(0)
            return get_correlation_id()

        results = await asyncio.gather(worker("a"), worker("b"))

        assert results == ["a", "b"]


class TestCorrelationIdProcessor:
    def test_adds_current_id(self) -> None:
        set_correlation_id("req-2")

        event = correlation_id_processor(None, "info", {"event": "x"})

        assert event["correlation_id"] == "req-2"

    def test_keeps_explicit_id(self) -> None:
        set_correlation_id("req-3")

        event = correlation_id_processor(None, "info", {"event": "x", "correlation_id": "own"})

        assert event["correlation_id"] == "own"

    def test_no_context_adds_nothing(self) -> None:
        set_correlation_id("")

        assert "correlation_id" not in correlation_id_processor(None, "info", {"event": "x"})
