"""Shared test fixtures for all test modules."""

import asyncio
from typing import List, Optional

import pytest

from promptprinter.llm.client import ModelBackend
from promptprinter.models.analysis import AnalysisResult
from promptprinter.models.prompt_record import PromptRecord
from promptprinter.services.exceptions import AnalysisFailed, PersistenceFailed
from promptprinter.services.storage import InMemoryPromptStore
from promptprinter.services.workflow import WorkflowController


class FakeBackend(ModelBackend):
    """
    Scripted AI backend.

    Returns ``result`` (or raises ``error``) for every call and records the
    (title, draft_text) pairs it was called with. When ``gate`` is set, each
    call waits for the event before resolving.
    """

    name = "fake"

    def __init__(
        self,
        result: Optional[AnalysisResult] = None,
        error: Optional[AnalysisFailed] = None,
        available: bool = True,
    ):
        self.result = result or AnalysisResult(
            optimized_prompt="Optimized text",
            change_log=["Added constraints"],
        )
        self.error = error
        self.available = available
        self.calls: List[tuple] = []
        self.gate: Optional[asyncio.Event] = None

    async def check_availability(self) -> bool:
        return self.available

    async def analyze(self, title: str, draft_text: str) -> AnalysisResult:
        self.calls.append((title, draft_text))
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return self.result.model_copy(deep=True)


class FlakyStore(InMemoryPromptStore):
    """In-memory store whose operations can be made to fail."""

    def __init__(self, records: Optional[List[PromptRecord]] = None):
        super().__init__(records)
        self.fail_writes = False
        self.fail_reads = False
        self.connected = True
        self.created: List[PromptRecord] = []
        self.updated: List[tuple] = []

    async def test_connection(self) -> bool:
        return self.connected

    async def get_all_prompts(self) -> List[PromptRecord]:
        if self.fail_reads:
            raise PersistenceFailed("get_all_prompts", "storage unavailable")
        return await super().get_all_prompts()

    async def create_prompt(self, record: PromptRecord) -> PromptRecord:
        if self.fail_writes:
            raise PersistenceFailed("create_prompt", "storage unavailable")
        self.created.append(record)
        return await super().create_prompt(record)

    async def update_prompt(self, record_id: int, record: PromptRecord) -> PromptRecord:
        if self.fail_writes:
            raise PersistenceFailed("update_prompt", "storage unavailable")
        self.updated.append((record_id, record))
        return await super().update_prompt(record_id, record)

    async def delete_prompt(self, record_id: int) -> None:
        if self.fail_writes:
            raise PersistenceFailed("delete_prompt", "storage unavailable")
        await super().delete_prompt(record_id)


@pytest.fixture
def fake_backend():
    """AI backend returning a fixed analysis result."""
    return FakeBackend()


@pytest.fixture
def stored_record():
    """A record as storage would return it (id 7, version v3.0)."""
    return PromptRecord(
        id=7,
        title="Order export",
        summary="Export orders for finance",
        content="Export all orders as a spreadsheet.",
        raw_context="Export orders.",
        version="v3.0",
    )


@pytest.fixture
def store(stored_record):
    """Store pre-populated with ``stored_record``."""
    return FlakyStore([stored_record])


@pytest.fixture
def controller(fake_backend, store):
    """Workflow controller over the fake backend and store."""
    return WorkflowController(backend=fake_backend, store=store)


@pytest.fixture
def make_backend():
    """Factory for extra FakeBackend instances."""
    return FakeBackend
