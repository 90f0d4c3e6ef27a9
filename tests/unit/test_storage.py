"""Unit tests for the storage collaborators."""

import json
from unittest.mock import AsyncMock, Mock, patch

import httpx
import pytest

from promptprinter.models.config import StorageConfig, SupabaseConfig
from promptprinter.models.prompt_record import PromptRecord
from promptprinter.services.exceptions import PersistenceFailed
from promptprinter.services.storage import (
    InMemoryPromptStore,
    JsonFilePromptStore,
    SupabasePromptStore,
    create_store,
)


class TestInMemoryPromptStore:
    """Test the process-local store."""

    @pytest.mark.asyncio
    async def test_create_assigns_id_and_timestamp(self):
        store = InMemoryPromptStore()

        first = await store.create_prompt(PromptRecord(title="A", content="a"))
        second = await store.create_prompt(PromptRecord(title="B", content="b"))

        assert (first.id, second.id) == (1, 2)
        assert first.created_at is not None

    @pytest.mark.asyncio
    async def test_returned_records_are_copies(self):
        store = InMemoryPromptStore([PromptRecord(id=1, title="A")])

        listed = await store.get_all_prompts()
        listed[0].title = "changed"

        assert (await store.get_all_prompts())[0].title == "A"

    @pytest.mark.asyncio
    async def test_update_and_delete_missing_ids_fail(self):
        store = InMemoryPromptStore()

        with pytest.raises(PersistenceFailed):
            await store.update_prompt(5, PromptRecord(title="A"))
        with pytest.raises(PersistenceFailed):
            await store.delete_prompt(5)


class TestJsonFilePromptStore:
    """Test the local JSON file store."""

    @pytest.fixture
    def path(self, tmp_path):
        return tmp_path / "data" / "prompts.json"

    @pytest.mark.asyncio
    async def test_missing_file_is_empty_and_connected(self, path):
        store = JsonFilePromptStore(path)

        assert await store.test_connection() is True
        assert await store.get_all_prompts() == []
        assert not path.exists()

    @pytest.mark.asyncio
    async def test_create_update_delete_round_trip(self, path):
        store = JsonFilePromptStore(path)

        created = await store.create_prompt(
            PromptRecord(title="Orders", content="optimized", raw_context="raw")
        )
        assert created.id == 1

        updated = await store.update_prompt(
            created.id, created.model_copy(update={"content": "v2 text", "version": "v2.0"})
        )
        assert updated.created_at == created.created_at

        reloaded = await JsonFilePromptStore(path).get_all_prompts()
        assert len(reloaded) == 1
        assert reloaded[0].content == "v2 text"
        assert reloaded[0].raw_context == "raw"
        assert reloaded[0].version == "v2.0"

        await store.delete_prompt(created.id)
        assert await store.get_all_prompts() == []

    @pytest.mark.asyncio
    async def test_ids_are_not_reused_after_delete(self, path):
        store = JsonFilePromptStore(path)
        first = await store.create_prompt(PromptRecord(title="A"))
        await store.delete_prompt(first.id)

        second = await store.create_prompt(PromptRecord(title="B"))

        assert second.id == 2

    @pytest.mark.asyncio
    async def test_listing_is_newest_first(self, path):
        store = JsonFilePromptStore(path)
        await store.create_prompt(PromptRecord(title="older"))
        await store.create_prompt(PromptRecord(title="newer"))

        titles = [p.title for p in await store.get_all_prompts()]

        assert titles == ["newer", "older"]

    @pytest.mark.asyncio
    async def test_corrupt_file(self, path):
        path.parent.mkdir(parents=True)
        path.write_text("{not json")
        store = JsonFilePromptStore(path)

        assert await store.test_connection() is False
        with pytest.raises(PersistenceFailed):
            await store.get_all_prompts()
        with pytest.raises(PersistenceFailed):
            await store.create_prompt(PromptRecord(title="A"))

    @pytest.mark.asyncio
    @pytest.mark.parametrize("entries", [
        ["oops"],
        [{"id": None, "title": "A"}],
        [{"title": "no id"}],
    ])
    async def test_malformed_entries(self, path, entries):
        """Entries that are not records with integer ids fail as PersistenceFailed."""
        path.parent.mkdir(parents=True)
        path.write_text(json.dumps({"prompts": entries}))
        store = JsonFilePromptStore(path)

        assert await store.test_connection() is False
        with pytest.raises(PersistenceFailed, match="Malformed prompt entry"):
            await store.get_all_prompts()
        with pytest.raises(PersistenceFailed):
            await store.delete_prompt(1)

    @pytest.mark.asyncio
    async def test_update_missing_record(self, path):
        store = JsonFilePromptStore(path)

        with pytest.raises(PersistenceFailed, match="does not exist"):
            await store.update_prompt(3, PromptRecord(title="A"))

    def test_file_layout(self, path):
        description = JsonFilePromptStore(path).get_schema_description()

        assert str(path) in description
        assert "raw_context" in description


def create_mock_client(response=None, side_effect=None):
    """Create an httpx.AsyncClient stand-in for PostgREST calls."""
    mock_client = AsyncMock()
    mock_client.request = AsyncMock(return_value=response, side_effect=side_effect)
    mock_client.get = AsyncMock(return_value=response, side_effect=side_effect)
    mock_client.__aenter__ = AsyncMock(return_value=mock_client)
    mock_client.__aexit__ = AsyncMock(return_value=None)
    return mock_client


def create_json_response(body, is_success=True):
    response = Mock()
    response.is_success = is_success
    response.raise_for_status = Mock()
    response.json = Mock(return_value=body)
    return response


ROW = {
    "id": 7,
    "title": "Orders",
    "summary": None,
    "content": "optimized",
    "excontext": "raw draft",
    "version": "v3.0",
    "created_at": "2025-01-15T10:00:00+00:00",
}


class TestSupabasePromptStore:
    """Test the PostgREST-backed store."""

    @pytest.fixture
    def store(self):
        return SupabasePromptStore(
            SupabaseConfig(url="https://abc.supabase.co", key="anon-key", table="prompts")
        )

    def test_table_url(self, store):
        assert store.table_url == "https://abc.supabase.co/rest/v1/prompts"

    @pytest.mark.asyncio
    async def test_list_maps_excontext_to_raw_context(self, store):
        mock_client = create_mock_client(create_json_response([ROW]))

        with patch("httpx.AsyncClient", return_value=mock_client):
            records = await store.get_all_prompts()

        assert records[0].raw_context == "raw draft"
        assert records[0].summary == ""
        assert records[0].id == 7

        call = mock_client.request.call_args
        assert call.args == ("GET", "https://abc.supabase.co/rest/v1/prompts")
        assert call.kwargs["params"]["order"] == "created_at.desc"
        assert call.kwargs["headers"]["apikey"] == "anon-key"

    @pytest.mark.asyncio
    async def test_create_sends_row_without_storage_fields(self, store):
        mock_client = create_mock_client(create_json_response([ROW]))
        record = PromptRecord(id=99, title="Orders", content="optimized", raw_context="raw draft")

        with patch("httpx.AsyncClient", return_value=mock_client):
            saved = await store.create_prompt(record)

        assert saved.id == 7
        call = mock_client.request.call_args
        assert call.args[0] == "POST"
        body = call.kwargs["json"]
        assert body["excontext"] == "raw draft"
        assert "id" not in body
        assert "created_at" not in body
        assert "raw_context" not in body
        assert call.kwargs["headers"]["Prefer"] == "return=representation"

    @pytest.mark.asyncio
    async def test_update_filters_by_id(self, store):
        mock_client = create_mock_client(create_json_response([ROW]))

        with patch("httpx.AsyncClient", return_value=mock_client):
            await store.update_prompt(7, PromptRecord(title="Orders", version="v4.0"))

        call = mock_client.request.call_args
        assert call.args[0] == "PATCH"
        assert call.kwargs["params"] == {"id": "eq.7"}

    @pytest.mark.asyncio
    async def test_update_with_no_matching_row(self, store):
        mock_client = create_mock_client(create_json_response([]))

        with patch("httpx.AsyncClient", return_value=mock_client):
            with pytest.raises(PersistenceFailed, match="no row"):
                await store.update_prompt(7, PromptRecord(title="Orders"))

    @pytest.mark.asyncio
    async def test_delete(self, store):
        mock_client = create_mock_client(create_json_response(None))

        with patch("httpx.AsyncClient", return_value=mock_client):
            await store.delete_prompt(7)

        call = mock_client.request.call_args
        assert call.args[0] == "DELETE"
        assert call.kwargs["params"] == {"id": "eq.7"}

    @pytest.mark.asyncio
    async def test_http_error_becomes_persistence_failed(self, store):
        request = httpx.Request("POST", store.table_url)
        response = create_json_response({})
        response.raise_for_status = Mock(side_effect=httpx.HTTPStatusError(
            "Forbidden", request=request, response=httpx.Response(403, request=request)
        ))
        mock_client = create_mock_client(response)

        with patch("httpx.AsyncClient", return_value=mock_client):
            with pytest.raises(PersistenceFailed, match="HTTP 403") as exc_info:
                await store.create_prompt(PromptRecord(title="A"))

        assert exc_info.value.operation == "create_prompt"

    @pytest.mark.asyncio
    async def test_network_error_becomes_persistence_failed(self, store):
        mock_client = create_mock_client(side_effect=httpx.ConnectError("refused"))

        with patch("httpx.AsyncClient", return_value=mock_client):
            with pytest.raises(PersistenceFailed, match="Network error"):
                await store.get_all_prompts()

    @pytest.mark.asyncio
    async def test_connection_check_never_raises(self, store):
        ok_client = create_mock_client(create_json_response([]))
        with patch("httpx.AsyncClient", return_value=ok_client):
            assert await store.test_connection() is True

        failing_client = create_mock_client(side_effect=httpx.ConnectError("refused"))
        with patch("httpx.AsyncClient", return_value=failing_client):
            assert await store.test_connection() is False

    def test_schema_description_is_sql(self, store):
        ddl = store.get_schema_description()

        assert "create table if not exists public.prompts" in ddl
        assert "excontext text" in ddl


class TestCreateStore:
    """Test store selection from configuration."""

    def test_default_is_file_store(self, tmp_path):
        config = StorageConfig(file={"path": str(tmp_path / "p.json")})

        store = create_store(config)

        assert isinstance(store, JsonFilePromptStore)
        assert store.path == tmp_path / "p.json"

    def test_memory_store(self):
        assert isinstance(create_store(StorageConfig(backend="memory")), InMemoryPromptStore)

    def test_supabase_store(self):
        config = StorageConfig(
            backend="supabase",
            supabase={"url": "https://abc.supabase.co", "key": "k"},
        )

        assert isinstance(create_store(config), SupabasePromptStore)
