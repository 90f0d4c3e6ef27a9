"""Storage collaborators for prompt records.

The workflow treats storage as an opaque record store reached only through
the ``PromptStore`` interface. Three implementations are provided:

- ``InMemoryPromptStore``: process-local dict (tests, throwaway sessions)
- ``JsonFilePromptStore``: a single JSON file with atomic writes (default)
- ``SupabasePromptStore``: a Supabase table via its PostgREST API

All mutating and listing operations raise ``PersistenceFailed`` on error;
``test_connection`` never raises.
"""

import json
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from pathlib import Path
from textwrap import dedent
from typing import Any, Dict, List, Optional

import httpx
import structlog
from pydantic import ValidationError as PydanticValidationError

from promptprinter.models.config import StorageBackend, StorageConfig, SupabaseConfig
from promptprinter.models.prompt_record import PromptRecord
from promptprinter.services.exceptions import PersistenceFailed
from promptprinter.services.file_operations import atomic_write

logger = structlog.get_logger()


# Fields storage assigns itself; never sent on create/update
_STORAGE_OWNED_FIELDS = {"id", "created_at"}


def _sort_newest_first(records: List[PromptRecord]) -> List[PromptRecord]:
    epoch = datetime.min.replace(tzinfo=timezone.utc)
    # Records created within one clock tick fall back to id order
    return sorted(records, key=lambda r: (r.created_at or epoch, r.id or 0), reverse=True)


class PromptStore(ABC):
    """Abstract interface for prompt record storage."""

    name: str = "store"

    @abstractmethod
    async def test_connection(self) -> bool:
        """Return True if the store is reachable. Never raises."""
        pass

    @abstractmethod
    async def get_all_prompts(self) -> List[PromptRecord]:
        """Return all stored records (order is store-defined)."""
        pass

    @abstractmethod
    async def create_prompt(self, record: PromptRecord) -> PromptRecord:
        """Insert a record; storage assigns id and created_at."""
        pass

    @abstractmethod
    async def update_prompt(self, record_id: int, record: PromptRecord) -> PromptRecord:
        """Replace the stored fields of an existing record."""
        pass

    @abstractmethod
    async def delete_prompt(self, record_id: int) -> None:
        """Delete a record permanently."""
        pass

    @abstractmethod
    def get_schema_description(self) -> str:
        """Human-readable description of the storage layout for first-time setup."""
        pass


class InMemoryPromptStore(PromptStore):
    """Process-local store. Contents are lost on exit."""

    name = "memory"

    def __init__(self, records: Optional[List[PromptRecord]] = None):
        self._records: Dict[int, PromptRecord] = {}
        self._next_id = 1
        for record in records or []:
            stored = record.model_copy(deep=True)
            if stored.id is None:
                stored.id = self._next_id
            if stored.created_at is None:
                stored.created_at = datetime.now(timezone.utc)
            self._records[stored.id] = stored
            self._next_id = max(self._next_id, stored.id + 1)

    async def test_connection(self) -> bool:
        return True

    async def get_all_prompts(self) -> List[PromptRecord]:
        return [r.model_copy(deep=True) for r in _sort_newest_first(list(self._records.values()))]

    async def create_prompt(self, record: PromptRecord) -> PromptRecord:
        stored = record.model_copy(
            deep=True,
            update={"id": self._next_id, "created_at": datetime.now(timezone.utc)},
        )
        self._records[stored.id] = stored
        self._next_id += 1
        logger.info("prompt_created", store=self.name, prompt_id=stored.id, version=stored.version)
        return stored.model_copy(deep=True)

    async def update_prompt(self, record_id: int, record: PromptRecord) -> PromptRecord:
        existing = self._records.get(record_id)
        if existing is None:
            raise PersistenceFailed("update_prompt", f"Prompt {record_id} does not exist")

        stored = record.model_copy(
            deep=True,
            update={"id": record_id, "created_at": existing.created_at},
        )
        self._records[record_id] = stored
        logger.info("prompt_updated", store=self.name, prompt_id=record_id, version=stored.version)
        return stored.model_copy(deep=True)

    async def delete_prompt(self, record_id: int) -> None:
        if self._records.pop(record_id, None) is None:
            raise PersistenceFailed("delete_prompt", f"Prompt {record_id} does not exist")
        logger.info("prompt_deleted", store=self.name, prompt_id=record_id)

    def get_schema_description(self) -> str:
        return "In-memory store: records live only for the current session. No setup required."


class JsonFilePromptStore(PromptStore):
    """
    Local store backed by one JSON file.

    File layout:
        {"next_id": 3, "prompts": [{"id": 1, "title": ..., ...}, ...]}
    """

    name = "file"

    def __init__(self, path: Path):
        self.path = path

    def _load(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {"next_id": 1, "prompts": []}

        data = json.loads(self.path.read_text(encoding="utf-8"))
        if not isinstance(data, dict) or not isinstance(data.get("prompts"), list):
            raise ValueError(f"Unrecognized prompt store layout in {self.path}")
        for entry in data["prompts"]:
            if not isinstance(entry, dict) or type(entry.get("id")) is not int:
                raise ValueError(f"Malformed prompt entry in {self.path}: {entry!r:.80}")
        data.setdefault("next_id", 1 + max((p.get("id", 0) for p in data["prompts"]), default=0))
        return data

    def _save(self, data: Dict[str, Any]) -> None:
        atomic_write(self.path, json.dumps(data, ensure_ascii=False, indent=2))

    def _records(self, data: Dict[str, Any]) -> List[PromptRecord]:
        return [PromptRecord.model_validate(p) for p in data["prompts"]]

    async def test_connection(self) -> bool:
        try:
            self._load()
            return True
        except Exception as e:
            logger.warning("store_connection_failed", store=self.name, path=str(self.path), error=str(e))
            return False

    async def get_all_prompts(self) -> List[PromptRecord]:
        try:
            return _sort_newest_first(self._records(self._load()))
        except (OSError, ValueError, PydanticValidationError) as e:
            logger.error("store_read_failed", store=self.name, path=str(self.path), error=str(e))
            raise PersistenceFailed("get_all_prompts", f"Could not read {self.path}: {e}") from e

    async def create_prompt(self, record: PromptRecord) -> PromptRecord:
        try:
            data = self._load()
            stored = record.model_copy(
                deep=True,
                update={"id": data["next_id"], "created_at": datetime.now(timezone.utc)},
            )
            data["prompts"].append(stored.model_dump(mode="json"))
            data["next_id"] += 1
            self._save(data)
        except (OSError, ValueError) as e:
            logger.error("store_write_failed", store=self.name, operation="create_prompt", error=str(e))
            raise PersistenceFailed("create_prompt", f"Could not write {self.path}: {e}") from e

        logger.info("prompt_created", store=self.name, prompt_id=stored.id, version=stored.version)
        return stored

    async def update_prompt(self, record_id: int, record: PromptRecord) -> PromptRecord:
        try:
            data = self._load()
            for index, raw in enumerate(data["prompts"]):
                if raw.get("id") == record_id:
                    existing = PromptRecord.model_validate(raw)
                    stored = record.model_copy(
                        deep=True,
                        update={"id": record_id, "created_at": existing.created_at},
                    )
                    data["prompts"][index] = stored.model_dump(mode="json")
                    self._save(data)
                    break
            else:
                raise PersistenceFailed("update_prompt", f"Prompt {record_id} does not exist")
        except (OSError, ValueError) as e:
            logger.error("store_write_failed", store=self.name, operation="update_prompt", error=str(e))
            raise PersistenceFailed("update_prompt", f"Could not write {self.path}: {e}") from e

        logger.info("prompt_updated", store=self.name, prompt_id=record_id, version=stored.version)
        return stored

    async def delete_prompt(self, record_id: int) -> None:
        try:
            data = self._load()
            remaining = [p for p in data["prompts"] if p.get("id") != record_id]
            if len(remaining) == len(data["prompts"]):
                raise PersistenceFailed("delete_prompt", f"Prompt {record_id} does not exist")
            data["prompts"] = remaining
            self._save(data)
        except (OSError, ValueError) as e:
            logger.error("store_write_failed", store=self.name, operation="delete_prompt", error=str(e))
            raise PersistenceFailed("delete_prompt", f"Could not write {self.path}: {e}") from e

        logger.info("prompt_deleted", store=self.name, prompt_id=record_id)

    def get_schema_description(self) -> str:
        return dedent(f"""
            Local JSON file store: {self.path}
            The file is created on first save. Layout:
            {{"next_id": <int>, "prompts": [{{"id", "title", "summary", "content",
              "raw_context", "version", "created_at"}}, ...]}}
        """).strip()


class SupabasePromptStore(PromptStore):
    """
    Supabase table accessed through PostgREST (``/rest/v1/<table>``).

    The table keeps the raw draft text in an ``excontext`` column; it is
    mapped onto ``PromptRecord.raw_context``.
    """

    name = "supabase"

    def __init__(self, config: SupabaseConfig):
        self.config = config
        self.table_url = f"{str(config.url).rstrip('/')}/rest/v1/{config.table}"

    def _headers(self, returning: bool = False) -> Dict[str, str]:
        headers = {
            "apikey": self.config.key,
            "Authorization": f"Bearer {self.config.key}",
            "Content-Type": "application/json",
        }
        if returning:
            headers["Prefer"] = "return=representation"
        return headers

    @staticmethod
    def _to_row(record: PromptRecord) -> Dict[str, Any]:
        row = record.model_dump(mode="json", exclude=_STORAGE_OWNED_FIELDS | {"raw_context"})
        row["excontext"] = record.raw_context
        return row

    @staticmethod
    def _from_row(row: Dict[str, Any]) -> PromptRecord:
        data = dict(row)
        data["raw_context"] = data.pop("excontext", None) or ""
        # Nullable text columns come back as None
        for key in ("summary", "content", "title"):
            if data.get(key) is None:
                data[key] = ""
        if not data.get("version"):
            data.pop("version", None)
        return PromptRecord.model_validate(data)

    async def _request(
        self,
        operation: str,
        method: str,
        params: Optional[Dict[str, str]] = None,
        json_body: Optional[Dict[str, Any]] = None,
        returning: bool = False,
    ) -> Any:
        try:
            async with httpx.AsyncClient(timeout=httpx.Timeout(self.config.timeout)) as client:
                response = await client.request(
                    method,
                    self.table_url,
                    params=params,
                    json=json_body,
                    headers=self._headers(returning=returning),
                )
                response.raise_for_status()
                if method == "DELETE" and not returning:
                    return None
                return response.json()

        except httpx.HTTPStatusError as e:
            logger.error(
                "supabase_http_error",
                operation=operation,
                status_code=e.response.status_code,
                error=str(e),
            )
            raise PersistenceFailed(
                operation, f"Supabase returned HTTP {e.response.status_code}"
            ) from e

        except httpx.HTTPError as e:
            logger.error("supabase_network_error", operation=operation, error=str(e))
            raise PersistenceFailed(operation, f"Network error: {e}") from e

        except ValueError as e:
            logger.error("supabase_body_not_json", operation=operation, error=str(e))
            raise PersistenceFailed(operation, f"Supabase returned a non-JSON body: {e}") from e

    def _single_row(self, operation: str, rows: Any) -> PromptRecord:
        if not isinstance(rows, list) or not rows:
            raise PersistenceFailed(operation, "Supabase returned no row")
        try:
            return self._from_row(rows[0])
        except PydanticValidationError as e:
            raise PersistenceFailed(operation, f"Unexpected row shape: {e}") from e

    async def test_connection(self) -> bool:
        try:
            async with httpx.AsyncClient(timeout=httpx.Timeout(self.config.timeout)) as client:
                response = await client.get(
                    self.table_url,
                    params={"select": "id", "limit": "1"},
                    headers=self._headers(),
                )
                connected = response.is_success
            logger.info("store_connection_checked", store=self.name, connected=connected)
            return connected
        except Exception as e:
            logger.warning("store_connection_failed", store=self.name, error=str(e))
            return False

    async def get_all_prompts(self) -> List[PromptRecord]:
        rows = await self._request(
            "get_all_prompts",
            "GET",
            params={"select": "*", "order": "created_at.desc"},
        )
        if not isinstance(rows, list):
            raise PersistenceFailed("get_all_prompts", "Supabase returned a non-list body")
        try:
            return [self._from_row(row) for row in rows if row]
        except PydanticValidationError as e:
            raise PersistenceFailed("get_all_prompts", f"Unexpected row shape: {e}") from e

    async def create_prompt(self, record: PromptRecord) -> PromptRecord:
        rows = await self._request(
            "create_prompt", "POST", json_body=self._to_row(record), returning=True
        )
        stored = self._single_row("create_prompt", rows)
        logger.info("prompt_created", store=self.name, prompt_id=stored.id, version=stored.version)
        return stored

    async def update_prompt(self, record_id: int, record: PromptRecord) -> PromptRecord:
        rows = await self._request(
            "update_prompt",
            "PATCH",
            params={"id": f"eq.{record_id}"},
            json_body=self._to_row(record),
            returning=True,
        )
        stored = self._single_row("update_prompt", rows)
        logger.info("prompt_updated", store=self.name, prompt_id=record_id, version=stored.version)
        return stored

    async def delete_prompt(self, record_id: int) -> None:
        await self._request("delete_prompt", "DELETE", params={"id": f"eq.{record_id}"})
        logger.info("prompt_deleted", store=self.name, prompt_id=record_id)

    def get_schema_description(self) -> str:
        table = self.config.table
        return dedent(f"""
            -- Run once in the Supabase SQL editor
            create table if not exists public.{table} (
              id bigint generated by default as identity primary key,
              title text not null,
              summary text,
              content text,
              excontext text,
              version text not null default 'v1.0',
              created_at timestamptz not null default now()
            );

            alter table public.{table} enable row level security;

            create policy "Allow public access" on public.{table}
              for all using (true) with check (true);
        """).strip()


def create_store(config: StorageConfig) -> PromptStore:
    """Build the storage collaborator selected by configuration.

    Args:
        config: Storage configuration section

    Returns:
        PromptStore implementation
    """
    if config.backend == StorageBackend.MEMORY:
        return InMemoryPromptStore()

    if config.backend == StorageBackend.FILE:
        return JsonFilePromptStore(config.file.resolve_path())

    if config.backend == StorageBackend.SUPABASE:
        if config.supabase is None:
            raise ValueError("storage.supabase section is required for the supabase backend")
        return SupabasePromptStore(config.supabase)

    raise ValueError(f"Unknown storage backend: {config.backend}")
