"""
Client-local document storage.

Two independent JSON documents are persisted, one slot each: the dashboard
session (forms and prediction results) and the assistant chat history. Stores
only move opaque JSON; the repositories own the schema and the recovery policy:
a document that does not parse or does not validate is logged, discarded, and
replaced by the empty state.
"""

import json
import os
from pathlib import Path
from typing import Any, Protocol

import structlog
from pydantic import TypeAdapter, ValidationError

from riskdash.config import StorageConfig
from riskdash.domain.models import ChatMessage, ChatRole, DashboardData
from riskdash.errors import PersistenceCorruption

logger = structlog.get_logger(__name__)

_CHAT_LOG = TypeAdapter(list[ChatMessage])


class DocumentStore(Protocol):
    """
    A single storage slot holding one JSON document.

    ``load`` returns None when nothing was stored and raises
    PersistenceCorruption when the stored text is not valid JSON.
    """

    slot: str

    def load(self) -> Any | None: ...

    def save(self, document: Any) -> None: ...

    def clear(self) -> None: ...


class JsonFileStore:
    """Stores the document as ``<directory>/<slot>.json``."""

    def __init__(self, directory: Path, slot: str) -> None:
        self.directory = Path(directory)
        self.slot = slot

    @property
    def path(self) -> Path:
        return self.directory / f"{self.slot}.json"

    def load(self) -> Any | None:
        if not self.path.exists():
            return None
        try:
            return json.loads(self.path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise PersistenceCorruption(self.slot, str(e)) from e

    def save(self, document: Any) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_name(f"{self.path.name}.tmp")
        tmp_path.write_text(json.dumps(document, ensure_ascii=False), encoding="utf-8")
        os.replace(tmp_path, self.path)

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)


class InMemoryStore:
    """Keeps the serialized text in memory, so documents go through real JSON encoding."""

    def __init__(self, slot: str, text: str | None = None) -> None:
        self.slot = slot
        self.text = text

    def load(self) -> Any | None:
        if self.text is None:
            return None
        try:
            return json.loads(self.text)
        except json.JSONDecodeError as e:
            raise PersistenceCorruption(self.slot, str(e)) from e

    def save(self, document: Any) -> None:
        self.text = json.dumps(document, ensure_ascii=False)

    def clear(self) -> None:
        self.text = None


class _DocumentRepository:
    def __init__(self, store: DocumentStore) -> None:
        self.store = store
        self.logger = logger.bind(component=type(self).__name__, slot=store.slot)

    def _load_raw(self) -> Any | None:
        try:
            return self.store.load()
        except PersistenceCorruption as e:
            self._discard(e)
            return None

    def _discard(self, error: PersistenceCorruption) -> None:
        self.logger.warning("persisted_document_corrupt", reason=error.reason)
        self.store.clear()


class DashboardRepository(_DocumentRepository):
    """Load and save the dashboard session document."""

    def load(self) -> DashboardData | None:
        raw = self._load_raw()
        if raw is None:
            return None
        try:
            return DashboardData.model_validate(raw)
        except ValidationError as e:
            self._discard(PersistenceCorruption(self.store.slot, str(e)))
            return None

    def save(self, data: DashboardData) -> None:
        self.store.save(data.to_document())
        self.logger.debug(
            "dashboard_saved", has_finance=data.has_finance, has_health=data.has_health
        )

    def update(self, **parts: Any) -> DashboardData:
        """Replace some parts of the stored document (snake_case field names).

        Parts go through model validation, so models and their wire-shaped
        dicts are both accepted and an invalid part raises ValidationError
        before anything is saved.
        """
        current = self.load() or DashboardData()
        unknown = set(parts) - set(DashboardData.model_fields)
        if unknown:
            raise TypeError(f"Unknown dashboard parts: {sorted(unknown)}")
        merged = {name: getattr(current, name) for name in DashboardData.model_fields}
        updated = DashboardData.model_validate({**merged, **parts})
        self.save(updated)
        return updated

    def clear(self) -> None:
        self.store.clear()


class ChatHistoryRepository(_DocumentRepository):
    """Load and save the ordered chat log. Loading placeholders are never persisted."""

    def load(self) -> list[ChatMessage]:
        raw = self._load_raw()
        if raw is None:
            return []
        try:
            messages = _CHAT_LOG.validate_python(raw)
        except ValidationError as e:
            self._discard(PersistenceCorruption(self.store.slot, str(e)))
            return []
        return [m for m in messages if m.role is not ChatRole.LOADING]

    def save(self, messages: list[ChatMessage]) -> None:
        persisted = [m for m in messages if m.role is not ChatRole.LOADING]
        self.store.save(_CHAT_LOG.dump_python(persisted, mode="json", by_alias=True))

    def clear(self) -> None:
        self.store.clear()


def dashboard_repository(config: StorageConfig) -> DashboardRepository:
    return DashboardRepository(JsonFileStore(config.data_dir, config.dashboard_slot))


def chat_history_repository(config: StorageConfig) -> ChatHistoryRepository:
    return ChatHistoryRepository(JsonFileStore(config.data_dir, config.chat_history_slot))
