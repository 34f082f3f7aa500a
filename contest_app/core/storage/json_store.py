"""File-backed storage for one collection of records."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Generic, TypeVar

from pydantic import BaseModel, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from contest_app.core.errors import StorageError

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", bound=BaseModel)


class JsonCollectionStore(Generic[RecordT]):
    """Reads and writes a whole collection as one JSON array."""

    def __init__(self, file_path: Path, record_type: type[RecordT]) -> None:
        self._path = Path(file_path)
        self._adapter: TypeAdapter[list[RecordT]] = TypeAdapter(list[record_type])

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> list[RecordT]:
        if not self._path.exists():
            return []
        try:
            raw = self._path.read_bytes()
        except OSError as exc:
            raise StorageError(f"Could not read {self._path}: {exc}") from exc
        if not raw.strip():
            return []
        try:
            records = self._adapter.validate_json(raw)
        except PydanticValidationError as exc:
            raise StorageError(f"Stored collection {self._path} is malformed.") from exc
        logger.debug("Loaded %d records from %s", len(records), self._path)
        return records

    def save(self, records: list[RecordT]) -> None:
        """Write the collection, replacing the previous file in one step."""
        document = self._adapter.dump_json(records, by_alias=True, indent=2)
        temp_path = self._path.with_suffix(self._path.suffix + ".tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            temp_path.write_bytes(document)
            os.replace(temp_path, self._path)
        except OSError as exc:
            raise StorageError(f"Could not write {self._path}: {exc}") from exc
