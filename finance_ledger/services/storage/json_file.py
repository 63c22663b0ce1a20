"""
JSON File Storage Implementation

Keeps the whole-state blob in a single UTF-8 JSON file.

Writes are atomic: the blob goes to a temporary file in the same
directory, which then replaces the target with os.replace. A reader
never sees a half-written file. Transient OS errors (a locked file on
Windows, a busy network share) are retried before giving up.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Optional, Union

import structlog
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from finance_ledger.config import get_settings
from finance_ledger.services.storage.interface import StateStorageInterface, StorageError


logger = structlog.get_logger(__name__)


class JsonFileStateStorage(StateStorageInterface):
    """Whole-state blob stored as one JSON file."""

    def __init__(self, path: Optional[Union[str, Path]] = None):
        """
        Args:
            path: File to use. Defaults to LEDGER_STATE_FILE_PATH.
        """
        self._path = Path(path) if path is not None else get_settings().ledger.state_file

    @property
    def path(self) -> Path:
        return self._path

    def read_blob(self) -> Optional[dict[str, Any]]:
        if not self._path.exists():
            logger.debug("state_file_missing", path=str(self._path))
            return None

        try:
            with self._path.open("r", encoding="utf-8") as fh:
                blob = json.load(fh)
        except json.JSONDecodeError as e:
            raise StorageError(f"State file is not valid JSON: {self._path}: {e}") from e
        except OSError as e:
            raise StorageError(f"Failed to read state file {self._path}: {e}") from e

        if not isinstance(blob, dict):
            raise StorageError(f"State file does not contain a JSON object: {self._path}")

        return blob

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.2, min=0.2, max=2),
        retry=retry_if_exception_type(OSError),
        reraise=True,
    )
    def _write_atomic(self, text: str) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=str(self._path.parent),
            prefix=f".{self._path.name}.",
            suffix=".tmp",
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(text)
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp_name, self._path)
        except OSError:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

    def write_blob(self, blob: dict[str, Any]) -> None:
        text = json.dumps(blob, ensure_ascii=False, indent=2)
        try:
            self._write_atomic(text)
        except OSError as e:
            logger.error("state_write_failed", path=str(self._path), error=str(e))
            raise StorageError(f"Failed to write state file {self._path}: {e}") from e

        logger.debug("state_file_written", path=str(self._path), size=len(text))

    def clear(self) -> None:
        try:
            self._path.unlink(missing_ok=True)
        except OSError as e:
            raise StorageError(f"Failed to remove state file {self._path}: {e}") from e
