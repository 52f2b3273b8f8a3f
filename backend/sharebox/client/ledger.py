"""Folder Reference Ledger: durable per-profile memory of granted folders.

Stores ``{id, folder_name, owner_id, timestamp}`` per folder in a JSON file.
It remembers *that* access was granted, never the capability itself. If the
file cannot be opened every call degrades to a harmless no-op.
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from pathlib import Path

from sharebox.config import settings
from sharebox.errors import StoreUnavailable

logger = logging.getLogger(__name__)


@dataclass
class FolderReference:
    id: str
    folder_name: str
    owner_id: str
    timestamp: str  # ISO-8601, UTC


class FolderLedger:
    """Lazily-opened JSON store of folder references."""

    FILENAME = "folder_references.json"

    def __init__(self, profile_dir: str | None = None):
        self._dir = Path(profile_dir or settings.profile_dir)
        self._file = self._dir / self.FILENAME
        self._entries: dict[str, FolderReference] | None = None
        self._unavailable = False

    @property
    def available(self) -> bool:
        """False once opening the store has failed."""
        return not self._unavailable

    def register(self, folder_id: str, folder_name: str, owner_id: str) -> bool:
        """Upsert a reference with a fresh timestamp. Returns False if not persisted."""
        try:
            entries = self._open()
            ref = FolderReference(
                id=folder_id,
                folder_name=folder_name,
                owner_id=owner_id,
                timestamp=datetime.now(timezone.utc).isoformat(),
            )
            self._save({**entries, folder_id: ref})
            entries[folder_id] = ref
        except StoreUnavailable as e:
            logger.warning("Folder %s not remembered: %s", folder_id, e)
            return False
        return True

    def has(self, folder_id: str) -> bool:
        try:
            return folder_id in self._open()
        except StoreUnavailable:
            return False

    def get(self, folder_id: str) -> FolderReference | None:
        try:
            return self._open().get(folder_id)
        except StoreUnavailable:
            return None

    def entries(self) -> list[FolderReference]:
        try:
            return list(self._open().values())
        except StoreUnavailable:
            return []

    def _open(self) -> dict[str, FolderReference]:
        if self._unavailable:
            raise StoreUnavailable(f"Ledger at {self._file} is unavailable")
        if self._entries is not None:
            return self._entries

        try:
            self._dir.mkdir(parents=True, exist_ok=True)
            if not self._file.exists():
                self._entries = {}
                return self._entries
            raw = self._file.read_text(encoding="utf-8")
        except OSError as e:
            self._unavailable = True
            logger.warning("Cannot open folder ledger at %s: %s", self._file, e)
            raise StoreUnavailable(str(e)) from e

        try:
            data = json.loads(raw)
            self._entries = {
                item["id"]: FolderReference(**item) for item in data.get("folders", [])
            }
        except (json.JSONDecodeError, KeyError, TypeError, AttributeError) as e:
            logger.warning("Corrupt folder ledger, starting empty: %s", e)
            self._entries = {}

        logger.debug("Loaded %d folder reference(s) from %s", len(self._entries), self._file)
        return self._entries

    def _save(self, entries: dict[str, FolderReference]) -> None:
        data = {"folders": [asdict(ref) for ref in entries.values()]}
        try:
            self._file.write_text(json.dumps(data, indent=2), encoding="utf-8")
        except OSError as e:
            raise StoreUnavailable(f"Cannot write folder ledger: {e}") from e
