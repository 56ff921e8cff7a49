"""String key-value stores backing the result cache."""
from __future__ import annotations

import re
from pathlib import Path

from ticket_series.domain.repositories import StoreFullError


class MemoryStore:
    """Process-local store bounded by the total length of stored values."""

    def __init__(self, capacity: int | None = None) -> None:
        self._capacity = capacity
        self._data: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        if self._capacity is not None:
            used = sum(len(v) for k, v in self._data.items() if k != key)
            if used + len(value) > self._capacity:
                raise StoreFullError(f"Store capacity {self._capacity} exceeded by key {key!r}")
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def __contains__(self, key: object) -> bool:
        return key in self._data


def _normalize_key(key: str) -> str:
    sanitized = re.sub(r"[^0-9A-Za-z_.-]+", "_", key.strip())
    return sanitized or "default"


class JsonFileStore:
    """One JSON file per key under ``root``."""

    def __init__(self, root: Path) -> None:
        self._root = Path(root)

    def _path(self, key: str) -> Path:
        return self._root / f"{_normalize_key(key)}.json"

    def get(self, key: str) -> str | None:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set(self, key: str, value: str) -> None:
        try:
            self._root.mkdir(parents=True, exist_ok=True)
            self._path(key).write_text(value, encoding="utf-8")
        except OSError as exc:
            raise StoreFullError(str(exc)) from exc

    def delete(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)
