"""Cache of settled daily matrices keyed by query signature.

Only days strictly before yesterday are stored, since later days can still
be revised by late reports. The cache is an accelerator: every failure
degrades to a miss.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Any, Callable, Sequence

from ticket_series.config import SETTINGS
from ticket_series.domain.models import DateMatrix, DistributionWeight, Metric, Number, SeriesRow, SeriesValue
from ticket_series.domain.repositories import KeyValueStore, StoreFullError

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class CacheEntry:
    key: str
    data: DateMatrix
    cached_up_to_date: date
    timestamp: datetime
    entity_scope: tuple[str, ...]


def cache_key(
    date_range: str,
    metric: Metric | str,
    weight: DistributionWeight | str,
    entity_ids: Sequence[str],
) -> str:
    metric = Metric(metric)
    weight = DistributionWeight(weight)
    return f"{date_range}_{metric.value}_{weight.value}_{','.join(sorted(entity_ids))}"


def _encode_number(value: Number) -> int | str:
    if isinstance(value, Decimal):
        return str(value)
    return int(value)


def _decode_number(value: int | str) -> Number:
    if isinstance(value, str):
        return Decimal(value)
    return int(value)


def encode_matrix(matrix: Sequence[SeriesRow]) -> list[dict[str, Any]]:
    return [
        {
            "date": row.date.isoformat(),
            "values": {
                entity_id: [_encode_number(value.actual), _encode_number(value.estimated)]
                for entity_id, value in row.values.items()
            },
            "reported": sorted(row.reported),
        }
        for row in matrix
    ]


def decode_matrix(raw: Sequence[dict[str, Any]]) -> DateMatrix:
    return tuple(
        SeriesRow(
            date=date.fromisoformat(item["date"]),
            values={
                entity_id: SeriesValue(_decode_number(pair[0]), _decode_number(pair[1]))
                for entity_id, pair in item.get("values", {}).items()
            },
            reported=frozenset(item.get("reported", ())),
        )
        for item in raw
    )


def merge(cached: Sequence[SeriesRow], fresh: Sequence[SeriesRow], cached_up_to_date: date | None = None) -> DateMatrix:
    """Combine cached history with a fresh tail; fresh rows win on shared dates.

    Cached rows after ``cached_up_to_date`` are unsettled and always dropped.
    """
    fresh_dates = {row.date for row in fresh}
    merged = [
        row
        for row in cached
        if row.date not in fresh_dates and (cached_up_to_date is None or row.date <= cached_up_to_date)
    ]
    merged.extend(fresh)
    return tuple(sorted(merged, key=lambda row: row.date))


def _now() -> datetime:
    return datetime.now(SETTINGS.timezone)


class ResultCache:
    """Read-through cache handle; construct one per process or user session."""

    def __init__(
        self,
        store: KeyValueStore,
        ttl: timedelta | None = None,
        version: int | None = None,
        clock: Callable[[], datetime] = _now,
        blob_key: str | None = None,
    ) -> None:
        self._store = store
        self._ttl = SETTINGS.cache_ttl if ttl is None else ttl
        self._version = SETTINGS.cache_version if version is None else version
        self._clock = clock
        self._blob_key = blob_key or SETTINGS.cache_blob_key

    @property
    def ttl(self) -> timedelta:
        return self._ttl

    def yesterday(self) -> date:
        return self._clock().date() - timedelta(days=1)

    def get(self, key: str, entity_scope: Sequence[str]) -> CacheEntry | None:
        entries = self._load()
        raw = entries.get(key)
        if raw is None:
            LOGGER.debug("Cache miss for %s", key)
            return None
        try:
            timestamp = datetime.fromisoformat(raw["timestamp"])
            if self._expired(timestamp):
                LOGGER.debug("Cache entry %s expired", key)
                return None
            scope = tuple(sorted(raw["entity_scope"]))
            if scope != tuple(sorted(entity_scope)):
                LOGGER.debug("Cache entry %s has a different entity scope", key)
                return None
            entry = CacheEntry(
                key=key,
                data=decode_matrix(raw["data"]),
                cached_up_to_date=date.fromisoformat(raw["cached_up_to_date"]),
                timestamp=timestamp,
                entity_scope=scope,
            )
        except (KeyError, TypeError, ValueError, ArithmeticError):
            LOGGER.warning("Discarding unreadable cache entry %s", key)
            return None
        LOGGER.debug("Cache hit for %s up to %s", key, entry.cached_up_to_date)
        return entry

    def put(self, key: str, matrix: Sequence[SeriesRow], entity_scope: Sequence[str]) -> CacheEntry | None:
        cutoff = self.yesterday()
        settled = tuple(row for row in matrix if row.date < cutoff)
        if not settled:
            return None

        entry = CacheEntry(
            key=key,
            data=settled,
            cached_up_to_date=settled[-1].date,
            timestamp=self._clock(),
            entity_scope=tuple(entity_scope),
        )
        entries = self._load()
        entries[key] = {
            "data": encode_matrix(entry.data),
            "cached_up_to_date": entry.cached_up_to_date.isoformat(),
            "timestamp": entry.timestamp.isoformat(),
            "entity_scope": list(entry.entity_scope),
        }
        self._save(entries)
        return entry

    merge = staticmethod(merge)

    def clear(self) -> None:
        self._delete()

    def _expired(self, timestamp: datetime) -> bool:
        return self._clock() - timestamp > self._ttl

    def _load(self) -> dict[str, dict[str, Any]]:
        try:
            payload = self._store.get(self._blob_key)
        except (OSError, UnicodeDecodeError):
            LOGGER.warning("Cache store unreadable, treating as empty", exc_info=True)
            return {}
        if not payload:
            return {}
        try:
            cache = json.loads(payload)
        except json.JSONDecodeError:
            return {}
        if not isinstance(cache, dict) or cache.get("version") != self._version:
            return {}
        entries = cache.get("entries")
        return dict(entries) if isinstance(entries, dict) else {}

    def _dump(self, entries: dict[str, dict[str, Any]]) -> str:
        return json.dumps({"version": self._version, "entries": entries}, sort_keys=True)

    def _save(self, entries: dict[str, dict[str, Any]]) -> None:
        try:
            self._store.set(self._blob_key, self._dump(entries))
            return
        except StoreFullError:
            LOGGER.warning("Cache store rejected write, evicting expired entries")

        fresh: dict[str, dict[str, Any]] = {}
        for key, raw in entries.items():
            try:
                if not self._expired(datetime.fromisoformat(raw["timestamp"])):
                    fresh[key] = raw
            except (KeyError, TypeError, ValueError):
                continue
        try:
            self._store.set(self._blob_key, self._dump(fresh))
        except StoreFullError:
            LOGGER.warning("Cache store still full, dropping the whole cache")
            self._delete()

    def _delete(self) -> None:
        try:
            self._store.delete(self._blob_key)
        except OSError:
            LOGGER.warning("Could not delete cache blob %s", self._blob_key, exc_info=True)
