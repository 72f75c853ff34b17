"""Redis-backed counter store.

Each record lives in a hash ``<prefix>:<key>``; a set ``<prefix>:keys``
indexes the stored keys. Updates use optimistic transactions: the hash is
``WATCH``ed, the mutation is computed client side and written in a single
``MULTI``/``EXEC`` block that Redis aborts if another writer touched the
hash in between.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import replace
from datetime import date
from functools import lru_cache
from typing import Any

import redis
from redis.exceptions import RedisError, WatchError

from encore_counters.core.errors import StorageUnavailable
from encore_counters.core.rollover import CounterRecord
from encore_counters.core.settings import settings
from encore_counters.repositories.counter_store import CounterStore, Mutation

logger = logging.getLogger(__name__)

_COUNT_FIELDS = ("daily_count", "weekly_count", "monthly_count", "yearly_count", "total_count")
_MARKER_FIELDS = ("last_reset_day", "last_reset_week", "last_reset_month", "last_reset_year")


def _text(value: Any) -> str:
    return value.decode() if isinstance(value, bytes) else str(value)


def _decode(key: str, raw: Mapping[Any, Any]) -> CounterRecord | None:
    if not raw:
        return None
    data = {_text(k): _text(v) for k, v in raw.items()}
    try:
        return CounterRecord(
            key=key,
            version=int(data.get("version", 0)),
            **{name: max(0, int(data.get(name, 0))) for name in _COUNT_FIELDS},
            **{name: date.fromisoformat(data[name]) for name in _MARKER_FIELDS},
        )
    except (KeyError, ValueError) as err:
        raise StorageUnavailable(f"Counter {key!r} holds malformed data: {err}") from err


def _encode(record: CounterRecord) -> dict[str, str | int]:
    fields: dict[str, str | int] = {name: getattr(record, name) for name in _COUNT_FIELDS}
    fields.update({name: getattr(record, name).isoformat() for name in _MARKER_FIELDS})
    fields["version"] = record.version
    return fields


class RedisCounterStore(CounterStore):
    """Lightweight counter store for deployments that keep counters in Redis."""

    def __init__(
        self,
        client: redis.Redis,
        prefix: str | None = None,
        max_retries: int | None = None,
    ) -> None:
        super().__init__(max_retries)
        self.client = client
        self.prefix = prefix or settings.counter_redis_prefix

    @property
    def _index_key(self) -> str:
        return f"{self.prefix}:keys"

    def _hash_key(self, key: str) -> str:
        return f"{self.prefix}:{key}"

    def load(self, key: str) -> CounterRecord | None:
        try:
            raw = self.client.hgetall(self._hash_key(key))
        except RedisError as err:
            raise StorageUnavailable(f"Could not read counter {key!r}: {err}") from err
        return _decode(key, raw)

    def save(self, key: str, mutate: Mutation) -> CounterRecord:
        hash_key = self._hash_key(key)
        for attempt in range(1, self.max_retries + 1):
            try:
                with self.client.pipeline() as pipe:
                    pipe.watch(hash_key)
                    current = _decode(key, pipe.hgetall(hash_key))
                    updated = mutate(current)
                    if current is not None and updated == current:
                        pipe.unwatch()
                        return current

                    stored = replace(
                        updated,
                        key=key,
                        version=(current.version if current is not None else 0) + 1,
                    )
                    pipe.multi()
                    pipe.hset(hash_key, mapping=_encode(stored))
                    pipe.sadd(self._index_key, key)
                    pipe.execute()
                    return stored
            except WatchError:
                logger.debug(
                    "Counter %s changed concurrently (attempt %d), retrying", key, attempt
                )
            except RedisError as err:
                raise StorageUnavailable(f"Could not write counter {key!r}: {err}") from err

        raise self._exhausted(key)

    def keys(self, prefix: str = "") -> list[str]:
        try:
            members = self.client.smembers(self._index_key)
        except RedisError as err:
            raise StorageUnavailable(f"Could not list counters: {err}") from err
        return sorted(name for name in map(_text, members) if name.startswith(prefix))


@lru_cache(maxsize=1)
def get_redis_client() -> redis.Redis:
    """Return the process-wide Redis client for ``REDIS_URL``.

    The client owns a connection pool, so it is built once and shared by
    every request.
    """
    return redis.from_url(settings.redis_url, decode_responses=True)
