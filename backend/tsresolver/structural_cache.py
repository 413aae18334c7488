"""
In-memory memoization keyed by structural equality.

Keys are arbitrary nested option records (dicts, lists, scalars). Two keys
that serialize to the same stable chunk stream are the same entry, no
matter whether they are the same object or in which order their dict keys
were written. Entries live in a dict keyed by an md5 of that stream; on a
digest hit the full streams are compared before the entry is returned.

The cache never copies keys. Callers must not mutate a key after handing
it in.
"""

import dataclasses
import hashlib
import json
import logging
import math
import re
import threading
from dataclasses import dataclass
from datetime import date, datetime
from itertools import zip_longest
from typing import Any, Callable, Dict, Generic, Iterator, Optional, TypeVar

logger = logging.getLogger(__name__)

K = TypeVar('K')
V = TypeVar('V')

_MISSING = object()


@dataclass
class CacheEntry(Generic[K, V]):
    """A stored value together with the key it was stored under."""
    key: K
    value: V
    hits: int = 0


@dataclass(frozen=True)
class CacheResult(Generic[V]):
    """Outcome of a cache lookup; ``value`` is only meaningful on a hit."""
    hit: bool
    value: Optional[V] = None


CACHE_MISS: CacheResult = CacheResult(hit=False)


def serialize_stable_order(struct: Any) -> Iterator[str]:
    """
    Yield a stable textual rendering of ``struct`` chunk by chunk.

    Dict keys are sorted, sequences keep their order. Callables and other
    opaque objects contribute nothing.
    """
    if struct is None or isinstance(struct, (bool, int, float)):
        yield repr(struct)
    elif isinstance(struct, str):
        yield json.dumps(struct)
    elif isinstance(struct, (bytes, bytearray)):
        yield f"b'{bytes(struct).hex()}'"
    elif isinstance(struct, datetime):
        if struct.tzinfo is not None:
            yield f"Date({struct.timestamp()!r})"
        else:
            yield f"Date({struct.isoformat()})"
    elif isinstance(struct, date):
        yield f"Date({struct.isoformat()})"
    elif isinstance(struct, re.Pattern):
        yield f"/{struct.pattern}/{struct.flags}"
    elif isinstance(struct, dict):
        yield '{'
        for chunk_key, value in sorted(
                ((''.join(serialize_stable_order(k)), v) for k, v in struct.items()),
                key=lambda item: item[0]):
            yield chunk_key
            yield '='
            yield from serialize_stable_order(value)
        yield '}'
    elif isinstance(struct, (list, tuple)):
        yield '['
        for item in struct:
            yield from serialize_stable_order(item)
            yield ','
        yield ']'
    elif isinstance(struct, (set, frozenset)):
        yield '#{'
        for chunk in sorted(''.join(serialize_stable_order(item)) for item in struct):
            yield chunk
            yield ','
        yield '}'
    elif dataclasses.is_dataclass(struct) and not isinstance(struct, type):
        yield type(struct).__name__
        yield from serialize_stable_order({
            f.name: getattr(struct, f.name) for f in dataclasses.fields(struct)
        })
    # callables, modules, handles: not serializable, ignored


def hash_struct(struct: Any) -> str:
    """Compute an md5 digest of the stable serialization of ``struct``."""
    digest = hashlib.md5()
    for chunk in serialize_stable_order(struct):
        digest.update(chunk.encode('utf-8'))
    return digest.hexdigest()


def struct_equal(struct0: Any, struct1: Any) -> bool:
    """Deep equality by stable serialization, short-circuiting on identity."""
    if struct0 is struct1:
        return True

    for a, b in zip_longest(serialize_stable_order(struct0),
                            serialize_stable_order(struct1),
                            fillvalue=_MISSING):
        if a is _MISSING or b is _MISSING or a != b:
            return False
    return True


class StructuralCache(Generic[K, V]):
    """Bounded memo store with least-hit eviction.

    ``max_size < 1`` turns the cache into a pass-through: ``get`` always
    misses, ``set`` does nothing and ``get_or_create`` always calls the
    factory. All map and counter updates happen under a lock, so one
    instance may be shared between threads.
    """

    def __init__(self, max_size: float = math.inf):
        self.max_size = max_size
        self._entries: Dict[str, CacheEntry[K, V]] = {}
        self._hottest: Optional[CacheEntry[K, V]] = None
        self._lock = threading.RLock()

    @property
    def enabled(self) -> bool:
        return self.max_size >= 1

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, key: K) -> CacheResult[V]:
        """Look up ``key``.

        Args:
            key: Structural key

        Returns:
            CacheResult with ``hit`` set and the stored value, or a miss
        """
        if not self.enabled:
            return CACHE_MISS

        with self._lock:
            hottest = self._hottest
            if hottest is not None and hottest.key is key:
                hottest.hits += 1
                return CacheResult(hit=True, value=hottest.value)

            entry = self._entries.get(hash_struct(key))
            if entry is None or not struct_equal(entry.key, key):
                return CACHE_MISS

            entry.hits += 1
            if hottest is None or hottest.hits < entry.hits:
                self._hottest = entry
            return CacheResult(hit=True, value=entry.value)

    def set(self, key: K, value: V) -> None:
        """Store ``value`` under ``key``, evicting the least-hit entries if full."""
        if not self.enabled:
            return

        digest = hash_struct(key)
        with self._lock:
            replaced = self._entries.get(digest)
            if replaced is not None and replaced is self._hottest:
                self._hottest = None
            self._entries[digest] = CacheEntry(key=key, value=value)

            overflow = len(self._entries) - self.max_size
            if overflow > 0:
                self._evict(int(overflow))

    def get_or_create(self, key: K, factory: Callable[[K], V]) -> V:
        """Return the cached value for ``key``, building it with ``factory`` on a miss."""
        result = self.get(key)
        if result.hit:
            return result.value

        value = factory(key)
        self.set(key, value)
        return value

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._hottest = None

    def _evict(self, count: int) -> None:
        # sorted() is stable: equal hit counts go in insertion order
        victims = sorted(self._entries.items(), key=lambda item: item[1].hits)[:count]
        for digest, entry in victims:
            del self._entries[digest]
            if entry is self._hottest:
                self._hottest = None
        logger.debug(f"Evicted {len(victims)} cache entries (max_size={self.max_size})")
