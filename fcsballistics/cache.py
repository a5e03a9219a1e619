"""
Ballistic Result Cache
======================
Memoizes rendered range tables across a batch so that shells with the same
physics (the same round fitted to many vehicles) are simulated once.

Keys are bit-exact: every float is compared by its IEEE-754 bit pattern.
Thousands of Euler steps amplify last-bit differences in the inputs, so
no tolerance-based equality is safe here.

The map is split into shards, each a dict guarded by its own lock. Lookups
read the dict without locking; inserts lock only the owning shard and never
replace an existing entry. Two threads missing on the same key at once both
compute, and both get the same text, since the computation is deterministic.
"""

import logging
import struct
import threading
from dataclasses import dataclass
from typing import Optional, Tuple

from .atmosphere import DensityTable
from .formatter import render_table
from .projectile import ProjectileRecord
from .range_table import build_range_table


logger = logging.getLogger(__name__)

DEFAULT_SHARDS = 16

_MISSING = object()


def float_bits(value: float) -> int:
    """IEEE-754 binary64 bit pattern of ``value`` as an unsigned int."""
    return struct.unpack('<Q', struct.pack('<d', value))[0]


@dataclass(frozen=True)
class CacheKey:
    """Fingerprint of every input that affects a range table."""
    shell_type: str
    mass: int
    caliber: int
    speed: int
    cx: int
    explosive_mass: int
    damage_mass: int
    damage_caliber: int
    demarre_k: int
    demarre_speed_pow: int
    demarre_mass_pow: int
    demarre_caliber_pow: int
    armor_power: Tuple[Tuple[int, int], ...]
    sensitivity: int


def make_cache_key(record: ProjectileRecord, sensitivity: float) -> CacheKey:
    return CacheKey(
        shell_type=record.shell_type,
        mass=float_bits(record.mass),
        caliber=float_bits(record.caliber),
        speed=float_bits(record.speed),
        cx=float_bits(record.cx),
        explosive_mass=float_bits(record.explosive_mass),
        damage_mass=float_bits(record.damage_mass),
        damage_caliber=float_bits(record.damage_caliber),
        demarre_k=float_bits(record.demarre_k),
        demarre_speed_pow=float_bits(record.demarre_speed_pow),
        demarre_mass_pow=float_bits(record.demarre_mass_pow),
        demarre_caliber_pow=float_bits(record.demarre_caliber_pow),
        armor_power=tuple((float_bits(d), float_bits(p)) for d, p in record.armor_power),
        sensitivity=float_bits(sensitivity),
    )


def compute_ballistic(record: ProjectileRecord, sensitivity: float,
                      atmosphere: DensityTable) -> Optional[str]:
    """
    Uncached range table text for one projectile.

    None means the projectile is not simulated at all; '' means it was
    simulated but left nothing worth writing.
    """
    rows = build_range_table(record, sensitivity, atmosphere)
    if rows is None:
        return None
    return render_table(rows)


class _Shard:
    __slots__ = ('entries', 'lock')

    def __init__(self):
        self.entries = {}
        self.lock = threading.Lock()


class BallisticCache:
    """
    Thread-safe get-or-compute cache of rendered range tables.

    Shares one DensityTable across every computation it runs.
    """

    def __init__(self, atmosphere: DensityTable = None, shards: int = DEFAULT_SHARDS):
        if shards < 1:
            raise ValueError(f"BallisticCache needs at least one shard, got {shards}")
        self.atmosphere = atmosphere if atmosphere is not None else DensityTable()
        self._shards = tuple(_Shard() for _ in range(shards))

    def _shard(self, key: CacheKey) -> _Shard:
        return self._shards[hash(key) % len(self._shards)]

    def __len__(self) -> int:
        return sum(len(s.entries) for s in self._shards)

    def __contains__(self, key: CacheKey) -> bool:
        return key in self._shard(key).entries

    def get_or_compute(self, record: ProjectileRecord,
                       sensitivity: float) -> Tuple[Optional[str], bool]:
        """
        Returns (result, was_cache_hit).

        The result is exactly what compute_ballistic() would return for the
        same inputs; the cache only decides whether it is recomputed.
        """
        key = make_cache_key(record, sensitivity)
        shard = self._shard(key)

        cached = shard.entries.get(key, _MISSING)
        if cached is not _MISSING:
            return cached, True

        result = compute_ballistic(record, sensitivity, self.atmosphere)
        with shard.lock:
            stored = shard.entries.setdefault(key, result)
        logger.debug("cache miss for %r (%s), stored %d chars",
                     record.output_name, record.shell_type,
                     len(stored) if stored else 0)
        return stored, False
