"""
Batch Range-Table Generation
============================
Walks ``{input}/*.txt`` vehicle data files, computes a range table for every
projectile and writes ``{output}/{vehicle}/{shell}.txt``.

Vehicles run in parallel on a thread pool. All workers share one
BallisticCache, so a shell carried by many vehicles is simulated once.
Per-vehicle statistics are returned by each task and merged afterwards;
workers share no other state.
"""

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from functools import reduce
from pathlib import Path
from typing import Dict, List, Optional

from .atmosphere import DensityTable
from .cache import BallisticCache
from .data_file import DataProjectile, parse_data_file
from .projectile import is_skipped


logger = logging.getLogger(__name__)

DEFAULT_SENSITIVITY = 0.50


@dataclass
class BatchConfig:
    """Run-time options for one batch run."""
    input_dir: Path
    output_dir: Path
    sensitivity: float = DEFAULT_SENSITIVITY
    jobs: int = 0                                  # 0 = one per CPU
    vehicles: Optional[List[str]] = None           # file stems to keep
    density_step: float = 0.1                      # m
    density_ceiling: float = 500.0                 # m

    def __post_init__(self):
        self.input_dir = Path(self.input_dir)
        self.output_dir = Path(self.output_dir)

    @property
    def worker_count(self) -> int:
        if self.jobs > 0:
            return self.jobs
        return os.cpu_count() or 1


@dataclass
class BatchStats:
    vehicles: int = 0
    shells_written: int = 0
    errors: int = 0
    cache_hits: int = 0
    cache_misses: int = 0
    cache_entries: int = 0       # distinct tables held by the cache after the run
    failed_vehicles: List[str] = field(default_factory=list)

    def merge(self, other: 'BatchStats') -> 'BatchStats':
        return BatchStats(
            vehicles=self.vehicles + other.vehicles,
            shells_written=self.shells_written + other.shells_written,
            errors=self.errors + other.errors,
            cache_hits=self.cache_hits + other.cache_hits,
            cache_misses=self.cache_misses + other.cache_misses,
            cache_entries=max(self.cache_entries, other.cache_entries),
            failed_vehicles=self.failed_vehicles + other.failed_vehicles,
        )

    @property
    def lookups(self) -> int:
        return self.cache_hits + self.cache_misses

    @property
    def reuse_pct(self) -> float:
        return 100.0 * self.cache_hits / self.lookups if self.lookups else 0.0


def collect_vehicle_files(config: BatchConfig) -> List[Path]:
    if not config.input_dir.is_dir():
        raise FileNotFoundError(f"input directory not found: {config.input_dir}")
    files = sorted(p for p in config.input_dir.glob('*.txt') if p.is_file())
    if config.vehicles:
        wanted = set(config.vehicles)
        files = [p for p in files if p.stem in wanted]
    return files


def unique_projectiles(projectiles: List[DataProjectile]) -> List[DataProjectile]:
    """
    One projectile per output name, the last occurrence winning (a later
    block would overwrite the earlier file). Skip-listed shells are dropped.
    """
    last_by_name: Dict[str, DataProjectile] = {}
    for proj in projectiles:
        if not is_skipped(proj.shell_type):
            last_by_name[proj.output_name] = proj
    return list(last_by_name.values())


def process_vehicle(path: Path, config: BatchConfig, cache: BallisticCache) -> BatchStats:
    """Compute and write every range table of one vehicle file."""
    stats = BatchStats()
    vehicle_id = path.stem

    try:
        data = parse_data_file(path)
    except (OSError, UnicodeDecodeError) as e:
        logger.error("read error %s: %s", vehicle_id, e)
        stats.errors += 1
        stats.failed_vehicles.append(vehicle_id)
        return stats

    vehicle_dir = config.output_dir / vehicle_id
    written = 0

    for proj in unique_projectiles(data.projectiles):
        content, hit = cache.get_or_compute(proj.record, config.sensitivity)
        if hit:
            stats.cache_hits += 1
        else:
            stats.cache_misses += 1

        if not content:
            continue

        file_path = vehicle_dir / f"{proj.output_name}.txt"
        try:
            vehicle_dir.mkdir(parents=True, exist_ok=True)
            file_path.write_text(content, encoding='utf-8')
        except OSError as e:
            logger.error("write error %s/%s: %s", vehicle_id, file_path.name, e)
            stats.errors += 1
            continue
        written += 1

    if written:
        stats.vehicles += 1
        stats.shells_written += written
    logger.debug("%s: %d tables written", vehicle_id, written)
    return stats


def run_batch(config: BatchConfig, cache: BallisticCache = None) -> BatchStats:
    """
    Generate range tables for every vehicle file in ``config.input_dir``.

    Raises FileNotFoundError when the input directory does not exist; any
    per-file I/O failure is logged and counted instead.
    """
    if not config.sensitivity > 0.0:
        logger.warning("sensitivity %s is not positive, no tables will be written",
                       config.sensitivity)

    files = collect_vehicle_files(config)
    config.output_dir.mkdir(parents=True, exist_ok=True)
    if cache is None:
        cache = BallisticCache(DensityTable(config.density_step, config.density_ceiling))

    logger.info("computing range tables for %d vehicles (sensitivity=%s, jobs=%d)",
                len(files), config.sensitivity, config.worker_count)

    with ThreadPoolExecutor(max_workers=config.worker_count) as pool:
        results = list(pool.map(lambda p: process_vehicle(p, config, cache), files))

    stats = reduce(BatchStats.merge, results, BatchStats())
    # Racing misses on one key each count a miss but store a single entry
    stats.cache_entries = len(cache)
    logger.info("done: %d vehicles, %d tables written, %d errors",
                stats.vehicles, stats.shells_written, stats.errors)
    logger.info("cache: %d unique / %d lookups (%.0f%% reuse)",
                stats.cache_entries, stats.lookups, stats.reuse_pct)
    return stats
