"""Parallel shard driver.

Splits the arrays VCF into contiguous record ranges, runs one accumulator
per range in a process pool and folds the partial results in shard order.
Derived fields are resolved exactly once, on the merged result.
"""

import logging
import time
from concurrent.futures import ProcessPoolExecutor, as_completed
from pathlib import Path

from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskProgressColumn,
    TextColumn,
    TimeElapsedColumn,
)

from arrays_metrics.accumulator import ArraysCallingAccumulator
from arrays_metrics.exceptions import ConfigurationError
from arrays_metrics.metrics.derived import resolve
from arrays_metrics.metrics.merge import merge_all
from arrays_metrics.metrics.partial import MetricsResult, PartialResult
from arrays_metrics.parsers.vcf import ShardSpec, VcfSource
from arrays_metrics.reference.dbsnp import MembershipIndex

logger = logging.getLogger(__name__)

# Module-level index for worker processes (set by initializer)
_worker_index: MembershipIndex | None = None


def _init_worker(index: MembershipIndex) -> None:
    """Initialize worker process with the shared dbSNP index."""
    global _worker_index
    _worker_index = index


def accumulate_shard(
    source: VcfSource,
    shard: ShardSpec,
    index: MembershipIndex,
) -> PartialResult:
    """Run one accumulator over one shard.

    Args:
        source: Arrays VCF source
        shard: Record range to consume
        index: dbSNP membership index

    Returns:
        Partial result for the shard
    """
    accumulator = ArraysCallingAccumulator(index, shard_index=shard.index)
    accumulator.initialize(source.open())
    accumulator.accept_all(source.iterate_shard(shard))
    return accumulator.finish()


def _accumulate_shard_worker(path: str, shard: ShardSpec) -> PartialResult:
    """Worker entry point: accumulate a shard with the initializer's index."""
    if _worker_index is None:
        raise RuntimeError("Worker process started without a dbSNP index")
    return accumulate_shard(VcfSource(Path(path)), shard, _worker_index)


def run(
    source: VcfSource,
    index: MembershipIndex,
    worker_count: int,
    call_rate_threshold: float,
    show_progress: bool = False,
) -> MetricsResult:
    """Collect metrics over the whole VCF.

    Args:
        source: Arrays VCF source
        index: Fully built dbSNP membership index
        worker_count: Number of shards and worker processes (>= 1)
        call_rate_threshold: Call rate a sample must exceed to pass
        show_progress: Show a rich progress bar over completed shards

    Returns:
        Resolved metrics

    Raises:
        ConfigurationError: If worker_count < 1
        ArraysMetricsError: If any shard fails; the run is aborted
    """
    if worker_count < 1:
        raise ConfigurationError(f"worker_count must be >= 1, got {worker_count}")

    start_time = time.time()
    source.open()
    shards = source.plan_shards(worker_count)
    logger.info(f"Processing {len(shards)} shards with {worker_count} workers")

    partials: dict[int, PartialResult] = {}

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        TimeElapsedColumn(),
        disable=not show_progress,
    ) as progress:
        task = progress.add_task("Collecting metrics...", total=len(shards))

        if worker_count == 1 or len(shards) == 1:
            for shard in shards:
                partials[shard.index] = accumulate_shard(source, shard, index)
                progress.advance(task)
        else:
            with ProcessPoolExecutor(
                max_workers=min(worker_count, len(shards)),
                initializer=_init_worker,
                initargs=(index,),
            ) as executor:
                future_to_shard = {
                    executor.submit(_accumulate_shard_worker, str(source.path), shard): shard
                    for shard in shards
                }
                for future in as_completed(future_to_shard):
                    shard = future_to_shard[future]
                    try:
                        partials[shard.index] = future.result()
                    except Exception:
                        logger.error(
                            f"Shard {shard.index} (records {shard.start}-{shard.stop}) failed"
                        )
                        for pending in future_to_shard:
                            pending.cancel()
                        raise
                    progress.advance(task)
                    logger.debug(f"Shard {shard.index} complete")

    merged = merge_all(partials[i] for i in sorted(partials))
    result = resolve(merged, call_rate_threshold)

    elapsed = time.time() - start_time
    logger.info(f"Collected metrics for {len(result.samples)} samples in {elapsed:.1f}s")
    return result
