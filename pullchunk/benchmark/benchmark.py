import asyncio
import os
import shutil
import tempfile
import time
import psutil
import json
from pathlib import Path
from typing import List, Dict, Optional
from dataclasses import dataclass, asdict
import logging

from ..io.sink import FileChunkSink
from ..io.source import FileByteSource
from ..transfer.driver import TransferDriver, TransferStatus
from ..transfer.store import TransferStore

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZES = [4 * 1024, 16 * 1024, 64 * 1024, 100 * 1024]


@dataclass
class BenchmarkResult:
    """Single benchmark result"""
    chunk_size: int
    file_size: int
    iterations: int
    chunks_per_transfer: int
    avg_duration_ms: float
    min_duration_ms: float
    max_duration_ms: float
    throughput_mb_s: float
    cpu_usage_avg: float
    memory_mb_avg: float
    memory_mb_max: float
    completed: int
    timestamp: float


class Benchmarker:
    """
    Measures transfer throughput and memory growth per chunk size
    A single outstanding chunk should keep memory flat regardless of file size
    """

    def __init__(self, output_dir: Path, file_size: int = 8 * 1024 * 1024):
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.file_size = file_size
        self.results: List[BenchmarkResult] = []

        # Process for resource monitoring
        self.process = psutil.Process()

    def _make_source(self, workdir: Path) -> Path:
        source = workdir / "bench_source.bin"
        with open(source, 'wb') as f:
            remaining = self.file_size
            while remaining > 0:
                block = min(remaining, 1024 * 1024)
                f.write(os.urandom(block))
                remaining -= block
        return source

    async def test_chunk_size(self, chunk_size: int, iterations: int = 3,
                              workdir: Optional[Path] = None) -> BenchmarkResult:
        """Transfer the same generated file `iterations` times with one chunk size"""
        if iterations <= 0:
            raise ValueError(f"iterations must be positive, got {iterations}")

        logger.info(f"Benchmarking chunk size {chunk_size} bytes")

        own_workdir = workdir is None
        workdir = Path(workdir or tempfile.mkdtemp(prefix="pullchunk-bench-"))
        source = self._make_source(workdir)

        durations = []
        cpu_usages = []
        memory_usages = []
        completed = 0
        chunks = 0

        try:
            for i in range(iterations):
                store = TransferStore(FileByteSource(), chunk_size=chunk_size)
                sink = FileChunkSink(workdir / f"out_{chunk_size}_{i}")
                driver = TransferDriver(store, sink)

                cpu_before = self.process.cpu_percent()
                mem_before = self.process.memory_info().rss / 1024 / 1024

                key = store.register(str(source))
                start = time.perf_counter()
                result = await driver.drive(key)
                durations.append((time.perf_counter() - start) * 1000)

                cpu_after = self.process.cpu_percent()
                mem_after = self.process.memory_info().rss / 1024 / 1024
                cpu_usages.append((cpu_before + cpu_after) / 2)
                memory_usages.append(mem_after - mem_before)

                chunks = store.get_window(key).total_chunks
                if result.status is TransferStatus.COMPLETED:
                    completed += 1

                shutil.rmtree(sink.output_dir, ignore_errors=True)

                # Small delay between iterations
                await asyncio.sleep(0.05)
        finally:
            if own_workdir:
                shutil.rmtree(workdir, ignore_errors=True)

        avg_ms = sum(durations) / len(durations)
        result = BenchmarkResult(
            chunk_size=chunk_size,
            file_size=self.file_size,
            iterations=iterations,
            chunks_per_transfer=chunks,
            avg_duration_ms=avg_ms,
            min_duration_ms=min(durations),
            max_duration_ms=max(durations),
            throughput_mb_s=(self.file_size / 1024 / 1024) / (avg_ms / 1000) if avg_ms > 0 else 0.0,
            cpu_usage_avg=sum(cpu_usages) / len(cpu_usages),
            memory_mb_avg=sum(memory_usages) / len(memory_usages),
            memory_mb_max=max(memory_usages),
            completed=completed,
            timestamp=time.time()
        )

        self.results.append(result)
        return result

    async def test_all_chunk_sizes(self, chunk_sizes: Optional[List[int]] = None,
                                   iterations: int = 3):
        """Benchmark every chunk size in turn"""
        if iterations <= 0:
            raise ValueError(f"iterations must be positive, got {iterations}")
        chunk_sizes = chunk_sizes or DEFAULT_CHUNK_SIZES

        for count, chunk_size in enumerate(chunk_sizes, 1):
            logger.info(f"Progress: {count}/{len(chunk_sizes)}")
            try:
                await self.test_chunk_size(chunk_size, iterations=iterations)
            except Exception as e:
                logger.error(f"Failed to benchmark chunk size {chunk_size}: {e}")

        logger.info(f"Completed {len(self.results)} benchmarks")

    def save_results(self) -> Dict[str, Path]:
        """Save benchmark results to JSON and CSV"""
        timestamp = int(time.time())

        json_file = self.output_dir / f"benchmark_{timestamp}.json"
        with open(json_file, 'w') as f:
            json.dump([asdict(r) for r in self.results], f, indent=2)
        logger.info(f"Saved results to {json_file}")

        csv_file = self.output_dir / f"benchmark_{timestamp}.csv"
        with open(csv_file, 'w') as f:
            if self.results:
                fields = asdict(self.results[0]).keys()
                f.write(','.join(fields) + '\n')

                for result in self.results:
                    values = [str(v) for v in asdict(result).values()]
                    f.write(','.join(values) + '\n')

        logger.info(f"Saved CSV to {csv_file}")
        return {'json': json_file, 'csv': csv_file}

    def compare_chunk_sizes(self) -> Dict:
        """Pick the best chunk size per criterion"""
        if not self.results:
            return {}

        return {
            'fastest': asdict(max(self.results, key=lambda r: r.throughput_mb_s)),
            'lowest_memory': asdict(min(self.results, key=lambda r: r.memory_mb_max))
        }
