"""Correctness check and throughput benchmark for shared mutexes."""

from __future__ import annotations

import argparse
import os
import sys
import threading
import time
from dataclasses import dataclass
from typing import Callable, Sequence, TextIO

from sharedlock.gated import GatedSharedMutex
from sharedlock.guards import shared_lock, unique_lock
from sharedlock.packed import PackedSharedMutex

__all__ = [
    "BenchmarkRunner",
    "CorrectnessError",
    "CorrectnessResult",
    "check_correctness",
    "dummy_work",
    "main",
    "run_performance_tests",
    "scenarios",
]

MUTEXES: dict[str, Callable[[], object]] = {
    "GatedSharedMutex": GatedSharedMutex,
    "PackedSharedMutex": PackedSharedMutex,
}


class CorrectnessError(AssertionError):
    """Raised when a mutex lets readers or writers see inconsistent state."""


@dataclass(frozen=True)
class CorrectnessResult:
    final_value: int
    expected_writes: int
    reads: int


def dummy_work(microseconds: int) -> None:
    """Spin for at least ``microseconds`` of wall-clock time."""
    start = time.perf_counter_ns()
    limit = microseconds * 1000
    while time.perf_counter_ns() - start < limit:
        pass


class BenchmarkRunner:
    """Runs reader and writer threads against one mutex for a fixed time."""

    def __init__(
        self,
        mutex_factory: Callable[[], object],
        readers: int,
        writers: int,
        work_duration_us: int = 10,
        write_weight: int = 3,
    ) -> None:
        if readers < 0 or writers < 0:
            raise ValueError("thread counts must not be negative")
        self._mutex = mutex_factory()
        self.reader_count = readers
        self.writer_count = writers
        self.work_duration_us = work_duration_us
        self.write_weight = write_weight
        self._read_ops = 0
        self._write_ops = 0
        self._run_time_ms = 0
        self._counts_guard = threading.Lock()
        self._start = threading.Event()
        self._running = threading.Event()

    def run_test(self, duration_ms: int) -> None:
        """Run all threads for ``duration_ms`` and record the results."""
        self._read_ops = 0
        self._write_ops = 0
        self._start.clear()
        self._running.set()
        threads = [threading.Thread(target=self._reader_job) for _ in range(self.reader_count)]
        threads += [threading.Thread(target=self._writer_job) for _ in range(self.writer_count)]
        for thread in threads:
            thread.start()

        self._start.set()
        start_time = time.perf_counter()
        time.sleep(duration_ms / 1000)
        self._running.clear()

        for thread in threads:
            thread.join()
        self._run_time_ms = int((time.perf_counter() - start_time) * 1000)

    def _reader_job(self) -> None:
        self._start.wait()
        count = 0
        while self._running.is_set():
            with shared_lock(self._mutex):
                dummy_work(self.work_duration_us)
            count += 1
        with self._counts_guard:
            self._read_ops += count

    def _writer_job(self) -> None:
        self._start.wait()
        count = 0
        while self._running.is_set():
            with unique_lock(self._mutex):
                dummy_work(self.work_duration_us * self.write_weight)
            count += 1
        with self._counts_guard:
            self._write_ops += count

    @property
    def read_ops(self) -> int:
        return self._read_ops

    @property
    def write_ops(self) -> int:
        return self._write_ops

    @property
    def total_ops(self) -> int:
        return self._read_ops + self._write_ops

    @property
    def ops_per_sec(self) -> float:
        if self._run_time_ms <= 0:
            return 0.0
        return self.total_ops / (self._run_time_ms / 1000.0)

    @property
    def run_time_ms(self) -> int:
        return self._run_time_ms


def scenarios(max_threads: int) -> list[tuple[int, int]]:
    """The (readers, writers) pairs exercised for a given thread budget."""
    quarter = max_threads // 4
    return [
        (max_threads, 0),
        (0, max_threads),
        (max_threads, quarter),
        (quarter, max_threads),
        (max_threads, 1),
        (1, max_threads),
    ]


def run_performance_tests(
    name: str,
    mutex_factory: Callable[[], object],
    duration_ms: int,
    max_threads: int | None = None,
    out: TextIO | None = None,
) -> list[tuple[int, int, BenchmarkRunner]]:
    """Benchmark every scenario and report each one; returns the finished runners."""
    out = out if out is not None else sys.stdout
    if max_threads is None:
        max_threads = os.cpu_count() or 1

    print(f"\n===== Performance test ({name}) =====", file=out)
    print(f"Duration: {duration_ms}ms", file=out)
    print(f"Hardware concurrency: {max_threads}", file=out)

    results = []
    for readers, writers in scenarios(max_threads):
        if readers == 0 and writers == 0:
            continue
        runner = BenchmarkRunner(mutex_factory, readers, writers)
        runner.run_test(duration_ms)
        print(
            f"\nScenario: {readers} readers, {writers} writers\n"
            f"  Total ops: {runner.total_ops} ({runner.read_ops} reads + {runner.write_ops} writes)\n"
            f"  Elapsed: {runner.run_time_ms} ms\n"
            f"  Throughput: {runner.ops_per_sec:.0f} op/s",
            file=out,
        )
        results.append((readers, writers, runner))
    return results


def check_correctness(
    mutex_factory: Callable[[], object],
    num_threads: int = 8,
    iterations: int = 100000,
    out: TextIO | None = None,
) -> CorrectnessResult:
    """Hammer a mutex with paired readers and writers and verify the outcome."""
    out = out if out is not None else sys.stdout
    mutex = mutex_factory()
    shared_value = 0
    read_count = 0
    count_guard = threading.Lock()
    start = threading.Event()
    failures: list[str] = []

    def reader() -> None:
        nonlocal read_count
        start.wait()
        local_reads = 0
        for _ in range(iterations):
            with shared_lock(mutex):
                value_copy = shared_value
            if value_copy < 0:
                failures.append(f"read a negative value: {value_copy}")
                return
            local_reads += 1
        with count_guard:
            read_count += local_reads

    def writer() -> None:
        nonlocal shared_value
        start.wait()
        for _ in range(iterations):
            with unique_lock(mutex):
                shared_value += 1

    pairs = num_threads // 2
    threads = []
    for _ in range(pairs):
        threads.append(threading.Thread(target=reader))
        threads.append(threading.Thread(target=writer))
    for thread in threads:
        thread.start()
    start.set()
    for thread in threads:
        thread.join()

    if failures:
        raise CorrectnessError(failures[0])

    expected_writes = pairs * iterations
    print("\n===== Correctness test =====", file=out)
    print(f"Final value: {shared_value} (expected: {expected_writes})", file=out)
    print(f"Total reads: {read_count} (expected: ~{expected_writes})", file=out)

    if shared_value != expected_writes:
        raise CorrectnessError(f"final value {shared_value}, expected {expected_writes}")
    if read_count <= 0:
        raise CorrectnessError("no reads were performed")

    print("All tests passed!", file=out)
    return CorrectnessResult(shared_value, expected_writes, read_count)


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Check and benchmark shared mutexes.")
    parser.add_argument("--duration", type=int, default=2000, help="milliseconds per scenario")
    parser.add_argument("--max-threads", type=int, default=64)
    parser.add_argument("--pause", type=float, default=2.0, help="seconds between mutexes")
    parser.add_argument("--iterations", type=int, default=100000)
    args = parser.parse_args(argv)

    try:
        for factory in MUTEXES.values():
            check_correctness(factory, iterations=args.iterations)
    except CorrectnessError as exc:
        print(f"Error! {exc}", file=sys.stderr)
        return 1

    for index, (name, factory) in enumerate(MUTEXES.items()):
        if index:
            time.sleep(args.pause)
        run_performance_tests(name, factory, args.duration, args.max_threads)
    return 0


if __name__ == "__main__":
    sys.exit(main())