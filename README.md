# sharedlock

Two reader-writer mutexes for threaded Python code, context managers that
hold them for a block, and a small benchmark that checks the mutexes for
correctness and measures their throughput under several mixes of readers
and writers.

## The mutexes

Both mutex types offer the same interface:

| method              | meaning                                            |
|---------------------|----------------------------------------------------|
| `lock()`            | take exclusive ownership, blocking as needed       |
| `try_lock()`        | take exclusive ownership only if free; `bool`      |
| `unlock()`          | release exclusive ownership                        |
| `lock_shared()`     | take shared ownership, blocking as needed          |
| `try_lock_shared()` | take shared ownership without blocking; `bool`     |
| `unlock_shared()`   | release shared ownership                           |
| `readers()`         | number of shared holders                           |
| `write_entered()`   | whether a writer holds the lock or is queued for it |

`unlock_shared()` raises `RuntimeError` when there is no shared holder.

### `sharedlock.gated.GatedSharedMutex`

Built from one lock and two condition "gates". The state holds a
write-entered flag in its high bit (`WRITE_ENTERED`, bit 31) and a reader
count in the remaining bits (at most `MAX_READERS`). A writer waits on the
first gate until it can raise the flag, which stops new readers, then waits
on the second gate for the current readers to leave. While no reader holds
the lock, readers and writers compete on equal terms; once a writer is
queued, it is served first. Readers that find the count saturated wait until
a reader leaves.

`try_lock()` and `try_lock_shared()` also return `False` if the internal
lock is momentarily busy.

### `sharedlock.packed.PackedSharedMutex`

Keeps the reader count in the lower 32 bits of one state word (`READERS`)
and the writer flag in the upper 32 bits (`WRITERS`). Threads blocked by a
writer park on one wait point; a writer waiting for readers to drain parks
on another, and is woken by the last reader to leave. `unlock()` wakes every
parked thread. `waiters()` reports how many threads are parked behind a
writer.

`try_lock_shared()` fails only when a writer is entered. Taking shared
ownership when the reader count is full raises `RuntimeError`.

## Guards

`sharedlock.guards` has two context managers that pair each acquire with its
release, even when the block raises. Each yields the mutex.

```python
from sharedlock.gated import GatedSharedMutex
from sharedlock.guards import shared_lock, unique_lock

mutex = GatedSharedMutex()
value = 0

with unique_lock(mutex):
    value += 1

with shared_lock(mutex):
    snapshot = value
```

## Benchmark

`sharedlock.bench` has the benchmark pieces:

- `check_correctness(mutex_factory, num_threads=8, iterations=100000, out=None)`
  starts `num_threads // 2` readers and as many writers that share one
  counter; each writer increments it `iterations` times under the exclusive
  lock and each reader reads it as often under the shared lock. It writes a
  report to `out` (standard output by default), raises `CorrectnessError` if
  a read sees a negative value, the final count is wrong, or no reads took
  place, and otherwise returns a `CorrectnessResult` with `final_value`,
  `expected_writes` and `reads`.
- `BenchmarkRunner(mutex_factory, readers, writers, work_duration_us=10, write_weight=3)`
  makes one mutex and, on `run_test(duration_ms)`, runs the reader and writer
  threads against it for that long. Readers spin for `work_duration_us`
  microseconds inside the shared lock, writers for `write_weight` times as
  long inside the exclusive lock. Afterwards the properties `read_ops`,
  `write_ops`, `total_ops`, `run_time_ms` and `ops_per_sec` give the results.
  Negative thread counts raise `ValueError`.
- `dummy_work(microseconds)` spins for at least that much wall-clock time.
- `scenarios(max_threads)` gives the `(readers, writers)` mixes tested, with
  `q = max_threads // 4`: `(max_threads, 0)`, `(0, max_threads)`,
  `(max_threads, q)`, `(q, max_threads)`, `(max_threads, 1)` and
  `(1, max_threads)`.
- `run_performance_tests(name, mutex_factory, duration_ms, max_threads=None, out=None)`
  runs every scenario (skipping one with no threads at all), writes a report
  to `out`, and returns a list of `(readers, writers, runner)` tuples.
  `max_threads` defaults to the number of CPUs.

```python
import sys
from sharedlock.bench import check_correctness, run_performance_tests
from sharedlock.packed import PackedSharedMutex

check_correctness(PackedSharedMutex, 8, 10_000, sys.stdout)
run_performance_tests("PackedSharedMutex", PackedSharedMutex, 500, 8, sys.stdout)
```

### Command line

```
sharedlock-bench
```

runs the correctness check on `GatedSharedMutex` and `PackedSharedMutex`,
then benchmarks each in turn. Options:

| option          | default  | meaning                                  |
|-----------------|----------|------------------------------------------|
| `--duration`    | `2000`   | milliseconds per scenario                |
| `--max-threads` | `64`     | thread budget passed to `scenarios()`    |
| `--pause`       | `2.0`    | seconds to wait between mutexes          |
| `--iterations`  | `100000` | iterations per thread in the check       |

If a correctness check fails, the command prints the error to standard error
and exits with status 1 before any benchmark runs.

## Limits

CPython threads share one interpreter lock, so the figures compare how the
locking schemes behave under contention; they are not raw hardware limits.
The benchmark only covers the two mutexes in this package; it does not
measure other reader-writer lock implementations.