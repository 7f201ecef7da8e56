"""
=============================================================================
WORKER POOL
=============================================================================

Threads that take accepted connections off a shared queue. Each job is one
connection, carried from first byte to close by a single worker.

=============================================================================
LAYOUT
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   accept loop                                                        │
    │       │ submit(process, args=(conn,))                                │
    │       ▼                                                              │
    │   ┌─────────────── queue.Queue ────────────────┐                     │
    │   │  Job(conn #7)   Job(conn #8)   Job(conn #9) │                    │
    │   └────────────────────────────────────────────┘                     │
    │       │ get()            │ get()           │ get()                   │
    │       ▼                  ▼                 ▼                         │
    │   Worker-0 (busy)    Worker-1 (busy)   Worker-2 (idle → busy)        │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
GROWTH AND LIMITS
=============================================================================

    min_workers   spawned by start() and kept until shutdown()
    max_workers   ceiling; submit() spawns one more worker whenever the
                  backlog is larger than the number of idle workers
    queue_size    0 = unbounded backlog; otherwise submit() answers False
                  once the backlog is full and the caller turns the
                  connection away

Jobs have no time limit, so a client that stops sending pins its worker.
Growing on demand keeps such a client from starving the others.

=============================================================================
STOPPING
=============================================================================

shutdown() enqueues one ``None`` per worker. A worker that dequeues
``None`` leaves its loop; jobs queued ahead of it still run first.

=============================================================================
"""

import logging
import queue
import threading
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, List, Optional


logger = logging.getLogger(__name__)


class WorkerState(Enum):
    IDLE = "idle"
    BUSY = "busy"
    STOPPED = "stopped"


@dataclass
class Job:
    """One unit of work, normally ``process(conn)`` for a single connection."""

    func: Callable[..., Any]
    args: tuple = ()
    kwargs: dict = field(default_factory=dict)
    queued_at: float = field(default_factory=time.monotonic)

    def __call__(self):
        return self.func(*self.args, **self.kwargs)


class Worker(threading.Thread):
    """
    Runs jobs from ``jobs`` until it dequeues ``None``.

    An exception escaping a job is logged and counted against this worker;
    the thread itself carries on with the next job.
    """

    def __init__(self, jobs: queue.Queue, index: int):
        super().__init__(name=f"minihttp-worker-{index}", daemon=True)
        self.jobs = jobs
        self.state = WorkerState.IDLE
        self.completed = 0
        self.failed = 0

    def run(self):
        logger.debug(f"{self.name} up")

        while True:
            job = self.jobs.get()
            if job is None:
                self.jobs.task_done()
                break

            try:
                self._run_job(job)
            finally:
                self.jobs.task_done()

        self.state = WorkerState.STOPPED
        logger.debug(f"{self.name} down")

    def _run_job(self, job: Job):
        self.state = WorkerState.BUSY
        waited = time.monotonic() - job.queued_at
        started = time.monotonic()

        try:
            job()
        except Exception as e:
            self.failed += 1
            logger.exception(f"{self.name}: job raised after {time.monotonic() - started:.3f}s: {e}")
        else:
            self.completed += 1
            logger.debug(
                f"{self.name}: job done in {time.monotonic() - started:.3f}s "
                f"(queued {waited:.3f}s)"
            )
        finally:
            self.state = WorkerState.IDLE


class ThreadPool:
    """
    Example:
        pool = ThreadPool(min_workers=4, max_workers=64)
        pool.start()
        if not pool.submit(process, args=(conn,)):
            ...  # backlog full
        pool.shutdown()
    """

    def __init__(self, min_workers: int = 4, max_workers: int = 64, queue_size: int = 0):
        self.min_workers = min_workers
        self.max_workers = max_workers

        self._jobs: "queue.Queue[Optional[Job]]" = queue.Queue(maxsize=queue_size)
        self._workers: List[Worker] = []
        self._workers_lock = threading.Lock()
        self._spawned = 0

        self._started = False
        self._stopping = False

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def start(self):
        if self._started:
            return

        with self._workers_lock:
            for _ in range(self.min_workers):
                self._spawn()

        self._stopping = False
        self._started = True
        logger.info(f"Worker pool started ({self.min_workers}-{self.max_workers} workers)")

    def _spawn(self) -> Worker:
        # Needs _workers_lock
        worker = Worker(self._jobs, self._spawned)
        self._spawned += 1
        self._workers.append(worker)
        worker.start()
        return worker

    def shutdown(self, wait: bool = True, timeout: Optional[float] = None):
        """
        Stop every worker.

        With ``wait``, jobs still in the backlog get up to ``timeout``
        seconds (forever if None) to be picked up before the workers are
        told to exit.
        """
        if not self._started:
            return

        self._stopping = True
        logger.info("Stopping worker pool...")

        if wait:
            deadline = None if timeout is None else time.monotonic() + timeout
            while not self._jobs.empty():
                if deadline is not None and time.monotonic() >= deadline:
                    logger.warning(f"{self._jobs.qsize()} queued jobs left after {timeout}s")
                    break
                time.sleep(0.05)

        with self._workers_lock:
            workers, self._workers = self._workers, []

        for _ in workers:
            self._jobs.put(None)
        for worker in workers:
            worker.join(timeout=2.0)

        self._started = False
        logger.info(
            f"Worker pool stopped: {sum(w.completed for w in workers)} jobs done, "
            f"{sum(w.failed for w in workers)} failed"
        )

    # =========================================================================
    # SUBMITTING WORK
    # =========================================================================

    def submit(self, func: Callable[..., Any], args: tuple = (), kwargs: Optional[dict] = None) -> bool:
        """
        Queue ``func(*args, **kwargs)``.

        Returns False when a bounded backlog is full.

        Raises:
            RuntimeError: If the pool hasn't been started or is stopping
        """
        if not self._started:
            raise RuntimeError("Worker pool is not running")
        if self._stopping:
            raise RuntimeError("Worker pool is stopping")

        try:
            self._jobs.put_nowait(Job(func, args, kwargs or {}))
        except queue.Full:
            return False

        self._grow_if_needed()
        return True

    def _grow_if_needed(self):
        with self._workers_lock:
            if len(self._workers) >= self.max_workers:
                return

            idle = [w for w in self._workers if w.state is WorkerState.IDLE]
            if self._jobs.qsize() > len(idle):
                worker = self._spawn()
                logger.debug(f"Backlog exceeds idle workers, added {worker.name} ({self.worker_count} total)")

    # =========================================================================
    # INTROSPECTION
    # =========================================================================

    @property
    def worker_count(self) -> int:
        return len(self._workers)

    @property
    def busy_workers(self) -> int:
        return len([w for w in self._workers if w.state is WorkerState.BUSY])
