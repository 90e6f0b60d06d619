"""
=============================================================================
THREAD POOL
=============================================================================

Each accepted connection becomes one task; a worker thread runs it from
start to finish (read, parse, resolve, send, close). Tasks share nothing,
so there is no locking inside a task.

    accept loop ──submit()──► ┌──────────────┐ ──► Worker-0
                              │  task queue  │ ──► Worker-1
                              │  (bounded)   │ ──► ...
                              └──────────────┘ ──► Worker-N (≤ max_workers)

The pool starts with min_workers threads and adds one whenever every
worker is busy and tasks are waiting, up to max_workers. When the queue is
full submit() returns False and the caller decides what to do (the server
drops the connection).

=============================================================================
"""

import logging
import queue
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Optional


@dataclass
class Task:
    """A deferred call: func(*args)."""
    func: Callable[..., Any]
    args: tuple = field(default_factory=tuple)


class Worker(threading.Thread):
    """Pulls tasks off the shared queue until it receives None."""

    def __init__(self, task_queue: "queue.Queue[Optional[Task]]", worker_id: int, logger: logging.Logger):
        super().__init__(name=f"Worker-{worker_id}", daemon=True)
        self.task_queue = task_queue
        self.worker_id = worker_id
        self.logger = logger
        self.busy = False

    def run(self):
        while True:
            task = self.task_queue.get()
            try:
                if task is None:  # Poison pill
                    break
                self._execute(task)
            finally:
                self.task_queue.task_done()

    def _execute(self, task: Task):
        self.busy = True
        try:
            task.func(*task.args)
        except Exception as e:
            # A failing task must not take the worker down with it
            self.logger.exception(f"Worker {self.worker_id} task failed: {e}")
        finally:
            self.busy = False


class ThreadPool:
    """
    Bounded pool of worker threads.

    Usage:
        pool = ThreadPool(min_workers=4, max_workers=16)
        pool.start()
        pool.submit(handle, args=(conn,))
        pool.shutdown()
    """

    def __init__(
        self,
        min_workers: int = 4,
        max_workers: int = 16,
        queue_size: int = 100,
        logger: Optional[logging.Logger] = None,
    ):
        self.min_workers = min_workers
        self.max_workers = max_workers
        self.logger = logger or logging.getLogger(__name__)

        self._task_queue: "queue.Queue[Optional[Task]]" = queue.Queue(maxsize=queue_size)
        self._workers: list[Worker] = []
        self._lock = threading.Lock()  # Protects _workers
        self._started = False
        self._next_worker_id = 0

    @property
    def size(self) -> int:
        return len(self._workers)

    def start(self):
        """Spawn min_workers threads. No-op if already started."""
        if self._started:
            return
        self.logger.debug(f"Starting thread pool with {self.min_workers} workers")
        with self._lock:
            for _ in range(self.min_workers):
                self._add_worker()
        self._started = True

    def _add_worker(self):
        # Caller holds self._lock
        worker = Worker(self._task_queue, self._next_worker_id, self.logger)
        self._next_worker_id += 1
        self._workers.append(worker)
        worker.start()

    def submit(self, func: Callable[..., Any], args: tuple = ()) -> bool:
        """
        Queue func(*args) for a worker.

        Returns:
            True if queued, False if the queue is full.

        Raises:
            RuntimeError: If the pool has not been started.
        """
        if not self._started:
            raise RuntimeError("Thread pool not started")

        try:
            self._task_queue.put_nowait(Task(func, args))
        except queue.Full:
            return False

        self._maybe_scale_up()
        return True

    def _maybe_scale_up(self):
        with self._lock:
            all_busy = all(worker.busy for worker in self._workers)
            if all_busy and len(self._workers) < self.max_workers and not self._task_queue.empty():
                self.logger.debug(f"Scaling up: {len(self._workers)} -> {len(self._workers) + 1} workers")
                self._add_worker()

    def shutdown(self, timeout: Optional[float] = 5.0):
        """
        Let queued tasks finish, then stop every worker.

        Each worker gets `timeout` seconds to exit once its poison pill is
        queued.
        """
        if not self._started:
            return

        with self._lock:
            workers = list(self._workers)
            self._workers.clear()
            self._started = False

        # Blocking put: the pill waits behind tasks already queued
        for _ in workers:
            self._task_queue.put(None)
        for worker in workers:
            worker.join(timeout=timeout)

        self.logger.debug("Thread pool stopped")
