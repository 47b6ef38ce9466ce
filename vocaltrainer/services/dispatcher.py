"""Single-writer dispatcher serializing all session state mutations."""

import logging
import queue
import threading
from typing import Any, Callable, NamedTuple, Optional, Tuple

logger = logging.getLogger(__name__)


class DispatchJob(NamedTuple):
    """A state update to be applied on the dispatcher thread."""
    fn: Callable[..., Any]
    args: Tuple[Any, ...]


class StateDispatcher:
    """Applies submitted jobs one at a time, in submission order, on one thread.

    Timer threads and the audio capture thread never touch session state
    directly; they submit a job here and return immediately.
    """

    def __init__(self, name: str = "StateDispatcher"):
        self.name = name
        self.job_queue: "queue.Queue[Optional[DispatchJob]]" = queue.Queue()
        self.shutdown_event = threading.Event()
        self.thread = threading.Thread(target=self._dispatch_loop, daemon=True)
        self.thread.name = f"{name}Thread"
        self.thread.start()
        logger.info(f"{self.name} started")

    def is_dispatch_thread(self) -> bool:
        return threading.current_thread() is self.thread

    def submit(self, fn: Callable[..., Any], *args: Any) -> None:
        """Queue ``fn(*args)`` for execution on the dispatcher thread."""
        if self.shutdown_event.is_set():
            logger.debug(f"{self.name} is shut down, dropping {getattr(fn, '__name__', fn)}")
            return
        self.job_queue.put(DispatchJob(fn, args))

    def join(self) -> None:
        """Block until every job submitted so far has been applied."""
        if self.is_dispatch_thread():
            raise RuntimeError("join() called from the dispatcher thread")
        self.job_queue.join()

    def _dispatch_loop(self) -> None:
        logger.debug(f"{self.name} loop starting")
        while True:
            job = self.job_queue.get()
            if job is None:
                # Sentinel value received, time to exit
                self.job_queue.task_done()
                break
            try:
                job.fn(*job.args)
            except Exception as e:
                logger.error(f"Error applying {getattr(job.fn, '__name__', job.fn)}: {e}", exc_info=True)
            finally:
                self.job_queue.task_done()
        logger.debug(f"{self.name} loop exiting")

    def shutdown(self, timeout: float = 2.0) -> bool:
        """Apply the jobs already queued, then stop the thread.

        Returns:
            True if the thread exited within ``timeout``
        """
        if self.shutdown_event.is_set():
            return not self.thread.is_alive()
        self.shutdown_event.set()
        self.job_queue.put(None)
        if self.is_dispatch_thread():
            return True
        self.thread.join(timeout=timeout)
        if self.thread.is_alive():
            logger.warning(f"{self.name} did not stop cleanly")
            return False
        logger.info(f"{self.name} stopped")
        return True
