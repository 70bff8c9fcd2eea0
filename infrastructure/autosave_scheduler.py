# infrastructure/autosave_scheduler.py
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Tuple
from infrastructure.logging_service import get_module_logger

logger = get_module_logger("AutosaveScheduler", "autosave.log")


@dataclass
class ScheduledTask:
    """Handle for one pending, debounced call owned by a single entity."""
    key: str
    callback: Callable[..., Any]
    args: Tuple = ()
    timer: threading.Timer = field(default=None, repr=False)

    def cancel(self):
        if self.timer is not None:
            self.timer.cancel()


class AutosaveScheduler:
    """
    Debounces saves per entity: scheduling again for the same key replaces the
    pending call, so only the last state within ``delay`` seconds is written.
    """

    def __init__(self, delay: float = 1.0):
        self.delay = delay
        self._tasks: Dict[str, ScheduledTask] = {}
        self._lock = threading.Lock()

    def schedule(self, key: str, callback: Callable[..., Any], *args) -> ScheduledTask:
        task = ScheduledTask(key=key, callback=callback, args=args)
        task.timer = threading.Timer(self.delay, self._run, args=(task,))
        task.timer.daemon = True
        with self._lock:
            previous = self._tasks.get(key)
            if previous is not None:
                previous.cancel()
            self._tasks[key] = task
        task.timer.start()
        return task

    def pending(self, key: str) -> bool:
        with self._lock:
            return key in self._tasks

    def flush(self, key: str) -> bool:
        """Run the pending call for ``key`` now. Returns False when nothing was pending."""
        with self._lock:
            task = self._tasks.pop(key, None)
        if task is None:
            return False
        task.cancel()
        self._execute(task)
        return True

    def flush_all(self):
        with self._lock:
            keys = list(self._tasks)
        for key in keys:
            self.flush(key)

    def cancel(self, key: str) -> bool:
        with self._lock:
            task = self._tasks.pop(key, None)
        if task is None:
            return False
        task.cancel()
        return True

    def cancel_all(self):
        with self._lock:
            tasks = list(self._tasks.values())
            self._tasks.clear()
        for task in tasks:
            task.cancel()

    def _run(self, task: ScheduledTask):
        with self._lock:
            # A newer schedule() or a flush() already took over this key
            if self._tasks.get(task.key) is not task:
                return
            del self._tasks[task.key]
        self._execute(task)

    def _execute(self, task: ScheduledTask):
        try:
            task.callback(*task.args)
        except Exception:
            logger.exception(f"Scheduled save for {task.key} failed")
