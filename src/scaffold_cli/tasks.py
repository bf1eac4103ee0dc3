"""Sequential task runner.

Tasks run one after another against a shared context dict. An action may be
sync or async, and may return a list of child tasks which are run (with the
same context) before the next sibling. The first failure stops the batch and
propagates to the caller.
"""

import inspect
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Optional, Sequence


class TaskStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    SKIPPED = "skipped"


TaskContext = dict[str, Any]


@dataclass
class Task:
    title: str
    action: Callable[[TaskContext, "Task"], Any]
    enabled: Optional[Callable[[TaskContext], bool]] = None
    key: str = ""
    status: TaskStatus = TaskStatus.PENDING
    detail: str = ""
    children: list["Task"] = field(default_factory=list)

    def __post_init__(self):
        if not self.key:
            self.key = self.title.lower().rstrip(".").replace(" ", "-")


class TaskRunner:
    """Runs tasks in order and reports status changes to an optional tracker.

    The tracker needs ``add(key, label, parent=None)`` and
    ``update(key, status, detail="")`` (see ``ui.StepTracker``).
    """

    def __init__(self, tracker=None, logger: logging.Logger | None = None):
        self.tracker = tracker
        self.logger = logger or logging.getLogger(__name__)

    async def run(self, tasks: Sequence[Task], context: Optional[TaskContext] = None) -> TaskContext:
        context = {} if context is None else context
        await self._run_list(tasks, context, parent=None)
        return context

    async def _run_list(self, tasks: Sequence[Task], context: TaskContext, parent: Optional[Task]):
        for task in tasks:
            self._track(task, parent)
        for task in tasks:
            await self._run_one(task, context)

    async def _run_one(self, task: Task, context: TaskContext):
        if task.enabled is not None and not task.enabled(context):
            self._set(task, TaskStatus.SKIPPED)
            self.logger.debug("task skipped: %s", task.title)
            return

        self._set(task, TaskStatus.RUNNING)
        self.logger.debug("task started: %s", task.title)
        try:
            result = task.action(context, task)
            if inspect.isawaitable(result):
                result = await result
            if isinstance(result, (list, tuple)) and result and all(isinstance(t, Task) for t in result):
                task.children = list(result)
                await self._run_list(task.children, context, parent=task)
        except Exception as e:
            self._set(task, TaskStatus.FAILED, task.detail or str(e))
            self.logger.debug("task failed: %s: %s", task.title, e)
            raise
        self._set(task, TaskStatus.SUCCEEDED)
        self.logger.debug("task succeeded: %s", task.title)

    def _track(self, task: Task, parent: Optional[Task]):
        if self.tracker is not None:
            self.tracker.add(task.key, task.title, parent=parent.key if parent else None)

    def _set(self, task: Task, status: TaskStatus, detail: str = ""):
        task.status = status
        if detail:
            task.detail = detail
        if self.tracker is not None:
            self.tracker.update(task.key, status, task.detail)
