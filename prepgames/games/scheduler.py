"""
Delayed UI sequencing (shake reset, confetti, level-complete prompt) as named tasks on the game's own clock.

Tasks carry a name instead of a callback, so pending tasks can be stored together with the rest of the game state.
The owning game decides what a name means when the task comes due.
"""

from dataclasses import dataclass, field
from typing import Callable, Self

from prepgames.core.models import TaskData


@dataclass(frozen=True)
class ScheduledTask:
    name: str
    due: float  # milliseconds on the game clock

    @classmethod
    def from_data(cls, data: TaskData) -> Self:
        return cls(name=str(data["name"]), due=float(data["due"]))

    def to_data(self) -> TaskData:
        return {"name": self.name, "due": self.due}


@dataclass
class Scheduler:
    """Pending tasks of one game. Nothing fires by itself: the owner calls run_due() with the current time."""

    tasks: list[ScheduledTask] = field(default_factory=list)

    @classmethod
    def from_data(cls, data: list[TaskData]) -> Self:
        return cls([ScheduledTask.from_data(task) for task in data])

    def to_data(self) -> list[TaskData]:
        return [task.to_data() for task in self.tasks]

    def call_later(self, now: float, delay_ms: float, name: str) -> ScheduledTask:
        task = ScheduledTask(name=name, due=now + delay_ms)
        self.tasks.append(task)
        return task

    def cancel(self, name: str) -> None:
        """Drop every pending task with this name."""
        self.tasks = [task for task in self.tasks if task.name != name]

    def cancel_all(self) -> None:
        self.tasks.clear()

    def run_due(self, now: float, handler: Callable[[str], None]) -> list[str]:
        """
        Fire all tasks whose due time has passed, in order of due time.

        Tasks scheduled by the handler itself are picked up in the same call if they are already due.
        Returns the names of the fired tasks.
        """
        fired: list[str] = []
        while True:
            due = sorted(
                (task for task in self.tasks if task.due <= now), key=lambda t: t.due
            )
            if not due:
                return fired
            task = due[0]
            self.tasks.remove(task)
            handler(task.name)
            fired.append(task.name)

    def pending(self) -> list[str]:
        return [task.name for task in sorted(self.tasks, key=lambda t: t.due)]
