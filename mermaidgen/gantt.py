"""
Gantt model - sections and tasks.

A Gantt is the entrypoint: create one, then use add_section / add_task.
Task ids share one namespace across the whole diagram because ``after``
references are resolved by id, no matter which section owns a task.
Section ids live in their own namespace, so a section and a task may use
the same id.
"""

import logging
import weakref
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, ValidationError, field_validator

from .errors import DependencyCycleError, InvalidConfigurationError

log = logging.getLogger(__name__)


class AxisFormat(str, Enum):
    """Common x axis formats (d3 time format). Any other string works too."""
    DATE_TIME_24_WITH_SECONDS = "%Y-%m-%d %H:%M:%S"
    DATE_TIME_24 = "%Y-%m-%d %H:%M"
    DATE_TIME_24_SHORT = "%y%m%d %H:%M"
    DATE = "%Y-%m-%d"
    DATE_SHORT = "%y%m%d"
    WEEKDAY_TIME_24 = "%a %H:%M"
    WEEKDAY_TIME_24_WITH_SECONDS = "%a %H:%M:%S"
    TIME_24 = "%H:%M"
    TIME_24_WITH_SECONDS = "%H:%M:%S"


class GanttConfig(BaseModel):
    """Optional settings of a Gantt diagram."""
    model_config = ConfigDict(strict=True, extra="forbid", validate_assignment=True)

    title: str = ""                             # "title" line, omitted if empty
    axis_format: Union[AxisFormat, str] = ""    # "axisFormat" line, omitted if empty


class Task(BaseModel):
    """
    A gantt task. Create it with Gantt.add_task or Section.add_task.

    A task starts either at a fixed ``start`` or right ``after`` another
    task; use set_start to switch between the two.
    """
    model_config = ConfigDict(validate_assignment=True)

    id: str = Field(frozen=True)
    title: str = ""                       # Empty shows the id
    start: Optional[datetime] = None
    after: Optional["Task"] = Field(default=None, repr=False)
    duration: Optional[timedelta] = None
    critical: bool = False
    active: bool = False
    done: bool = False

    _section: Optional[weakref.ref] = PrivateAttr(default=None)

    @field_validator("duration")
    @classmethod
    def validate_duration(cls, value: Optional[timedelta]) -> Optional[timedelta]:
        if value is not None and value < timedelta(0):
            raise ValueError("duration must not be negative")
        if value is not None and value % timedelta(milliseconds=1):
            raise ValueError("duration must be a whole number of milliseconds")
        return value

    @property
    def section(self) -> Optional["Section"]:
        """The section owning this task, None for section-less tasks."""
        return self._section() if self._section is not None else None

    def set_start(self, value: Union[datetime, "Task", None]):
        """Start at a fixed time, or after another task. None clears both."""
        if isinstance(value, Task):
            self.start = None
            self.after = value
        elif isinstance(value, datetime):
            self.after = None
            self.start = value
        elif value is None:
            self.after = None
            self.start = None
        else:
            raise InvalidConfigurationError(
                f"start of task {self.id!r} must be a datetime or a Task, "
                f"got {type(value).__name__}"
            )

    def start_time(self) -> Optional[datetime]:
        """Effective start, following the ``after`` chain. None if unknown."""
        return self._extent(set())[0]

    def end_time(self) -> Optional[datetime]:
        """Effective end (start + duration). None if unknown."""
        return self._extent(set())[1]

    def _extent(self, seen: set[int]) -> tuple[Optional[datetime], Optional[datetime]]:
        if id(self) in seen:
            raise DependencyCycleError(f"task {self.id!r} depends on itself")
        seen.add(id(self))
        if self.after is not None:
            start = self.after._extent(seen)[1]
        else:
            start = self.start
        if start is None or self.duration is None:
            return start, None
        return start, start + self.duration


class TaskConfig(BaseModel):
    """Optional settings given when a task is added."""
    model_config = ConfigDict(strict=True, extra="forbid")

    title: str = ""
    duration: Optional[timedelta] = None
    start: Optional[Union[datetime, Task]] = None  # Fixed start or predecessor
    critical: bool = False
    active: bool = False
    done: bool = False


class Section:
    """A named group of tasks, rendered as a ``section`` block."""

    def __init__(self, section_id: str, gantt: "Gantt", title: Optional[str] = None):
        self._id = section_id
        self._gantt_ref = weakref.ref(gantt)
        self.title: str = title if title else section_id
        self._tasks: dict[str, Task] = {}
        self._items: list[Task] = []

    @property
    def id(self) -> str:
        return self._id

    @property
    def gantt(self) -> "Gantt":
        gantt = self._gantt_ref()
        if gantt is None:
            raise RuntimeError(f"gantt of section {self._id!r} no longer exists")
        return gantt

    def add_task(self, task_id: str, config: Optional[TaskConfig] = None, **fields: Any) -> Optional[Task]:
        """
        Add a task to this section.

        Returns None if the id is already used by any task of the diagram.
        Raises InvalidConfigurationError for wrongly typed settings.
        """
        task = self.gantt._new_task(task_id, config, fields, self)
        if task is not None:
            self._tasks[task_id] = task
            self._items.append(task)
        return task

    def get_task(self, task_id: str) -> Optional[Task]:
        """Get a task of this section by id."""
        return self._tasks.get(task_id)

    def list_tasks(self) -> list[Task]:
        """Tasks of this section in the order they were added."""
        return list(self._items)

    def __repr__(self) -> str:
        return f"Section(id={self._id!r}, tasks={len(self._items)})"


class Gantt:
    """
    A Mermaid gantt diagram.

    Section-less tasks are rendered first, then each section with its tasks,
    everything in the order it was added.
    """

    def __init__(self, title: Any = "", axis_format: Any = "", *, config: Optional[GanttConfig] = None):
        if config is not None and (title or axis_format):
            raise InvalidConfigurationError("pass either a GanttConfig or title/axis_format, not both")
        if config is None:
            try:
                config = GanttConfig(title=title, axis_format=axis_format)
            except ValidationError as exc:
                raise InvalidConfigurationError.from_validation_error("gantt configuration", exc) from exc
        self.config = config

        self._sections: dict[str, Section] = {}
        self._section_items: list[Section] = []
        self._task_index: dict[str, Task] = {}   # All tasks, any section
        self._local_tasks: list[Task] = []       # Section-less tasks

    # --- Settings ---

    @property
    def title(self) -> str:
        return self.config.title

    @title.setter
    def title(self, value: str):
        self._set_config("title", value)

    @property
    def axis_format(self) -> Union[AxisFormat, str]:
        return self.config.axis_format

    @axis_format.setter
    def axis_format(self, value: Union[AxisFormat, str]):
        self._set_config("axis_format", value)

    def _set_config(self, name: str, value: Any):
        try:
            setattr(self.config, name, value)
        except ValidationError as exc:
            raise InvalidConfigurationError.from_validation_error("gantt configuration", exc) from exc

    # --- Add Items ---

    def add_section(self, section_id: str, title: Optional[str] = None) -> Optional[Section]:
        """Add a section. Returns None if the section id already exists."""
        if section_id in self._sections:
            log.debug("Section %r already exists", section_id)
            return None
        section = Section(section_id, self, title)
        self._sections[section_id] = section
        self._section_items.append(section)
        return section

    def add_task(self, task_id: str, config: Optional[TaskConfig] = None, **fields: Any) -> Optional[Task]:
        """
        Add a section-less task.

        Settings are given either as a TaskConfig or as keyword arguments
        (title, duration, start, critical, active, done). Returns None if the
        task id already exists. Raises InvalidConfigurationError for wrongly
        typed settings; nothing is added in that case.
        """
        task = self._new_task(task_id, config, fields, None)
        if task is not None:
            self._local_tasks.append(task)
        return task

    def _new_task(self, task_id: str, config: Optional[TaskConfig], fields: dict,
                  section: Optional[Section]) -> Optional[Task]:
        if task_id in self._task_index:
            log.debug("Task %r already exists", task_id)
            return None
        if config is not None and fields:
            raise InvalidConfigurationError("pass either a TaskConfig or keyword settings, not both")
        try:
            if config is None:
                config = TaskConfig(**fields)
            task = Task(
                id=task_id,
                title=config.title,
                duration=config.duration,
                critical=config.critical,
                active=config.active,
                done=config.done,
            )
        except ValidationError as exc:
            raise InvalidConfigurationError.from_validation_error(f"task {task_id!r}", exc) from exc
        task.set_start(config.start)
        if section is not None:
            task._section = weakref.ref(section)
        self._task_index[task_id] = task
        return task

    # --- Get Items ---

    def get_section(self, section_id: str) -> Optional[Section]:
        return self._sections.get(section_id)

    def get_task(self, task_id: str) -> Optional[Task]:
        """Get any task of the diagram by id, whichever section owns it."""
        return self._task_index.get(task_id)

    # --- List Items ---

    def list_sections(self) -> list[Section]:
        """Sections in the order they were added."""
        return list(self._section_items)

    def list_local_tasks(self) -> list[Task]:
        """Section-less tasks in the order they were added."""
        return list(self._local_tasks)

    def list_tasks(self) -> list[Task]:
        """All tasks of the diagram and its sections, sorted by id."""
        return sorted(self._task_index.values(), key=lambda task: task.id)

    # --- Output ---

    def render(self) -> str:
        """Render the whole diagram to Mermaid code."""
        from .render import render_gantt
        return render_gantt(self)

    def __str__(self) -> str:
        return self.render()

    def live_url(self) -> str:
        """Render and encode the diagram as a mermaid.live view URL."""
        from .export import live_url
        return live_url(self.render())

    def view_in_browser(self):
        """Open the live URL in the default browser without waiting for it."""
        from .browser import view_in_browser
        return view_in_browser(self.live_url())
