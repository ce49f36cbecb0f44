"""
Scheduler module for the domain monitor.

Provides cron-compatible scheduling used to trigger a monitor cycle on a
fixed interval (every 5 minutes by default).
"""

import asyncio
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Awaitable, Callable, Optional

from .enums import LogLevel

if TYPE_CHECKING:
    from .audit_logger import AuditLogger


class CronParseError(Exception):
    """Raised when a cron expression cannot be parsed."""

    def __init__(self, message: str, expression: str) -> None:
        self.message = message
        self.expression = expression
        super().__init__(f"{message}: '{expression}'")


@dataclass
class CronField:
    """Represents a parsed cron field with allowed values."""

    values: set[int]
    min_value: int
    max_value: int

    def matches(self, value: int) -> bool:
        return value in self.values

    @property
    def is_wildcard(self) -> bool:
        return self.values == set(range(self.min_value, self.max_value + 1))


@dataclass
class CronSchedule:
    """Represents a parsed cron schedule."""

    minute: CronField
    hour: CronField
    day_of_month: CronField
    month: CronField
    day_of_week: CronField
    original_expression: str

    def matches(self, dt: datetime) -> bool:
        """Check if a datetime (minute precision) matches this schedule."""
        # Cron numbers weekdays from Sunday = 0
        cron_weekday = (dt.weekday() + 1) % 7

        if self.day_of_month.is_wildcard and self.day_of_week.is_wildcard:
            day_match = True
        elif self.day_of_month.is_wildcard:
            day_match = self.day_of_week.matches(cron_weekday)
        elif self.day_of_week.is_wildcard:
            day_match = self.day_of_month.matches(dt.day)
        else:
            # Both restricted: either may match (standard cron OR semantics)
            day_match = self.day_of_month.matches(dt.day) or self.day_of_week.matches(
                cron_weekday
            )

        return (
            self.minute.matches(dt.minute)
            and self.hour.matches(dt.hour)
            and self.month.matches(dt.month)
            and day_match
        )


class CronParser:
    """Parser for cron expressions."""

    # Field definitions: (min, max, name)
    FIELD_DEFS = [
        (0, 59, "minute"),
        (0, 23, "hour"),
        (1, 31, "day_of_month"),
        (1, 12, "month"),
        (0, 6, "day_of_week"),  # 0 = Sunday; 7 is accepted as Sunday too
    ]

    MONTH_NAMES = {
        "jan": 1, "feb": 2, "mar": 3, "apr": 4,
        "may": 5, "jun": 6, "jul": 7, "aug": 8,
        "sep": 9, "oct": 10, "nov": 11, "dec": 12,
    }

    DOW_NAMES = {
        "sun": 0, "mon": 1, "tue": 2, "wed": 3,
        "thu": 4, "fri": 5, "sat": 6,
    }

    def parse(self, expression: str) -> CronSchedule:
        """
        Parse a cron expression into a CronSchedule.

        Supports standard 5-field expressions (minute, hour, day of month,
        month, day of week) and 6-field expressions whose leading seconds
        field is ignored. Special characters: '*', ',', '-', '/'.

        Raises:
            CronParseError: If the expression is invalid
        """
        expression = expression.strip()
        if not expression:
            raise CronParseError("Empty cron expression", expression)

        fields = expression.split()

        if len(fields) == 6:
            fields = fields[1:]
        elif len(fields) != 5:
            raise CronParseError(
                f"Invalid number of fields (expected 5 or 6, got {len(fields)})",
                expression,
            )

        parsed_fields = []
        for field_str, (min_val, max_val, name) in zip(fields, self.FIELD_DEFS):
            try:
                parsed_fields.append(self._parse_field(field_str, min_val, max_val, name))
            except ValueError as e:
                raise CronParseError(f"Invalid {name} field: {e}", expression) from e

        return CronSchedule(
            minute=parsed_fields[0],
            hour=parsed_fields[1],
            day_of_month=parsed_fields[2],
            month=parsed_fields[3],
            day_of_week=parsed_fields[4],
            original_expression=expression,
        )

    def _parse_field(
        self, field_str: str, min_val: int, max_val: int, field_name: str
    ) -> CronField:
        """Parse a single cron field."""
        values: set[int] = set()

        field_str = field_str.lower()
        names = {"month": self.MONTH_NAMES, "day_of_week": self.DOW_NAMES}.get(field_name, {})
        for name, num in names.items():
            field_str = field_str.replace(name, str(num))

        # Sunday may be written as 7
        upper = 7 if field_name == "day_of_week" else max_val

        for part in field_str.split(","):
            part = part.strip()
            if not part:
                continue

            step = 1
            if "/" in part:
                part, step_str = part.split("/", 1)
                try:
                    step = int(step_str)
                except ValueError as e:
                    raise ValueError(f"Invalid step value: {step_str}") from e
                if step < 1:
                    raise ValueError(f"Step must be >= 1, got {step}")

            if part == "*":
                start, end = min_val, max_val
            elif "-" in part:
                low, high = part.split("-", 1)
                try:
                    start, end = int(low), int(high)
                except ValueError as e:
                    raise ValueError(f"Invalid range: {part}") from e
                if start > end:
                    raise ValueError(f"Range start {start} > end {end}")
            else:
                try:
                    start = int(part)
                except ValueError as e:
                    raise ValueError(f"Invalid value: {part}") from e
                end = start

            for bound in (start, end):
                if bound < min_val or bound > upper:
                    raise ValueError(f"Value {bound} out of bounds [{min_val}-{upper}]")

            for val in range(start, end + 1, step):
                values.add(0 if field_name == "day_of_week" and val == 7 else val)

        if not values:
            raise ValueError("No values parsed from field")

        return CronField(values=values, min_value=min_val, max_value=max_val)


@dataclass
class ScheduledTask:
    """Represents a scheduled task."""

    name: str
    schedule: CronSchedule
    callback: Callable[[], Awaitable[object]]
    last_run: Optional[datetime] = None
    enabled: bool = True


class Scheduler:
    """
    Cron-compatible scheduler.

    Tasks run on the scheduler's own loop and are awaited before the next
    match is looked for, so runs of the same task never overlap; a matching
    minute that passes while a run is still in progress is skipped.
    """

    def __init__(
        self,
        logger: Optional["AuditLogger"] = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._parser = CronParser()
        self._tasks: dict[str, ScheduledTask] = {}
        self._running = False
        self._logger = logger
        self._clock = clock

    def schedule(
        self,
        name: str,
        cron_expression: str,
        callback: Callable[[], Awaitable[object]],
    ) -> CronSchedule:
        """
        Schedule a task with a cron expression.

        Raises:
            CronParseError: If the cron expression is invalid
            ValueError: If a task with the same name already exists
        """
        if name in self._tasks:
            raise ValueError(f"Task '{name}' already exists")

        schedule = self._parser.parse(cron_expression)
        self._tasks[name] = ScheduledTask(name=name, schedule=schedule, callback=callback)
        return schedule

    def unschedule(self, name: str) -> bool:
        return self._tasks.pop(name, None) is not None

    def get_task(self, name: str) -> Optional[ScheduledTask]:
        return self._tasks.get(name)

    def list_tasks(self) -> list[ScheduledTask]:
        return list(self._tasks.values())

    async def run_pending(self, now: Optional[datetime] = None) -> list[str]:
        """
        Run every enabled task whose schedule matches the current minute.

        Each task runs at most once per matching minute. Exceptions raised by
        a task are logged and do not stop the other tasks.

        Returns:
            Names of the tasks that were started
        """
        now_minute = (now or self._clock()).replace(second=0, microsecond=0)
        started = []

        for task in list(self._tasks.values()):
            if not task.enabled or not task.schedule.matches(now_minute):
                continue
            if task.last_run is not None and task.last_run >= now_minute:
                continue

            task.last_run = now_minute
            started.append(task.name)
            try:
                await task.callback()
            except Exception as e:
                if self._logger:
                    self._logger.log_error(
                        "Scheduler",
                        f"Scheduled task '{task.name}' failed",
                        error=e,
                    )

        return started

    async def run(self, stop_event: Optional[asyncio.Event] = None) -> None:
        """
        Run the scheduler loop until stopped.

        Args:
            stop_event: Optional event to signal the scheduler to stop
        """
        self._running = True
        if self._logger:
            self._logger.log(
                LogLevel.INFO,
                "Scheduler",
                "Scheduler started",
                {"tasks": {t.name: t.schedule.original_expression for t in self._tasks.values()}},
            )

        while self._running:
            await self.run_pending()

            if stop_event is not None and stop_event.is_set():
                break

            # Sleep until the start of the next minute
            now = self._clock()
            delay = 60 - now.second - now.microsecond / 1_000_000
            if stop_event is not None:
                try:
                    await asyncio.wait_for(stop_event.wait(), timeout=delay)
                    break
                except asyncio.TimeoutError:
                    pass
            else:
                await asyncio.sleep(delay)

        self._running = False

    def is_running(self) -> bool:
        return self._running
