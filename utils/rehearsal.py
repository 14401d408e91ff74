"""Rehearsal scheduling: adaptive spacing and fixed-frequency recurrences.

A schedule is created ``Scheduled`` and completed exactly once. Completing an
adaptive (non-recurring) schedule creates one successor spaced by the
interval table; recurring schedules are created up front as a batch sharing
a ``recurring_id``.

Writes go to the store one at a time with no transaction. If a write fails
part way through a batch, or between completing a schedule and creating its
successor, the earlier writes stay in place and ``PartialWriteFailure``
reports every step attempted so the caller can react.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, Iterable, List, Optional, Sequence

from config import DEFAULT_INTERVALS, DEFAULT_RECURRING_BATCH_SIZE
from db.store import DocumentStore, StoreFailure
from models.rehearsal import RehearsalSchedule

logger = logging.getLogger(__name__)

REHEARSALS = "rehearsals"

FREQUENCY_OPTIONS: List[Dict[str, object]] = [
    {"label": "Daily", "value": 1},
    {"label": "Every Other Day", "value": 2},
    {"label": "Twice a Week", "value": 3},
    {"label": "Weekly", "value": 7},
    {"label": "Bi-weekly", "value": 14},
    {"label": "Monthly", "value": 30},
]


class RehearsalNotFound(LookupError):
    """No schedule with the given id exists for the acting user."""


class RehearsalAlreadyCompleted(ValueError):
    """The schedule was already completed; completion happens once."""


@dataclass(frozen=True)
class WriteStep:
    action: str
    record_id: str
    ok: bool
    error: Optional[str] = None


class PartialWriteFailure(StoreFailure):
    """A multi-step write stopped at a failed step; earlier steps persisted."""

    def __init__(self, message: str, steps: List[WriteStep]):
        super().__init__(message)
        self.steps = steps

    @property
    def written_ids(self) -> List[str]:
        return [step.record_id for step in self.steps if step.ok]


@dataclass(frozen=True)
class ScheduleResult:
    schedule_id: str
    record_ids: List[str]
    recurring_id: Optional[str]
    steps: List[WriteStep]


@dataclass(frozen=True)
class CompletionResult:
    schedule: RehearsalSchedule
    next_rehearsal_date: datetime
    successor_id: Optional[str]
    steps: List[WriteStep]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC so they compare with aware ones."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def next_interval_days(completed_count: int, intervals: Sequence[int] = DEFAULT_INTERVALS) -> int:
    """Days until the next adaptive rehearsal after ``completed_count`` prior completions."""
    if not intervals:
        raise ValueError("intervals must not be empty")
    return intervals[min(max(completed_count, 0), len(intervals) - 1)]


def get_due_today(schedules: Iterable[RehearsalSchedule], now: datetime) -> List[RehearsalSchedule]:
    """Open schedules dated within a day either side of ``now`` (end exclusive)."""
    now = as_utc(now)
    start, end = now - timedelta(days=1), now + timedelta(days=1)
    return [
        schedule
        for schedule in schedules
        if not schedule.completed and start <= as_utc(schedule.scheduled_date) < end
    ]


def get_upcoming(schedules: Iterable[RehearsalSchedule], now: datetime) -> List[RehearsalSchedule]:
    """Open schedules dated strictly after ``now``."""
    now = as_utc(now)
    return [
        schedule
        for schedule in schedules
        if not schedule.completed and as_utc(schedule.scheduled_date) > now
    ]


def _new_id() -> str:
    return uuid.uuid4().hex


class RehearsalScheduler:
    def __init__(
        self,
        store: DocumentStore,
        user_id: str,
        intervals: Optional[Sequence[int]] = None,
        batch_size: int = DEFAULT_RECURRING_BATCH_SIZE,
        initial_delay_days: int = 1,
        clock: Callable[[], datetime] = utcnow,
        id_factory: Callable[[], str] = _new_id,
    ):
        self.store = store
        self.user_id = user_id
        self.intervals = list(intervals or DEFAULT_INTERVALS)
        self.batch_size = batch_size
        self.initial_delay_days = initial_delay_days
        self.clock = clock
        self.id_factory = id_factory

    @classmethod
    def from_config(cls, store: DocumentStore, user_id: str, config: Dict, **kwargs) -> "RehearsalScheduler":
        rehearsal_cfg = config.get("rehearsal", {})
        return cls(
            store,
            user_id,
            intervals=rehearsal_cfg.get("intervals", DEFAULT_INTERVALS),
            batch_size=rehearsal_cfg.get("recurring_batch_size", DEFAULT_RECURRING_BATCH_SIZE),
            initial_delay_days=rehearsal_cfg.get("initial_delay_days", 1),
            **kwargs,
        )

    def _now(self) -> datetime:
        return as_utc(self.clock())

    def _write(self, steps: List[WriteStep], action: str, record_id: str, record: Dict, merge: bool = False) -> None:
        try:
            self.store.set(REHEARSALS, record_id, record, merge=merge)
        except StoreFailure as exc:
            steps.append(WriteStep(action, record_id, False, str(exc)))
            logger.error(
                "Rehearsal %s of %s failed after %d successful writes: %s",
                action, record_id, sum(1 for step in steps if step.ok), exc,
            )
            raise PartialWriteFailure(f"Failed to {action} rehearsal {record_id}", list(steps)) from exc
        steps.append(WriteStep(action, record_id, True))

    def schedule_rehearsal(
        self,
        verse_id: str,
        reference: str,
        is_initial: bool = True,
        custom_date: Optional[datetime] = None,
        frequency_days: Optional[int] = None,
    ) -> ScheduleResult:
        """Create one adaptive schedule, or a recurring batch when ``frequency_days`` is positive."""
        return self._schedule(verse_id, reference, is_initial, custom_date, frequency_days, [])

    def _schedule(
        self,
        verse_id: str,
        reference: str,
        is_initial: bool,
        custom_date: Optional[datetime],
        frequency_days: Optional[int],
        steps: List[WriteStep],
    ) -> ScheduleResult:
        now = self._now()
        if custom_date is not None:
            first_date = as_utc(custom_date)
        elif is_initial:
            first_date = now + timedelta(days=self.initial_delay_days)
        else:
            first_date = now + timedelta(days=self.intervals[0])

        recurring = frequency_days is not None and frequency_days > 0
        recurring_id = self.id_factory() if recurring else None
        occurrences = self.batch_size if recurring else 1

        record_ids: List[str] = []
        for k in range(occurrences):
            record_id = self.id_factory()
            schedule = RehearsalSchedule(
                id=record_id,
                verse_id=verse_id,
                user_id=self.user_id,
                reference=reference,
                scheduled_date=first_date + timedelta(days=frequency_days * k) if recurring else first_date,
                completed=False,
                frequency_days=frequency_days if recurring else None,
                recurring_id=recurring_id,
                created_at=now,
            )
            self._write(steps, "create", record_id, schedule.model_dump(mode="json"))
            record_ids.append(record_id)

        logger.info(
            "Scheduled %d rehearsal(s) of %s for user %s starting %s",
            len(record_ids), verse_id, self.user_id, first_date.isoformat(),
        )
        return ScheduleResult(
            schedule_id=record_ids[0],
            record_ids=record_ids,
            recurring_id=recurring_id,
            steps=list(steps),
        )

    def get_schedule(self, schedule_id: str) -> RehearsalSchedule:
        record = self.store.get(REHEARSALS, schedule_id)
        if record is None or record.get("user_id") != self.user_id:
            raise RehearsalNotFound(schedule_id)
        return RehearsalSchedule.model_validate(record)

    def list_schedules(self) -> List[RehearsalSchedule]:
        records = self.store.query(REHEARSALS, [("user_id", "==", self.user_id)])
        schedules = [RehearsalSchedule.model_validate(record) for record in records]
        return sorted(schedules, key=lambda schedule: as_utc(schedule.scheduled_date))

    def completed_count(self, verse_id: str) -> int:
        return len(
            self.store.query(
                REHEARSALS,
                [
                    ("user_id", "==", self.user_id),
                    ("verse_id", "==", verse_id),
                    ("completed", "==", True),
                ],
            )
        )

    def complete_rehearsal(self, schedule_id: str, accuracy: int) -> CompletionResult:
        """Mark a schedule done and, for adaptive schedules, create the successor.

        The completion is written before the successor; a failure in between
        leaves the schedule completed with no successor.
        """
        if not 0 <= accuracy <= 100:
            raise ValueError("accuracy must be between 0 and 100")
        schedule = self.get_schedule(schedule_id)
        if schedule.completed:
            raise RehearsalAlreadyCompleted(schedule_id)

        now = self._now()
        prior = self.completed_count(schedule.verse_id)
        if schedule.frequency_days:
            next_date = now + timedelta(days=schedule.frequency_days)
        else:
            next_date = now + timedelta(days=next_interval_days(prior, self.intervals))

        completed = schedule.model_copy(
            update={
                "completed": True,
                "completed_at": now,
                "accuracy": accuracy,
                "next_rehearsal_date": next_date,
            }
        )
        steps: List[WriteStep] = []
        self._write(
            steps,
            "complete",
            schedule_id,
            completed.model_dump(
                mode="json",
                include={"completed", "completed_at", "accuracy", "next_rehearsal_date"},
            ),
            merge=True,
        )
        logger.info(
            "Completed rehearsal %s of %s at %d%% (%d prior), next %s",
            schedule_id, schedule.verse_id, accuracy, prior, next_date.isoformat(),
        )

        successor_id = None
        if not schedule.frequency_days:
            successor = self._schedule(
                schedule.verse_id, schedule.reference, False, next_date, None, steps
            )
            successor_id = successor.schedule_id

        return CompletionResult(
            schedule=completed,
            next_rehearsal_date=next_date,
            successor_id=successor_id,
            steps=list(steps),
        )
