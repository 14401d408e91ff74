from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, status

from config import load_config
from db.database import get_db
from db.store import SQLiteStore, StoreFailure
from models.rehearsal import (
    FrequencyOption,
    RehearsalAttempt,
    RehearsalComplete,
    RehearsalSchedule,
    ScheduleCreate,
)
from utils.grading import compare_texts
from utils.rehearsal import (
    FREQUENCY_OPTIONS,
    PartialWriteFailure,
    RehearsalAlreadyCompleted,
    RehearsalNotFound,
    RehearsalScheduler,
    get_due_today,
    get_upcoming,
    utcnow,
)
from .practice import comparison_payload

router = APIRouter()


def get_store(conn=Depends(get_db)) -> SQLiteStore:
    return SQLiteStore(conn)


def _scheduler(store: SQLiteStore, user_id: str, config: dict = None) -> RehearsalScheduler:
    return RehearsalScheduler.from_config(store, user_id, config or load_config())


def _store_error(exc: StoreFailure) -> HTTPException:
    detail = {"message": str(exc)}
    if isinstance(exc, PartialWriteFailure):
        detail["steps"] = [
            {"action": step.action, "record_id": step.record_id, "ok": step.ok, "error": step.error}
            for step in exc.steps
        ]
    return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=detail)


def _complete(scheduler: RehearsalScheduler, schedule_id: str, accuracy: int) -> dict:
    try:
        completion = scheduler.complete_rehearsal(schedule_id, accuracy)
    except RehearsalNotFound:
        raise HTTPException(status_code=404, detail="Rehearsal not found")
    except RehearsalAlreadyCompleted:
        raise HTTPException(status_code=409, detail="Rehearsal already completed")
    except StoreFailure as exc:
        raise _store_error(exc) from exc
    return {
        "schedule": completion.schedule,
        "next_rehearsal_date": completion.next_rehearsal_date,
        "successor_id": completion.successor_id,
    }


@router.get("/frequencies", response_model=List[FrequencyOption])
async def list_frequencies():
    """Preset recurrence choices offered when scheduling."""
    return FREQUENCY_OPTIONS


@router.get("", response_model=List[RehearsalSchedule])
async def list_rehearsals(user_id: str = Query(...), store=Depends(get_store)):
    """All schedules for a user, ordered by date."""
    try:
        return _scheduler(store, user_id).list_schedules()
    except StoreFailure as exc:
        raise _store_error(exc) from exc


@router.get("/today", response_model=List[RehearsalSchedule])
async def today_rehearsals(user_id: str = Query(...), store=Depends(get_store)):
    """Open schedules due within a day of now."""
    try:
        schedules = _scheduler(store, user_id).list_schedules()
    except StoreFailure as exc:
        raise _store_error(exc) from exc
    return get_due_today(schedules, utcnow())


@router.get("/upcoming", response_model=List[RehearsalSchedule])
async def upcoming_rehearsals(user_id: str = Query(...), store=Depends(get_store)):
    """Open schedules dated after now."""
    try:
        schedules = _scheduler(store, user_id).list_schedules()
    except StoreFailure as exc:
        raise _store_error(exc) from exc
    return get_upcoming(schedules, utcnow())


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_rehearsal(payload: ScheduleCreate, store=Depends(get_store)):
    """Schedule a verse; a positive frequency creates the whole recurring batch."""
    scheduler = _scheduler(store, payload.user_id)
    try:
        result = scheduler.schedule_rehearsal(
            payload.verse_id,
            payload.reference,
            is_initial=payload.is_initial,
            custom_date=payload.custom_date,
            frequency_days=payload.frequency_days,
        )
    except StoreFailure as exc:
        raise _store_error(exc) from exc
    return {
        "schedule_id": result.schedule_id,
        "record_ids": result.record_ids,
        "recurring_id": result.recurring_id,
    }


@router.post("/{schedule_id}/complete")
async def complete_rehearsal(schedule_id: str, payload: RehearsalComplete, store=Depends(get_store)):
    """Record an accuracy for a rehearsal and book the next one."""
    return _complete(_scheduler(store, payload.user_id), schedule_id, payload.accuracy)


@router.post("/{schedule_id}/attempt")
async def attempt_rehearsal(schedule_id: str, payload: RehearsalAttempt, store=Depends(get_store)):
    """Score a recall attempt and complete the rehearsal with its accuracy."""
    config = load_config()
    candidate, reference, result = compare_texts(payload.candidate, payload.reference_text, config)
    completion = _complete(_scheduler(store, payload.user_id, config), schedule_id, result.accuracy)
    completion["comparison"] = comparison_payload(candidate, reference, result, config)
    return completion
