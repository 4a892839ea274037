"""
Stock ledger: works, distribution records and events.

Every operation is a pure function over an immutable `LedgerState` and
returns the new state (plus a result where the caller needs one). Compound
operations build the complete new state before returning it, so a caller
never observes a record without its stock adjustment.

Stock equation kept by every operation, per work:

    current_stock == initial_stock - sum(record.quantity for its records)

`initial_stock` is a high-water mark: restocking raises it together with
`current_stock`.
"""

import uuid
from datetime import datetime
from typing import Any, Mapping, Optional, Tuple
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from core import sanitize


QUANTITY_REQUIRED = "Quantity must be at least 1"
NO_STOCK = "No stock available. Restock first"
WORK_NOT_FOUND = "Work not found"
RESTOCK_QUANTITY_REQUIRED = "Restock quantity must be at least 1"


class LedgerValidationError(ValueError):
    """Hard validation failure; the operation was rejected with no state change."""


class Work(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: UUID
    user_id: Optional[UUID] = None
    title: str
    initial_stock: int
    current_stock: int
    price: Optional[float] = None
    memo: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class DistributionRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: UUID
    user_id: Optional[UUID] = None
    work_id: UUID
    quantity: int
    # Name snapshot taken when the record was created, not a live reference.
    event_name: Optional[str] = None
    memo: Optional[str] = None
    distributed_at: datetime


class Event(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: UUID
    user_id: Optional[UUID] = None
    name: str
    date: datetime
    location: Optional[str] = None
    memo: Optional[str] = None
    created_at: datetime


class LedgerState(BaseModel):
    model_config = ConfigDict(frozen=True)

    user_id: Optional[UUID] = None
    works: Tuple[Work, ...] = ()
    distribution_records: Tuple[DistributionRecord, ...] = ()
    events: Tuple[Event, ...] = ()


class ActionResult(BaseModel):
    success: bool
    message: Optional[str] = None
    registered_quantity: Optional[int] = None
    record_id: Optional[UUID] = None


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------

def get_work(state: LedgerState, work_id: UUID) -> Optional[Work]:
    return next((w for w in state.works if w.id == work_id), None)


def get_event(state: LedgerState, event_id: UUID) -> Optional[Event]:
    return next((e for e in state.events if e.id == event_id), None)


def get_distribution_record(state: LedgerState, record_id: UUID) -> Optional[DistributionRecord]:
    return next((r for r in state.distribution_records if r.id == record_id), None)


def records_for_work(state: LedgerState, work_id: UUID) -> Tuple[DistributionRecord, ...]:
    return tuple(r for r in state.distribution_records if r.work_id == work_id)


def _replace_work(state: LedgerState, work: Work) -> LedgerState:
    works = tuple(work if w.id == work.id else w for w in state.works)
    return state.model_copy(update={"works": works})


def _replace_record(state: LedgerState, record: DistributionRecord) -> LedgerState:
    records = tuple(record if r.id == record.id else r for r in state.distribution_records)
    return state.model_copy(update={"distribution_records": records})


def _replace_event(state: LedgerState, event: Event) -> LedgerState:
    events = tuple(event if e.id == event.id else e for e in state.events)
    return state.model_copy(update={"events": events})


# ---------------------------------------------------------------------------
# Works
# ---------------------------------------------------------------------------

def _clean_title(value: Any) -> str:
    title = sanitize.required_text(value)
    if not title:
        raise LedgerValidationError("Title is required")
    return title


def add_work(
    state: LedgerState,
    title: Any,
    initial_stock: Any,
    price: Any = None,
    memo: Any = None,
    now: Optional[datetime] = None,
) -> Tuple[LedgerState, Work]:
    clean_title = _clean_title(title)
    stock = sanitize.stock_count(initial_stock)
    ts = now or sanitize.utcnow()
    work = Work(
        id=uuid.uuid4(),
        user_id=state.user_id,
        title=clean_title,
        initial_stock=stock,
        current_stock=stock,
        price=sanitize.price(price),
        memo=sanitize.optional_text(memo),
        created_at=ts,
        updated_at=ts,
    )
    return state.model_copy(update={"works": state.works + (work,)}), work


def _work_changes(updates: Mapping[str, Any]) -> dict:
    changes: dict = {}
    if "title" in updates:
        changes["title"] = _clean_title(updates["title"])
    if "initial_stock" in updates:
        changes["initial_stock"] = sanitize.stock_count(updates["initial_stock"])
    if "current_stock" in updates:
        changes["current_stock"] = sanitize.stock_count(updates["current_stock"])
    if "price" in updates:
        changes["price"] = sanitize.price(updates["price"])
    if "memo" in updates:
        changes["memo"] = sanitize.optional_text(updates["memo"])
    return changes


def update_work(
    state: LedgerState,
    work_id: UUID,
    updates: Mapping[str, Any],
    now: Optional[datetime] = None,
) -> LedgerState:
    """Merge sanitized fields into a work. Stock counters only ever move through here."""
    work = get_work(state, work_id)
    if work is None:
        return state
    changes = _work_changes(updates)
    changes["updated_at"] = now or sanitize.utcnow()
    return _replace_work(state, work.model_copy(update=changes))


def delete_work(state: LedgerState, work_id: UUID) -> LedgerState:
    """Remove a work and all its records. Their stock is not restored."""
    if get_work(state, work_id) is None:
        return state
    return state.model_copy(
        update={
            "works": tuple(w for w in state.works if w.id != work_id),
            "distribution_records": tuple(
                r for r in state.distribution_records if r.work_id != work_id
            ),
        }
    )


def restock(
    state: LedgerState,
    work_id: UUID,
    quantity: Any,
    now: Optional[datetime] = None,
) -> Tuple[LedgerState, ActionResult]:
    amount = sanitize.positive_quantity(quantity)
    if amount < 1:
        return state, ActionResult(success=False, message=RESTOCK_QUANTITY_REQUIRED)

    work = get_work(state, work_id)
    if work is None:
        return state, ActionResult(success=False, message=WORK_NOT_FOUND)

    new_state = update_work(
        state,
        work.id,
        {
            "current_stock": work.current_stock + amount,
            "initial_stock": work.initial_stock + amount,
        },
        now=now,
    )
    return new_state, ActionResult(
        success=True,
        registered_quantity=amount,
        message=f"Restocked {amount} copies",
    )


# ---------------------------------------------------------------------------
# Distribution records
# ---------------------------------------------------------------------------

def register_distribution(
    state: LedgerState,
    work_id: UUID,
    quantity: Any,
    event_id: Optional[UUID] = None,
    memo: Any = None,
    distributed_at: Any = None,
    now: Optional[datetime] = None,
) -> Tuple[LedgerState, ActionResult]:
    """
    Record copies handed out for a work.

    The registered quantity is clamped to the work's current stock. A clamped
    registration still succeeds but carries a message saying how many copies
    were actually recorded.
    """
    requested = sanitize.positive_quantity(quantity)
    if requested < 1:
        return state, ActionResult(success=False, message=QUANTITY_REQUIRED)

    work = get_work(state, work_id)
    if work is None:
        return state, ActionResult(success=False, message=WORK_NOT_FOUND)
    if work.current_stock <= 0:
        return state, ActionResult(success=False, message=NO_STOCK)

    ts = now or sanitize.utcnow()
    registered = min(requested, work.current_stock)
    event = get_event(state, event_id) if event_id is not None else None

    record = DistributionRecord(
        id=uuid.uuid4(),
        user_id=state.user_id,
        work_id=work.id,
        quantity=registered,
        event_name=event.name if event else None,
        memo=sanitize.optional_text(memo),
        distributed_at=sanitize.timestamp(distributed_at, default=ts),
    )
    new_state = state.model_copy(
        update={"distribution_records": state.distribution_records + (record,)}
    )
    new_state = update_work(
        new_state, work.id, {"current_stock": work.current_stock - registered}, now=ts
    )

    message = None
    if registered < requested:
        message = f"Only {registered} copies were registered because stock ran short"
    return new_state, ActionResult(
        success=True,
        message=message,
        registered_quantity=registered,
        record_id=record.id,
    )


def update_distribution_record(
    state: LedgerState,
    record_id: UUID,
    updates: Mapping[str, Any],
    now: Optional[datetime] = None,
) -> LedgerState:
    """
    Edit a record and re-settle its work's stock.

    A quantity change first gives the old quantity back to the work, then
    clamps the new quantity to that restored stock, so the ceiling reflects
    any restocks or other distributions since the record was created.
    """
    record = get_distribution_record(state, record_id)
    if record is None:
        return state
    work = get_work(state, record.work_id)
    if work is None:
        return state

    changes: dict = {}
    new_stock = None
    if "quantity" in updates:
        requested = sanitize.positive_quantity(updates["quantity"])
        if requested < 1:
            raise LedgerValidationError(QUANTITY_REQUIRED)
        restored = work.current_stock + record.quantity
        new_quantity = min(requested, restored)
        changes["quantity"] = new_quantity
        new_stock = max(0, restored - new_quantity)
    if "memo" in updates:
        changes["memo"] = sanitize.optional_text(updates["memo"])
    if "event_name" in updates:
        changes["event_name"] = sanitize.optional_text(updates["event_name"])
    if "distributed_at" in updates:
        changes["distributed_at"] = sanitize.timestamp(updates["distributed_at"], default=now)

    new_state = _replace_record(state, record.model_copy(update=changes))
    if new_stock is not None:
        new_state = update_work(new_state, work.id, {"current_stock": new_stock}, now=now)
    return new_state


def delete_distribution_record(
    state: LedgerState,
    record_id: UUID,
    now: Optional[datetime] = None,
) -> LedgerState:
    """Remove a record and give its quantity back to the work, if the work still exists."""
    record = get_distribution_record(state, record_id)
    if record is None:
        return state
    new_state = state.model_copy(
        update={
            "distribution_records": tuple(
                r for r in state.distribution_records if r.id != record_id
            )
        }
    )
    work = get_work(new_state, record.work_id)
    if work is not None:
        new_state = update_work(
            new_state, work.id, {"current_stock": work.current_stock + record.quantity}, now=now
        )
    return new_state


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------

def _clean_event_name(value: Any) -> str:
    name = sanitize.required_text(value)
    if not name:
        raise LedgerValidationError("Event name is required")
    return name


def add_event(
    state: LedgerState,
    name: Any,
    date: Any = None,
    location: Any = None,
    memo: Any = None,
    now: Optional[datetime] = None,
) -> Tuple[LedgerState, Event]:
    clean_name = _clean_event_name(name)
    ts = now or sanitize.utcnow()
    event = Event(
        id=uuid.uuid4(),
        user_id=state.user_id,
        name=clean_name,
        date=sanitize.timestamp(date, default=ts),
        location=sanitize.optional_text(location),
        memo=sanitize.optional_text(memo),
        created_at=ts,
    )
    return state.model_copy(update={"events": state.events + (event,)}), event


def update_event(
    state: LedgerState,
    event_id: UUID,
    updates: Mapping[str, Any],
    now: Optional[datetime] = None,
) -> LedgerState:
    event = get_event(state, event_id)
    if event is None:
        return state
    changes: dict = {}
    if "name" in updates:
        changes["name"] = _clean_event_name(updates["name"])
    if "date" in updates:
        changes["date"] = sanitize.timestamp(updates["date"], default=now)
    if "location" in updates:
        changes["location"] = sanitize.optional_text(updates["location"])
    if "memo" in updates:
        changes["memo"] = sanitize.optional_text(updates["memo"])
    return _replace_event(state, event.model_copy(update=changes))


def delete_event(state: LedgerState, event_id: UUID) -> LedgerState:
    """Records keep their event_name snapshot."""
    if get_event(state, event_id) is None:
        return state
    return state.model_copy(update={"events": tuple(e for e in state.events if e.id != event_id)})
