"""
Snapshot load/save for the ledger.

`state_from_snapshot` is fed whatever the persistence side hands over: rows
from the database, a JSON export, or the legacy browser-storage dump
(`{"state": {"works": [...], "distributionRecords": [...], ...}, "version": 0}`)
written by the first, user-less schema. It must never raise on malformed
content, so every field goes through the sanitizers and entities that could
not have been created through the ledger are dropped.
"""

import logging
import uuid
from typing import Any, Dict, Iterable, List, Mapping, Optional
from uuid import UUID

from core import sanitize
from core.ledger import DistributionRecord, Event, LedgerState, Work

logger = logging.getLogger(__name__)


def _pick(raw: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    for k in keys:
        if k in raw:
            return raw[k]
    return default


def _rows(value: Any) -> List[Mapping[str, Any]]:
    if not isinstance(value, (list, tuple)):
        return []
    return [row for row in value if isinstance(row, Mapping)]


def _owner(raw: Mapping[str, Any], user_id: Optional[UUID]) -> Optional[UUID]:
    """Owner of a persisted row; None means "belongs to another user"."""
    owner = sanitize.entity_id(_pick(raw, "user_id", "userId"))
    if user_id is None:
        return owner
    if owner is not None and owner != user_id:
        return None
    return user_id


def _work_from(raw: Mapping[str, Any], user_id: Optional[UUID]) -> Optional[Work]:
    wid = sanitize.entity_id(_pick(raw, "id"))
    title = sanitize.required_text(_pick(raw, "title"))
    if wid is None or not title:
        return None
    owner = _owner(raw, user_id)
    if user_id is not None and owner is None:
        return None
    created = sanitize.timestamp(_pick(raw, "created_at", "createdAt"))
    initial = sanitize.stock_count(_pick(raw, "initial_stock", "initialStock"))
    current = sanitize.stock_count(_pick(raw, "current_stock", "currentStock", default=initial))
    return Work(
        id=wid,
        user_id=owner,
        title=title,
        initial_stock=initial,
        current_stock=current,
        price=sanitize.price(_pick(raw, "price")),
        memo=sanitize.optional_text(_pick(raw, "memo")),
        created_at=created,
        updated_at=sanitize.timestamp(_pick(raw, "updated_at", "updatedAt"), default=created),
    )


def _record_from(raw: Mapping[str, Any], user_id: Optional[UUID], work_ids: set) -> Optional[DistributionRecord]:
    rid = sanitize.entity_id(_pick(raw, "id"))
    work_id = sanitize.entity_id(_pick(raw, "work_id", "workId"))
    quantity = sanitize.positive_quantity(_pick(raw, "quantity"))
    if rid is None or work_id not in work_ids or quantity < 1:
        return None
    owner = _owner(raw, user_id)
    if user_id is not None and owner is None:
        return None
    return DistributionRecord(
        id=rid,
        user_id=owner,
        work_id=work_id,
        quantity=quantity,
        event_name=sanitize.optional_text(_pick(raw, "event_name", "eventName")),
        memo=sanitize.optional_text(_pick(raw, "memo")),
        distributed_at=sanitize.timestamp(_pick(raw, "distributed_at", "distributedAt")),
    )


def _event_from(raw: Mapping[str, Any], user_id: Optional[UUID]) -> Optional[Event]:
    eid = sanitize.entity_id(_pick(raw, "id"))
    name = sanitize.required_text(_pick(raw, "name"))
    if eid is None or not name:
        return None
    owner = _owner(raw, user_id)
    if user_id is not None and owner is None:
        return None
    created = sanitize.timestamp(_pick(raw, "created_at", "createdAt"))
    return Event(
        id=eid,
        user_id=owner,
        name=name,
        date=sanitize.timestamp(_pick(raw, "date"), default=created),
        location=sanitize.optional_text(_pick(raw, "location")),
        memo=sanitize.optional_text(_pick(raw, "memo")),
        created_at=created,
    )


def _unique(items: Iterable) -> tuple:
    seen = set()
    out = []
    for it in items:
        if it is None or it.id in seen:
            continue
        seen.add(it.id)
        out.append(it)
    return tuple(out)


def state_from_snapshot(data: Any, user_id: Optional[UUID] = None) -> LedgerState:
    if not isinstance(data, Mapping):
        return LedgerState(user_id=user_id)
    # legacy browser-storage envelope
    if isinstance(data.get("state"), Mapping):
        data = data["state"]

    raw_works = _rows(_pick(data, "works"))
    raw_records = _rows(_pick(data, "distribution_records", "distributionRecords"))
    raw_events = _rows(_pick(data, "events"))

    works = _unique(_work_from(w, user_id) for w in raw_works)
    work_ids = {w.id for w in works}
    records = _unique(_record_from(r, user_id, work_ids) for r in raw_records)
    events = _unique(_event_from(e, user_id) for e in raw_events)

    dropped = (len(raw_works) - len(works)) + (len(raw_records) - len(records)) + (len(raw_events) - len(events))
    if dropped:
        logger.warning("snapshot for user=%s: dropped %d unusable entries", user_id, dropped)

    return LedgerState(user_id=user_id, works=works, distribution_records=records, events=events)


def state_to_snapshot(state: LedgerState) -> Dict[str, Any]:
    return {
        "user_id": str(state.user_id) if state.user_id else None,
        "works": [w.model_dump(mode="json") for w in state.works],
        "distribution_records": [r.model_dump(mode="json") for r in state.distribution_records],
        "events": [e.model_dump(mode="json") for e in state.events],
    }


def reassign_ids(state: LedgerState) -> LedgerState:
    """
    Give every entity a fresh id, keeping record -> work links.

    Imported snapshots may reuse ids that already exist under another
    account, so imports always go through here before being saved.
    """
    work_ids = {w.id: uuid.uuid4() for w in state.works}
    works = tuple(w.model_copy(update={"id": work_ids[w.id], "user_id": state.user_id}) for w in state.works)
    records = tuple(
        r.model_copy(update={"id": uuid.uuid4(), "work_id": work_ids[r.work_id], "user_id": state.user_id})
        for r in state.distribution_records
        if r.work_id in work_ids
    )
    events = tuple(e.model_copy(update={"id": uuid.uuid4(), "user_id": state.user_id}) for e in state.events)
    return state.model_copy(update={"works": works, "distribution_records": records, "events": events})
