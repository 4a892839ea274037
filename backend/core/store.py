"""
LedgerStore: explicit state container around the pure ledger operations.

The store swaps in each new state wholesale and notifies subscribers once
per operation, after the whole compound change is in place. Listeners are
for observers only: one that raises is logged and skipped, and the new state
stays in place. Persistence belongs to the caller, which saves `store.state`
after the operation and sees any storage error directly.
"""

import logging
from datetime import datetime
from typing import Any, Callable, List, Mapping, Optional
from uuid import UUID

from core import ledger
from core.ledger import ActionResult, Event, LedgerState, Work

logger = logging.getLogger(__name__)

Listener = Callable[[LedgerState], None]


class LedgerStore:
    def __init__(self, state: Optional[LedgerState] = None, user_id: Optional[UUID] = None):
        self._state = state if state is not None else LedgerState(user_id=user_id)
        self._listeners: List[Listener] = []

    @property
    def state(self) -> LedgerState:
        return self._state

    @property
    def user_id(self) -> Optional[UUID]:
        return self._state.user_id

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def replace(self, state: LedgerState) -> None:
        """Swap in a whole new state (e.g. an imported snapshot)."""
        self._commit(state)

    def _commit(self, new_state: LedgerState) -> None:
        if new_state is self._state:
            return
        self._state = new_state
        for listener in list(self._listeners):
            try:
                listener(new_state)
            except Exception:
                logger.exception("ledger listener %r failed", listener)

    # -- works --------------------------------------------------------------

    def add_work(self, title: Any, initial_stock: Any, price: Any = None, memo: Any = None,
                 now: Optional[datetime] = None) -> Work:
        new_state, work = ledger.add_work(self._state, title, initial_stock, price=price, memo=memo, now=now)
        self._commit(new_state)
        logger.info("work created id=%s stock=%s", work.id, work.initial_stock)
        return work

    def update_work(self, work_id: UUID, updates: Mapping[str, Any], now: Optional[datetime] = None) -> Optional[Work]:
        self._commit(ledger.update_work(self._state, work_id, updates, now=now))
        return ledger.get_work(self._state, work_id)

    def delete_work(self, work_id: UUID) -> None:
        if ledger.get_work(self._state, work_id) is None:
            return
        removed = len(ledger.records_for_work(self._state, work_id))
        self._commit(ledger.delete_work(self._state, work_id))
        logger.info("work deleted id=%s records_removed=%s", work_id, removed)

    def restock(self, work_id: UUID, quantity: Any, now: Optional[datetime] = None) -> ActionResult:
        new_state, result = ledger.restock(self._state, work_id, quantity, now=now)
        self._commit(new_state)
        if result.success:
            logger.info("restocked work=%s quantity=%s", work_id, result.registered_quantity)
        else:
            logger.info("restock rejected work=%s: %s", work_id, result.message)
        return result

    # -- distribution records -------------------------------------------------

    def register_distribution(
        self,
        work_id: UUID,
        quantity: Any,
        event_id: Optional[UUID] = None,
        memo: Any = None,
        distributed_at: Any = None,
        now: Optional[datetime] = None,
    ) -> ActionResult:
        new_state, result = ledger.register_distribution(
            self._state,
            work_id,
            quantity,
            event_id=event_id,
            memo=memo,
            distributed_at=distributed_at,
            now=now,
        )
        self._commit(new_state)
        if not result.success:
            logger.info("distribution rejected work=%s: %s", work_id, result.message)
        elif result.message:
            logger.warning(
                "partial distribution work=%s requested=%s registered=%s",
                work_id, quantity, result.registered_quantity,
            )
        else:
            logger.info("distribution registered work=%s quantity=%s", work_id, result.registered_quantity)
        return result

    def update_distribution_record(self, record_id: UUID, updates: Mapping[str, Any],
                                   now: Optional[datetime] = None):
        self._commit(ledger.update_distribution_record(self._state, record_id, updates, now=now))
        return ledger.get_distribution_record(self._state, record_id)

    def delete_distribution_record(self, record_id: UUID, now: Optional[datetime] = None) -> None:
        self._commit(ledger.delete_distribution_record(self._state, record_id, now=now))

    # -- events -------------------------------------------------------------

    def add_event(self, name: Any, date: Any = None, location: Any = None, memo: Any = None,
                  now: Optional[datetime] = None) -> Event:
        new_state, event = ledger.add_event(self._state, name, date=date, location=location, memo=memo, now=now)
        self._commit(new_state)
        return event

    def update_event(self, event_id: UUID, updates: Mapping[str, Any], now: Optional[datetime] = None) -> Optional[Event]:
        self._commit(ledger.update_event(self._state, event_id, updates, now=now))
        return ledger.get_event(self._state, event_id)

    def delete_event(self, event_id: UUID) -> None:
        self._commit(ledger.delete_event(self._state, event_id))
