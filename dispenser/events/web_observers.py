"""Web-facing observers for dispenser events.

Subscribes to an event bus for:
  - inventory.low_stock
  - inventory.insufficient

and stores a lightweight in-memory ring buffer of recent alerts that the web
layer serves at /api/alerts, so a household display can poll for new
low-stock and out-of-stock notices.

  * Each alert gets an auto-increment integer id (cursor) so clients request
    only newer alerts (since=<last_id_seen>).
  * The buffer is per process; alerts are notifications, the durable warning
    flag lives on the medication row.
  * MAX_EVENTS caps memory use.
"""
from __future__ import annotations
import logging
from typing import List, Dict, Any, Optional
from threading import Lock
from datetime import datetime, timezone

from .Event_Bus import EventBus, INVENTORY_LOW_STOCK, INVENTORY_INSUFFICIENT

logger = logging.getLogger(__name__)

MAX_EVENTS = 300  # keep a few hundred recent alerts


class AlertFeed:
    def __init__(self, max_events: int = MAX_EVENTS):
        self.max_events = max_events
        self._lock = Lock()
        self._events: List[Dict[str, Any]] = []
        self._next_id = 1
        self._buses: List[EventBus] = []

    def record(self, event_name: str, payload: Any):  # signature expected by EventBus
        evt: Dict[str, Any] = {
            'type': event_name,
            'ts': datetime.now(timezone.utc).isoformat()
        }
        if isinstance(payload, dict):
            slot = payload.get('slot')
            if slot is not None:
                evt['machine_id'] = getattr(slot, 'machine_id', '')
                evt['connect'] = getattr(slot, 'owner', '')
                evt['medi_id'] = getattr(slot, 'medi_id', '')
                evt['name'] = getattr(slot, 'medicine_name', '') or evt['medi_id']
                evt['slot'] = getattr(slot, 'slot', None)
            for k in ('remaining', 'threshold', 'requested'):
                if k in payload:
                    evt[k] = payload[k]
        with self._lock:
            evt['id'] = self._next_id
            self._next_id += 1
            self._events.append(evt)
            if len(self._events) > self.max_events:
                del self._events[: len(self._events) - self.max_events]

    def start(self, bus: EventBus):
        """Idempotent per bus: subscribe once."""
        if bus in self._buses:
            return
        bus.subscribe(INVENTORY_LOW_STOCK, self.record)
        bus.subscribe(INVENTORY_INSUFFICIENT, self.record)
        self._buses.append(bus)
        logger.debug("Alert feed subscribed to %r", bus)

    def stop(self):
        for bus in self._buses:
            bus.unsubscribe(INVENTORY_LOW_STOCK, self.record)
            bus.unsubscribe(INVENTORY_INSUFFICIENT, self.record)
        self._buses = []

    def get_events(self, since: Optional[int] = None, connect: Optional[str] = None) -> Dict[str, Any]:
        """Return alerts newer than 'since' (exclusive), optionally for one household.

        next_cursor is the largest id seen so the client can poll with since=next_cursor.
        """
        with self._lock:
            data = list(self._events) if since is None else [e for e in self._events if e['id'] > since]
            next_cursor = self._events[-1]['id'] if self._events else (since or 0)
        if connect is not None:
            data = [e for e in data if e.get('connect') == connect]
        return {'events': data, 'next_cursor': next_cursor}


__all__ = ['AlertFeed', 'MAX_EVENTS']
