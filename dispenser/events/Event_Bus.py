"""Simple Event Bus / Observer implementation for dispenser alerts.

Event names used so far:
  inventory.low_stock    -> {"slot": MachineSlot, "remaining": int, "threshold": int}
  inventory.insufficient -> {"slot": MachineSlot, "remaining": int, "requested": int}
  intake.confirmed       -> {"member": Member}
  members.daily_reset    -> {"affected": int}

Subscribers are callables taking (event_name, payload).
"""
from __future__ import annotations
import logging
from collections import defaultdict
from threading import Lock
from typing import Callable, Any, Dict, List

logger = logging.getLogger(__name__)

# --- Event name constants (used across modules) ---
INVENTORY_LOW_STOCK = "inventory.low_stock"
INVENTORY_INSUFFICIENT = "inventory.insufficient"
INTAKE_CONFIRMED = "intake.confirmed"
MEMBERS_DAILY_RESET = "members.daily_reset"


class EventBus:
	def __init__(self):
		self._subscribers: Dict[str, List[Callable[[str, Any], None]]] = defaultdict(list)
		self._lock = Lock()

	def subscribe(self, event_name: str, callback: Callable[[str, Any], None]):
		with self._lock:
			if callback not in self._subscribers[event_name]:
				self._subscribers[event_name].append(callback)

	def unsubscribe(self, event_name: str, callback: Callable[[str, Any], None]):
		with self._lock:
			try:
				self._subscribers[event_name].remove(callback)
			except (ValueError, KeyError):
				pass

	def publish(self, event_name: str, payload: Any):
		with self._lock:
			callbacks = list(self._subscribers.get(event_name, []))
		for cb in callbacks:
			# A failing subscriber never breaks the publisher
			try:
				cb(event_name, payload)
			except Exception:
				logger.exception("Error delivering %s to %r", event_name, cb)


# Process-wide default bus; components accept their own bus for isolation
GLOBAL_EVENT_BUS = EventBus()


__all__ = [
	'EventBus', 'GLOBAL_EVENT_BUS',
	'INVENTORY_LOW_STOCK', 'INVENTORY_INSUFFICIENT', 'INTAKE_CONFIRMED', 'MEMBERS_DAILY_RESET'
]
