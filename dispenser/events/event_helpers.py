"""Event helper utilities.

Publish helpers for dispenser events. Each takes the bus explicitly so a
component can be wired to an isolated bus in tests.

Quick import:
    from dispenser.events.event_helpers import (
        publish_low_stock, publish_insufficient, publish_intake_confirmed, publish_daily_reset
    )
"""
from __future__ import annotations
from typing import Any, Optional
from .Event_Bus import (
    EventBus, GLOBAL_EVENT_BUS,
    INVENTORY_LOW_STOCK, INVENTORY_INSUFFICIENT, INTAKE_CONFIRMED, MEMBERS_DAILY_RESET
)

__all__ = [
    'publish_low_stock', 'publish_insufficient', 'publish_intake_confirmed', 'publish_daily_reset'
]


def _bus(bus: Optional[EventBus]) -> EventBus:
    return bus if bus is not None else GLOBAL_EVENT_BUS


def publish_low_stock(slot: Any, remaining: int, threshold: int, bus: Optional[EventBus] = None):
    """Publish an inventory.low_stock event (only on a warning transition)."""
    _bus(bus).publish(INVENTORY_LOW_STOCK, {
        'slot': slot,
        'remaining': remaining,
        'threshold': threshold
    })


def publish_insufficient(slot: Any, remaining: int, requested: int, bus: Optional[EventBus] = None):
    _bus(bus).publish(INVENTORY_INSUFFICIENT, {
        'slot': slot,
        'remaining': remaining,
        'requested': requested
    })


def publish_intake_confirmed(member: Any, bus: Optional[EventBus] = None):
    _bus(bus).publish(INTAKE_CONFIRMED, {'member': member})


def publish_daily_reset(affected: int, bus: Optional[EventBus] = None):
    _bus(bus).publish(MEMBERS_DAILY_RESET, {'affected': affected})
