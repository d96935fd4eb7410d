"""Dispenser error taxonomy."""
from typing import Optional


class DispenserError(Exception):
    """Base class for dispenser domain errors."""


class NotFound(DispenserError):
    """A referenced member, device-linked member or household has no record."""


class InsufficientStock(DispenserError):
    def __init__(self, medication_id: str, remaining: int, requested: int, name: Optional[str] = None):
        self.medication_id = medication_id
        self.remaining = remaining
        self.requested = requested
        self.name = name
        super().__init__(f"Insufficient stock for {name or medication_id}: {remaining} < {requested}")


class UnknownMedicationAtDevice(DispenserError):
    def __init__(self, group_id: str, medication_id: str):
        self.group_id = group_id
        self.medication_id = medication_id
        super().__init__(f"No machine slot for medication '{medication_id}' in household '{group_id}'")


class TransientStorageFailure(DispenserError):
    """A lookup or write against the database failed."""

    def __init__(self, context: str, cause: Optional[BaseException] = None):
        self.context = context
        self.cause = cause
        super().__init__(f"{context} failed")
