"""Audience filter for the dispensing path.

Viewing paths show every household dose; only "what should this member's
device dispense" runs entries through these checks.
"""
from __future__ import annotations
from datetime import date
from typing import Optional

from dispenser.domain.Medication import Medication
from dispenser.domain.ScheduleEntry import ScheduleEntry

__all__ = ["is_recipient", "is_within_validity"]


def is_recipient(entry: ScheduleEntry, medication: Optional[Medication], member_id: str) -> bool:
    """True when the medication targets everyone (no list) or lists this member."""
    if medication is None or not medication.target_users:
        return True
    return member_id in medication.target_users


def is_within_validity(medication: Optional[Medication], on_date: date) -> bool:
    """True unless on_date falls outside the medication's start/end window."""
    if medication is None:
        return True
    if medication.start_date and on_date < medication.start_date:
        return False
    if medication.end_date and on_date > medication.end_date:
        return False
    return True
