"""Core business logic layer.

Subpackages:
- clock: wall clock -> (day of week, time-of-day slot)
- schedule: due-dose lookups and the audience filter
- inventory: machine stock ledger and low-stock warnings
- dispense: dispense candidates and dispense-result reconciliation
- household: token authentication, intake confirmation, status views
- reset: daily reset of the taken-today marker
"""
__all__ = ["clock", "schedule", "inventory", "dispense", "household", "reset"]
