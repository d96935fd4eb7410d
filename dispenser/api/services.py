"""Wiring of repositories and logic components for one application instance."""
from __future__ import annotations
from typing import Optional

from dispenser.events.Event_Bus import EventBus, GLOBAL_EVENT_BUS
from dispenser.events.web_observers import AlertFeed
from dispenser.infra.database import Database
from dispenser.infra.Dispense_Log_Repository import DispenseLogRepository
from dispenser.infra.Machine_Repository import MachineRepository
from dispenser.infra.Medication_Repository import MedicationRepository
from dispenser.infra.Member_Repository import MemberRepository
from dispenser.infra.Schedule_Repository import ScheduleRepository
from dispenser.logic.clock.resolver import ClockResolver
from dispenser.logic.dispense.orchestrator import DispenseOrchestrator
from dispenser.logic.household.intake import IntakeService
from dispenser.logic.household.status import HouseholdStatus
from dispenser.logic.inventory.ledger import InventoryLedger
from dispenser.logic.reset.daily import DailyResetScheduler, reset_taken_today
from dispenser.logic.schedule.index import ScheduleIndex
from dispenser.utilities.config import DAILY_RESET_HOUR, DISPENSER_TIMEZONE, DISPENSE_TIMEOUT_SECONDS


class Services:
    def __init__(self, database: Database, clock: Optional[ClockResolver] = None,
                 event_bus: Optional[EventBus] = None, dispense_timeout: float = DISPENSE_TIMEOUT_SECONDS,
                 reset_hour: int = DAILY_RESET_HOUR):
        self.database = database
        self.clock = clock or ClockResolver(tz=DISPENSER_TIMEZONE)
        self.event_bus = event_bus if event_bus is not None else GLOBAL_EVENT_BUS

        # Repositories
        self.members = MemberRepository(database)
        self.medications = MedicationRepository(database)
        self.machines = MachineRepository(database)
        self.schedules = ScheduleRepository(database)
        self.dispense_log = DispenseLogRepository(database)

        # Logic
        self.schedule_index = ScheduleIndex(self.schedules)
        self.ledger = InventoryLedger(database, machines=self.machines, medications=self.medications,
                                      dispense_log=self.dispense_log, event_bus=self.event_bus)
        self.orchestrator = DispenseOrchestrator(self.members, self.ledger, self.schedule_index, self.medications,
                                                 clock=self.clock, event_bus=self.event_bus,
                                                 timeout=dispense_timeout)
        self.intake = IntakeService(self.members, clock=self.clock, event_bus=self.event_bus)
        self.household = HouseholdStatus(self.members, self.machines, self.schedule_index, clock=self.clock)

        # Background + web-facing
        self.alerts = AlertFeed()
        self.alerts.start(self.event_bus)
        self.reset_scheduler = DailyResetScheduler(self.run_daily_reset, clock=self.clock, hour=reset_hour)

    def run_daily_reset(self):
        return reset_taken_today(self.members, event_bus=self.event_bus)

    def shutdown(self):
        self.reset_scheduler.stop()
        self.alerts.stop()
