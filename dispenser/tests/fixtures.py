"""Shared seed data: one household (H1) with a parent, a child and a three-slot device."""
from datetime import datetime

from dispenser.domain.MachineSlot import MachineSlot
from dispenser.domain.Medication import Medication
from dispenser.domain.Member import Member
from dispenser.domain.ScheduleEntry import ScheduleEntry
from dispenser.infra.database import Database
from dispenser.infra.Machine_Repository import MachineRepository
from dispenser.infra.Medication_Repository import MedicationRepository
from dispenser.infra.Member_Repository import MemberRepository
from dispenser.infra.Schedule_Repository import ScheduleRepository
from dispenser.logic.clock.resolver import ClockResolver

HOUSEHOLD = "H1"
DEVICE = "M-100"
PARENT_TOKEN = "K-PARENT"
CHILD_TOKEN = "K-CHILD"

# 2025-01-06 is a Monday
MONDAY_MORNING = datetime(2025, 1, 6, 9, 30)
MONDAY_EVENING = datetime(2025, 1, 6, 19, 0)


def make_database():
    return Database("sqlite://").create_all()


def fixed_clock(moment=MONDAY_MORNING):
    return ClockResolver.fixed(moment)


def seed_household(database, remain=6, total=30):
    """Members u1 (parent) and u2 (child), Vitamin D loaded in slot 1 with ``remain`` left."""
    members = MemberRepository(database)
    members.add(Member(user_id="u1", name="Alex", role="parent", connect=HOUSEHOLD, m_uid=DEVICE,
                       k_uid=PARENT_TOKEN, age=41))
    members.add(Member(user_id="u2", name="Sam", role="child", connect=HOUSEHOLD, m_uid=DEVICE,
                       k_uid=CHILD_TOKEN, age=9))

    medications = MedicationRepository(database)
    medications.add(Medication(medi_id="med-x", connect=HOUSEHOLD, name="Vitamin D"))

    MachineRepository(database).add(MachineSlot(machine_id=DEVICE, medi_id="med-x", owner=HOUSEHOLD,
                                                total=total, remain=remain, slot=1))


def add_medication(database, medi_id, name, connect=HOUSEHOLD, target_users=None,
                   start_date=None, end_date=None):
    MedicationRepository(database).add(Medication(medi_id=medi_id, connect=connect, name=name,
                                                  target_users=target_users,
                                                  start_date=start_date, end_date=end_date))


def add_schedule(database, schedule_id, medi_id, dose, time_of_day="morning", user_id="u1",
                 day_of_week="mon", connect=HOUSEHOLD):
    ScheduleRepository(database).add(ScheduleEntry(schedule_id=schedule_id, connect=connect, user_id=user_id,
                                                   medi_id=medi_id, day_of_week=day_of_week,
                                                   time_of_day=time_of_day, dose=dose))
