"""Device and household endpoints under /dispenser.

Domain "not found" conditions become 404; anything else (storage failures
included) is logged with its context and returned as a generic 500 with a
fixed message, so internal detail never reaches the device.
"""
import logging
from typing import NoReturn

from fastapi import APIRouter, HTTPException, Request

from dispenser.api.services import Services
from dispenser.domain.errors import NotFound, TransientStorageFailure
from dispenser.utilities.validators import DispenseResultInput, KitUidInput, UidInput

router = APIRouter(prefix="/dispenser", tags=["dispenser"])
logger = logging.getLogger(__name__)


def _services(request: Request) -> Services:
    return request.app.state.services


def _handle_error(ctx: str, error: Exception, fallback_message: str) -> NoReturn:
    if isinstance(error, NotFound):
        raise HTTPException(status_code=404, detail=str(error))
    if isinstance(error, TransientStorageFailure):
        logger.error("%s storage error: %s", ctx, error.context)
    else:
        logger.exception("%s error: %s", ctx, error)
    raise HTTPException(status_code=500, detail=fallback_message)


@router.post("/verify-uid")
def verify_uid(payload: UidInput, request: Request):
    """Authenticate a scanned RFID token."""
    try:
        return _services(request).intake.authenticate(payload.uid)
    except Exception as e:
        _handle_error("verify_uid", e, "Token authentication failed")


@router.post("/confirm")
def confirm_intake(payload: UidInput, request: Request):
    try:
        return _services(request).intake.confirm_intake(payload.uid)
    except Exception as e:
        _handle_error("confirm_intake", e, "Intake confirmation failed")


@router.get("/medicine/{connect}")
def get_medicine_list(connect: str, request: Request):
    """Household medication stock, ordered by slot."""
    try:
        return _services(request).household.medication_list(connect)
    except Exception as e:
        _handle_error("get_medicine_list", e, "Error while loading medications")


@router.get("/schedules/connect/{connect}")
def get_today_schedules_by_connect(connect: str, request: Request):
    try:
        return _services(request).household.today_schedule_for_group(connect)
    except Exception as e:
        _handle_error("get_today_schedules_by_connect", e, "Error while loading schedules")


@router.get("/schedules/user/{user_id}")
def get_today_schedules_by_user(user_id: str, request: Request):
    try:
        return _services(request).household.today_schedule_for_member(user_id)
    except Exception as e:
        _handle_error("get_today_schedules_by_user", e, "Error while loading schedules")


@router.post("/dispense-list")
def get_dispense_list(payload: KitUidInput, request: Request):
    """Doses the scanned member should receive for the rest of today."""
    try:
        return _services(request).orchestrator.resolve_dispense_candidates(payload.k_uid)
    except Exception as e:
        _handle_error("get_dispense_list", e, "Error while building the dispense list")


@router.post("/dispense-result")
def report_dispense_result(payload: DispenseResultInput, request: Request):
    """Apply what the device actually dispensed to machine stock."""
    try:
        return _services(request).orchestrator.handle_dispense_result(
            payload.k_uid, payload.dispenseList, request_id=payload.request_id)
    except Exception as e:
        _handle_error("report_dispense_result", e, "Error while processing the dispense result")


@router.get("/machine-status/{muid}")
def get_machine_status(muid: str, request: Request):
    try:
        return _services(request).household.machine_status(muid)
    except Exception as e:
        _handle_error("get_machine_status", e, "Error while loading machine status")


@router.get("/users/by-muid/{muid}")
def get_users_by_muid(muid: str, request: Request):
    try:
        return _services(request).household.members_for_device(muid)
    except Exception as e:
        _handle_error("get_users_by_muid", e, "Error while loading members")


@router.get("/schedules/today/{muid}")
def get_today_schedules_by_muid(muid: str, request: Request):
    """Whole-day household schedule grouped by time of day."""
    try:
        return _services(request).household.today_schedule_for_device(muid)
    except Exception as e:
        _handle_error("get_today_schedules_by_muid", e, "Error while loading schedules")


@router.get("/slots/status/{muid}")
def get_slot_status(muid: str, request: Request):
    try:
        return _services(request).household.slot_status(muid)
    except Exception as e:
        _handle_error("get_slot_status", e, "Error while loading slot status")
