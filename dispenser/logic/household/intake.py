"""RFID token authentication and daily intake confirmation."""
from __future__ import annotations
import logging
from typing import Any, Dict, Optional

from dispenser.domain.errors import NotFound
from dispenser.events.Event_Bus import EventBus
from dispenser.events.event_helpers import publish_intake_confirmed
from dispenser.infra.Member_Repository import MemberRepository
from dispenser.logic.clock.resolver import ClockResolver

logger = logging.getLogger(__name__)


class IntakeService:
    def __init__(self, members: MemberRepository, clock: Optional[ClockResolver] = None,
                 event_bus: Optional[EventBus] = None):
        self.members = members
        self.clock = clock or ClockResolver()
        self.event_bus = event_bus

    def authenticate(self, token_id: str) -> Dict[str, Any]:
        """Known token -> member summary; unknown token -> pairing payload for the registration QR code."""
        logger.info("Token authentication attempt: %s", token_id)
        member = self.members.find_by_token(token_id)
        if member is None:
            logger.warning("Unregistered token: %s", token_id)
            return {
                "status": "unregistered",
                "qr_data": {
                    "type": "register",
                    "k_uid": token_id,
                    "createdAt": self.clock.now().isoformat(),
                },
            }
        logger.info("Authenticated %s (%s)", member.name, member.role)
        return {"status": "ok", "user": member.public_summary()}

    def confirm_intake(self, token_id: str) -> Dict[str, Any]:
        """Mark today's intake; a second call the same day reports already_confirmed."""
        member = self.members.find_by_token(token_id)
        if member is None:
            raise NotFound("Unregistered user")
        if not self.members.mark_taken_today(token_id):
            return {"status": "already_confirmed", "message": "Intake was already confirmed today."}
        member.took_today = 1
        logger.info("Intake confirmed: %s", member.name)
        publish_intake_confirmed(member, bus=self.event_bus)
        return {"status": "confirmed", "user_id": member.user_id, "message": "Intake confirmed."}
