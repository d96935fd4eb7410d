"""
Input validation schemas using Pydantic for the device-facing endpoints.
"""
from pydantic import BaseModel, Field, field_validator
from typing import List, Optional


class UidInput(BaseModel):
    """Body of /verify-uid and /confirm: the scanned RFID token."""
    uid: str = Field(..., min_length=1, max_length=45)

    @field_validator('uid')
    @classmethod
    def strip_whitespace(cls, v):
        """Remove leading/trailing whitespace."""
        v = v.strip()
        if not v:
            raise ValueError('uid cannot be blank')
        return v


class KitUidInput(BaseModel):
    """Body of /dispense-list."""
    k_uid: str = Field(..., min_length=1, max_length=50)

    @field_validator('k_uid')
    @classmethod
    def strip_whitespace(cls, v):
        v = v.strip()
        if not v:
            raise ValueError('k_uid cannot be blank')
        return v


class DispenseItemInput(BaseModel):
    """One medication outcome reported by the device."""
    medi_id: str = Field(..., min_length=1, max_length=50)
    dose: int = Field(..., ge=0, le=1000)


class DispenseResultInput(BaseModel):
    """Body of /dispense-result.

    request_id is optional; when the device resends the same id after a
    timeout, items already applied under it are not decremented again.
    """
    k_uid: str = Field(..., min_length=1, max_length=50)
    dispenseList: List[DispenseItemInput] = Field(default_factory=list)
    request_id: Optional[str] = Field(None, min_length=1, max_length=64)

    @field_validator('k_uid')
    @classmethod
    def strip_whitespace(cls, v):
        v = v.strip()
        if not v:
            raise ValueError('k_uid cannot be blank')
        return v
