"""Employee and time-clock schemas."""

import enum

from pydantic import BaseModel


class ClockAction(str, enum.Enum):
    IN = "in"
    OUT = "out"


class ClockRequest(BaseModel):
    action: ClockAction
