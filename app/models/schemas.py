from pydantic import BaseModel
from typing import Optional
from datetime import datetime
from enum import Enum, IntEnum


# ──────────────────────────────────────────────
# Status vocabulary
# ──────────────────────────────────────────────

class StatusCode(IntEnum):
    open = 1              # no alert
    yellow_alert = 2      # minor restrictions
    orange_alert = 3      # significant restrictions
    restricted = 4
    closed = 5
    red_alert = 6         # closed, red alert


class ParkState(str, Enum):
    open = "open"
    restricted = "restricted"
    closed = "closed"
    error = "error"          # placeholder, upstream could not be resolved


class SeverityColor(str, Enum):
    green = "green"
    yellow = "yellow"
    orange = "orange"
    red = "red"
    gray = "gray"            # error placeholder only


class StatusInfo(BaseModel, frozen=True):
    state: ParkState
    color: SeverityColor
    message: str
    message_es: str


# ──────────────────────────────────────────────
# Resolved status
# ──────────────────────────────────────────────

class NormalizedStatus(BaseModel):
    state: ParkState
    color: SeverityColor
    message: str
    message_es: str = ""
    status_code: Optional[int] = None   # raw ALERTA_DESCRIPCION, None on error
    park_name: Optional[str] = None
    schedule: str = ""
    incident_date: str = ""
    reopening: str = ""
    observations: str = ""
    resolved: bool
    error: Optional[str] = None


class StatusResult(NormalizedStatus):
    served_from_cache: bool
    cache_age_seconds: Optional[int] = None   # only set on a cache hit
    fetched_at: datetime


# ──────────────────────────────────────────────
# API responses
# ──────────────────────────────────────────────

class ParkStatusResponse(BaseModel):
    park: str
    park_es: str
    status: ParkState                   # normalized state; "error" when unresolved
    color: SeverityColor
    message: str
    message_es: str
    status_code: Optional[int] = None
    park_name: Optional[str] = None
    schedule: str = ""
    incident_date: str = ""
    reopening: str = ""
    observations: str = ""
    resolved: bool
    error: Optional[str] = None
    served_from_cache: bool
    cache_age_seconds: Optional[int] = None
    fetched_at: datetime
    source_url: str
    last_updated: datetime
