"""
Status Table
============
Madrid ALERTAS_PARQUES alert codes (ALERTA_DESCRIPCION) → normalized status.

  1       → open        green
  2       → restricted  yellow
  3, 4    → restricted  orange
  5, 6    → closed      red

Upstream has moved code 3 between orange and yellow in the past, so the
color per code can be overridden with STATUS_COLOR_OVERRIDES, e.g.
"3:yellow,4:yellow". Unknown codes always fall back to code 1.
"""

import logging
import os
from types import MappingProxyType
from typing import Mapping, Optional

from app.models.schemas import StatusCode, StatusInfo, ParkState, SeverityColor

logger = logging.getLogger(__name__)

STATUS_COLOR_OVERRIDES = os.getenv("STATUS_COLOR_OVERRIDES", "")

DEFAULT_STATUS_MAP: Mapping[StatusCode, StatusInfo] = MappingProxyType({
    StatusCode.open: StatusInfo(
        state=ParkState.open,
        color=SeverityColor.green,
        message="The park is OPEN",
        message_es="El parque está ABIERTO",
    ),
    StatusCode.yellow_alert: StatusInfo(
        state=ParkState.restricted,
        color=SeverityColor.yellow,
        message="The park has MINOR RESTRICTIONS (yellow alert)",
        message_es="El parque tiene RESTRICCIONES LEVES (alerta amarilla)",
    ),
    StatusCode.orange_alert: StatusInfo(
        state=ParkState.restricted,
        color=SeverityColor.orange,
        message="The park has SIGNIFICANT RESTRICTIONS (orange alert)",
        message_es="El parque tiene RESTRICCIONES IMPORTANTES (alerta naranja)",
    ),
    StatusCode.restricted: StatusInfo(
        state=ParkState.restricted,
        color=SeverityColor.orange,
        message="The park has RESTRICTIONS",
        message_es="El parque tiene RESTRICCIONES",
    ),
    StatusCode.closed: StatusInfo(
        state=ParkState.closed,
        color=SeverityColor.red,
        message="The park is CLOSED",
        message_es="El parque está CERRADO",
    ),
    StatusCode.red_alert: StatusInfo(
        state=ParkState.closed,
        color=SeverityColor.red,
        message="The park is CLOSED (red alert)",
        message_es="El parque está CERRADO (alerta roja)",
    ),
})


def load_status_map(overrides: Optional[str] = None) -> Mapping[StatusCode, StatusInfo]:
    """
    Build the status table, applying "code:color" overrides on top of the
    defaults. Malformed entries are logged and skipped.
    """
    spec = STATUS_COLOR_OVERRIDES if overrides is None else overrides
    table = dict(DEFAULT_STATUS_MAP)

    for item in filter(None, (part.strip() for part in spec.split(","))):
        raw_code, _, raw_color = item.partition(":")
        try:
            code = StatusCode(int(raw_code))
            color = SeverityColor(raw_color.strip().lower())
        except ValueError:
            logger.warning(f"Ignoring invalid status color override: '{item}'")
            continue
        if color == SeverityColor.gray:
            logger.warning(f"Ignoring status color override '{item}' — gray is reserved for errors")
            continue
        table[code] = table[code].model_copy(update={"color": color})

    return MappingProxyType(table)


def lookup(code: int, status_map: Mapping[StatusCode, StatusInfo]) -> StatusInfo:
    """Return the entry for code, or code 1's entry if the code is unknown."""
    try:
        return status_map[StatusCode(code)]
    except (ValueError, KeyError):
        return status_map[StatusCode.open]
