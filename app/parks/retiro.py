"""
Retiro Park Resolver
====================
Live data source: Madrid open-data ArcGIS layer MEDIO_AMBIENTE/ALERTAS_PARQUES
  https://sigma.madrid.es/hosted/rest/services/MEDIO_AMBIENTE/ALERTAS_PARQUES/MapServer/0/query

Query: where=1=1, outFields=*, f=json → { features: [{ attributes: {...} }] }

Feature attribute fields:
  ZONA_VERDE          — park name ("Parque del Retiro", ...)
  ALERTA_DESCRIPCION  — alert code 1..6 (see app/parks/status_map.py)
  HORARIO_INCIDENCIA  — affected hours, free text
  FECHA_INCIDENCIA    — incident date, free text
  PREVISION_APERTURA  — reopening forecast, text or small integer (0 = none)
  OBSERVACIONES       — observations, free text
"""

import httpx
import logging
import os
from typing import Mapping, Optional

from app.parks.base import BaseStatusResolver, error_status
from app.parks.errors import (
    ParkStatusError,
    UpstreamUnavailable, MalformedResponse, FacilityNotFound,
)
from app.parks.status_map import load_status_map, lookup
from app.models.schemas import NormalizedStatus, StatusCode, StatusInfo

logger = logging.getLogger(__name__)

UPSTREAM_URL = os.getenv(
    "UPSTREAM_URL",
    "https://sigma.madrid.es/hosted/rest/services/MEDIO_AMBIENTE/ALERTAS_PARQUES/MapServer/0/query",
)
INFO_URL = (
    "https://www.madrid.es/portales/munimadrid/es/Inicio/Medio-ambiente/"
    "Estado-de-cierre-y-apertura-de-algunos-parques-en-Madrid/"
)
FACILITY_NAME = os.getenv("FACILITY_NAME", "retiro")

UPSTREAM_PARAMS = {"where": "1=1", "outFields": "*", "f": "json"}
UPSTREAM_HEADERS = {
    "Accept":     "application/json",
    "User-Agent": "RetiroParkStatus/1.0",
}


class RetiroResolver(BaseStatusResolver):
    park_name    = "Retiro Park"
    park_name_es = "Parque del Retiro"
    source_url   = INFO_URL

    def __init__(
        self,
        url: str = UPSTREAM_URL,
        facility_name: str = FACILITY_NAME,
        status_map: Optional[Mapping[StatusCode, StatusInfo]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.url = url
        self.facility_name = facility_name
        self.status_map = status_map if status_map is not None else load_status_map()
        self._transport = transport

    async def resolve(self) -> NormalizedStatus:
        try:
            return self._normalize(await self._fetch_attributes())
        except ParkStatusError as e:
            return self._failure(str(e))
        except Exception as e:
            logger.error(f"[Retiro] Unexpected error while resolving status: {e}", exc_info=True)
            return self._failure(f"Unexpected error: {e}")

    def _normalize(self, attrs: dict) -> NormalizedStatus:
        code = _parse_code(attrs.get("ALERTA_DESCRIPCION"))
        info = lookup(code, self.status_map)

        return NormalizedStatus(
            state=info.state,
            color=info.color,
            message=info.message,
            message_es=info.message_es,
            status_code=code,
            park_name=attrs.get("ZONA_VERDE"),
            schedule=_text(attrs.get("HORARIO_INCIDENCIA")),
            incident_date=_text(attrs.get("FECHA_INCIDENCIA")),
            reopening=_forecast(attrs.get("PREVISION_APERTURA")),
            observations=_text(attrs.get("OBSERVACIONES")),
            resolved=True,
        )

    # ──────────────────────────────────────────
    # Upstream
    # ──────────────────────────────────────────

    async def _fetch_attributes(self) -> dict:
        """One GET (redirects followed), no retry. Returns the matching feature's attributes."""
        try:
            async with httpx.AsyncClient(transport=self._transport, follow_redirects=True) as client:
                resp = await client.get(self.url, params=UPSTREAM_PARAMS, headers=UPSTREAM_HEADERS)
        except httpx.HTTPError as e:
            raise UpstreamUnavailable(f"Upstream request failed: {e}") from e

        if not resp.is_success:
            raise UpstreamUnavailable(f"API returned status {resp.status_code}")

        try:
            data = resp.json()
        except ValueError as e:
            raise MalformedResponse("API returned a body that is not valid JSON") from e

        features = data.get("features") if isinstance(data, dict) else None
        if not isinstance(features, list):
            raise MalformedResponse("API response has no features list")
        if not features:
            raise MalformedResponse("No park data returned from API")

        target = self.facility_name.lower()
        for feature in features:
            attrs = feature.get("attributes") if isinstance(feature, dict) else None
            if not isinstance(attrs, dict):
                continue
            name = attrs.get("ZONA_VERDE")
            if isinstance(name, str) and target in name.lower():
                return attrs

        raise FacilityNotFound(f"Park matching '{self.facility_name}' not found in API response")

    def _failure(self, description: str) -> NormalizedStatus:
        logger.error(f"[Retiro] API fetch error: {description}")
        return error_status(description)


# ──────────────────────────────────────────────
# Helpers
# ──────────────────────────────────────────────

def _parse_code(value) -> int:
    """Missing, null or non-numeric alert codes count as code 1."""
    if value is None or isinstance(value, bool):
        return int(StatusCode.open)
    try:
        return int(value)
    except (ValueError, TypeError):
        logger.warning(f"[Retiro] Unparseable ALERTA_DESCRIPCION: {value!r} — defaulting to 1")
        return int(StatusCode.open)


def _text(value) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def _forecast(value) -> str:
    """PREVISION_APERTURA may arrive as an integer; 0 means no forecast."""
    if isinstance(value, int) and not isinstance(value, bool):
        return "" if value == 0 else str(value)
    return _text(value)
