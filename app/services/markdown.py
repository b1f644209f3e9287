"""
Markdown rendering of the park status, for LLM agents and plain-text clients.
"""

from app.models.schemas import ParkStatusResponse, ParkState

STATE_HEADLINES = {
    ParkState.open:       "OPEN",
    ParkState.restricted: "OPEN WITH RESTRICTIONS",
    ParkState.closed:     "CLOSED",
    ParkState.error:      "UNKNOWN",
}


def render_status_markdown(payload: ParkStatusResponse) -> str:
    lines = [
        f"# {payload.park} ({payload.park_es}) status",
        "",
        f"**Status:** {STATE_HEADLINES[payload.status]} ({payload.color.value})",
        "",
        payload.message,
        "",
    ]

    details = [
        ("Alert code", str(payload.status_code) if payload.status_code is not None else ""),
        ("Affected hours", payload.schedule),
        ("Incident date", payload.incident_date),
        ("Expected reopening", payload.reopening),
        ("Observations", payload.observations),
    ]
    details = [(label, value) for label, value in details if value]
    if details:
        lines.append("## Details")
        lines.append("")
        lines.extend(f"- **{label}:** {value}" for label, value in details)
        lines.append("")

    if not payload.resolved and payload.error:
        lines.append(f"> Live data unavailable: {payload.error}")
        lines.append("")

    if payload.served_from_cache:
        lines.append(
            f"_Cached data, fetched {payload.fetched_at.isoformat()} "
            f"({payload.cache_age_seconds}s ago)._"
        )
    else:
        lines.append(f"_Fetched {payload.fetched_at.isoformat()}._")
    lines.append("")
    lines.append(f"Official source: {payload.source_url}")
    lines.append("")
    return "\n".join(lines)
