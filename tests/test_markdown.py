"""Unit tests for the markdown status rendering."""

from datetime import datetime, timezone

from app.models.schemas import ParkStatusResponse
from app.services.markdown import render_status_markdown

FETCHED = datetime(2026, 3, 14, 9, 0, tzinfo=timezone.utc)


def payload(**overrides) -> ParkStatusResponse:
    fields = dict(
        park="Retiro Park",
        park_es="Parque del Retiro",
        status="closed",
        color="red",
        message="The park is CLOSED (red alert)",
        message_es="El parque está CERRADO (alerta roja)",
        status_code=6,
        park_name="Parque del Retiro",
        schedule="08:00-20:00",
        observations="Viento fuerte",
        resolved=True,
        served_from_cache=True,
        cache_age_seconds=120,
        fetched_at=FETCHED,
        source_url="https://www.madrid.es/",
        last_updated=FETCHED,
    )
    fields.update(overrides)
    return ParkStatusResponse(**fields)


class TestRenderStatusMarkdown:
    def test_closed_status_with_details(self) -> None:
        text = render_status_markdown(payload())

        assert text.startswith("# Retiro Park (Parque del Retiro) status")
        assert "**Status:** CLOSED (red)" in text
        assert "The park is CLOSED (red alert)" in text
        assert "- **Affected hours:** 08:00-20:00" in text
        assert "- **Observations:** Viento fuerte" in text
        assert "(120s ago)" in text
        assert "Official source: https://www.madrid.es/" in text

    def test_empty_fields_are_omitted(self) -> None:
        text = render_status_markdown(payload(schedule="", observations=""))

        assert "Affected hours" not in text
        assert "Observations" not in text
        assert "Expected reopening" not in text

    def test_error_placeholder(self) -> None:
        text = render_status_markdown(payload(
            status="error",
            color="gray",
            message="Could not fetch status - please check madrid.es directly",
            status_code=None,
            schedule="",
            observations="",
            resolved=False,
            error="API returned status 503",
            served_from_cache=False,
            cache_age_seconds=None,
        ))

        assert "**Status:** UNKNOWN (gray)" in text
        assert "> Live data unavailable: API returned status 503" in text
        assert "## Details" not in text
        assert "_Fetched 2026-03-14T09:00:00+00:00._" in text
