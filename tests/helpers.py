"""Test doubles: synthetic upstream responses, fake resolvers and clocks."""

import asyncio
from datetime import datetime, timedelta, timezone

import httpx

from app.models.schemas import NormalizedStatus
from app.parks.base import BaseStatusResolver, error_status


FIXED_NOW = datetime(2026, 3, 14, 9, 30, 0, tzinfo=timezone.utc)


def feature(name: str = "Parque del Retiro", **attrs) -> dict:
    return {"attributes": {"ZONA_VERDE": name, **attrs}}


def features_body(*features: dict) -> dict:
    return {"features": list(features)}


class RecordingTransport(httpx.MockTransport):
    """MockTransport that remembers every request it served."""

    def __init__(self, handler):
        self.requests: list[httpx.Request] = []

        def record(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        super().__init__(record)


def json_transport(body, status_code: int = 200) -> RecordingTransport:
    return RecordingTransport(lambda request: httpx.Response(status_code, json=body))


class FakeClock:
    def __init__(self, start: datetime = FIXED_NOW):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class FakeResolver(BaseStatusResolver):
    """Returns queued results in order; repeats the last one when exhausted."""

    park_name = "Retiro Park"
    park_name_es = "Parque del Retiro"
    source_url = "https://www.madrid.es/"

    def __init__(self, *results: NormalizedStatus, delay: float = 0):
        self.results = list(results)
        self.calls = 0
        self.delay = delay

    async def resolve(self) -> NormalizedStatus:
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        index = min(self.calls, len(self.results)) - 1
        return self.results[index]


def ok_status(code: int = 1, **overrides) -> NormalizedStatus:
    fields = dict(
        state="open",
        color="green",
        message="The park is OPEN",
        message_es="El parque está ABIERTO",
        status_code=code,
        park_name="Parque del Retiro",
        resolved=True,
    )
    fields.update(overrides)
    return NormalizedStatus(**fields)


def failed_status(description: str = "API returned status 503") -> NormalizedStatus:
    return error_status(description)
