class ParkStatusError(Exception):
    """Base class for failures while resolving the park status upstream."""


class UpstreamUnavailable(ParkStatusError):
    """Non-2xx HTTP status or transport failure."""


class MalformedResponse(ParkStatusError):
    """Body is not JSON or lacks a usable features list."""


class FacilityNotFound(ParkStatusError):
    """No feature record matches the target facility name."""
