from abc import ABC, abstractmethod
from app.models.schemas import NormalizedStatus, ParkState, SeverityColor

ERROR_MESSAGE    = "Could not fetch status - please check madrid.es directly"
ERROR_MESSAGE_ES = "No se pudo obtener el estado - consulta madrid.es directamente"


class BaseStatusResolver(ABC):
    """
    Abstract base class for park status resolvers.

    resolve() must never raise: every failure is returned as a
    NormalizedStatus with resolved=False (see error_status).
    """
    park_name: str
    park_name_es: str
    source_url: str

    @abstractmethod
    async def resolve(self) -> NormalizedStatus: ...


def error_status(description: str) -> NormalizedStatus:
    """Placeholder returned when the upstream status cannot be resolved."""
    return NormalizedStatus(
        state=ParkState.error,
        color=SeverityColor.gray,
        message=ERROR_MESSAGE,
        message_es=ERROR_MESSAGE_ES,
        resolved=False,
        error=description,
    )
