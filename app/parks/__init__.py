"""
Park status resolvers.

The service tracks a single park; build_resolver() returns the resolver
the application wires into its StatusCache at startup.
"""

from app.parks.base import BaseStatusResolver
from app.parks.retiro import RetiroResolver


def build_resolver() -> BaseStatusResolver:
    return RetiroResolver()
