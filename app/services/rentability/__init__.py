"""
Rate resolution.
"""

from app.services.rentability.resolver import RateResolver, RateResolution


__all__ = [
    "RateResolver",
    "RateResolution",
]
