"""Known locations used as defaults by the chat and routing services."""

from __future__ import annotations

from ..config import settings
from ..schemas.jobs import Location, StartLocation

BUNNINGS_CARLINGFORD = Location(
    street_address="295 Pennant Hills Road",
    suburb="Carlingford",
    state="NSW",
    postcode="2118",
    formatted_address="295 Pennant Hills Road, Carlingford NSW 2118",
    latitude=-33.77895597508021,
    longitude=151.05162274718293,
)


def bunnings_location() -> Location:
    return BUNNINGS_CARLINGFORD.model_copy()


def default_start_location() -> StartLocation:
    """Depot the day starts from when the request does not name one."""
    return StartLocation(
        latitude=settings.default_start_latitude,
        longitude=settings.default_start_longitude,
        formatted_address=settings.default_start_address,
    )
