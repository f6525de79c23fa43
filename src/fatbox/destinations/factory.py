"""Destination registry."""

from typing import Dict

from fatbox.core.config import Settings
from fatbox.core.exceptions import InvalidInputError
from fatbox.destinations.base import Destination
from fatbox.destinations.catbox import CatboxDestination, LitterboxDestination
from fatbox.destinations.pomf import PomfDestination


def build_destinations(settings: Settings) -> Dict[str, Destination]:
    """Create every supported destination keyed by name."""
    destinations: list[Destination] = [
        PomfDestination(settings.POMF_UPLOAD_URL),
        CatboxDestination(settings.CATBOX_UPLOAD_URL),
        LitterboxDestination(settings.LITTERBOX_UPLOAD_URL),
    ]
    return {destination.name: destination for destination in destinations}


def get_destination(destinations: Dict[str, Destination], name: str | None) -> Destination:
    """Look up a destination by name.

    Raises:
        InvalidInputError: If the name is missing or not supported
    """
    if not name:
        raise InvalidInputError("Missing destination")
    try:
        return destinations[name]
    except KeyError:
        supported = ", ".join(sorted(destinations))
        raise InvalidInputError(
            f"Unknown destination '{name}'. Supported: {supported}"
        ) from None
