"""
Hosting destinations

Request formatting and response parsing for the third-party file hosts a
finished upload can be relayed to, plus the forwarder that performs the
outbound request.
"""

from fatbox.destinations.base import Destination, ForwardOptions, UploadRequest
from fatbox.destinations.catbox import CatboxDestination, LitterboxDestination
from fatbox.destinations.factory import build_destinations, get_destination
from fatbox.destinations.forwarder import DestinationForwarder
from fatbox.destinations.pomf import PomfDestination

__all__ = [
    "Destination",
    "ForwardOptions",
    "UploadRequest",
    "CatboxDestination",
    "LitterboxDestination",
    "PomfDestination",
    "DestinationForwarder",
    "build_destinations",
    "get_destination",
]
