"""Abstract hosting destination interface."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, Optional

import httpx


@dataclass
class ForwardOptions:
    """Per-request parameters some destinations understand."""

    userhash: Optional[str] = None  # catbox only
    time: str = "1h"  # litterbox only


@dataclass
class UploadRequest:
    """Outbound multipart request for one destination.

    The file content itself is attached by the forwarder under
    ``file_field`` so that it can be reopened for every attempt.
    """

    url: str
    file_field: str
    data: Dict[str, str] = field(default_factory=dict)


class Destination(ABC):
    """Abstract base class for hosting destinations."""

    name: str

    def __init__(self, upload_url: str):
        self.upload_url = upload_url

    @abstractmethod
    def build_request(self, options: ForwardOptions) -> UploadRequest:
        """Describe the multipart request for an upload.

        Args:
            options: Destination-specific parameters

        Returns:
            Request description without the file content
        """
        pass

    @abstractmethod
    def parse_response(self, response: httpx.Response) -> str:
        """Extract the public URL (or raw body) from a successful response.

        Raises:
            UpstreamError: If the response cannot be used
        """
        pass
