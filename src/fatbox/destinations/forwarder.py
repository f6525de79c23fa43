"""Outbound relay of local files to hosting destinations."""

import asyncio
import logging
from pathlib import Path
from typing import Dict, Optional

import httpx
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_random,
)

from fatbox.core.exceptions import UpstreamError, UpstreamTimeoutError
from fatbox.destinations.base import Destination, ForwardOptions
from fatbox.destinations.factory import get_destination

logger = logging.getLogger(__name__)


class DestinationForwarder:
    """Sends a local file to a destination and returns the resulting URL.

    Every attempt, from connect to the last response byte, is bounded by
    ``timeout``. Transport failures (connection errors, timeouts) are
    retried up to ``max_attempts`` in total after a random delay of at most
    ``retry_jitter`` seconds. Upstream HTTP errors and unusable payloads are
    never retried.
    """

    def __init__(
        self,
        destinations: Dict[str, Destination],
        timeout: float = 300.0,
        max_attempts: int = 2,
        retry_jitter: float = 1.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.destinations = destinations
        self.timeout = timeout
        self.max_attempts = max(1, max_attempts)
        self.retry_jitter = retry_jitter
        self.transport = transport

    def resolve(self, name: str | None) -> Destination:
        """Return the destination for ``name`` or raise InvalidInputError."""
        return get_destination(self.destinations, name)

    async def forward(
        self,
        destination_name: str | None,
        file_path: Path,
        display_name: str,
        options: ForwardOptions | None = None,
    ) -> str:
        """Upload a local file to a destination.

        Args:
            destination_name: One of the registered destination names
            file_path: Local file to upload
            display_name: File name presented to the destination
            options: userhash/time parameters

        Returns:
            URL (or raw response body) reported by the destination

        Raises:
            InvalidInputError: If the destination is unknown
            UpstreamTimeoutError: If the destination timed out on every attempt
            UpstreamError: If the request failed or the response is unusable
        """
        destination = self.resolve(destination_name)
        options = options or ForwardOptions()
        upload = destination.build_request(options)

        logger.info(
            f"Forwarding {display_name} to {destination.name}",
            extra={"destination": destination.name, "upload_url": upload.url},
        )

        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_random(0, self.retry_jitter),
            retry=retry_if_exception_type((httpx.TransportError, asyncio.TimeoutError)),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                async for attempt in retrying:
                    with attempt:
                        with open(file_path, "rb") as fh:
                            response = await asyncio.wait_for(
                                client.post(
                                    upload.url,
                                    data=upload.data,
                                    files={upload.file_field: (display_name, fh, "application/octet-stream")},
                                ),
                                timeout=self.timeout,
                            )
        except (httpx.TimeoutException, asyncio.TimeoutError) as e:
            raise UpstreamTimeoutError(
                f"{destination.name} did not respond within {self.timeout}s "
                f"after {self.max_attempts} attempt(s)"
            ) from e
        except httpx.HTTPError as e:
            raise UpstreamError(f"{destination.name} request failed: {e}") from e

        if response.is_error:
            raise UpstreamError(
                f"{destination.name} responded with HTTP {response.status_code}",
                details=response.text,
            )

        result = destination.parse_response(response)
        logger.info(
            f"Uploaded to {destination.name}: {result}",
            extra={"destination": destination.name, "status_code": response.status_code},
        )
        return result
