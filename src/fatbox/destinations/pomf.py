"""pomf.lain.la destination."""

import json

import httpx

from fatbox.core.exceptions import UpstreamError
from fatbox.destinations.base import Destination, ForwardOptions, UploadRequest


class PomfDestination(Destination):
    """Uploads to a pomf-compatible host and returns the first file URL."""

    name = "pomf"

    def build_request(self, options: ForwardOptions) -> UploadRequest:
        return UploadRequest(url=self.upload_url, file_field="files[]")

    def parse_response(self, response: httpx.Response) -> str:
        body = response.text
        try:
            payload = json.loads(body)
        except json.JSONDecodeError as e:
            raise UpstreamError(f"Pomf JSON parse error: {e}", details=body) from e

        if not isinstance(payload, dict) or not payload.get("success"):
            raise UpstreamError(f"Pomf upload failed: {body}", details=body)

        files = payload.get("files")
        first = files[0] if isinstance(files, list) and files else None
        url = first.get("url") if isinstance(first, dict) else None
        if not url:
            raise UpstreamError(f"Pomf upload failed: {body}", details=body)
        return url
