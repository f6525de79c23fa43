"""catbox.moe and litterbox.catbox.moe destinations.

Both share the catbox upload API and return the file URL as a plain text
body, which is passed through unchanged.
"""

import httpx

from fatbox.destinations.base import Destination, ForwardOptions, UploadRequest


class CatboxDestination(Destination):
    """Permanent catbox upload, optionally bound to an account userhash."""

    name = "catbox"

    def build_request(self, options: ForwardOptions) -> UploadRequest:
        data = {"reqtype": "fileupload"}
        if options.userhash:
            data["userhash"] = options.userhash
        return UploadRequest(url=self.upload_url, file_field="fileToUpload", data=data)

    def parse_response(self, response: httpx.Response) -> str:
        return response.text


class LitterboxDestination(CatboxDestination):
    """Temporary litterbox upload expiring after ``time``."""

    name = "litterbox"

    def build_request(self, options: ForwardOptions) -> UploadRequest:
        data = {"reqtype": "fileupload", "time": options.time}
        return UploadRequest(url=self.upload_url, file_field="fileToUpload", data=data)
