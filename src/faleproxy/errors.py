# src/faleproxy/errors.py
"""Error taxonomy surfaced by the proxy to the API and CLI layers."""
from typing import Optional


class FaleproxyError(RuntimeError):
    """Base class. `detail` is safe to show to end users."""

    http_status = 500

    def __init__(self, detail: str, http_status: Optional[int] = None):
        super().__init__(detail)
        self.detail = detail
        if http_status is not None:
            self.http_status = http_status


class InputError(FaleproxyError):
    """Missing or malformed request URL. Raised before any fetch is attempted."""

    http_status = 400


class FetchError(FaleproxyError):
    """Network failure, timeout or non-success status from the remote server."""

    def __init__(self, url: str, cause: str):
        super().__init__(f"{cause} ({url})")
        self.url = url
        self.cause = cause


class TransformError(FaleproxyError):
    """Unexpected failure while parsing, substituting or serializing a document."""
