# src/faleproxy/core/utils/url_utils.py
import logging
from typing import Optional
from urllib.parse import urljoin, urlsplit

from faleproxy.errors import InputError

logger = logging.getLogger(__name__)

DEFAULT_PORTS = {"http": 80, "https": 443, "ws": 80, "wss": 443, "ftp": 21}


class UrlUtils:
    """A collection of static methods for URL parsing and manipulation."""

    @staticmethod
    def validate_request_url(url: Optional[str]) -> str:
        """
        Checks a user supplied URL before anything is fetched.
        Returns the stripped URL or raises InputError.
        """
        if not url or (isinstance(url, str) and not url.strip()):
            raise InputError("URL is required", http_status=400)
        if not isinstance(url, str):
            raise InputError(f"Invalid URL: {url!r}", http_status=500)

        url = url.strip()
        try:
            parsed = urlsplit(url)
            _ = parsed.port  # raises on a malformed port
        except ValueError:
            logger.debug(f"Could not parse invalid URL: {url}")
            raise InputError(f"Invalid URL: {url}", http_status=500)

        if parsed.scheme not in ("http", "https") or not parsed.hostname:
            logger.debug(f"Invalid URL format: {url}")
            raise InputError(f"Invalid URL: {url}", http_status=500)
        return url

    @staticmethod
    def get_origin(url: str) -> str:
        """
        Returns scheme://host[:port] for an absolute URL.
        Scheme and host are lowercased and default ports are dropped.
        """
        try:
            parsed = urlsplit(url)
            port = parsed.port
        except ValueError:
            raise InputError(f"Invalid URL: {url}", http_status=500)

        if not parsed.scheme or not parsed.hostname:
            raise InputError(f"Invalid URL: {url}", http_status=500)

        scheme = parsed.scheme.lower()
        host = parsed.hostname
        if ":" in host:
            host = f"[{host}]"
        if port is not None and port != DEFAULT_PORTS.get(scheme):
            return f"{scheme}://{host}:{port}"
        return f"{scheme}://{host}"

    @staticmethod
    def resolve(base_url: str, url: str) -> str:
        """Resolves a possibly relative reference against a base URL."""
        return urljoin(base_url, url.strip())

    @staticmethod
    def is_web_url(url: str) -> bool:
        return url.startswith(("http://", "https://"))
