# src/faleproxy/services/http_request_service.py
import logging
import platform
import time
from typing import Dict, Optional

import requests

from faleproxy.errors import FetchError
from faleproxy.model import FetchResult

logger = logging.getLogger(__name__)


def generate_default_user_agent(chrome_version: str = "120.0.0.0") -> str:
    """
    Generates a generic Chrome user agent string for the current operating system.
    """
    os_name = platform.system()

    if os_name == "Windows":
        os_part = "Windows NT 10.0; Win64; x64"
    elif os_name == "Darwin":  # macOS
        os_part = "Macintosh; Intel Mac OS X 10_15_7"
    elif os_name == "Linux":
        os_part = "X11; Linux x86_64"
    else:
        os_part = "Unknown OS"

    return (
        f"Mozilla/5.0 ({os_part}) AppleWebKit/537.36 (KHTML, like Gecko) "
        f"Chrome/{chrome_version} Safari/537.36"
    )


class HttpRequestService:
    """
    Fetches a single remote document.
    Owns the requests session, timeout and redirect policy, and turns every
    transport problem into a FetchError.
    """

    def __init__(self, config: Dict, user_agent: Optional[str] = None):
        self.config = config or {}

        session_config = self.config.get('session', {})
        self.timeout = float(session_config.get('time_out', 30))
        self.max_redirects = int(session_config.get('max_redirects', 10))
        self.user_agent = (
            user_agent
            or session_config.get('user_agent')
            or generate_default_user_agent(session_config.get('chrome_version', "120.0.0.0"))
        )
        self.session: Optional[requests.Session] = None

    def __enter__(self):
        self.initialize()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def initialize(self):
        if self.session is None:
            self.session = requests.Session()
            self.session.max_redirects = self.max_redirects
            self.session.headers.update({
                'Accept': 'text/html,application/xhtml+xml;q=0.9,*/*;q=0.8',
                'Accept-Encoding': 'gzip, deflate',
                'User-Agent': self.user_agent,
            })
            logger.debug("HttpRequestService: Session initialized.")

    def close(self):
        if self.session is not None:
            self.session.close()
            self.session = None
            logger.debug("HttpRequestService: Session closed.")

    def fetch(self, url: str) -> FetchResult:
        """
        GETs the URL (following redirects) and returns the decoded body.
        Raises FetchError on network failure, timeout or a non-2xx status.
        """
        self.initialize()
        start_time = time.perf_counter()

        try:
            response = self.session.get(url, timeout=self.timeout, allow_redirects=True)
            response.raise_for_status()
        except requests.exceptions.HTTPError as e:
            status = e.response.status_code if e.response is not None else "unknown"
            raise FetchError(url, f"Request failed with status code {status}") from e
        except requests.exceptions.Timeout as e:
            raise FetchError(url, f"Timeout of {self.timeout:g}s exceeded") from e
        except requests.exceptions.TooManyRedirects as e:
            raise FetchError(url, f"Exceeded {self.max_redirects} redirects") from e
        except requests.exceptions.ConnectionError as e:
            raise FetchError(url, f"Connection failed: {e}") from e
        except requests.exceptions.RequestException as e:
            raise FetchError(url, str(e)) from e

        content_type = response.headers.get("Content-Type", "")
        if "html" not in content_type.lower():
            logger.warning("Content-Type of %s is %r, transforming anyway.", url, content_type)

        # requests falls back to ISO-8859-1 for text/* without a charset
        if "charset" not in content_type.lower():
            response.encoding = response.apparent_encoding

        elapsed = round(time.perf_counter() - start_time, 4)
        logger.info("Fetched %s (%s) in %.3fs", url, response.status_code, elapsed)

        return FetchResult(
            url=url,
            final_url=str(response.url),
            status_code=response.status_code,
            content_type=content_type or None,
            body=response.text,
            elapsed_time=elapsed,
        )
