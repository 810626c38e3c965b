# tests/services/test_http_request_service.py
import pytest
import requests
from unittest.mock import MagicMock

from faleproxy.errors import FetchError
from faleproxy.services.http_request_service import HttpRequestService, generate_default_user_agent

CONFIG = {"session": {"time_out": 5, "max_redirects": 3, "user_agent": "test-agent"}}


def _response(status=200, text="<html></html>", content_type="text/html; charset=utf-8", url="https://example.com/"):
    response = MagicMock()
    response.status_code = status
    response.text = text
    response.url = url
    response.headers = {"Content-Type": content_type}
    if status >= 400:
        response.raise_for_status.side_effect = requests.exceptions.HTTPError(response=response)
    return response


@pytest.fixture
def service():
    svc = HttpRequestService(CONFIG)
    svc.session = MagicMock()
    return svc


def test_settings_are_read_from_config():
    svc = HttpRequestService(CONFIG)
    assert svc.timeout == 5.0
    assert svc.max_redirects == 3
    assert svc.user_agent == "test-agent"


def test_default_user_agent_is_generated_when_not_configured():
    svc = HttpRequestService({"session": {"chrome_version": "1.2.3"}})
    assert "Chrome/1.2.3" in svc.user_agent
    assert generate_default_user_agent().startswith("Mozilla/5.0 (")


def test_fetch_returns_body(service):
    service.session.get.return_value = _response(text="<p>Yale</p>", url="https://example.com/final")

    result = service.fetch("https://example.com/")

    service.session.get.assert_called_once_with("https://example.com/", timeout=5.0, allow_redirects=True)
    assert result.body == "<p>Yale</p>"
    assert result.status_code == 200
    assert result.final_url == "https://example.com/final"
    assert result.content_type == "text/html; charset=utf-8"


def test_fetch_without_charset_uses_apparent_encoding(service):
    response = _response(content_type="text/html")
    response.apparent_encoding = "utf-8"
    service.session.get.return_value = response

    service.fetch("https://example.com/")
    assert response.encoding == "utf-8"


def test_non_success_status_raises_fetch_error(service):
    service.session.get.return_value = _response(status=500)

    with pytest.raises(FetchError) as excinfo:
        service.fetch("https://example.com/")

    assert excinfo.value.url == "https://example.com/"
    assert "500" in excinfo.value.cause
    assert excinfo.value.http_status == 500


@pytest.mark.parametrize("exc, fragment", [
    (requests.exceptions.ConnectionError("Name or service not known"), "Connection failed"),
    (requests.exceptions.Timeout("slow"), "Timeout of 5s exceeded"),
    (requests.exceptions.TooManyRedirects("loop"), "Exceeded 3 redirects"),
    (requests.exceptions.InvalidURL("bad"), "bad"),
])
def test_transport_errors_become_fetch_errors(service, exc, fragment):
    service.session.get.side_effect = exc

    with pytest.raises(FetchError) as excinfo:
        service.fetch("https://example.com/")
    assert fragment in excinfo.value.detail


def test_context_manager_closes_session():
    with HttpRequestService(CONFIG) as svc:
        assert svc.session is not None
        session = svc.session
    assert svc.session is None
    assert session is not None
