# tests/services/test_metadata_normalizer_service.py
import pytest
from bs4 import BeautifulSoup

from faleproxy.errors import InputError
from faleproxy.services.metadata_normalizer_service import MetadataNormalizerService


@pytest.fixture
def normalizer():
    return MetadataNormalizerService()


def test_base_is_inserted_as_first_head_child(normalizer):
    doc = BeautifulSoup(
        "<html><head><title>T</title></head><body></body></html>", "html.parser"
    )
    href = normalizer.apply_base(doc, "https://example.com/path/page.html")

    assert href == "https://example.com/"
    first = doc.head.find(True)
    assert first.name == "base"
    assert first["href"] == "https://example.com/"


def test_existing_base_is_overwritten_not_duplicated(normalizer):
    doc = BeautifulSoup(
        '<html><head><base href="https://elsewhere.org/sub/"></head><body></body></html>',
        "html.parser",
    )
    normalizer.apply_base(doc, "https://example.com/path/page.html")

    bases = doc.find_all("base")
    assert len(bases) == 1
    assert bases[0]["href"] == "https://example.com/"


def test_missing_head_is_created(normalizer):
    doc = BeautifulSoup("<html><body><p>hi</p></body></html>", "html.parser")
    normalizer.apply_base(doc, "http://example.com/a")

    assert doc.html.contents[0].name == "head"
    assert doc.head.base["href"] == "http://example.com/"


def test_fragment_keeps_doctype_first(normalizer):
    doc = BeautifulSoup("<!DOCTYPE html><p>hi</p>", "html.parser")
    normalizer.apply_base(doc, "http://example.com/")

    assert str(doc).startswith("<!DOCTYPE html><head><base")


@pytest.mark.parametrize("url, expected", [
    ("https://example.com:443/x", "https://example.com/"),
    ("http://example.com:80/x", "http://example.com/"),
    ("http://example.com:8080/x?y=1#z", "http://example.com:8080/"),
    ("HTTPS://Example.COM/x", "https://example.com/"),
    ("https://user:pw@example.com/x", "https://example.com/"),
    ("http://[::1]:3001/x", "http://[::1]:3001/"),
])
def test_base_href_is_the_origin(url, expected):
    assert MetadataNormalizerService.base_href_for(url) == expected


@pytest.mark.parametrize("url", ["not-a-valid-url", "/relative/path", "http://example.com:notaport/"])
def test_non_absolute_url_raises(normalizer, url):
    doc = BeautifulSoup("<html><head></head></html>", "html.parser")
    with pytest.raises(InputError):
        normalizer.apply_base(doc, url)
    assert doc.find("base") is None
