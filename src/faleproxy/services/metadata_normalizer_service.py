# src/faleproxy/services/metadata_normalizer_service.py
import logging

from bs4 import BeautifulSoup, Doctype, Tag

from faleproxy.core.utils.url_utils import UrlUtils

logger = logging.getLogger(__name__)


class MetadataNormalizerService:
    """
    Makes relative links, images and scripts of a proxied document resolve
    against the site it was fetched from, by adding or updating <base href>.
    """

    @staticmethod
    def base_href_for(request_url: str) -> str:
        """origin + '/' of the request URL. Raises InputError for non-absolute URLs."""
        return UrlUtils.get_origin(request_url) + "/"

    @staticmethod
    def _ensure_head(doc: BeautifulSoup) -> Tag:
        if doc.head is not None:
            return doc.head

        head = doc.new_tag("head")
        html = doc.find("html")
        if html is not None:
            html.insert(0, head)
            return head

        # Bare fragment: keep a leading doctype in front
        position = 0
        for index, child in enumerate(doc.contents):
            if isinstance(child, Doctype):
                position = index + 1
        doc.insert(position, head)
        return head

    def apply_base(self, doc: BeautifulSoup, request_url: str) -> str:
        """
        Points the first <base> of the document at the request origin, or inserts
        one as the first child of <head>. Returns the href that was written.
        """
        href = self.base_href_for(request_url)

        base = doc.find("base")
        if base is not None:
            logger.debug("Updating existing <base href=%r> to %r", base.get("href"), href)
            base["href"] = href
            return href

        head = self._ensure_head(doc)
        head.insert(0, doc.new_tag("base", href=href))
        logger.debug("Inserted <base href=%r>", href)
        return href
