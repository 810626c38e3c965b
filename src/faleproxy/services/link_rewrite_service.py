# src/faleproxy/services/link_rewrite_service.py
from __future__ import annotations

import logging
from typing import List, Optional

from bs4 import BeautifulSoup

from faleproxy.core.utils.url_utils import UrlUtils
from faleproxy.errors import InputError
from faleproxy.model import LinkPlan

logger = logging.getLogger(__name__)

PROXY_LINK_CLASS = "proxy-link"


class LinkRewriteService:
    """
    Describes how the viewer treats anchors of a proxied page. Web links are
    intercepted and loaded through the proxy; anything else (mailto:, tel:,
    javascript:) opens in a new tab. Nothing here touches the document.
    """

    @staticmethod
    def _is_proxy_url(url: str, proxy_origin: str) -> bool:
        try:
            return UrlUtils.get_origin(url) == proxy_origin.rstrip("/")
        except InputError:
            return False

    @staticmethod
    def plan_link(original_url: str, proxy_origin: str, raw_href: Optional[str] = None) -> LinkPlan:
        """
        Plans a single, already absolute link. `raw_href` is the attribute as
        written in the page; the viewer matches anchors on it. Links back to the
        proxy itself are left to the browser.
        """
        raw_href = original_url if raw_href is None else raw_href
        if LinkRewriteService._is_proxy_url(original_url, proxy_origin):
            return LinkPlan(original_url=original_url, raw_href=raw_href, href=original_url, intercept=False)
        if UrlUtils.is_web_url(original_url):
            return LinkPlan(
                original_url=original_url,
                raw_href=raw_href,
                href=original_url,
                intercept=True,
                title=f"Click to view through Faleproxy: {original_url}",
                css_class=PROXY_LINK_CLASS,
            )
        return LinkPlan(
            original_url=original_url,
            raw_href=raw_href,
            href=original_url,
            intercept=False,
            target="_blank",
            rel="noopener noreferrer",
        )

    def plan_links(self, doc: BeautifulSoup, base_url: str, proxy_origin: str) -> List[LinkPlan]:
        """
        Resolves every <a href> against base_url and plans it, in document order.
        An href that cannot be resolved is planned as-is and never intercepted.
        """
        plans: List[LinkPlan] = []
        for anchor in doc.find_all("a", href=True):
            raw_href = anchor.get("href") or ""
            if not raw_href.strip():
                continue
            try:
                resolved = UrlUtils.resolve(base_url, raw_href)
            except ValueError as e:
                logger.warning("Unresolvable link %r: %s", raw_href, e)
                plans.append(LinkPlan(original_url=raw_href, raw_href=raw_href, href=raw_href, intercept=False))
                continue
            plans.append(self.plan_link(resolved, proxy_origin, raw_href=raw_href))
        logger.debug("Planned %d link(s) for proxy origin %s", len(plans), proxy_origin)
        return plans
