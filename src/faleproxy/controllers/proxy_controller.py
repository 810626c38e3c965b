# src/faleproxy/controllers/proxy_controller.py
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from bs4 import BeautifulSoup

from faleproxy.core.managers.config_manager import config_manager
from faleproxy.core.utils.url_utils import UrlUtils
from faleproxy.errors import FaleproxyError, InputError, TransformError
from faleproxy.model import LinkPlan, TransformResult
from faleproxy.services.http_request_service import HttpRequestService
from faleproxy.services.link_rewrite_service import LinkRewriteService
from faleproxy.services.metadata_normalizer_service import MetadataNormalizerService
from faleproxy.services.text_substitution_service import TextSubstitutionService

logger = logging.getLogger(__name__)

DEFAULT_PARSER = "html.parser"


def transform(
        raw_html: str,
        request_url: str,
        target_word: str,
        substitute_word: str,
        parser_features: str = DEFAULT_PARSER,
) -> TransformResult:
    """
    Parses raw_html, substitutes the target word in body text and title, points
    <base href> at the origin of request_url and serializes the result.
    Performs no I/O.
    """
    # Fail before parsing when the URL cannot yield an origin
    UrlUtils.get_origin(request_url)

    try:
        doc = BeautifulSoup(raw_html or "", parser_features)
        substitution = TextSubstitutionService(target_word, substitute_word)
        substitution.substitute_body(doc)
        title = substitution.substitute_title(doc)
        MetadataNormalizerService().apply_base(doc, request_url)
        content = str(doc)
    except FaleproxyError:
        raise
    except Exception as e:
        logger.error("Transformation of %s failed: %s", request_url, e, exc_info=True)
        raise TransformError(f"Could not transform document: {e}") from e

    return TransformResult(transformed_html=content, title=title, original_url=request_url)


class ProxyController:
    """
    Orchestrates one proxy request: validate the URL, fetch it, transform it.
    Holds no per-request state, so one instance can serve concurrent requests.
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None, fetcher: Optional[HttpRequestService] = None):
        self.config = config if config is not None else config_manager.get_all()
        self.fetcher = fetcher
        self.link_service = LinkRewriteService()

        substitution = self.config.get('substitution', {})
        self.target_word = substitution.get('target_word', "Yale")
        self.substitute_word = substitution.get('substitute_word', "Fale")
        self.parser_features = self.config.get('parser', {}).get('features', DEFAULT_PARSER)

    def _get_fetcher(self) -> HttpRequestService:
        if self.fetcher is None:
            self.fetcher = HttpRequestService(self.config)
        return self.fetcher

    def transform(self, raw_html: str, request_url: str) -> TransformResult:
        return transform(
            raw_html,
            request_url,
            self.target_word,
            self.substitute_word,
            parser_features=self.parser_features,
        )

    def fetch_and_transform(self, url: Optional[str]) -> TransformResult:
        """
        Raises InputError for a missing/malformed URL (nothing is fetched),
        FetchError when the remote side fails and TransformError otherwise.
        """
        url = UrlUtils.validate_request_url(url)
        logger.info("Proxying %s", url)

        fetched = self._get_fetcher().fetch(url)
        return self.transform(fetched.body, url)

    def plan_links(self, result: TransformResult, proxy_origin: str) -> List[LinkPlan]:
        """Link plans for the transformed page, resolved the way the browser will (against <base href>)."""
        doc = BeautifulSoup(result.transformed_html, self.parser_features)
        base = doc.find("base")
        base_url = base.get("href") if base is not None else MetadataNormalizerService.base_href_for(result.original_url)
        return self.link_service.plan_links(doc, base_url, proxy_origin)

    @staticmethod
    def error_response(error: FaleproxyError) -> Dict[str, str]:
        """The JSON body for a failed request. Only the missing URL case is reported bare."""
        if isinstance(error, InputError) and error.http_status == 400:
            return {"error": error.detail}
        return {"error": f"Failed to fetch content: {error.detail}"}
