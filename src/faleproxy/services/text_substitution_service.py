# src/faleproxy/services/text_substitution_service.py
from __future__ import annotations

import logging
import re
from typing import Iterator, List, Optional

from bs4 import BeautifulSoup, CData, Comment, Declaration, Doctype, NavigableString, ProcessingInstruction, Tag
from bs4.element import Script, Stylesheet, TemplateString

from faleproxy.model import CasePattern, Match, NodeKind

logger = logging.getLogger(__name__)

# Elements whose character data is never rendered as page text.
RAW_TEXT_PARENTS = ("script", "style", "template")


def capitalize(word: str) -> str:
    """'yALE' -> 'Yale'. Unlike str.capitalize this keeps an empty string empty."""
    return word[:1].upper() + word[1:].lower()


def case_pattern(text: str, target_word: str) -> CasePattern:
    """
    Classifies the casing of a matched occurrence of the target word.
    Upper wins over capitalized for one-letter words ('A' is both).
    """
    if text == text.upper():
        return CasePattern.UPPER
    if text == text.lower():
        return CasePattern.LOWER
    if text == capitalize(target_word):
        return CasePattern.CAPITALIZED
    return CasePattern.MIXED


def match_case(pattern: CasePattern, substitute_word: str) -> str:
    """Renders the substitute in the casing of the match. MIXED falls back to capitalized."""
    if pattern is CasePattern.UPPER:
        return substitute_word.upper()
    if pattern is CasePattern.LOWER:
        return substitute_word.lower()
    return capitalize(substitute_word)


class TextSubstitutionService:
    """
    Walks a parsed document and replaces every case-insensitive occurrence of
    the target word in visible text with a case-matched substitute.
    Attribute values, tag names, comments and script/style contents are never touched.
    """

    def __init__(self, target_word: str, substitute_word: str):
        if not target_word:
            raise ValueError("Target word cannot be empty.")
        if not substitute_word:
            raise ValueError("Substitute word cannot be empty.")
        self.target_word = target_word
        self.substitute_word = substitute_word
        self._pattern = re.compile(re.escape(target_word), re.IGNORECASE)

    # -------- Node classification --------

    @staticmethod
    def classify(node) -> NodeKind:
        """Maps a bs4 node onto a NodeKind."""
        if isinstance(node, Tag):
            return NodeKind.ELEMENT
        if isinstance(node, Comment):
            return NodeKind.COMMENT
        if isinstance(node, Doctype):
            return NodeKind.DOCTYPE
        if isinstance(node, CData):
            return NodeKind.CDATA
        if isinstance(node, ProcessingInstruction):
            return NodeKind.PROCESSING_INSTRUCTION
        if isinstance(node, Declaration):
            return NodeKind.DECLARATION
        if isinstance(node, (Script, Stylesheet, TemplateString)):
            return NodeKind.RAW_TEXT
        if isinstance(node, NavigableString):
            # Not every tree builder tags script/style strings with their own class
            parent = node.parent
            if parent is not None and parent.name in RAW_TEXT_PARENTS:
                return NodeKind.RAW_TEXT
            return NodeKind.TEXT
        raise TypeError(f"Unsupported node type: {type(node).__name__}")

    def iter_text_nodes(self, doc: BeautifulSoup) -> Iterator[NavigableString]:
        """
        Yields the text nodes eligible for substitution: plain text inside <body>
        (or anywhere outside <head> when the parser produced no body) whose
        stripped value is not empty.
        """
        body = doc.body
        if body is not None:
            candidates = list(body.descendants)
        else:
            candidates = [n for n in doc.descendants if n.find_parent(["head", "title"]) is None]

        for node in candidates:
            if self.classify(node) is not NodeKind.TEXT:
                continue
            if node.find_parent(list(RAW_TEXT_PARENTS)) is not None:
                continue
            if not node.strip():
                continue
            yield node

    # -------- String level --------

    def find_matches(self, text: str) -> List[Match]:
        return [
            Match(
                text=m.group(0),
                start=m.start(),
                end=m.end(),
                pattern=case_pattern(m.group(0), self.target_word),
            )
            for m in self._pattern.finditer(text)
        ]

    def contains_target(self, text: str) -> bool:
        return self._pattern.search(text) is not None

    def replace(self, text: str) -> str:
        """Replaces all occurrences of the target word, preserving the case of each match."""
        return self._pattern.sub(
            lambda m: match_case(case_pattern(m.group(0), self.target_word), self.substitute_word),
            text,
        )

    # -------- Document level --------

    def substitute_body(self, doc: BeautifulSoup) -> int:
        """
        Rewrites matching text nodes in place and returns how many were changed.
        Nodes without a match are left alone.
        """
        rewritten = 0
        for node in list(self.iter_text_nodes(doc)):
            text = str(node)
            if not self.contains_target(text):
                continue
            new_text = self.replace(text)
            if new_text != text:
                node.replace_with(new_text)
                rewritten += 1
        logger.debug("Rewrote %d text node(s).", rewritten)
        return rewritten

    @staticmethod
    def _find_title(doc: BeautifulSoup) -> Optional[Tag]:
        if doc.head is not None:
            title = doc.head.find("title")
            if title is not None:
                return title
        return doc.find("title")

    def substitute_title(self, doc: BeautifulSoup) -> str:
        """
        Rewrites the document title on its own path (titles are not body text)
        and returns the final title, or "" when the document has none.
        """
        title_tag = self._find_title(doc)
        if title_tag is None:
            return ""

        title = title_tag.get_text()
        if self.contains_target(title):
            title = self.replace(title)
            title_tag.string = title
        return title
