# src/auditor/dom/builder.py
import json
import logging
from typing import Any, Dict, List, Tuple

from bs4 import BeautifulSoup

from .models import HTMLDocument
from .registry import DOMRegistry
from ..errors import ParseError

logger = logging.getLogger(__name__)


class DOMBuilder:
    """
    Builder responsible for parsing raw HTML into a read-only HTMLDocument.
    Parsing never fails: malformed or empty markup yields a best-effort,
    possibly empty, document.
    """

    def __init__(self):
        """Initializes the builder and ensures the DOMRegistry is populated."""
        DOMRegistry.discover()

    def parse_doc(self, url: str, html: str) -> HTMLDocument:
        """
        Parses raw HTML content into an HTMLDocument.

        Args:
            url (str): The URL of the page being parsed.
            html (str): The raw HTML string.
        """
        if not html:
            return HTMLDocument(url=url)

        try:
            soup = self._parse(html)
        except ParseError as e:
            logger.warning("Falling back to an empty document for %s: %s", url, e)
            return HTMLDocument(url=url, parse_failed=True)

        try:
            return self._build(url, html, soup)
        except Exception as e:
            logger.warning("Element extraction failed for %s, using an empty document: %s", url, e, exc_info=True)
            return HTMLDocument(url=url, parse_failed=True)

    def _build(self, url: str, html: str, soup: BeautifulSoup) -> HTMLDocument:
        collections: Dict[str, Any] = {name: [] for name in DOMRegistry.collections()}
        for tag in soup.find_all(DOMRegistry.tag_names()):
            defn = DOMRegistry.get_definition(tag.name)
            element = defn.parser(tag)
            if element is not None:
                collections[defn.collection].append(element)

        for defn in DOMRegistry.document_definitions():
            collections[defn.collection] = defn.parser(soup)

        structured_data, invalid = self._extract_structured_data(collections.get("scripts", []))

        root = soup.find("html")
        lang = root.get("lang") if root else None
        text_root = soup.body or soup

        document = HTMLDocument(
            url=url,
            lang=lang if lang else None,
            body_text=text_root.get_text(" ", strip=True),
            content_length=len(html),
            structured_data=structured_data,
            invalid_structured_data=invalid,
            **collections
        )
        document._soup = soup
        return document

    @staticmethod
    def _parse(html: str) -> BeautifulSoup:
        clean_html = html.replace('\ufeff', '').strip()
        try:
            return BeautifulSoup(clean_html, 'html.parser')
        except Exception as e:
            raise ParseError(str(e)) from e

    @staticmethod
    def _extract_structured_data(scripts: List[Any]) -> Tuple[List[Dict[str, Any]], int]:
        """
        Splits JSON-LD blocks into valid schemas and an invalid count. A block is
        valid when it parses to an object carrying both `@context` and `@type`.
        """
        valid: List[Dict[str, Any]] = []
        invalid = 0
        for script in scripts:
            if not script.is_structured_data:
                continue
            try:
                data = json.loads(script.text)
            except ValueError:
                invalid += 1
                continue
            if isinstance(data, dict) and data.get("@context") and data.get("@type"):
                valid.append(data)
            else:
                invalid += 1
        return valid, invalid
