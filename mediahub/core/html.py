"""
HTML Document Helpers - Selector-based extraction over BeautifulSoup.

A selector that matches nothing is a data gap, not an error: every lookup
returns the supplied default so providers can fall back to "N/A".
"""

import json
import logging
import re
from typing import Any, Dict, List, Optional
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Tag


logger = logging.getLogger(__name__)

_URL_ATTRS = ('href', 'src', 'data-src', 'poster', 'file')


class HTMLDocument:
    """Parsed HTML page with forgiving lookups."""

    def __init__(self, html_content: str, base_url: str = ""):
        """
        Initialize HTML document.

        Args:
            html_content: HTML content to parse
            base_url: Base URL for resolving relative links
        """
        self.soup = BeautifulSoup(html_content or "", 'html.parser')
        self.base_url = base_url

    def attr(self, element: Tag, attr: str) -> Optional[str]:
        """Attribute of an already selected element; URL attributes are resolved."""
        if not element.has_attr(attr):
            return None
        value = element[attr]
        # BeautifulSoup returns multi-valued attributes (class, rel) as lists
        if isinstance(value, list):
            value = " ".join(value)
        if attr in _URL_ATTRS and self.base_url and value:
            return urljoin(self.base_url, value)
        return value

    def select(self, selector: str) -> List[Tag]:
        return self.soup.select(selector)

    def find_text(self, selector: str, default: Optional[str] = None) -> Optional[str]:
        """
        Text content of the first match.

        Args:
            selector: CSS selector string
            default: Value returned if nothing matches or the text is empty
        """
        element = self.soup.select_one(selector)
        if element is None:
            return default
        text = element.get_text(strip=True)
        return text or default

    def find_attr(self, selector: str, attr: str, default: Optional[str] = None) -> Optional[str]:
        """Attribute value of the first match; relative URLs are resolved."""
        element = self.soup.select_one(selector)
        if element is None:
            return default
        value = self.attr(element, attr)
        return value if value else default

    def find_all_text(self, selector: str) -> List[str]:
        """Non-empty text content of every match, in document order."""
        texts = (elem.get_text(strip=True) for elem in self.soup.select(selector))
        return [text for text in texts if text]

    def find_all_attrs(self, selector: str, attr: str) -> List[str]:
        """Attribute values of every match that carries the attribute."""
        values = []
        for elem in self.soup.select(selector):
            value = self.attr(elem, attr)
            if value:
                values.append(value)
        return values

    def extract_json_data(self, script_selector: str = "script") -> Dict[str, Any]:
        """
        Merge flat JSON objects embedded in script tags.

        Args:
            script_selector: CSS selector for script tags
        """
        json_data: Dict[str, Any] = {}
        for script in self.soup.select(script_selector):
            if not script.string:
                continue
            for match in re.findall(r'(\{[^{}]*\})', script.string):
                try:
                    data = json.loads(match)
                except json.JSONDecodeError:
                    continue
                if isinstance(data, dict):
                    json_data.update(data)
        return json_data


__all__ = ["HTMLDocument"]
