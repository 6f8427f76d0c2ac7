from typing import Optional, List, Dict, Any
from bs4 import BeautifulSoup
from pydantic import BaseModel, ConfigDict, Field, PrivateAttr

from .core import ElementBase, snapshot
from .elements.head import HeadElement
from .elements.heading import HeadingElement
from .elements.image import ImageElement
from .elements.link import LinkElement
from .elements.script import ScriptElement


class HTMLDocument(BaseModel):
    """
    Read-only model of a parsed page.

    Typed element collections are extracted once by the builder. Ad-hoc
    CSS-selector queries run against the retained parse tree and always
    return fresh `ElementBase` snapshots, never the underlying tags.
    """
    model_config = ConfigDict(frozen=True)

    url: str
    lang: Optional[str] = None
    head: HeadElement = Field(default_factory=HeadElement)
    headings: List[HeadingElement] = Field(default_factory=list)
    images: List[ImageElement] = Field(default_factory=list)
    links: List[LinkElement] = Field(default_factory=list)
    scripts: List[ScriptElement] = Field(default_factory=list)

    body_text: str = ""
    content_length: int = 0
    structured_data: List[Dict[str, Any]] = Field(default_factory=list)
    invalid_structured_data: int = 0
    parse_failed: bool = False

    _soup: Optional[BeautifulSoup] = PrivateAttr(default=None)

    # --- Selector queries ---

    def select(self, selector: str) -> List[ElementBase]:
        if self._soup is None:
            return []
        return [snapshot(tag) for tag in self._soup.select(selector)]

    def select_one(self, selector: str) -> Optional[ElementBase]:
        if self._soup is None:
            return None
        tag = self._soup.select_one(selector)
        return snapshot(tag) if tag is not None else None

    def exists(self, selector: str) -> bool:
        return self._soup is not None and self._soup.select_one(selector) is not None

    def count(self, selector: str) -> int:
        return len(self._soup.select(selector)) if self._soup is not None else 0

    def first_match(self, selectors: List[str]) -> Optional[ElementBase]:
        """Snapshot of the first element matched by the first selector that matches anything."""
        for selector in selectors:
            found = self.select_one(selector)
            if found is not None:
                return found
        return None

    # --- Convenience views ---

    def headings_at(self, level: int) -> List[HeadingElement]:
        return [h for h in self.headings if h.level == level]

    @property
    def h1s(self) -> List[HeadingElement]:
        return self.headings_at(1)

    @property
    def anchors(self) -> List[LinkElement]:
        """Anchors that carry an href attribute (`a[href]`)."""
        return [link for link in self.links if link.href is not None]

    @property
    def external_scripts(self) -> List[ScriptElement]:
        return [s for s in self.scripts if s.is_external]

    @property
    def render_blocking_scripts(self) -> List[ScriptElement]:
        return [s for s in self.scripts if s.is_render_blocking]

    @property
    def structured_data_scripts(self) -> List[ScriptElement]:
        return [s for s in self.scripts if s.is_structured_data]
