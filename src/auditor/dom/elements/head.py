from typing import Dict, Optional, List
from pydantic import Field
from bs4 import BeautifulSoup, Tag
from ..core import ElementBase, ElementDefinition

OPEN_GRAPH_CORE = ("og:title", "og:description", "og:image", "og:url")


class HeadElement(ElementBase):
    """
    Document-level metadata relevant for SEO and technical health.

    `None` means the tag is absent; an empty string means it is present
    but carries no value. Lookups follow `querySelector` semantics, so a
    `<title>` outside of `<head>` still counts.
    """
    tag: str = "head"

    title_raw: Optional[str] = None
    meta_description: Optional[str] = None
    canonical_href: Optional[str] = None
    viewport_content: Optional[str] = None
    robots_content: Optional[str] = None
    charset: Optional[str] = None

    open_graph: Dict[str, str] = Field(default_factory=dict)
    hreflang_count: int = 0
    has_sitemap_link: bool = False
    stylesheet_count: int = 0
    font_count: int = 0

    @property
    def has_title(self) -> bool:
        return bool(self.title_raw and self.title_raw.strip())

    @property
    def title_text(self) -> str:
        return (self.title_raw or "").strip()

    @property
    def title_len(self) -> int:
        return len(self.title_raw or "")

    @property
    def has_meta_desc(self) -> bool:
        return bool(self.meta_description and self.meta_description.strip())

    @property
    def meta_desc_len(self) -> int:
        return len(self.meta_description or "")

    @property
    def has_canonical(self) -> bool:
        return self.canonical_href is not None

    @property
    def has_viewport(self) -> bool:
        return self.viewport_content is not None

    @property
    def has_robots_meta(self) -> bool:
        return self.robots_content is not None

    @property
    def open_graph_core(self) -> List[str]:
        """The core og:* properties present, in canonical order."""
        return [prop for prop in OPEN_GRAPH_CORE if prop in self.open_graph]


def _rel_tokens(tag: Tag) -> List[str]:
    rel = tag.get("rel") or []
    if isinstance(rel, str):
        rel = rel.split()
    return [token.lower() for token in rel]


def _first_meta(soup: BeautifulSoup, attr: str, value: str) -> Optional[Tag]:
    return soup.find("meta", attrs={attr: lambda v: v is not None and v.lower() == value})


def _first_link(soup: BeautifulSoup, rel: str) -> Optional[Tag]:
    for link in soup.find_all("link"):
        if rel in _rel_tokens(link):
            return link
    return None


def parse_head(soup: BeautifulSoup) -> HeadElement:
    """
    Extracts high-level SEO metadata from the whole parsed document.
    """
    title_tag = soup.find("title")
    meta_desc = _first_meta(soup, "name", "description")
    canonical = _first_link(soup, "canonical")
    viewport = _first_meta(soup, "name", "viewport")
    robots = _first_meta(soup, "name", "robots")
    charset = soup.find("meta", attrs={"charset": True})

    open_graph: Dict[str, str] = {}
    for meta in soup.find_all("meta", attrs={"property": True}):
        prop = str(meta.get("property", "")).strip().lower()
        if prop.startswith("og:") and prop not in open_graph:
            open_graph[prop] = meta.get("content", "") or ""

    links = soup.find_all("link")
    hreflang_count = sum(1 for link in links if "alternate" in _rel_tokens(link) and link.get("hreflang"))
    stylesheet_count = sum(1 for link in links if "stylesheet" in _rel_tokens(link))
    font_count = sum(
        1 for link in links
        if "preload" in _rel_tokens(link) and str(link.get("as", "")).lower() == "font"
    )

    return HeadElement(
        attrs=soup.head.attrs if soup.head else {},
        title_raw=title_tag.get_text() if title_tag else None,
        meta_description=meta_desc.get("content", "") if meta_desc else None,
        canonical_href=canonical.get("href", "") if canonical else None,
        viewport_content=viewport.get("content", "") if viewport else None,
        robots_content=robots.get("content", "") if robots else None,
        charset=charset.get("charset") if charset else None,
        open_graph=open_graph,
        hreflang_count=hreflang_count,
        has_sitemap_link=_first_link(soup, "sitemap") is not None,
        stylesheet_count=stylesheet_count,
        font_count=font_count
    )


# --- ELEMENT DEFINITION ---
DEFINITION = ElementDefinition(
    tag_names="head",
    parser=parse_head,
    collection="head",
    document_level=True
)
