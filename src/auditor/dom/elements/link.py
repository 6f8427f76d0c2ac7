from typing import Optional
from bs4 import Tag
from ..core import ElementBase, ElementDefinition

BROKEN_HREFS = ("#", "", "javascript:void(0)")


class LinkElement(ElementBase):
    """
    Data model for anchor (<a>) tags.
    """
    tag: str = "a"

    @property
    def href(self) -> Optional[str]:
        """The raw href attribute, None when absent."""
        return self.attrs.get('href')

    @property
    def rel(self) -> str:
        return self.attrs.get('rel', '')

    @property
    def is_nofollow(self) -> bool:
        return 'nofollow' in self.rel.lower()

    @property
    def looks_broken(self) -> bool:
        """Placeholder targets such as '#' or 'javascript:void(0)'."""
        return self.href is not None and self.href.strip() in BROKEN_HREFS


def parse_link(tag: Tag) -> LinkElement:
    """Parses a <a> tag into the LinkElement model."""
    return LinkElement(
        tag="a",
        attrs=tag.attrs,
        text=tag.get_text(" ", strip=True)
    )


# --- ELEMENT DEFINITION ---
DEFINITION = ElementDefinition(
    tag_names="a",
    parser=parse_link,
    collection="links"
)
