from bs4 import Tag
from ..core import ElementBase, ElementDefinition


class HeadingElement(ElementBase):
    """
    Model representing a heading element (h1-h6).
    Stores the heading level for structural analysis.
    """
    level: int


def parse_heading(tag: Tag) -> HeadingElement:
    """
    Parses heading tags and determines their hierarchy level (e.g., h1 -> 1).
    """
    try:
        level = int(tag.name[1])
    except (ValueError, IndexError, TypeError):
        level = 0

    return HeadingElement(
        tag=tag.name,
        attrs=tag.attrs,
        text=tag.get_text(" ", strip=True),
        level=level
    )


# --- ELEMENT DEFINITION ---
DEFINITION = ElementDefinition(
    tag_names=["h1", "h2", "h3", "h4", "h5", "h6"],
    parser=parse_heading,
    collection="headings"
)
