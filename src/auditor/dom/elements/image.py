import re
from typing import Optional
from bs4 import Tag
from ..core import ElementBase, ElementDefinition

_STYLE_SIZE = re.compile(r"(^|;)\s*(width|height)\s*:", re.IGNORECASE)


class ImageElement(ElementBase):
    tag: str = "img"

    @property
    def src(self) -> str: return self.attrs.get('src', '')

    @property
    def alt(self) -> Optional[str]: return self.attrs.get('alt')

    @property
    def filename(self) -> str:
        return self.src.rstrip("/").split("/")[-1] or self.src

    @property
    def missing_alt(self) -> bool:
        return self.alt is None

    @property
    def empty_alt(self) -> bool:
        return self.alt is not None and not self.alt.strip()

    @property
    def is_lazy(self) -> bool:
        return self.attrs.get('loading', '').lower() == 'lazy'

    @property
    def has_dimensions(self) -> bool:
        """Width or height given as attribute or inline style."""
        if 'width' in self.attrs or 'height' in self.attrs:
            return True
        return bool(_STYLE_SIZE.search(self.attrs.get('style', '')))


def parse_image(tag: Tag) -> ImageElement:
    return ImageElement(tag="img", attrs=tag.attrs)


# --- DEFINITION ---
DEFINITION = ElementDefinition(
    tag_names="img",
    parser=parse_image,
    collection="images"
)
