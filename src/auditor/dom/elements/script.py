from bs4 import Tag
from ..core import ElementBase, ElementDefinition

LD_JSON = "application/ld+json"


class ScriptElement(ElementBase):
    """
    A <script> tag. `text` holds the inline source, which is only kept for
    JSON-LD blocks.
    """
    tag: str = "script"

    @property
    def src(self) -> str:
        return self.attrs.get('src', '')

    @property
    def is_external(self) -> bool:
        return 'src' in self.attrs

    @property
    def is_render_blocking(self) -> bool:
        return self.is_external and 'async' not in self.attrs and 'defer' not in self.attrs

    @property
    def is_structured_data(self) -> bool:
        return self.attrs.get('type', '').strip().lower() == LD_JSON


def parse_script(tag: Tag) -> ScriptElement:
    is_ld_json = str(tag.get('type', '')).strip().lower() == LD_JSON
    return ScriptElement(
        tag="script",
        attrs=tag.attrs,
        text=tag.get_text() if is_ld_json else ""
    )


# --- ELEMENT DEFINITION ---
DEFINITION = ElementDefinition(
    tag_names="script",
    parser=parse_script,
    collection="scripts"
)
