from typing import Dict, Any, List, Callable, Optional, Union
from pydantic import BaseModel, ConfigDict, Field, field_validator
from bs4 import Tag


class ElementBase(BaseModel):
    """
    Read-only snapshot of one DOM element: tag name, attributes and text.
    Multi-valued attributes (class, rel, ...) are joined into a single string.
    """
    model_config = ConfigDict(frozen=True)

    tag: str
    attrs: Dict[str, str] = Field(default_factory=dict)
    text: str = ""

    @field_validator("attrs", mode="before")
    @classmethod
    def _flatten_attrs(cls, v: Any) -> Dict[str, str]:
        if not v:
            return {}
        flat = {}
        for key, value in dict(v).items():
            if isinstance(value, (list, tuple)):
                value = " ".join(str(part) for part in value)
            flat[str(key).lower()] = "" if value is None else str(value)
        return flat

    def attr(self, name: str, default: Optional[str] = None) -> Optional[str]:
        return self.attrs.get(name.lower(), default)

    def has_attr(self, name: str) -> bool:
        return name.lower() in self.attrs

    @property
    def is_empty(self) -> bool:
        return not self.text.strip()


def snapshot(tag: Tag) -> ElementBase:
    """Generic parser used for elements without a dedicated definition."""
    return ElementBase(tag=tag.name, attrs=tag.attrs, text=tag.get_text(" ", strip=True))


class ElementDefinition:
    """
    Binds one or more HTML tags to the parser that turns them into
    typed elements, and to the `HTMLDocument` field that collects them.

    With `document_level=True` the parser is called once with the whole
    parsed document instead of once per matching tag.
    """

    def __init__(
            self,
            tag_names: Union[str, List[str]],
            parser: Callable[[Tag], Optional[ElementBase]],
            collection: str,
            document_level: bool = False
    ):
        self.tag_names = [tag_names] if isinstance(tag_names, str) else list(tag_names)
        self.parser = parser
        self.collection = collection
        self.document_level = document_level
