# src/auditor/dom/registry.py
import importlib
import pkgutil
import logging
from typing import Dict, List, Optional

from .core import ElementDefinition

logger = logging.getLogger(__name__)


class DOMRegistry:
    """
    Central registry for typed DOM element parsers.

    Dynamically discovers ElementDefinition modules from the
    'auditor.dom.elements' package.
    """

    _definitions: List[ElementDefinition] = []
    _by_tag: Dict[str, ElementDefinition] = {}
    _loaded: bool = False

    @classmethod
    def discover(cls) -> None:
        """
        Scans `auditor.dom.elements` for modules exposing a `DEFINITION`
        attribute (an `ElementDefinition`) and registers them by tag name.
        """
        if cls._loaded:
            return

        import auditor.dom.elements as elements_pkg

        for _, name, _ in pkgutil.iter_modules(elements_pkg.__path__):
            full_name = f"auditor.dom.elements.{name}"
            module = importlib.import_module(full_name)
            defn = getattr(module, "DEFINITION", None)
            if not isinstance(defn, ElementDefinition):
                continue

            cls._definitions.append(defn)
            if not defn.document_level:
                for tag_name in defn.tag_names:
                    cls._by_tag[tag_name] = defn
            logger.debug("Element definition loaded: %s -> %s", name, defn.collection)

        cls._loaded = True

    @classmethod
    def get_definition(cls, tag_name: str) -> Optional[ElementDefinition]:
        return cls._by_tag.get(tag_name)

    @classmethod
    def tag_names(cls) -> List[str]:
        return list(cls._by_tag)

    @classmethod
    def document_definitions(cls) -> List[ElementDefinition]:
        return [d for d in cls._definitions if d.document_level]

    @classmethod
    def collections(cls) -> List[str]:
        return [d.collection for d in cls._definitions if not d.document_level]
