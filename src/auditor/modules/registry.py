# src/auditor/modules/registry.py
import importlib
import pkgutil
import logging
from typing import Dict, List, Type

from ..errors import UnknownModuleError
from .base import AnalysisModule

logger = logging.getLogger(__name__)


class ModuleRegistry:
    """
    Discovers analysis modules from the 'auditor.modules' package.

    A module file takes part when it exposes a `MODULE` attribute holding an
    `AnalysisModule` subclass. Lookups accept the module name or an alias.
    """

    _modules: Dict[str, Type[AnalysisModule]] = {}
    _aliases: Dict[str, str] = {
        "quickwins": "quick_wins",
        "blog": "blog_content",
        "speed": "page_speed",
        "seo": "audit",
    }
    _loaded: bool = False

    @classmethod
    def discover(cls) -> None:
        if cls._loaded:
            return

        import auditor.modules as modules_pkg

        for _, name, _ in pkgutil.iter_modules(modules_pkg.__path__):
            module = importlib.import_module(f"auditor.modules.{name}")
            module_cls = getattr(module, "MODULE", None)
            if not (isinstance(module_cls, type) and issubclass(module_cls, AnalysisModule)):
                continue
            cls._modules[module_cls.name] = module_cls
            logger.debug("Analysis module loaded: %s -> %s", name, module_cls.name)

        cls._loaded = True

    @classmethod
    def names(cls) -> List[str]:
        cls.discover()
        return sorted(cls._modules)

    @classmethod
    def get(cls, name: str) -> AnalysisModule:
        """Returns a fresh instance of the named module."""
        cls.discover()
        key = cls._aliases.get(name, name)
        module_cls = cls._modules.get(key)
        if module_cls is None:
            raise UnknownModuleError(name, cls.names())
        return module_cls()
