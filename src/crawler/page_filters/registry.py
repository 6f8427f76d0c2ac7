# src/crawler/page_filters/registry.py
import importlib
import inspect
import logging
import pkgutil
from typing import Dict, Type

from crawler.page_filters.page_filter_base import PageFilterBase

logger = logging.getLogger(__name__)


class FilterRegistry:
    """
    Discovers PageFilterBase subclasses in the `crawler.page_filters` package.
    Filters are registered under their module name without the '_filter' suffix
    (e.g. 'blog_post_filter' → 'blog_post').
    """

    _filters: Dict[str, Type[PageFilterBase]] = {}
    _loaded: bool = False

    @classmethod
    def discover(cls) -> None:
        if cls._loaded:
            return

        import crawler.page_filters as filters_pkg

        for _, name, _ in pkgutil.iter_modules(filters_pkg.__path__):
            if not name.endswith("_filter"):
                continue
            try:
                module = importlib.import_module(f"crawler.page_filters.{name}")
            except ImportError as e:
                logger.error("Failed to load filter module %s: %s", name, e)
                continue

            for _, obj in inspect.getmembers(module, inspect.isclass):
                if issubclass(obj, PageFilterBase) and obj is not PageFilterBase:
                    filter_name = name[:-len("_filter")]
                    cls._filters[filter_name] = obj
                    logger.debug("Discovered page filter '%s'", filter_name)

        cls._loaded = True

    @classmethod
    def get(cls, name: str) -> Type[PageFilterBase]:
        cls.discover()
        try:
            return cls._filters[name]
        except KeyError:
            raise KeyError(f"Unknown page filter '{name}'. Known: {sorted(cls._filters)}") from None

    @classmethod
    def names(cls):
        cls.discover()
        return sorted(cls._filters)
