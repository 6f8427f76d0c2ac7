# src/sitelens/api.py
"""
Public entry points. Each `analyze_*` coroutine runs one module through the
shared pipeline and returns an immutable `Report`.

All of them accept:
    deadline_s:   overall time budget in seconds; on expiry a best-effort
                  report is returned with `summary["partial"] = True`.
    cancel_event: an `asyncio.Event` that stops the run the same way when set.
    retrieval:    a `RetrievalService` to reuse (it is not closed afterwards).
"""
import asyncio
from typing import Optional

from auditor.controllers.analysis_controller import AnalysisController
from auditor.model import Report
from auditor.modules.registry import ModuleRegistry
from crawler.services.retrieval_service import RetrievalService


async def analyze(
        module_name: str,
        url: str,
        deadline_s: Optional[float] = None,
        cancel_event: Optional[asyncio.Event] = None,
        retrieval: Optional[RetrievalService] = None
) -> Report:
    module = ModuleRegistry.get(module_name)
    controller = AnalysisController(module, retrieval=retrieval, cancel_event=cancel_event, deadline_s=deadline_s)
    return await controller.analyze(url)


async def analyze_technical(url: str, deadline_s: Optional[float] = None,
                            cancel_event: Optional[asyncio.Event] = None,
                            retrieval: Optional[RetrievalService] = None) -> Report:
    return await analyze("technical", url, deadline_s, cancel_event, retrieval)


async def analyze_quick_wins(url: str, deadline_s: Optional[float] = None,
                             cancel_event: Optional[asyncio.Event] = None,
                             retrieval: Optional[RetrievalService] = None) -> Report:
    return await analyze("quick_wins", url, deadline_s, cancel_event, retrieval)


async def analyze_blog_content(url: str, deadline_s: Optional[float] = None,
                               cancel_event: Optional[asyncio.Event] = None,
                               retrieval: Optional[RetrievalService] = None) -> Report:
    return await analyze("blog_content", url, deadline_s, cancel_event, retrieval)


async def analyze_page_speed(url: str, deadline_s: Optional[float] = None,
                             cancel_event: Optional[asyncio.Event] = None,
                             retrieval: Optional[RetrievalService] = None) -> Report:
    return await analyze("page_speed", url, deadline_s, cancel_event, retrieval)


async def analyze_site(url: str, deadline_s: Optional[float] = None,
                       cancel_event: Optional[asyncio.Event] = None,
                       retrieval: Optional[RetrievalService] = None) -> Report:
    return await analyze("site", url, deadline_s, cancel_event, retrieval)


async def analyze_audit(url: str, deadline_s: Optional[float] = None,
                        cancel_event: Optional[asyncio.Event] = None,
                        retrieval: Optional[RetrievalService] = None) -> Report:
    return await analyze("audit", url, deadline_s, cancel_event, retrieval)
