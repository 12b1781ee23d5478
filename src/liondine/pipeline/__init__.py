"""Menu acquisition pipeline: Cache → Fetcher → Structurer → Cache.

The pipeline serves one meal category per call:
1. Look up today's entry in the cache store
2. On a miss (or bypass), fetch the LionDine page text
3. Structure the text into a menu record through an LLM
4. Validate, store, and return the record

Components:
- MenuOrchestrator: Main coordinator
- LionDineFetcher: Page → text
- MenuFetcher / MenuStructurer: Ports the orchestrator depends on
"""

from liondine.pipeline.fetcher import LionDineFetcher, extract_menu_text
from liondine.pipeline.orchestrator import AcquireResult, MenuOrchestrator
from liondine.pipeline.ports import MenuFetcher, MenuStructurer

__all__ = [
    "AcquireResult",
    "LionDineFetcher",
    "MenuFetcher",
    "MenuOrchestrator",
    "MenuStructurer",
    "extract_menu_text",
]
