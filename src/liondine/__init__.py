"""LionDine menu service.

Fetches the daily LionDine meal pages, structures them into menu records
with an LLM, and serves them from a day-scoped cache.
"""

__version__ = "1.0.0"
