"""Streamlit test page for the LionDine menu service.

Pick a meal, fetch it (optionally bypassing the cache), browse the
structured result, and inspect or clear the cache.
"""
