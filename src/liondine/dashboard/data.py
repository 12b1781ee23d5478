"""Data layer for the Streamlit test page.

Bridges the synchronous Streamlit script to the async pipeline through one
shared MenuService, created once per server process with
``st.cache_resource``. Its loop thread is a daemon and ends with the server.
"""

import logging

import pandas as pd
import streamlit as st

from liondine.errors import MenuServiceError
from liondine.models import MenuRecord
from liondine.pipeline import AcquireResult
from liondine.service import MenuService

logger = logging.getLogger(__name__)

_REQUEST_TIMEOUT = 180.0


@st.cache_resource
def get_service() -> MenuService:
    """Get the process-wide MenuService, starting it on first use."""
    return MenuService().start()


def fetch_menu(meal: str, refresh: bool = False) -> AcquireResult | None:
    """Acquire a menu for display.

    Service errors are shown in the page with their kind; a retryable
    error is labelled as such.

    Returns:
        AcquireResult on success, None on failure.
    """
    try:
        result = get_service().acquire(meal, bypass_cache=refresh, timeout=_REQUEST_TIMEOUT)
    except MenuServiceError as e:
        logger.warning("Menu request for %s failed: %s", meal, e)
        hint = "try again later" if e.retryable else "fix the request"
        st.error(f"{e.kind}: {e.message} ({hint})")
        return None
    except TimeoutError:
        st.error(f"Request timed out after {_REQUEST_TIMEOUT:.0f}s")
        return None

    st.session_state[f"menu_{meal}"] = result
    return result


def get_last_menu(meal: str) -> AcquireResult | None:
    """Most recent result for ``meal`` in this browser session."""
    return st.session_state.get(f"menu_{meal}")


def stations_frame(record: MenuRecord) -> pd.DataFrame:
    """Flatten a record to one row per menu item.

    Columns: hall, station, item. Closed halls contribute no rows.
    """
    rows = [
        {"hall": hall.name, "station": station.name, "item": item}
        for hall in record.dining_halls
        for station in hall.stations
        for item in station.items
    ]
    return pd.DataFrame(rows, columns=["hall", "station", "item"])


def hall_summary(record: MenuRecord) -> pd.DataFrame:
    """One row per dining hall: name, status, hours, station and item counts."""
    rows = [
        {
            "hall": hall.name,
            "status": hall.status,
            "hours": hall.hours,
            "stations": len(hall.stations),
            "items": sum(len(s.items) for s in hall.stations),
        }
        for hall in record.dining_halls
    ]
    return pd.DataFrame(rows, columns=["hall", "status", "hours", "stations", "items"])
