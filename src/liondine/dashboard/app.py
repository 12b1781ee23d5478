"""LionDine menu test page.

Run with:
    streamlit run src/liondine/dashboard/app.py
"""

import streamlit as st

from liondine import __version__
from liondine.dashboard.data import (
    fetch_menu,
    get_last_menu,
    get_service,
    hall_summary,
    stations_frame,
)
from liondine.models import MealCategory

st.set_page_config(
    page_title="Lion Dine Menu",
    page_icon="L",
    layout="wide",
)

st.title("Lion Dine Menu API Test")
st.caption("Test the menu parsing pipeline with different meal types.")

# Sidebar
with st.sidebar:
    st.markdown("### Request")

    meal = st.selectbox(
        "Meal type",
        [c.value for c in MealCategory],
        format_func=lambda v: MealCategory(v).get_label(),
    )
    refresh = st.checkbox(
        "Bypass cache",
        value=False,
        help="Fetch and structure fresh data even if today's menu is cached",
    )

    if st.button("Fetch Menu", use_container_width=True):
        with st.spinner(f"Fetching {meal}..."):
            fetched = fetch_menu(meal, refresh=refresh)
        if fetched:
            st.success(f"{meal}: cache {'HIT' if fetched.cache_hit else 'MISS'}")

    st.markdown("### Cache")
    service = get_service()
    stats = service.report()
    st.metric("Entries", stats["entries"])
    st.caption(f"Size: {stats['sizeKB']} KB")
    for key in stats["keys"]:
        st.code(key, language=None)

    col_sweep, col_clear = st.columns(2)
    with col_sweep:
        if st.button("Sweep", use_container_width=True):
            removed = service.sweep()
            st.info(f"Removed {removed} expired entries")
    with col_clear:
        if st.button("Clear", use_container_width=True):
            service.clear_all()
            st.info("Cache cleared successfully")

    st.markdown("---")
    health = service.health()
    st.caption(f"**{health['service']}** v{__version__} · {health['status']} · up {health['uptime']:.0f}s")

result = get_last_menu(meal)

if result is None:
    st.info("No menu loaded. Choose a meal and press Fetch Menu.")
else:
    record = result.record
    st.markdown(
        f"**{record.meal_type.get_label()}** · generated "
        f"{record.timestamp:%Y-%m-%d %H:%M} · "
        f"{len(record.open_halls())}/{len(record.dining_halls)} halls open · "
        f"cache {'HIT' if result.cache_hit else 'MISS'}"
    )

    st.subheader("Dining halls")
    st.dataframe(hall_summary(record), use_container_width=True, hide_index=True)

    for hall in record.dining_halls:
        label = f"{hall.name} ({hall.hours})" if hall.hours else hall.name
        with st.expander(label, expanded=not hall.is_closed):
            if hall.is_closed:
                st.caption("Closed")
                continue
            for station in hall.stations:
                st.markdown(f"**{station.name}**")
                st.markdown("\n".join(f"- {item}" for item in station.items))

    st.subheader("All items")
    st.dataframe(stations_frame(record), use_container_width=True, hide_index=True)

    with st.expander("Raw JSON"):
        st.json(record.to_dict())
