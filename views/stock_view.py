import streamlit as st

import auth
from services import stock_table_service
from use_cases import reconciliation
from use_cases.inventory_flow import load_inventory
from utils import session_manager


def _current_load(manager, refresh: bool):
    tracker = st.session_state.inventory_tracker
    if tracker.result is not None and not refresh:
        return tracker.result

    ticket = tracker.begin()
    with st.spinner("Loading stock and videos..."):
        try:
            load = load_inventory(auth.get_inventory_client(), manager)
        except auth.SessionExpiredError:
            session_manager.expire_session()
            return None
    # A newer load (or a logout) may have started while this one ran.
    if not tracker.apply(ticket, load):
        return tracker.result
    return load


def _render_video_links(row, identity, base_url):
    if row.action == "upload":
        st.caption("No video yet. Upload a walkthrough for this vehicle.")
        return
    if row.action == "direct":
        video = row.videos[0]
        st.code(reconciliation.build_share_link(base_url, video, identity), language=None)
        if video.uploader_name:
            st.caption(f"by {video.uploader_name} · {video.view_count} views")
        return
    with st.expander(f"{row.video_count} videos"):
        for video in row.videos:
            st.markdown(f"**{video.title}** · {stock_table_service.format_video_date(video.created_at)}")
            st.code(reconciliation.build_share_link(base_url, video, identity), language=None)


def render_stock_page(manager, admin: bool = False):
    config = auth.load_portal_config()
    st.header("🚗 Stock")

    refresh = st.button("🔄 Refresh")
    load = _current_load(manager, refresh)
    if load is None:
        return

    for message in load.errors:
        st.error(message)
    if admin:
        level, message = stock_table_service.format_sync_status(load.stock)
        getattr(st, level)(message)

    col_search, col_filter = st.columns([3, 1])
    with col_search:
        search = st.text_input("Search make, model or registration", key="stock_search")
    with col_filter:
        mode = st.selectbox("Status", reconciliation.FILTER_MODES, key="stock_filter")

    rows = reconciliation.reconcile_view(load.stock.items, load.videos, search, mode)
    summary = reconciliation.summarize(reconciliation.build_rows(load.stock.items, load.videos))
    m1, m2, m3 = st.columns(3)
    m1.metric("Vehicles", summary.total)
    m2.metric("With video", summary.with_video)
    m3.metric("No video", summary.without_video)

    page = reconciliation.paginate(rows, st.session_state.stock_page, config.stock_page_size)
    st.session_state.stock_page = page.page
    st.dataframe(stock_table_service.build_stock_table(page.rows), use_container_width=True, hide_index=True)
    st.caption(f"Showing {page.start_entry} to {page.end_entry} of {page.total_entries} entries")

    prev_col, next_col = st.columns(2)
    if prev_col.button("← Previous", disabled=page.page <= 1):
        st.session_state.stock_page = page.page - 1
        st.rerun()
    if next_col.button("Next →", disabled=page.page >= page.total_pages):
        st.session_state.stock_page = page.page + 1
        st.rerun()

    for row in page.rows:
        item = row.item
        with st.container(border=True):
            st.markdown(f"**{item.make} {item.model}** · `{item.registration_plate}` · {row.status}")
            if item.derivative:
                st.caption(item.derivative)
            _render_video_links(row, manager.identity, config.base_url)
