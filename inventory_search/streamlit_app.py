import time

import pandas as pd
import streamlit as st

from inventory_search.config import get_config
from inventory_search.data.models import SearchBy, SearchQuery, SortDirection, SortField, SortSpec
from inventory_search.data.util import get_inventory_store

st.set_page_config(page_title="Inventory Search", layout="wide")

# -----------------------------------------------------------------------------
# Store (seeded once per server process)
# -----------------------------------------------------------------------------
config = get_config()


@st.cache_resource
def load_store():
    return get_inventory_store()


store = load_store()

# -----------------------------------------------------------------------------
# Sidebar filters
# -----------------------------------------------------------------------------
st.sidebar.header("Search")

criteria = st.sidebar.text_input("Criteria (contains)")
by = st.sidebar.selectbox("Search by", [b.value for b in SearchBy])
branches = st.sidebar.multiselect("Branches", store.list_branches())
only_available = st.sidebar.checkbox("Only available")

sort_field = st.sidebar.selectbox("Sort by", [f.value for f in SortField])
sort_dir = st.sidebar.radio("Direction", [d.value for d in SortDirection], horizontal=True)
page = st.sidebar.number_input("Page", min_value=1, value=1, step=1)

query = SearchQuery(
    criteria=criteria,
    by=by,
    branches=branches,
    only_available=only_available,
    sort=SortSpec(field=sort_field, direction=sort_dir),
    page=int(page) - 1,
    size=config.default_page_size,
)

t0 = time.perf_counter()
result = store.search(query)
t_search = (time.perf_counter() - t0) * 1000.0

# -----------------------------------------------------------------------------
# Results table
# -----------------------------------------------------------------------------
pages = max(1, -(-result.total // query.size))
st.markdown(f"### Inventory ({result.total:,} matches, page {query.page + 1} of {pages})")
show_cols = [
    "partNumber", "supplierSku", "description", "branch",
    "availableQty", "uom", "leadTimeDays", "lastPurchaseDate",
]
rows = [item.model_dump(mode="json", by_alias=True) for item in result.items]
st.dataframe(pd.DataFrame(rows, columns=show_cols), use_container_width=True)

with st.expander("Query timing (ms)"):
    st.write({"search": round(t_search, 2)})

# -----------------------------------------------------------------------------
# Per-part drill-down: lots and peak availability
# -----------------------------------------------------------------------------
st.markdown("### Part details")
part_numbers = sorted({item.part_number for item in result.items})
if part_numbers:
    part = st.selectbox("Part number", part_numbers)
    lots = [lot.model_dump(mode="json", by_alias=True) for item in result.items if item.part_number == part for lot in item.lots]
    st.markdown("#### Lots")
    st.dataframe(pd.DataFrame(lots, columns=["lotNumber", "qty", "expirationDate"]), use_container_width=True)

    peak = store.get_peak_availability(part)
    st.markdown(f"#### Peak availability: {peak.total_available:,} total")
    st.bar_chart(pd.DataFrame([b.model_dump() for b in peak.branches], columns=["branch", "qty"]), x="branch", y="qty")
else:
    st.info("No parts on this page.")
