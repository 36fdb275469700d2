"""
Streamlit dashboard for the Crypto Arbitrage Tracker.

Run with:
    streamlit run dashboard/app.py

The page never calls an exchange itself. It reads through the QueryFacade,
whose cache is kept warm by the background refresh scheduler started the
first time the page loads.
"""

import os
import sys
import time

import streamlit as st
from streamlit_autorefresh import st_autorefresh

sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

from config import ASSETS, DEFAULT_INVESTMENT, MIN_PROFIT_PCT, MIN_VOLUME, SOURCES
from dashboard.tables import format_epoch_ms, opportunities_frame, sized_frame
from exceptions import CacheComputationFailed
from processor.opportunity_sizer import parse_investment
from service.bootstrap import build_facade


@st.cache_resource
def get_facade():
    """One facade (and one scheduler thread) per Streamlit server process."""
    facade = build_facade()
    facade.start()
    return facade


# ── Page config ────────────────────────────────────────────────────────────────
st.set_page_config(
    page_title="Crypto Arbitrage Tracker",
    page_icon="🪙",
    layout="wide",
)

st.markdown("""
<style>
    .block-container { padding-top: 1.5rem; }
    .metric-card {
        background: #0e1117;
        border: 1px solid #2a2a2a;
        border-radius: 10px;
        padding: 16px 20px;
        text-align: center;
        margin-bottom: 8px;
    }
    .metric-symbol { font-size: 0.85rem; color: #888; margin-bottom: 4px; }
    .metric-price  { font-size: 1.6rem; font-weight: 700; color: #fff; }
    .metric-label  { font-size: 0.72rem; color: #555; margin-top: 6px; }
</style>
""", unsafe_allow_html=True)

# The cache only changes every few minutes; re-read it every 30 s
st_autorefresh(interval=30_000, key="autorefresh")

facade = get_facade()


# ── SIDEBAR ───────────────────────────────────────────────────────────────────
with st.sidebar:
    st.markdown("## 💰 Profit Simulator")
    st.caption("Size every opportunity against your investment.")

    investment = st.number_input(
        "Your investment (USDT)",
        min_value=0.0,
        value=float(DEFAULT_INVESTMENT),
        step=1_000.0,
    )
    fee_pct = st.slider(
        "Fee per trade (%)",
        min_value=0.0,
        max_value=1.0,
        value=0.1,
        step=0.05,
        help="Typical fees: Binance 0.1%, Kraken 0.16-0.26%, Coinbase 0.5-1.0%"
    )
    st.caption(f"Total round-trip fees: **{fee_pct * 2:.2f}%** (buy + sell)")

    st.markdown("---")
    st.markdown("## ⚙️ Filters")
    st.caption(
        f"Opportunities need a spread ≥ **{MIN_PROFIT_PCT}%** and at least "
        f"**{MIN_VOLUME:,.0f}** of 24h volume on both exchanges."
    )


# ── HEADER ────────────────────────────────────────────────────────────────────
col_title, col_status = st.columns([6, 2])
with col_title:
    st.markdown("## 🪙 Crypto Arbitrage Tracker")

timing = facade.get_refresh_timing()
with col_status:
    st.markdown(
        "<div style='text-align:right;padding-top:18px;color:#888;font-size:0.8rem;'>"
        f"last refresh {format_epoch_ms(timing.last_refresh_time)} · "
        f"next {format_epoch_ms(timing.next_refresh_time)}</div>",
        unsafe_allow_html=True,
    )

st.markdown("---")

try:
    result = facade.get_ranked_result()
    sized = facade.get_sized_opportunities(investment)
    amount = sized[0].investment if sized else parse_investment(investment, DEFAULT_INVESTMENT)
except CacheComputationFailed as e:
    st.error(str(e))
    st.stop()


# ── METRIC CARDS ──────────────────────────────────────────────────────────────
cards = st.columns(3)
summary = [
    ("Opportunities", f"{len(result.opportunities)}", f"spread ≥ {MIN_PROFIT_PCT}%"),
    ("Exchanges online", f"{result.exchange_count}/{len(SOURCES)}", "failed sources are skipped"),
    ("Assets quoted", f"{result.scanned_pairs}/{len(ASSETS)}", "after the volume floor"),
]
for col, (label, value, note) in zip(cards, summary):
    with col:
        st.markdown(f"""
        <div class='metric-card'>
            <div class='metric-symbol'>{label}</div>
            <div class='metric-price'>{value}</div>
            <div class='metric-label'>{note}</div>
        </div>
        """, unsafe_allow_html=True)

st.markdown("<br>", unsafe_allow_html=True)

left, right = st.columns([3, 2])

with left:
    st.markdown("#### 🚨 Ranked opportunities")
    st.caption("Buy on the cheaper exchange, sell on the pricier one. Best spread first.")
    if result.opportunities:
        st.dataframe(opportunities_frame(result.opportunities), use_container_width=True, hide_index=True)
    else:
        st.info(f"No spreads above {MIN_PROFIT_PCT}% in the last scan.")

with right:
    st.markdown(f"#### 📊 Sized for ${amount:,.0f}")
    st.caption("Trade size is capped by the thinner market. **Net profit** deducts both fees.")
    if sized:
        st.dataframe(sized_frame(sized, fee_pct), use_container_width=True, hide_index=True)
    else:
        st.info("Nothing to size yet.")


# ── FOOTER ────────────────────────────────────────────────────────────────────
st.markdown("---")
st.caption(
    f"Scan at {format_epoch_ms(result.timestamp)} &nbsp;|&nbsp; "
    f"Sources: {' · '.join(SOURCES)} &nbsp;|&nbsp; "
    f"Page rendered {time.strftime('%H:%M:%S')} &nbsp;|&nbsp; "
    f"⚠️ For educational purposes — not financial advice"
)
