"""
DataFrames behind the dashboard tables.

Kept out of app.py so they can be built (and tested) without Streamlit.
"""

import time
from typing import List

import pandas as pd

from models.opportunity import Opportunity, SizedOpportunity

OPPORTUNITY_COLUMNS = {
    "asset": "Asset",
    "lowest_exchange": "Buy on",
    "lowest_price": "Buy price",
    "highest_exchange": "Sell on",
    "highest_price": "Sell price",
    "profit_percentage": "Spread %",
    "max_trade_size": "Max size",
    "potential_profit": "Profit at max size",
}


def opportunities_frame(opportunities: List[Opportunity]) -> pd.DataFrame:
    """One row per ranked opportunity, best spread first."""
    if not opportunities:
        return pd.DataFrame(columns=list(OPPORTUNITY_COLUMNS.values()))
    df = pd.DataFrame([o.to_dict() for o in opportunities])
    return df[list(OPPORTUNITY_COLUMNS)].rename(columns=OPPORTUNITY_COLUMNS)


def sized_frame(sized: List[SizedOpportunity], fee_pct: float = 0.0) -> pd.DataFrame:
    """
    Profit simulator table for one investment amount.

    fee_pct is charged twice (one fee to buy, one fee to sell) on the
    sized amount, so Net profit can go negative on thin spreads.
    """
    columns = ["Asset", "Buy on", "Sell on", "Spread %", "Trade size", "Gross profit", "Fees", "Net profit"]
    if not sized:
        return pd.DataFrame(columns=columns)

    rows = []
    for s in sized:
        fees = s.sized_amount * (fee_pct * 2) / 100
        rows.append({
            "Asset": s.opportunity.asset,
            "Buy on": s.opportunity.lowest_exchange,
            "Sell on": s.opportunity.highest_exchange,
            "Spread %": s.opportunity.profit_percentage,
            "Trade size": s.sized_amount,
            "Gross profit": s.projected_profit,
            "Fees": round(fees, 2),
            "Net profit": round(s.projected_profit - fees, 2),
        })
    return pd.DataFrame(rows, columns=columns)


def format_epoch_ms(value) -> str:
    if value is None:
        return "—"
    return time.strftime("%H:%M:%S", time.localtime(value / 1000))
