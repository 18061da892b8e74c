# src/data_io.py

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple
import logging

import pandas as pd

from errors import InvalidInput

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Basket:
    """One invoice: its distinct product ids in first-seen order."""
    invoice_no: str
    items: Tuple[str, ...]
    date: Optional[str] = None


def _find_column(columns: Sequence[str], needles: Sequence[str]) -> Optional[str]:
    for c in columns:
        cl = str(c).lower()
        if any(n in cl for n in needles):
            return c
    return None


def load_sales_csv(path_or_buffer) -> pd.DataFrame:
    """
    Read a sales export with one row per sold line item.

    Columns are detected case-insensitively by substring:
      invoice       -> "invoice"
      product id    -> "product id", "product_id", "id produk"
      product name  -> "product name", "product_name", "detail menu"
      date (opt.)   -> "date", "tanggal"

    Rows missing any required value are dropped.
    We always normalize to a DataFrame with cols:
      ['invoice', 'product_id', 'name'] (+ 'date' when present).
    """
    try:
        df = pd.read_csv(path_or_buffer, dtype=str, skip_blank_lines=True)
    except pd.errors.EmptyDataError:
        raise InvalidInput("CSV file is empty", field="csv") from None

    if df.empty:
        raise InvalidInput("CSV file is empty", field="csv")

    columns = list(df.columns)
    invoice_col = _find_column(columns, ["invoice"])
    if invoice_col is None:
        raise InvalidInput("No invoice column found", field="invoice")
    id_col = _find_column(columns, ["product id", "product_id", "id produk"])
    if id_col is None:
        raise InvalidInput("No product ID column found", field="product_id")
    name_col = _find_column(columns, ["product name", "product_name", "detail menu"])
    if name_col is None:
        raise InvalidInput("No product name column found", field="name")
    date_col = _find_column([c for c in columns if c not in (invoice_col, id_col, name_col)], ["date", "tanggal"])

    selected = {invoice_col: "invoice", id_col: "product_id", name_col: "name"}
    if date_col is not None:
        selected[date_col] = "date"

    out = df[list(selected)].rename(columns=selected).copy()
    for c in ("invoice", "product_id", "name"):
        out[c] = out[c].str.strip()
    required = out[["invoice", "product_id", "name"]]
    out = out[required.notna().all(axis=1) & (required != "").all(axis=1)]

    dropped = len(df) - len(out)
    if dropped:
        logger.info("Dropped %d rows with missing invoice/product values", dropped)
    return out.reset_index(drop=True)


def build_baskets(df: pd.DataFrame) -> Tuple[List[Basket], Dict[str, str]]:
    """
    Group a normalized sales frame by invoice.
    Returns:
      baskets: one Basket per invoice, in first-seen order, items deduplicated
      product_map: product_id -> display name (last seen name wins)
    """
    product_map: Dict[str, str] = dict(zip(df["product_id"].astype(str), df["name"].astype(str)))

    has_date = "date" in df.columns
    baskets: List[Basket] = []
    for invoice, group in df.groupby("invoice", sort=False):
        items = tuple(dict.fromkeys(group["product_id"].astype(str)))
        date = None
        if has_date:
            dates = group["date"].dropna()
            date = str(dates.iloc[0]) if len(dates) else None
        baskets.append(Basket(invoice_no=str(invoice), items=items, date=date))
    return baskets, product_map


def baskets_to_df(baskets: Sequence[Basket], product_map: Optional[Dict[str, str]] = None) -> pd.DataFrame:
    product_map = product_map or {}
    rows = []
    for b in baskets:
        rows.append({
            "invoice": b.invoice_no,
            "items": ", ".join(product_map.get(i, i) for i in b.items),
            "date": b.date,
        })
    return pd.DataFrame(rows, columns=["invoice", "items", "date"])


def basic_stats(baskets: Sequence[Basket], product_map: Optional[Dict[str, str]] = None) -> dict:
    """
    Simple statistics about the transaction DB:
      - number of transactions
      - total items (one per distinct product per invoice)
      - unique products
    """
    all_items = set()
    total_items = 0
    for b in baskets:
        all_items.update(b.items)
        total_items += len(b.items)

    return {
        "transaction_count": len(baskets),
        "total_items": total_items,
        "unique_items": len(product_map) if product_map else len(all_items),
    }
