# src/preprocessing/preprocess.py

from typing import List, Optional, Set, Tuple
import re

from data_io import Basket


def standardize_item_id(item_id: str) -> str:
    """
    Standardize product ids:
    - convert to string
    - strip leading/trailing whitespace
    - collapse multiple spaces
    """
    return re.sub(r"\s+", " ", str(item_id).strip())


def preprocess_baskets(
    baskets: List[Basket],
    valid_products: Optional[Set[str]] = None,
    min_items: int = 1,
) -> Tuple[List[Basket], str]:
    """
    Apply preprocessing steps:
      - standardize product ids
      - if valid_products is non-empty, drop items not in valid_products
      - drop duplicate items within a basket
      - remove baskets with fewer than min_items items

    Returns:
      cleaned_baskets: list of Basket, order preserved
      report: multi-line string describing what was done
    """
    before_count = len(baskets)

    empty_transactions = 0
    small_transactions = 0
    invalid_items_count = 0
    total_cleaned_items = 0

    cleaned: List[Basket] = []

    for basket in baskets:
        # 1) standardize ids, dedupe keeping order
        std_items = tuple(dict.fromkeys(standardize_item_id(i) for i in basket.items if str(i).strip()))

        # 2) filter invalid products if we have a list
        if valid_products:
            valid_items = tuple(i for i in std_items if i in valid_products)
            invalid_items_count += len(std_items) - len(valid_items)
        else:
            valid_items = std_items

        # 3) remove empty and too-small baskets
        if not valid_items:
            empty_transactions += 1
            continue
        if len(valid_items) < min_items:
            small_transactions += 1
            continue

        cleaned.append(Basket(basket.invoice_no, valid_items, basket.date))
        total_cleaned_items += len(valid_items)

    all_clean_items = {i for b in cleaned for i in b.items}
    removed = before_count - len(cleaned)

    report_lines = [
        "Preprocessing Report:",
        "---------------------",
        "Before Cleaning:",
        f"- Total transactions: {before_count}",
        f"- Empty transactions (or became empty): {empty_transactions}",
        f"- Transactions with fewer than {min_items} items: {small_transactions}",
        f"- Invalid items removed: {invalid_items_count}",
        "",
        "After Cleaning:",
        f"- Valid transactions: {len(cleaned)}",
        f"- Total items (after cleaning): {total_cleaned_items}",
        f"- Unique products: {len(all_clean_items)}",
        f"- Transactions removed: {removed}",
    ]

    report = "\n".join(report_lines)
    return cleaned, report
