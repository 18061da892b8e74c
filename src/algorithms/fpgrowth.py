# src/algorithms/fpgrowth.py

from typing import Dict, FrozenSet, List, Sequence, Set, Tuple
from itertools import combinations

from algorithms.common import (
    FrequentItemset,
    MAX_ITEMSET_SIZE,
    Item,
    ProcessLog,
    TransactionDB,
    log_step,
    min_support_count,
)


def count_item_frequencies(
    transactions: TransactionDB,
    items: Sequence[Item],
) -> Dict[Item, int]:
    """
    Number of transactions containing each item of the universe
    (an item counts at most once per transaction).
    """
    universe = set(items)
    counts: Dict[Item, int] = {}
    for transaction in transactions:
        for item in transaction:
            if item in universe:
                counts[item] = counts.get(item, 0) + 1
    return counts


def _order_transactions(
    transactions: TransactionDB,
    order: Dict[Item, int],
) -> List[Tuple[Item, ...]]:
    """
    Keep only frequent items of each transaction, sorted by frequency rank.
    Transactions left empty are dropped.
    """
    ordered = []
    for transaction in transactions:
        kept = sorted((i for i in transaction if i in order), key=order.__getitem__)
        if kept:
            ordered.append(tuple(kept))
    return ordered


def fpgrowth(
    transactions: TransactionDB,
    items: Sequence[Item],
    min_support: float,
    process_log: ProcessLog = None,
) -> List[FrequentItemset]:
    """
    FP-Growth style miner (horizontal format), patterns up to 3 items.

    Items are filtered and ranked by frequency the way FP-Growth prepares
    its tree, then every pair and triple of frequent items is counted
    directly over the reduced transactions. Results are identical to
    eclat() on the same input.
    """
    if not items or not transactions:
        log_step(process_log, "Nothing to mine: no items or no transactions")
        return []

    n_trans = len(transactions)
    min_sup_count = min_support_count(min_support, n_trans)

    log_step(
        process_log,
        f"Starting FP-Growth algorithm with minimum support count: {min_sup_count} "
        f"({min_support * 100:.2f}%)",
    )
    log_step(process_log, f"Total transactions: {n_trans}, Total unique products: {len(set(items))}")

    # Step 1: item frequencies
    item_counts = count_item_frequencies(transactions, items)
    log_step(process_log, f"Counted frequencies for {len(item_counts)} items")

    # Step 2: frequent items, most frequent first
    frequent_items = sorted(
        (item for item, count in item_counts.items() if count >= min_sup_count),
        key=lambda item: (-item_counts[item], item),
    )
    order = {item: rank for rank, item in enumerate(frequent_items)}
    log_step(process_log, f"Found {len(frequent_items)} frequent items after filtering")

    ordered = _order_transactions(transactions, order)
    log_step(process_log, f"Transformed {len(ordered)} transactions for FP-Tree construction")

    results: List[FrequentItemset] = []
    seen: Set[Tuple[Item, ...]] = set()

    def emit(members: Tuple[Item, ...], count: int) -> bool:
        itemset = FrequentItemset(members, count / n_trans)
        if itemset.key in seen:
            return False
        seen.add(itemset.key)
        results.append(itemset)
        return True

    for item in frequent_items:
        emit((item,), item_counts[item])
    log_step(process_log, f"Added {len(frequent_items)} frequent 1-itemsets")

    sets = [set(t) for t in ordered]
    prev_level: Set[FrozenSet[Item]] = {frozenset([i]) for i in frequent_items}

    for size in range(2, MAX_ITEMSET_SIZE + 1):
        log_step(process_log, f"Generating {size}-itemsets")
        level: Set[FrozenSet[Item]] = set()
        for candidate in combinations(frequent_items, size):
            # prune: every (size-1)-subset must already be frequent
            if any(frozenset(s) not in prev_level for s in combinations(candidate, size - 1)):
                continue
            count = sum(1 for t in sets if t.issuperset(candidate))
            if count >= min_sup_count and emit(candidate, count):
                level.add(frozenset(candidate))
        log_step(process_log, f"Found {len(level)} frequent {size}-itemsets")
        prev_level = level

    log_step(
        process_log,
        f"FP-Growth algorithm completed. Total frequent itemsets found: {len(results)}",
    )
    return results
