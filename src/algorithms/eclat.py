# src/algorithms/eclat.py

from typing import Dict, Set, List, Sequence, Tuple

from algorithms.common import (
    FrequentItemset,
    Item,
    ProcessLog,
    TransactionDB,
    log_step,
    min_support_count,
)

TIDSet = Set[int]


def build_vertical_representation(
    transactions: TransactionDB,
    items: Sequence[Item],
) -> Dict[Item, TIDSet]:
    """
    Build vertical representation:
      item -> set of transaction indices (TID-set)
    Only items from the given universe are tracked.
    """
    vertical: Dict[Item, TIDSet] = {item: set() for item in items}
    for tid, transaction in enumerate(transactions):
        for item in transaction:
            if item in vertical:
                vertical[item].add(tid)
    return vertical


def eclat(
    transactions: TransactionDB,
    items: Sequence[Item],
    min_support: float,
    process_log: ProcessLog = None,
) -> List[FrequentItemset]:
    """
    Eclat algorithm (vertical format), patterns up to 3 items.

    Frequent pairs are found by intersecting the TID-sets of frequent
    items; each frequent pair's intersection is kept and intersected
    again with every other frequent item to find triples.
    Returns the frequent itemsets in generation order.
    """
    if not items or not transactions:
        log_step(process_log, "Nothing to mine: no items or no transactions")
        return []

    n_trans = len(transactions)
    min_sup_count = min_support_count(min_support, n_trans)
    universe = sorted(set(items))

    log_step(
        process_log,
        f"Starting Eclat algorithm with minimum support count: {min_sup_count} "
        f"({min_support * 100:.2f}%)",
    )
    log_step(process_log, f"Total transactions: {n_trans}, Total unique products: {len(universe)}")

    # Step 1: vertical database
    vertical = build_vertical_representation(transactions, universe)
    log_step(process_log, f"Created vertical database with {len(vertical)} items")

    # Step 2: frequent single items
    frequent: Dict[Item, TIDSet] = {
        item: tids for item, tids in vertical.items() if len(tids) >= min_sup_count
    }
    log_step(process_log, f"Found {len(frequent)} frequent 1-itemsets")

    results: List[FrequentItemset] = []
    seen: Set[Tuple[Item, ...]] = set()

    def emit(members: Tuple[Item, ...], tids: TIDSet) -> bool:
        itemset = FrequentItemset(members, len(tids) / n_trans)
        if itemset.key in seen:
            return False
        seen.add(itemset.key)
        results.append(itemset)
        return True

    for item, tids in frequent.items():
        emit((item,), tids)

    # Step 3: pairs by TID-set intersection
    frequent_items = list(frequent)
    log_step(process_log, f"Generating 2-itemsets from {len(frequent_items)} frequent items")
    pair_tids: Dict[Tuple[Item, Item], TIDSet] = {}
    for i in range(len(frequent_items)):
        for j in range(i + 1, len(frequent_items)):
            a, b = frequent_items[i], frequent_items[j]
            inter = frequent[a] & frequent[b]
            if len(inter) >= min_sup_count and emit((a, b), inter):
                pair_tids[(a, b)] = inter
    log_step(process_log, f"Found {len(pair_tids)} frequent 2-itemsets")

    # Step 4: triples from each frequent pair and one more item
    log_step(process_log, "Generating 3-itemsets")
    triple_count = 0
    for pair, tids in pair_tids.items():
        for item in frequent_items:
            if item in pair:
                continue
            inter = tids & frequent[item]
            if len(inter) >= min_sup_count and emit(pair + (item,), inter):
                triple_count += 1
    log_step(process_log, f"Found {triple_count} frequent 3-itemsets")
    log_step(
        process_log,
        f"Eclat algorithm completed. Total frequent itemsets found: {len(results)}",
    )
    return results
