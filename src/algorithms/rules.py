# src/algorithms/rules.py

from typing import Dict, Iterator, List, Sequence, Tuple
import logging

from algorithms.common import (
    AssociationRule,
    FrequentItemset,
    Item,
    MAX_ITEMSET_SIZE,
    ProcessLog,
    itemset_key,
    log_step,
)

logger = logging.getLogger(__name__)


def _count(itemset: FrequentItemset, transaction_count: int) -> int:
    # supports are count / N, so the absolute count is recovered exactly
    return round(itemset.support * transaction_count)


def split_itemset(items: Sequence[Item]) -> Iterator[Tuple[Tuple[Item, ...], Tuple[Item, ...]]]:
    """
    Yield every (antecedent, consequent) split of `items` into two
    non-empty parts, one per bitmask 1 .. 2^k - 2.

    Only defined for itemsets up to MAX_ITEMSET_SIZE.
    """
    n = len(items)
    if n > MAX_ITEMSET_SIZE:
        raise ValueError(f"itemset of size {n} exceeds the supported maximum of {MAX_ITEMSET_SIZE}")
    for mask in range(1, (1 << n) - 1):
        antecedent = tuple(items[j] for j in range(n) if mask & (1 << j))
        consequent = tuple(items[j] for j in range(n) if not mask & (1 << j))
        yield antecedent, consequent


def generate_rules(
    frequent_itemsets: Sequence[FrequentItemset],
    transaction_count: int,
    min_confidence: float,
    process_log: ProcessLog = None,
) -> List[AssociationRule]:
    """
    Generate association rules X -> Y from frequent itemsets.

    confidence = count(X u Y) / count(X)
    lift       = confidence * N / count(Y)

    Both are computed from absolute counts, so a rule sitting exactly on
    min_confidence is kept.

    A split is kept only when both X and Y are themselves among the
    frequent itemsets and the confidence reaches min_confidence.
    Rules are returned sorted by lift, highest first; ties keep
    generation order.
    """
    log_step(
        process_log,
        f"Generating association rules with minimum confidence: {min_confidence * 100:.2f}%",
    )

    lookup: Dict[Tuple[Item, ...], FrequentItemset] = {fi.key: fi for fi in frequent_itemsets}
    multi = [fi for fi in lookup.values() if fi.size >= 2]
    log_step(process_log, f"Found {len(multi)} itemsets with 2 or more items for rule generation")

    rules: List[AssociationRule] = []
    for itemset in multi:
        for antecedent, consequent in split_itemset(itemset.items):
            sup_x = lookup.get(itemset_key(antecedent))
            if sup_x is None:
                logger.debug("Antecedent %s not frequent, skipping", antecedent)
                continue

            count_xy = _count(itemset, transaction_count)
            count_x = _count(sup_x, transaction_count)
            conf = count_xy / count_x
            if conf < min_confidence:
                continue

            sup_y = lookup.get(itemset_key(consequent))
            if sup_y is None:
                logger.debug("Consequent %s not frequent, skipping", consequent)
                continue

            rules.append(
                AssociationRule(
                    antecedent=antecedent,
                    consequent=consequent,
                    support=itemset.support,
                    confidence=conf,
                    lift=count_xy * transaction_count / (count_x * _count(sup_y, transaction_count)),
                )
            )

    log_step(process_log, f"Generated {len(rules)} association rules (from {transaction_count} transactions)")

    rules.sort(key=lambda r: r.lift, reverse=True)

    top = f"{rules[0].lift:.2f}" if rules else "N/A"
    log_step(process_log, f"Top rule has lift: {top}")
    return rules
