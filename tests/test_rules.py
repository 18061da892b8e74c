"""Association rule generation tests."""

import pytest

from algorithms.common import FrequentItemset, TransactionStore, itemset_key
from algorithms.eclat import eclat
from algorithms.fpgrowth import fpgrowth
from algorithms.rules import generate_rules, split_itemset

# ---------------------------------------------------------------------------
# Shared fixtures (module-level, built once)
# ---------------------------------------------------------------------------

store = TransactionStore.from_baskets(
    [
        ["A", "B"],
        ["A", "B", "C"],
        ["A", "C"],
        ["B", "C"],
        ["A", "B"],
    ]
)
itemsets = eclat(list(store.transactions), store.items, 0.4)
N = store.transaction_count


def _by_pair(rules):
    return {(r.antecedent, r.consequent): r for r in rules}


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------


def test_worked_example_rules() -> None:
    rules = _by_pair(generate_rules(itemsets, N, 0.5))
    ab = rules[(("A",), ("B",))]
    assert ab.support == pytest.approx(0.6)
    assert ab.confidence == pytest.approx(0.75)
    assert ab.lift == pytest.approx(0.9375)
    ba = rules[(("B",), ("A",))]
    assert ba.confidence == pytest.approx(0.75)
    assert ba.lift == pytest.approx(0.9375)
    # A -> C sits exactly on the threshold: 0.4 / 0.8 == 0.5
    assert (("A",), ("C",)) in rules
    assert len(rules) == 6


def test_sorted_by_lift_descending() -> None:
    rules = generate_rules(itemsets, N, 0.2)
    lifts = [r.lift for r in rules]
    assert lifts == sorted(lifts, reverse=True)
    assert rules[0].lift == pytest.approx(0.9375)


def test_confidence_threshold_filters() -> None:
    rules = generate_rules(itemsets, N, 0.6)
    pairs = set(_by_pair(rules))
    assert pairs == {
        (("A",), ("B",)),
        (("B",), ("A",)),
        (("C",), ("A",)),
        (("C",), ("B",)),
    }
    assert all(r.confidence >= 0.6 for r in rules)


def test_confidence_exactly_on_threshold_is_kept() -> None:
    # A -> B has confidence 3/4, which 0.6 / 0.8 misses in floating point
    rules = _by_pair(generate_rules(itemsets, N, 0.75))
    assert set(rules) == {(("A",), ("B",)), (("B",), ("A",))}
    assert rules[(("A",), ("B",))].confidence == 0.75
    assert rules[(("A",), ("B",))].lift == 0.9375


def test_rules_with_item_ids_containing_commas() -> None:
    s = TransactionStore.from_baskets([["A", "B", "A,B"]] * 2 + [["A,B"]] * 2)
    mined = eclat(list(s.transactions), s.items, 0.5)
    rules = _by_pair(generate_rules(mined, s.transaction_count, 0.9))
    ab = rules[(("A",), ("B",))]
    assert ab.confidence == 1.0
    assert ab.lift == pytest.approx(2.0)
    assert ab.support == pytest.approx(0.5)
    assert rules[(("A",), ("A,B",))].lift == pytest.approx(1.0)


def test_raising_confidence_never_adds_rules() -> None:
    counts = [len(generate_rules(itemsets, N, c)) for c in (0.1, 0.5, 0.6, 0.7, 0.8, 1.0)]
    assert counts == sorted(counts, reverse=True)


@pytest.mark.parametrize("engine", [eclat, fpgrowth], ids=["eclat", "fpgrowth"])
def test_rule_validity(engine) -> None:
    baskets = [
        ["milk", "bread", "eggs"],
        ["milk", "bread"],
        ["milk", "eggs"],
        ["bread", "eggs", "butter"],
        ["milk", "bread", "eggs", "butter"],
        ["bread", "butter"],
        ["milk", "bread", "butter"],
    ]
    s = TransactionStore.from_baskets(baskets)
    mined = engine(list(s.transactions), s.items, 0.25)
    keys = {fi.key for fi in mined}
    rules = generate_rules(mined, s.transaction_count, 0.3)
    assert rules
    seen = set()
    for r in rules:
        assert r.antecedent and r.consequent
        assert not set(r.antecedent) & set(r.consequent)
        assert itemset_key(r.antecedent + r.consequent) in keys
        assert r.confidence >= 0.3
        pair = (r.antecedent, r.consequent)
        assert pair not in seen
        seen.add(pair)


def test_missing_subsets_are_skipped() -> None:
    # "B" alone is not in the set, so neither A -> B nor B -> A can be scored
    partial = [FrequentItemset(("A",), 0.5), FrequentItemset(("A", "B"), 0.5)]
    assert generate_rules(partial, 10, 0.1) == []


def test_singletons_give_no_rules() -> None:
    assert generate_rules([FrequentItemset(("A",), 1.0)], 1, 0.1) == []


def test_triple_yields_all_splits() -> None:
    full = TransactionStore.from_baskets([["A", "B", "C"]] * 3)
    mined = eclat(list(full.transactions), full.items, 0.5)
    rules = generate_rules(mined, 3, 0.5)
    # 3 pairs x 2 splits + 1 triple x 6 splits
    assert len(rules) == 12
    assert all(r.confidence == 1.0 and r.lift == 1.0 for r in rules)


def test_split_itemset() -> None:
    splits = list(split_itemset(("A", "B", "C")))
    assert len(splits) == 6
    assert (("A",), ("B", "C")) in splits
    assert (("B", "C"), ("A",)) in splits
    for antecedent, consequent in splits:
        assert sorted(antecedent + consequent) == ["A", "B", "C"]


def test_split_itemset_rejects_large_itemsets() -> None:
    with pytest.raises(ValueError):
        list(split_itemset(("A", "B", "C", "D")))


def test_process_log() -> None:
    log = []
    generate_rules(itemsets, N, 0.5, log)
    assert log[0].startswith("Generating association rules with minimum confidence: 50.00%")
    assert any(line.startswith("Generated 6 association rules") for line in log)
    assert log[-1] == "Top rule has lift: 0.94"
