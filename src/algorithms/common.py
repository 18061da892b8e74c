# src/algorithms/common.py

from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterable, List, Optional, Sequence, Tuple
import logging
import math

from errors import InvalidInput

logger = logging.getLogger(__name__)

Item = str
Transaction = FrozenSet[Item]
TransactionDB = List[Transaction]
ProcessLog = Optional[List[str]]

# Patterns longer than this are never enumerated by either engine.
MAX_ITEMSET_SIZE = 3


def canonical(items: Iterable[Item]) -> Tuple[Item, ...]:
    return tuple(sorted(set(items)))


def itemset_key(items: Iterable[Item]) -> Tuple[Item, ...]:
    """
    Lookup key shared by both engines and the rule generator: the sorted
    member tuple. Item ids are opaque, so they are never joined into one
    string for lookups.
    """
    return canonical(items)


@dataclass(frozen=True)
class FrequentItemset:
    items: Tuple[Item, ...]
    support: float

    def __post_init__(self):
        object.__setattr__(self, "items", canonical(self.items))

    @property
    def key(self) -> Tuple[Item, ...]:
        return self.items

    @property
    def label(self) -> str:
        return ", ".join(self.items)

    @property
    def size(self) -> int:
        return len(self.items)


@dataclass(frozen=True)
class AssociationRule:
    antecedent: Tuple[Item, ...]
    consequent: Tuple[Item, ...]
    support: float
    confidence: float
    lift: float

    def __post_init__(self):
        object.__setattr__(self, "antecedent", canonical(self.antecedent))
        object.__setattr__(self, "consequent", canonical(self.consequent))


@dataclass(frozen=True)
class TransactionStore:
    """
    Normalized input for one analysis request:
      transactions: list of item-id sets, position = transaction index
      items: sorted universe of distinct item ids
    """
    transactions: Tuple[Transaction, ...]
    items: Tuple[Item, ...]

    @classmethod
    def from_baskets(cls, baskets: Iterable[Iterable[Item]]) -> "TransactionStore":
        transactions = tuple(frozenset(str(i) for i in basket) for basket in baskets)
        universe = set()
        for t in transactions:
            universe |= t
        return cls(transactions=transactions, items=tuple(sorted(universe)))

    @property
    def transaction_count(self) -> int:
        return len(self.transactions)

    def is_empty(self) -> bool:
        return not self.transactions or not self.items


def min_support_count(min_support: float, transaction_count: int) -> int:
    """
    Absolute threshold: ceil(min_support * N).
    The product is rounded to 9 places first so 0.7 * 10 gives 7, not 8.
    """
    if transaction_count <= 0:
        raise InvalidInput("transaction set is empty", field="transactions")
    return math.ceil(round(min_support * transaction_count, 9))


def log_step(process_log: ProcessLog, message: str) -> None:
    if process_log is not None:
        process_log.append(message)
    logger.debug(message)


def count_by_size(itemsets: Sequence[FrequentItemset]) -> Dict[int, int]:
    counts: Dict[int, int] = {}
    for itemset in itemsets:
        counts[itemset.size] = counts.get(itemset.size, 0) + 1
    return counts
