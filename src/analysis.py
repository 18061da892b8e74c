# src/analysis.py

from dataclasses import dataclass, field
from typing import Callable, Dict, List, Mapping, Optional, Sequence, Tuple
import logging
import time

import pandas as pd

from algorithms.common import (
    AssociationRule,
    FrequentItemset,
    ProcessLog,
    TransactionDB,
    TransactionStore,
    count_by_size,
)
from algorithms.eclat import eclat
from algorithms.fpgrowth import fpgrowth
from algorithms.rules import generate_rules
from config import AnalysisConfig, Algorithm
from data_io import Basket
from errors import InvalidInput

logger = logging.getLogger(__name__)

Miner = Callable[[TransactionDB, Sequence[str], float, ProcessLog], List[FrequentItemset]]

MINERS: Dict[Algorithm, Miner] = {
    Algorithm.ECLAT: eclat,
    Algorithm.FPGROWTH: fpgrowth,
}

EMPTY_RESULT_MESSAGE = (
    "No frequent itemsets found with the current parameters. "
    "Try lowering the minimum support."
)

DATE_FORMATS = ["%Y-%m-%d", "%d/%m/%Y", "%d-%m-%Y"]


@dataclass(frozen=True)
class AlgorithmComparison:
    itemset_count: int
    execution_time_ms: float
    itemsets_by_size: Dict[int, int]
    rule_count: int


@dataclass
class AnalysisResult:
    algorithm: Algorithm
    itemsets: List[FrequentItemset]
    rules: List[AssociationRule]
    params: Dict[str, object]
    process_logs: Dict[str, List[str]] = field(default_factory=dict)
    comparison: Optional[Dict[str, AlgorithmComparison]] = None
    message: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return not self.itemsets

    def to_dict(self, product_map: Optional[Mapping[str, str]] = None) -> dict:
        """
        Response payload. Items are rendered as {"id", "name"}; the name
        falls back to the id when the product map does not know it.
        """
        product_map = product_map or {}

        def named(items):
            return [{"id": i, "name": product_map.get(i, i)} for i in items]

        payload = {
            "success": not self.is_empty,
            "frequent_itemsets": [
                {"items": named(fi.items), "support": fi.support} for fi in self.itemsets
            ],
            "association_rules": [
                {
                    "antecedent": named(r.antecedent),
                    "consequent": named(r.consequent),
                    "support": r.support,
                    "confidence": r.confidence,
                    "lift": r.lift,
                }
                for r in self.rules
            ],
            "algorithm_params": dict(self.params),
            "process_logs": {k: list(v) for k, v in self.process_logs.items()},
            "comparison_data": None,
        }
        if self.comparison is not None:
            payload["comparison_data"] = {
                name: {
                    "itemsetCount": c.itemset_count,
                    "executionTime": c.execution_time_ms,
                    "itemsetsBySize": dict(c.itemsets_by_size),
                    "ruleCount": c.rule_count,
                }
                for name, c in self.comparison.items()
            }
        if self.message:
            payload["message"] = self.message
        return payload

    def itemsets_frame(self, product_map: Optional[Mapping[str, str]] = None) -> pd.DataFrame:
        product_map = product_map or {}
        rows = [
            {
                "items": ", ".join(product_map.get(i, i) for i in fi.items),
                "size": fi.size,
                "support": fi.support,
            }
            for fi in self.itemsets
        ]
        df = pd.DataFrame(rows, columns=["items", "size", "support"])
        return df.sort_values(["support", "size"], ascending=[False, True], kind="stable").reset_index(drop=True)

    def rules_frame(self, product_map: Optional[Mapping[str, str]] = None) -> pd.DataFrame:
        product_map = product_map or {}
        rows = [
            {
                "antecedent": ", ".join(product_map.get(i, i) for i in r.antecedent),
                "consequent": ", ".join(product_map.get(i, i) for i in r.consequent),
                "support": r.support,
                "confidence": r.confidence,
                "lift": r.lift,
            }
            for r in self.rules
        ]
        return pd.DataFrame(rows, columns=["antecedent", "consequent", "support", "confidence", "lift"])

    def comparison_frame(self) -> pd.DataFrame:
        rows = []
        for name, c in (self.comparison or {}).items():
            row = {
                "Algorithm": name,
                "Execution Time (ms)": round(c.execution_time_ms, 2),
                "Frequent Itemsets": c.itemset_count,
                "Rules Generated": c.rule_count,
            }
            for size in (1, 2, 3):
                row[f"{size}-itemsets"] = c.itemsets_by_size.get(size, 0)
            rows.append(row)
        return pd.DataFrame(rows)


def _run_miner(
    algorithm: Algorithm,
    store: TransactionStore,
    min_support: float,
    process_log: List[str],
) -> Tuple[List[FrequentItemset], float]:
    start = time.time()
    itemsets = MINERS[algorithm](list(store.transactions), store.items, min_support, process_log)
    elapsed_ms = (time.time() - start) * 1000
    logger.info("%s found %d frequent itemsets in %.2f ms", algorithm.value, len(itemsets), elapsed_ms)
    return itemsets, elapsed_ms


def run_analysis(
    store: TransactionStore,
    config: Optional[AnalysisConfig] = None,
    product_count: Optional[int] = None,
) -> AnalysisResult:
    """
    Mine frequent itemsets with the configured algorithm, then derive
    association rules from them.

    With config.compare_algorithms both engines run on the same store and
    the result carries per-engine timing and itemset counts; the main
    itemsets and rules come from config.algorithm.

    Zero frequent itemsets is not an error: the result is returned with
    is_empty set and an advisory message.
    """
    config = config or AnalysisConfig()
    if not store.transactions:
        raise InvalidInput("Missing required data: no transactions", field="transactions")
    if not store.items:
        raise InvalidInput("Missing required data: no items", field="items")

    n_trans = store.transaction_count
    logger.info(
        "Running algorithm: %s with minSupport: %s and minConfidence: %s",
        config.algorithm.value, config.min_support, config.min_confidence,
    )

    algorithms = list(Algorithm) if config.compare_algorithms else [config.algorithm]
    process_logs: Dict[str, List[str]] = {a.value: [] for a in Algorithm}
    mined: Dict[Algorithm, List[FrequentItemset]] = {}
    timings: Dict[Algorithm, float] = {}
    for algorithm in algorithms:
        mined[algorithm], timings[algorithm] = _run_miner(
            algorithm, store, config.min_support, process_logs[algorithm.value]
        )

    rules_by_algorithm: Dict[Algorithm, List[AssociationRule]] = {}
    for algorithm in algorithms:
        if not mined[algorithm]:
            rules_by_algorithm[algorithm] = []
            continue
        # only the selected engine's trace records rule generation
        trace = process_logs[algorithm.value] if algorithm == config.algorithm else None
        rules_by_algorithm[algorithm] = generate_rules(mined[algorithm], n_trans, config.min_confidence, trace)

    comparison = None
    if config.compare_algorithms:
        comparison = {
            a.value: AlgorithmComparison(
                itemset_count=len(mined[a]),
                execution_time_ms=timings[a],
                itemsets_by_size=count_by_size(mined[a]),
                rule_count=len(rules_by_algorithm[a]),
            )
            for a in algorithms
        }

    params = {
        "algorithm": config.algorithm.value,
        "minSupport": config.min_support,
        "minConfidence": config.min_confidence,
        "transactionCount": n_trans,
        "productCount": product_count if product_count is not None else len(store.items),
    }

    itemsets = mined[config.algorithm]
    rules = rules_by_algorithm[config.algorithm]
    message = None
    if not itemsets:
        logger.warning("No frequent itemsets at minSupport=%s", config.min_support)
        message = EMPTY_RESULT_MESSAGE
    else:
        logger.info("Generated %d association rules", len(rules))

    return AnalysisResult(
        algorithm=config.algorithm,
        itemsets=itemsets,
        rules=rules,
        params=params,
        process_logs=process_logs,
        comparison=comparison,
        message=message,
    )


def analyze_baskets(
    baskets: Sequence[Basket],
    config: Optional[AnalysisConfig] = None,
    product_map: Optional[Mapping[str, str]] = None,
) -> AnalysisResult:
    if not baskets:
        raise InvalidInput("Missing required data: no transactions", field="transactions")
    if product_map is not None and not product_map:
        raise InvalidInput("Missing required data: product map is empty", field="productMap")
    store = TransactionStore.from_baskets(b.items for b in baskets)
    return run_analysis(store, config, product_count=len(product_map) if product_map else None)


def parse_date(value) -> Optional[pd.Timestamp]:
    """
    Parse YYYY-MM-DD, DD/MM/YYYY or DD-MM-YYYY, then anything pandas
    understands (day first). Returns None when unparseable.
    """
    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    for fmt in DATE_FORMATS:
        try:
            return pd.to_datetime(text, format=fmt).normalize()
        except ValueError:
            continue
    try:
        ts = pd.to_datetime(text, dayfirst=True)
    except (ValueError, TypeError):
        return None
    if pd.isna(ts):
        return None
    return ts.normalize()


@dataclass
class DailyPatternResult:
    target_date: str
    previous_date: str
    transaction_count: int
    result: AnalysisResult


def analyze_daily_patterns(
    baskets: Sequence[Basket],
    target_date,
    config: Optional[AnalysisConfig] = None,
) -> DailyPatternResult:
    """
    Mine the baskets dated on the day before target_date.
    Baskets without a parseable date are ignored.
    """
    config = config or AnalysisConfig()
    target = parse_date(target_date)
    if target is None:
        raise InvalidInput(f"Invalid target date format: {target_date!r}", field="targetDate")

    previous = target - pd.Timedelta(days=1)
    previous_str = previous.strftime("%Y-%m-%d")
    day_baskets = [b for b in baskets if parse_date(b.date) == previous]
    if not day_baskets:
        raise InvalidInput(f"No transactions found for previous date: {previous_str}", field="transactions")

    logger.info("Analyzing daily patterns for %s (%d transactions)", previous_str, len(day_baskets))
    # daily analysis never compares engines
    daily_config = AnalysisConfig(
        min_support=config.min_support,
        min_confidence=config.min_confidence,
        algorithm=config.algorithm,
    )
    result = analyze_baskets(day_baskets, daily_config)
    return DailyPatternResult(
        target_date=target.strftime("%Y-%m-%d"),
        previous_date=previous_str,
        transaction_count=len(day_baskets),
        result=result,
    )
