"""Parameter validation tests."""

import pytest

from config import AnalysisConfig, Algorithm, DEFAULT_MIN_CONFIDENCE, DEFAULT_MIN_SUPPORT
from errors import InvalidInput


def test_defaults() -> None:
    config = AnalysisConfig()
    assert config.min_support == DEFAULT_MIN_SUPPORT == 0.01
    assert config.min_confidence == DEFAULT_MIN_CONFIDENCE == 0.2
    assert config.algorithm is Algorithm.ECLAT
    assert config.compare_algorithms is False


def test_from_mapping_camel_case() -> None:
    config = AnalysisConfig.from_mapping(
        {"minSupport": 0.05, "minConfidence": 0.4, "algorithm": "FPGrowth", "compareAlgorithms": True}
    )
    assert config == AnalysisConfig(0.05, 0.4, Algorithm.FPGROWTH, True)


def test_from_mapping_snake_case_and_defaults() -> None:
    config = AnalysisConfig.from_mapping({"min_support": 0.3})
    assert config.min_support == 0.3
    assert config.min_confidence == DEFAULT_MIN_CONFIDENCE
    assert config.algorithm is Algorithm.ECLAT


@pytest.mark.parametrize("name", ["fpgrowth", "FP-Growth", " eclat ", Algorithm.ECLAT])
def test_algorithm_names(name) -> None:
    assert isinstance(Algorithm.parse(name), Algorithm)


def test_unknown_algorithm() -> None:
    with pytest.raises(InvalidInput) as exc:
        AnalysisConfig(algorithm="apriori")
    assert exc.value.field == "algorithm"


@pytest.mark.parametrize("value", [0, -0.1, 1.5, "0.2", None, True, float("nan")])
def test_bad_min_support(value) -> None:
    with pytest.raises(InvalidInput) as exc:
        AnalysisConfig(min_support=value)
    assert exc.value.field == "min_support"


@pytest.mark.parametrize("value", [0, 2, "high"])
def test_bad_min_confidence(value) -> None:
    with pytest.raises(InvalidInput) as exc:
        AnalysisConfig.from_mapping({"minConfidence": value})
    assert exc.value.field == "min_confidence"


def test_upper_bound_is_inclusive() -> None:
    config = AnalysisConfig(min_support=1, min_confidence=1.0)
    assert config.min_support == 1.0
    assert isinstance(config.min_support, float)
