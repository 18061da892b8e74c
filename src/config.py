# src/config.py

from dataclasses import dataclass
from enum import Enum
from numbers import Real
from typing import Any, Mapping

from errors import InvalidInput

DEFAULT_MIN_SUPPORT = 0.01
DEFAULT_MIN_CONFIDENCE = 0.2


class Algorithm(str, Enum):
    ECLAT = "eclat"
    FPGROWTH = "fpgrowth"

    @classmethod
    def parse(cls, value: Any) -> "Algorithm":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower().replace("-", ""))
        except ValueError:
            choices = ", ".join(a.value for a in cls)
            raise InvalidInput(
                f"Unknown algorithm {value!r}; expected one of: {choices}",
                field="algorithm",
            ) from None


def _threshold(value: Any, name: str) -> float:
    # bool is a Real subclass, but True is not a threshold
    if isinstance(value, bool) or not isinstance(value, Real):
        raise InvalidInput(f"{name} must be a number, got {value!r}", field=name)
    value = float(value)
    if not 0 < value <= 1:
        raise InvalidInput(f"{name} must be in (0, 1], got {value}", field=name)
    return value


@dataclass(frozen=True)
class AnalysisConfig:
    """
    Parameters of one analysis request. Validated on construction.
    """
    min_support: float = DEFAULT_MIN_SUPPORT
    min_confidence: float = DEFAULT_MIN_CONFIDENCE
    algorithm: Algorithm = Algorithm.ECLAT
    compare_algorithms: bool = False

    def __post_init__(self):
        object.__setattr__(self, "min_support", _threshold(self.min_support, "min_support"))
        object.__setattr__(self, "min_confidence", _threshold(self.min_confidence, "min_confidence"))
        object.__setattr__(self, "algorithm", Algorithm.parse(self.algorithm))
        object.__setattr__(self, "compare_algorithms", bool(self.compare_algorithms))

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> "AnalysisConfig":
        """
        Build a config from a request body. Accepts the camelCase keys
        (minSupport, minConfidence, algorithm, compareAlgorithms) and
        their snake_case forms; absent keys fall back to the defaults.
        """
        def pick(camel: str, snake: str, default: Any) -> Any:
            if camel in payload:
                return payload[camel]
            return payload.get(snake, default)

        return cls(
            min_support=pick("minSupport", "min_support", DEFAULT_MIN_SUPPORT),
            min_confidence=pick("minConfidence", "min_confidence", DEFAULT_MIN_CONFIDENCE),
            algorithm=pick("algorithm", "algorithm", Algorithm.ECLAT),
            compare_algorithms=pick("compareAlgorithms", "compare_algorithms", False),
        )
