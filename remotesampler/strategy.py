"""Sampling strategy documents served by the remote sampling endpoint.

The shapes mirror the JSON a Jaeger-compatible sampling endpoint returns::

    {
      "strategyType": "PROBABILISTIC",
      "probabilisticSampling": {"samplingRate": 0.5},
      "rateLimitingSampling": {"maxTracesPerSecond": 100},
      "operationSampling": {
        "defaultSamplingProbability": 0.2,
        "perOperationStrategies": [
          {"operation": "GET /users", "probabilisticSampling": {"samplingRate": 1}}
        ]
      }
    }

All documents are immutable once parsed.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Tuple, Union

from remotesampler.errors import MalformedStrategyError


class SamplingStrategyType(enum.IntEnum):
    PROBABILISTIC = 0
    RATE_LIMITING = 1


@dataclass(frozen=True)
class ProbabilisticSamplingStrategy:
    sampling_rate: float


@dataclass(frozen=True)
class RateLimitingSamplingStrategy:
    max_traces_per_second: float


@dataclass(frozen=True)
class OperationSamplingStrategy:
    operation: str
    probabilistic_sampling: Optional[ProbabilisticSamplingStrategy] = None
    rate_limiting_sampling: Optional[RateLimitingSamplingStrategy] = None


@dataclass(frozen=True)
class PerOperationSamplingStrategies:
    default_sampling_probability: float
    per_operation_strategies: Tuple[OperationSamplingStrategy, ...] = ()


@dataclass(frozen=True)
class SamplingStrategyResponse:
    # Raw ints outside SamplingStrategyType are kept so the translator can reject them
    strategy_type: Optional[Union[SamplingStrategyType, int]] = None
    probabilistic_sampling: Optional[ProbabilisticSamplingStrategy] = None
    rate_limiting_sampling: Optional[RateLimitingSamplingStrategy] = None
    operation_sampling: Optional[PerOperationSamplingStrategies] = None

    def is_empty(self) -> bool:
        return (
            self.probabilistic_sampling is None
            and self.rate_limiting_sampling is None
            and self.operation_sampling is None
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SamplingStrategyResponse":
        """
        Build a response from a decoded JSON document.

        Accepts camelCase keys as served over the wire, or snake_case keys.

        Raises:
            MalformedStrategyError: if the document is structurally invalid
        """
        if not isinstance(data, Mapping):
            raise MalformedStrategyError(
                "sampling strategy document must be an object",
                {"type": type(data).__name__},
            )
        return cls(
            strategy_type=_parse_strategy_type(_get(data, "strategyType", "strategy_type")),
            probabilistic_sampling=_parse_probabilistic(
                _get(data, "probabilisticSampling", "probabilistic_sampling")
            ),
            rate_limiting_sampling=_parse_rate_limiting(
                _get(data, "rateLimitingSampling", "rate_limiting_sampling")
            ),
            operation_sampling=_parse_operation_sampling(
                _get(data, "operationSampling", "operation_sampling")
            ),
        )


def _get(data: Mapping[str, Any], camel: str, snake: str) -> Any:
    if camel in data:
        return data[camel]
    return data.get(snake)


def _number(value: Any, field: str) -> float:
    # Absent numeric fields take the protobuf zero value
    if value is None:
        return 0.0
    # bool is an int subclass but never a meaningful rate
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise MalformedStrategyError(f"'{field}' must be a number", {field: value})
    return float(value)


def _mapping(value: Any, field: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise MalformedStrategyError(f"'{field}' must be an object", {field: value})
    return value


def _parse_strategy_type(value: Any) -> Optional[Union[SamplingStrategyType, int]]:
    if value is None:
        return None
    if isinstance(value, str):
        try:
            return SamplingStrategyType[value.upper()]
        except KeyError:
            raise MalformedStrategyError(
                "unrecognized sampling strategy type", {"strategyType": value}
            ) from None
    if isinstance(value, bool) or not isinstance(value, int):
        raise MalformedStrategyError("'strategyType' must be a string or integer", {"strategyType": value})
    try:
        return SamplingStrategyType(value)
    except ValueError:
        return value


def _parse_probabilistic(value: Any) -> Optional[ProbabilisticSamplingStrategy]:
    if value is None:
        return None
    value = _mapping(value, "probabilisticSampling")
    return ProbabilisticSamplingStrategy(
        sampling_rate=_number(_get(value, "samplingRate", "sampling_rate"), "samplingRate"),
    )


def _parse_rate_limiting(value: Any) -> Optional[RateLimitingSamplingStrategy]:
    if value is None:
        return None
    value = _mapping(value, "rateLimitingSampling")
    return RateLimitingSamplingStrategy(
        max_traces_per_second=_number(
            _get(value, "maxTracesPerSecond", "max_traces_per_second"), "maxTracesPerSecond"
        ),
    )


def _parse_operation_sampling(value: Any) -> Optional[PerOperationSamplingStrategies]:
    if value is None:
        return None
    value = _mapping(value, "operationSampling")

    entries = _get(value, "perOperationStrategies", "per_operation_strategies")
    if entries is None:
        entries = []
    if not isinstance(entries, (list, tuple)):
        raise MalformedStrategyError(
            "'perOperationStrategies' must be a list", {"perOperationStrategies": entries}
        )

    strategies = []
    for entry in entries:
        entry = _mapping(entry, "perOperationStrategies[]")
        operation = entry.get("operation")
        if not isinstance(operation, str) or not operation:
            raise MalformedStrategyError("operation strategy is missing its operation name", {"entry": entry})
        strategies.append(
            OperationSamplingStrategy(
                operation=operation,
                probabilistic_sampling=_parse_probabilistic(
                    _get(entry, "probabilisticSampling", "probabilistic_sampling")
                ),
                rate_limiting_sampling=_parse_rate_limiting(
                    _get(entry, "rateLimitingSampling", "rate_limiting_sampling")
                ),
            )
        )

    return PerOperationSamplingStrategies(
        default_sampling_probability=_number(
            _get(value, "defaultSamplingProbability", "default_sampling_probability"),
            "defaultSamplingProbability",
        ),
        per_operation_strategies=tuple(strategies),
    )
