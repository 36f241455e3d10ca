"""Translate fetched sampling strategies into decision samplers."""

from __future__ import annotations

import logging
from typing import Dict

from remotesampler.errors import InvalidRateError, MalformedStrategyError
from remotesampler.samplers import (
    ALWAYS_ON,
    DecisionSampler,
    PerOperationSampler,
    ProbabilisticSampler,
    RateLimitingSampler,
    validate_probability,
)
from remotesampler.strategy import (
    OperationSamplingStrategy,
    PerOperationSamplingStrategies,
    SamplingStrategyResponse,
    SamplingStrategyType,
)

logger = logging.getLogger(__name__)


def translate(response: SamplingStrategyResponse, current_sampler: DecisionSampler) -> DecisionSampler:
    """
    Build the sampler described by ``response``.

    Returns ``current_sampler`` itself when the response carries no strategy,
    so callers can tell "nothing to apply" apart from an update with an
    identity check.

    Translation is all-or-nothing: nothing is returned unless every part of
    the document is valid.

    Raises:
        MalformedStrategyError: if the document is unrecognized, inconsistent,
            or carries an out-of-range rate
    """
    try:
        return _translate(response, current_sampler)
    except InvalidRateError as e:
        raise MalformedStrategyError(f"invalid sampling strategy: {e.message}", e.details) from e


def _translate(response: SamplingStrategyResponse, current_sampler: DecisionSampler) -> DecisionSampler:
    if response.operation_sampling is not None:
        return _per_operation_sampler(response.operation_sampling)

    strategy_type = response.strategy_type
    if strategy_type is not None and not isinstance(strategy_type, SamplingStrategyType):
        raise MalformedStrategyError("unrecognized sampling strategy type", {"strategy_type": strategy_type})

    probabilistic = response.probabilistic_sampling
    rate_limiting = response.rate_limiting_sampling

    if strategy_type is None and probabilistic is not None and rate_limiting is not None:
        raise MalformedStrategyError(
            "ambiguous sampling strategy: both probabilistic and rate limiting are set without a strategy type"
        )

    if strategy_type is SamplingStrategyType.PROBABILISTIC and probabilistic is None and rate_limiting is not None:
        raise MalformedStrategyError(
            "strategy type is PROBABILISTIC but only rate limiting sampling is set"
        )
    if strategy_type is SamplingStrategyType.RATE_LIMITING and rate_limiting is None and probabilistic is not None:
        raise MalformedStrategyError(
            "strategy type is RATE_LIMITING but only probabilistic sampling is set"
        )

    if probabilistic is not None and strategy_type is not SamplingStrategyType.RATE_LIMITING:
        return ratio_sampler(probabilistic.sampling_rate)
    if rate_limiting is not None:
        return RateLimitingSampler(rate_limiting.max_traces_per_second)

    logger.debug("Sampling strategy response carries no strategy, keeping %s", current_sampler.describe())
    return current_sampler


def ratio_sampler(rate: float) -> DecisionSampler:
    """Ratio sampler for ``rate``; a rate of exactly 1 samples everything."""
    if validate_probability(rate) == 1.0:
        return ALWAYS_ON
    return ProbabilisticSampler(rate)


def _per_operation_sampler(strategies: PerOperationSamplingStrategies) -> PerOperationSampler:
    default_sampler = ratio_sampler(strategies.default_sampling_probability)
    operation_map: Dict[str, DecisionSampler] = {}
    for strategy in strategies.per_operation_strategies:
        operation_map[strategy.operation] = _operation_sampler(strategy)
    return PerOperationSampler(default_sampler, operation_map)


def _operation_sampler(strategy: OperationSamplingStrategy) -> DecisionSampler:
    probabilistic = strategy.probabilistic_sampling
    rate_limiting = strategy.rate_limiting_sampling
    if probabilistic is not None and rate_limiting is not None:
        raise MalformedStrategyError(
            "operation strategy sets both probabilistic and rate limiting sampling",
            {"operation": strategy.operation},
        )
    if probabilistic is not None:
        return ratio_sampler(probabilistic.sampling_rate)
    if rate_limiting is not None:
        return RateLimitingSampler(rate_limiting.max_traces_per_second)
    raise MalformedStrategyError(
        "operation strategy sets neither probabilistic nor rate limiting sampling",
        {"operation": strategy.operation},
    )
