"""Trace-id ratio sampler."""

from __future__ import annotations

import math

from opentelemetry.sdk.trace.sampling import Decision, TraceIdRatioBased

from remotesampler.errors import InvalidRateError
from remotesampler.samplers.base import DecisionSampler


class ProbabilisticSampler(DecisionSampler):
    """
    Samples a fixed fraction of traces, keyed on the trace id.

    The decision compares the low 64 bits of the trace id against a bound
    derived from the rate, exactly as OpenTelemetry's ``TraceIdRatioBased``
    does, so it is a pure function of the trace id and agrees with other
    services sampling the same trace at the same rate.
    """

    TRACE_ID_LIMIT = TraceIdRatioBased.TRACE_ID_LIMIT

    def __init__(self, rate: float) -> None:
        self._rate = validate_probability(rate)
        self._bound = TraceIdRatioBased.get_bound_for_rate(self._rate)

    @property
    def rate(self) -> float:
        return self._rate

    @property
    def bound(self) -> int:
        return self._bound

    def decide(self, trace_id: int, operation_name: str = "") -> Decision:
        if trace_id & self.TRACE_ID_LIMIT < self._bound:
            return Decision.RECORD_AND_SAMPLE
        return Decision.DROP

    def describe(self) -> str:
        return f"ProbabilisticRatio{{{self._rate}}}"

    def __eq__(self, other) -> bool:
        return isinstance(other, ProbabilisticSampler) and other._rate == self._rate

    def __hash__(self) -> int:
        return hash((ProbabilisticSampler, self._rate))


def validate_probability(rate: float) -> float:
    """Return ``rate`` as a float, raising InvalidRateError outside [0, 1]."""
    try:
        value = float(rate)
    except (TypeError, ValueError) as e:
        raise InvalidRateError("sampling rate must be a number", {"rate": rate}) from e
    if math.isnan(value) or not 0.0 <= value <= 1.0:
        raise InvalidRateError("sampling rate must be between 0.0 and 1.0", {"rate": rate})
    return value
