"""Decision sampler interface and the constant samplers."""

from __future__ import annotations

from typing import Optional, Sequence

from opentelemetry.context import Context
from opentelemetry.sdk.trace.sampling import Decision, Sampler, SamplingResult
from opentelemetry.trace import Link, SpanKind, get_current_span
from opentelemetry.trace.span import TraceState
from opentelemetry.util.types import Attributes


class DecisionSampler(Sampler):
    """
    Base class for the samplers a remote strategy can be translated into.

    Subclasses implement ``decide`` and ``describe``; the OpenTelemetry
    ``should_sample``/``get_description`` contract is derived from them so
    every sampler can be handed to a ``TracerProvider`` directly. Trace ids
    are 128-bit ints, the form OpenTelemetry passes to ``should_sample``.

    A sampler's configuration never changes after construction. Updating
    the policy means building a new sampler.
    """

    def decide(self, trace_id: int, operation_name: str = "") -> Decision:
        raise NotImplementedError

    def describe(self) -> str:
        raise NotImplementedError

    def should_sample(
        self,
        parent_context: Optional[Context],
        trace_id: int,
        name: str,
        kind: SpanKind = None,
        attributes: Attributes = None,
        links: Sequence[Link] = None,
        trace_state: TraceState = None,
    ) -> SamplingResult:
        decision = self.decide(trace_id, name)
        if decision is Decision.DROP:
            attributes = None
        return SamplingResult(
            decision,
            attributes,
            _parent_trace_state(parent_context),
        )

    def get_description(self) -> str:
        return self.describe()

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.describe()}>"


class AlwaysOnSampler(DecisionSampler):
    """Samples every trace."""

    def decide(self, trace_id: int, operation_name: str = "") -> Decision:
        return Decision.RECORD_AND_SAMPLE

    def describe(self) -> str:
        return "AlwaysOn"

    def __eq__(self, other) -> bool:
        return isinstance(other, AlwaysOnSampler)

    def __hash__(self) -> int:
        return hash(AlwaysOnSampler)


class AlwaysOffSampler(DecisionSampler):
    """Drops every trace."""

    def decide(self, trace_id: int, operation_name: str = "") -> Decision:
        return Decision.DROP

    def describe(self) -> str:
        return "AlwaysOff"

    def __eq__(self, other) -> bool:
        return isinstance(other, AlwaysOffSampler)

    def __hash__(self) -> int:
        return hash(AlwaysOffSampler)


ALWAYS_ON = AlwaysOnSampler()
ALWAYS_OFF = AlwaysOffSampler()


def _parent_trace_state(parent_context: Optional[Context]) -> Optional[TraceState]:
    parent_span_context = get_current_span(parent_context).get_span_context()
    if parent_span_context is None or not parent_span_context.is_valid:
        return None
    return parent_span_context.trace_state
