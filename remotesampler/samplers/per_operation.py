"""Per-operation dispatching sampler."""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping, Optional

from opentelemetry.sdk.trace.sampling import Decision

from remotesampler.samplers.base import DecisionSampler


class PerOperationSampler(DecisionSampler):
    """
    Delegates to a sampler chosen by operation (span) name.

    Operations missing from the map fall back to ``default_sampler``.
    """

    def __init__(
        self,
        default_sampler: DecisionSampler,
        operation_map: Optional[Mapping[str, DecisionSampler]] = None,
    ) -> None:
        self._default_sampler = default_sampler
        self._operation_map = MappingProxyType(dict(operation_map or {}))

    @property
    def default_sampler(self) -> DecisionSampler:
        return self._default_sampler

    @property
    def operation_map(self) -> Mapping[str, DecisionSampler]:
        return self._operation_map

    def sampler_for(self, operation_name: str) -> DecisionSampler:
        return self._operation_map.get(operation_name, self._default_sampler)

    def decide(self, trace_id: int, operation_name: str = "") -> Decision:
        return self.sampler_for(operation_name).decide(trace_id, operation_name)

    def describe(self) -> str:
        per = ",".join(
            f"{operation}:{self._operation_map[operation].describe()}"
            for operation in sorted(self._operation_map)
        )
        return f"PerOperation{{default={self._default_sampler.describe()},per={{{per}}}}}"

    def __eq__(self, other) -> bool:
        return (
            isinstance(other, PerOperationSampler)
            and other._default_sampler == self._default_sampler
            and dict(other._operation_map) == dict(self._operation_map)
        )

    def __hash__(self) -> int:
        return hash((PerOperationSampler, self._default_sampler, frozenset(self._operation_map.items())))
