"""Decision samplers a remote sampling strategy is translated into."""

from opentelemetry.sdk.trace.sampling import Decision

from remotesampler.samplers.base import (
    ALWAYS_OFF,
    ALWAYS_ON,
    AlwaysOffSampler,
    AlwaysOnSampler,
    DecisionSampler,
)
from remotesampler.samplers.per_operation import PerOperationSampler
from remotesampler.samplers.probabilistic import ProbabilisticSampler, validate_probability
from remotesampler.samplers.rate_limiting import RateLimitingSampler, TokenBucket, validate_rate_limit

__all__ = [
    "Decision",
    "DecisionSampler",
    "AlwaysOnSampler",
    "AlwaysOffSampler",
    "ALWAYS_ON",
    "ALWAYS_OFF",
    "ProbabilisticSampler",
    "RateLimitingSampler",
    "TokenBucket",
    "PerOperationSampler",
    "validate_probability",
    "validate_rate_limit",
]
