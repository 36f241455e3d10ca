"""Remotely controlled trace sampling for OpenTelemetry."""

from remotesampler.config import SamplerConfig, load_config
from remotesampler.errors import (
    ConfigError,
    FetchError,
    InvalidRateError,
    MalformedStrategyError,
    RemoteSamplerError,
)
from remotesampler.fetcher import HTTPStrategyFetcher, StrategyFetcher
from remotesampler.poller import PollerState, StrategyPoller
from remotesampler.remote_sampler import RemoteSampler
from remotesampler.samplers import (
    AlwaysOffSampler,
    AlwaysOnSampler,
    Decision,
    DecisionSampler,
    PerOperationSampler,
    ProbabilisticSampler,
    RateLimitingSampler,
)
from remotesampler.strategy import (
    OperationSamplingStrategy,
    PerOperationSamplingStrategies,
    ProbabilisticSamplingStrategy,
    RateLimitingSamplingStrategy,
    SamplingStrategyResponse,
    SamplingStrategyType,
)
from remotesampler.translator import translate

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "RemoteSampler",
    "SamplerConfig",
    "load_config",
    "StrategyFetcher",
    "HTTPStrategyFetcher",
    "StrategyPoller",
    "PollerState",
    "translate",
    "Decision",
    "DecisionSampler",
    "AlwaysOnSampler",
    "AlwaysOffSampler",
    "ProbabilisticSampler",
    "RateLimitingSampler",
    "PerOperationSampler",
    "SamplingStrategyResponse",
    "SamplingStrategyType",
    "ProbabilisticSamplingStrategy",
    "RateLimitingSamplingStrategy",
    "OperationSamplingStrategy",
    "PerOperationSamplingStrategies",
    "RemoteSamplerError",
    "ConfigError",
    "FetchError",
    "MalformedStrategyError",
    "InvalidRateError",
]
