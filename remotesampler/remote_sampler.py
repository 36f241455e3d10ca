"""OpenTelemetry sampler whose policy is controlled by a remote endpoint."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Sequence

from opentelemetry.context import Context
from opentelemetry.sdk.trace.sampling import Decision, Sampler, SamplingResult
from opentelemetry.trace import Link, SpanKind
from opentelemetry.trace.span import TraceState
from opentelemetry.util.types import Attributes

from remotesampler.config import SamplerConfig, validate_config
from remotesampler.fetcher import HTTPStrategyFetcher, StrategyFetcher
from remotesampler.poller import StrategyPoller
from remotesampler.samplers import DecisionSampler, PerOperationSampler
from remotesampler.slot import SamplerSlot
from remotesampler.translator import ratio_sampler

logger = logging.getLogger(__name__)


class RemoteSampler(Sampler):
    """
    Sampler that applies the strategy served for ``service_name``.

    Sampling always goes through the currently installed sampler, which
    starts as a ratio sampler at ``initial_sampling_rate`` and is replaced
    wholesale whenever the background poller fetches a new strategy.
    Fetch or translation failures never reach callers; the last good
    sampler keeps serving.

    Usage:
        sampler = RemoteSampler(service_name="checkout", endpoint="http://agent:5778")
        provider = TracerProvider(sampler=sampler)
        ...
        sampler.shutdown()
    """

    def __init__(
        self,
        service_name: str,
        endpoint: Optional[str] = None,
        polling_interval: Optional[float] = None,
        initial_sampling_rate: Optional[float] = None,
        operation_overrides: Optional[Dict[str, float]] = None,
        fetcher: Optional[StrategyFetcher] = None,
        start_polling: bool = True,
    ) -> None:
        """
        Initialize the sampler and start polling.

        Args:
            service_name: Service whose strategy is fetched
            endpoint: Base URL of the sampling endpoint
            polling_interval: Seconds between polls (default 60)
            initial_sampling_rate: Ratio used until the first strategy arrives (default 0.001)
            operation_overrides: Initial per-operation ratios
            fetcher: Custom strategy fetcher (defaults to HTTP against ``endpoint``)
            start_polling: Start the background poller immediately

        Raises:
            ConfigError: if the configuration is invalid
        """
        values: Dict[str, Any] = {"service_name": service_name}
        for key, value in (
            ("endpoint", endpoint),
            ("polling_interval", polling_interval),
            ("initial_sampling_rate", initial_sampling_rate),
            ("operation_overrides", operation_overrides),
        ):
            if value is not None:
                values[key] = value
        self._setup(validate_config(values), fetcher, start_polling)

    @classmethod
    def from_config(
        cls,
        config: SamplerConfig,
        fetcher: Optional[StrategyFetcher] = None,
        start_polling: bool = True,
    ) -> "RemoteSampler":
        """Create a sampler from an already validated config."""
        sampler = cls.__new__(cls)
        sampler._setup(config, fetcher, start_polling)
        return sampler

    def _setup(
        self,
        config: SamplerConfig,
        fetcher: Optional[StrategyFetcher],
        start_polling: bool,
    ) -> None:
        self.config = config
        if config.debug:
            logging.getLogger("remotesampler").setLevel(logging.DEBUG)

        self._slot = SamplerSlot(initial_sampler(config.initial_sampling_rate, config.operation_overrides))
        # Only a fetcher built here is closed on shutdown; an injected one
        # belongs to the caller.
        self._owns_fetcher = fetcher is None
        self.fetcher = fetcher or HTTPStrategyFetcher(
            service_name=config.service_name,
            endpoint=config.endpoint,
            timeout=config.fetch_timeout,
        )
        self._poller = StrategyPoller(
            fetcher=self.fetcher,
            slot=self._slot,
            polling_interval=config.polling_interval,
        )
        logger.debug(
            "Remote sampler for service '%s' starting with %s",
            config.service_name,
            self._slot.load().describe(),
        )
        if start_polling:
            self._poller.start()

    @property
    def sampler(self) -> DecisionSampler:
        """The currently installed sampler."""
        return self._slot.load()

    @property
    def poller(self) -> StrategyPoller:
        return self._poller

    def decide(self, trace_id: int, operation_name: str = "") -> Decision:
        return self._slot.load().decide(trace_id, operation_name)

    def describe(self) -> str:
        return self._slot.load().describe()

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
        return self._slot.load().should_sample(
            parent_context,
            trace_id,
            name,
            kind=kind,
            attributes=attributes,
            links=links,
            trace_state=trace_state,
        )

    def get_description(self) -> str:
        return self.describe()

    def update_sampling_strategies(self) -> bool:
        """Poll once in the calling thread; see StrategyPoller.update_sampling_strategies."""
        return self._poller.update_sampling_strategies()

    def shutdown(self, timeout: Optional[float] = None) -> None:
        """Stop the background poller and close the default HTTP fetcher."""
        self._poller.shutdown(timeout=timeout)
        if self._owns_fetcher:
            self.fetcher.close()

    def __enter__(self) -> "RemoteSampler":
        return self

    def __exit__(self, *exc_info) -> None:
        self.shutdown()


def initial_sampler(
    initial_sampling_rate: float,
    operation_overrides: Optional[Dict[str, float]] = None,
) -> DecisionSampler:
    """Sampler used before any strategy has been fetched."""
    default_sampler = ratio_sampler(initial_sampling_rate)
    if not operation_overrides:
        return default_sampler
    return PerOperationSampler(
        default_sampler,
        {operation: ratio_sampler(rate) for operation, rate in operation_overrides.items()},
    )
