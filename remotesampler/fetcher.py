"""Sampling strategy fetchers."""

from __future__ import annotations

from typing import Optional

import requests

from remotesampler.errors import FetchError
from remotesampler.strategy import SamplingStrategyResponse

DEFAULT_ENDPOINT = "http://localhost:5778"
DEFAULT_SAMPLING_PATH = "/sampling"


class StrategyFetcher:
    """Base fetcher interface: returns the current strategy for this service."""

    def fetch(self) -> SamplingStrategyResponse:
        """
        Fetch the sampling strategy.

        Raises:
            FetchError: if the strategy could not be retrieved
        """
        raise NotImplementedError


class HTTPStrategyFetcher(StrategyFetcher):
    """
    Fetches strategies from a Jaeger-compatible HTTP sampling endpoint.

    Issues ``GET <endpoint><path>?service=<service_name>`` and decodes the
    JSON body. Transport errors, non-2xx statuses and undecodable bodies
    surface as FetchError; a decoded body with the wrong shape raises
    MalformedStrategyError.
    """

    def __init__(
        self,
        service_name: str,
        endpoint: str = DEFAULT_ENDPOINT,
        timeout: float = 10.0,
        path: str = DEFAULT_SAMPLING_PATH,
        session: Optional[requests.Session] = None,
    ) -> None:
        """
        Initialize the fetcher.

        Args:
            service_name: Service whose strategy is requested
            endpoint: Base URL of the sampling endpoint
            timeout: Request timeout in seconds
            path: Path appended to the endpoint
            session: Optional requests session (a new one is created otherwise)
        """
        self.service_name = service_name
        self.endpoint = endpoint
        self.timeout = timeout
        self.url = endpoint.rstrip("/") + "/" + path.lstrip("/") if path else endpoint
        self._session = session or requests.Session()

    def fetch(self) -> SamplingStrategyResponse:
        try:
            response = self._session.get(
                self.url,
                params={"service": self.service_name},
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.RequestException as e:
            raise FetchError(
                "failed to fetch sampling strategy",
                {"url": self.url, "service": self.service_name, "error": e},
            ) from e

        try:
            body = response.json()
        except ValueError as e:
            raise FetchError(
                "sampling strategy response is not valid JSON",
                {"url": self.url, "service": self.service_name},
            ) from e

        return SamplingStrategyResponse.from_dict(body)

    def close(self) -> None:
        self._session.close()
