"""Tests for the HTTP strategy fetcher."""

import unittest
from unittest import mock

import requests

from remotesampler.errors import FetchError, MalformedStrategyError
from remotesampler.fetcher import HTTPStrategyFetcher
from remotesampler.strategy import SamplingStrategyType


def _response(status=200, body=None, json_error=None):
    response = mock.Mock(spec=requests.Response)
    response.status_code = status
    if status >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(f"{status} Error")
    else:
        response.raise_for_status.return_value = None
    if json_error is not None:
        response.json.side_effect = json_error
    else:
        response.json.return_value = body
    return response


class TestHTTPStrategyFetcher(unittest.TestCase):
    """Test fetching strategies over HTTP."""

    def setUp(self):
        self.session = mock.Mock(spec=requests.Session)
        self.fetcher = HTTPStrategyFetcher(
            service_name="foo",
            endpoint="http://localhost:5778/",
            timeout=2.5,
            session=self.session,
        )

    def test_request_shape(self):
        self.session.get.return_value = _response(body={})
        self.fetcher.fetch()
        self.session.get.assert_called_once_with(
            "http://localhost:5778/sampling",
            params={"service": "foo"},
            timeout=2.5,
        )

    def test_decodes_strategy(self):
        self.session.get.return_value = _response(
            body={"strategyType": "RATE_LIMITING", "rateLimitingSampling": {"maxTracesPerSecond": 42}}
        )
        response = self.fetcher.fetch()
        self.assertIs(response.strategy_type, SamplingStrategyType.RATE_LIMITING)
        self.assertEqual(response.rate_limiting_sampling.max_traces_per_second, 42.0)

    def test_connection_error(self):
        self.session.get.side_effect = requests.ConnectionError("refused")
        with self.assertRaises(FetchError) as ctx:
            self.fetcher.fetch()
        self.assertEqual(ctx.exception.details["service"], "foo")

    def test_http_error_status(self):
        self.session.get.return_value = _response(status=503)
        with self.assertRaises(FetchError):
            self.fetcher.fetch()

    def test_invalid_json(self):
        self.session.get.return_value = _response(json_error=ValueError("Expecting value"))
        with self.assertRaises(FetchError):
            self.fetcher.fetch()

    def test_wrong_document_shape(self):
        self.session.get.return_value = _response(body=["not", "an", "object"])
        with self.assertRaises(MalformedStrategyError):
            self.fetcher.fetch()

    def test_custom_path(self):
        fetcher = HTTPStrategyFetcher("bar", endpoint="http://agent:14268", path="api/sampling", session=self.session)
        self.assertEqual(fetcher.url, "http://agent:14268/api/sampling")

    def test_close_closes_session(self):
        self.fetcher.close()
        self.session.close.assert_called_once_with()


if __name__ == "__main__":
    unittest.main()
