import logging
from decimal import Decimal

import pytest
import requests

from guesser.services.guesses.errors import PriceUnavailable
from guesser.services.prices.oracle import COINBASE_SPOT_URL, CoinbasePriceOracle


class FakeResponse:
    def __init__(self, payload=None, status_code=200, body_error=None):
        self.payload = payload
        self.status_code = status_code
        self.body_error = body_error

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f'{self.status_code} error')

    def json(self):
        if self.body_error:
            raise self.body_error
        return self.payload


@pytest.fixture()
def fake_get(monkeypatch):
    calls = []

    def install(response):
        def _get(url, timeout=None):
            calls.append({'url': url, 'timeout': timeout})
            if isinstance(response, Exception):
                raise response
            return response
        monkeypatch.setattr(requests, 'get', _get)
        return calls

    return install


def test_current_price_parses_decimal(fake_get):
    calls = fake_get(FakeResponse({'data': {'amount': '64123.45', 'base': 'BTC', 'currency': 'USD'}}))
    oracle = CoinbasePriceOracle(timeout=2.5)
    assert oracle.current_price() == Decimal('64123.45')
    assert calls == [{'url': COINBASE_SPOT_URL, 'timeout': 2.5}]


def test_quote_reports_source(fake_get):
    fake_get(FakeResponse({'data': {'amount': '10', 'currency': 'USD'}}))
    quote = CoinbasePriceOracle().quote()
    assert (quote.price, quote.currency, quote.source) == (Decimal('10'), 'USD', 'Coinbase')


@pytest.mark.parametrize('response', [
    requests.ConnectionError('boom'),
    requests.Timeout('slow'),
    FakeResponse(status_code=502),
    FakeResponse(body_error=ValueError('not json')),
    FakeResponse({'errors': [{'id': 'not_found'}]}),
    FakeResponse({'data': {}}),
    FakeResponse({'data': {'amount': 'abc'}}),
    FakeResponse({'data': {'amount': '-1'}}),
    FakeResponse(['unexpected']),
])
def test_failures_raise_price_unavailable(fake_get, response, caplog):
    fake_get(response)
    with caplog.at_level(logging.WARNING):
        with pytest.raises(PriceUnavailable):
            CoinbasePriceOracle().current_price()
    assert '[price-error]' in caplog.text
