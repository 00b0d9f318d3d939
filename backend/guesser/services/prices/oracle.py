import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

import requests

from guesser.services.guesses.errors import PriceUnavailable

log = logging.getLogger(__name__)

COINBASE_SPOT_URL = 'https://api.coinbase.com/v2/prices/BTC-USD/spot'


@dataclass(frozen=True)
class PriceQuote:
    price: Decimal
    currency: str = 'USD'
    source: str = 'Coinbase'


class CoinbasePriceOracle:
    """Current BTC spot price from the Coinbase v2 prices API.

    Any failure (timeout, HTTP error, unexpected payload) raises
    ``PriceUnavailable`` so callers can defer and retry on the next poll.
    """

    def __init__(self, url=None, timeout=5.0, session=None):
        self.url = url or COINBASE_SPOT_URL
        self.timeout = timeout
        self.http = session or requests

    def quote(self) -> PriceQuote:
        try:
            r = self.http.get(self.url, timeout=self.timeout)
            r.raise_for_status()
            payload = r.json()
        except requests.RequestException as exc:
            log.warning(f"[price-error] url={self.url} error={exc}")
            raise PriceUnavailable() from exc
        except ValueError as exc:
            log.warning(f"[price-error] url={self.url} invalid JSON: {exc}")
            raise PriceUnavailable() from exc

        data = payload.get('data') if isinstance(payload, dict) else None
        amount = data.get('amount') if isinstance(data, dict) else None
        if amount in (None, ''):
            log.error(f"[price-error] unexpected payload from {self.url}: {payload}")
            raise PriceUnavailable()
        try:
            # Parse from the string so no float rounding creeps in
            price = Decimal(str(amount))
        except InvalidOperation as exc:
            log.error(f"[price-error] unparseable amount {amount!r}")
            raise PriceUnavailable() from exc
        if not price.is_finite() or price <= 0:
            log.error(f"[price-error] implausible amount {amount!r}")
            raise PriceUnavailable()
        return PriceQuote(price=price, currency=data.get('currency') or 'USD')

    def current_price(self) -> Decimal:
        return self.quote().price
