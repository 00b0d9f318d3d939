import os
import sys
from decimal import Decimal

import pytest
from sqlalchemy.exc import OperationalError

# Ensure the backend root (containing the `guesser` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from guesser import create_app, db, socketio
from guesser.services.guesses.errors import PriceUnavailable
from guesser.services.guesses.store import PlayerStore
from guesser.services.prices.oracle import PriceQuote


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    RESOLUTION_WINDOW_SEC = 60
    RESOLUTION_SWEEP_SEC = 0


class FakeOracle:
    """Scripted price source. ``price = None`` means the oracle is down."""

    def __init__(self, price='100'):
        self.price = price
        self.calls = 0
        # One-shot callable run before the next quote, used to stage races
        self.before_quote = None

    def quote(self):
        self.calls += 1
        hook, self.before_quote = self.before_quote, None
        if hook is not None:
            hook()
        if self.price is None:
            raise PriceUnavailable()
        return PriceQuote(price=Decimal(str(self.price)))

    def current_price(self):
        return self.quote().price


class FlakySession:
    """Real session whose named methods start failing after N calls.

    ``FlakySession(db.session, commit=1)`` lets one commit through, then
    raises ``OperationalError`` the way a locked or lost database would.
    """

    def __init__(self, session, **allowed_calls):
        self._session = session
        self.allowed_calls = dict(allowed_calls)
        self.rollbacks = 0

    def _maybe_fail(self, name):
        if name not in self.allowed_calls:
            return
        if self.allowed_calls[name] <= 0:
            raise OperationalError(name.upper(), None, Exception('database is locked'))
        self.allowed_calls[name] -= 1

    def query(self, *args, **kwargs):
        self._maybe_fail('query')
        return self._session.query(*args, **kwargs)

    def execute(self, *args, **kwargs):
        self._maybe_fail('execute')
        return self._session.execute(*args, **kwargs)

    def commit(self):
        self._maybe_fail('commit')
        self._session.commit()

    def rollback(self):
        self.rollbacks += 1
        self._session.rollback()


@pytest.fixture()
def oracle():
    return FakeOracle()


@pytest.fixture()
def flask_app(oracle):
    application = create_app(TestConfig, price_oracle=oracle)
    with application.app_context():
        # Ensure models are imported so tables are created
        import guesser.models  # noqa: F401
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def store(flask_app):
    return PlayerStore(db.session)


@pytest.fixture()
def sio_client(flask_app):
    test_client = socketio.test_client(
        flask_app,
        flask_test_client=flask_app.test_client(),
        namespace='/ws'
    )
    yield test_client
    try:
        test_client.disconnect(namespace='/ws')
    except Exception:
        pass


@pytest.fixture()
def flaky_store(flask_app):
    def make(**allowed_calls):
        return PlayerStore(FlakySession(db.session, **allowed_calls))
    return make
