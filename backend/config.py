import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///btc_guesser.db'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    # Seconds a guess must age before it can be scored
    RESOLUTION_WINDOW_SEC = int(os.environ.get('RESOLUTION_WINDOW_SEC', '60'))
    # Spot price source (Coinbase v2 API shape)
    PRICE_SOURCE_URL = os.environ.get('PRICE_SOURCE_URL') or 'https://api.coinbase.com/v2/prices/BTC-USD/spot'
    PRICE_TIMEOUT_SEC = float(os.environ.get('PRICE_TIMEOUT_SEC', '5'))
    # Optional: background sweep interval for due guesses (sec). 0 disables.
    RESOLUTION_SWEEP_SEC = int(os.environ.get('RESOLUTION_SWEEP_SEC', '0'))
    # Comma-separated list of allowed browser origins
    CORS_ORIGINS = [
        o.strip() for o in (
            os.environ.get('CORS_ORIGINS')
            or 'http://localhost:5173,http://127.0.0.1:5173,http://localhost:5174,http://127.0.0.1:5174'
        ).split(',') if o.strip()
    ]
