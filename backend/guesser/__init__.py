from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_cors import CORS
from flask_migrate import Migrate
from flask_socketio import SocketIO
import click
from config import Config

db = SQLAlchemy()
migrate = Migrate()
socketio = SocketIO(async_mode=None)

def create_app(config_class=Config, price_oracle=None):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    allowed_origins = flask_app.config.get('CORS_ORIGINS') or []

    db.init_app(flask_app)
    migrate.init_app(flask_app, db)
    CORS(flask_app, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # The price oracle is an explicit collaborator; tests hand in a fake one
    if price_oracle is None:
        from guesser.services.prices.oracle import CoinbasePriceOracle
        price_oracle = CoinbasePriceOracle(
            url=flask_app.config.get('PRICE_SOURCE_URL'),
            timeout=float(flask_app.config.get('PRICE_TIMEOUT_SEC', 5)),
        )
    flask_app.extensions['price_oracle'] = price_oracle

    # Import and register blueprints here
    from guesser.main import main
    flask_app.register_blueprint(main)

    from guesser.api.guesses import guesses
    # Mount guess routes under /api to match frontend API client
    flask_app.register_blueprint(guesses, url_prefix='/api')

    # Register Socket.IO event handlers
    from guesser.socketio_events import register_socketio_handlers
    register_socketio_handlers(testing=flask_app.config.get('TESTING', False))

    @click.command('db-reset')
    def db_reset_command():
        """Drops and recreates the database."""
        import guesser.models  # noqa: F401
        with flask_app.app_context():
            db.drop_all()
            db.create_all()
            print('Database has been reset!')

    @click.command('resolve-guesses')
    def resolve_guesses_command():
        """Resolves every guess that has aged past the resolution window."""
        from guesser.services.guesses.sweeper import resolve_due_guesses
        with flask_app.app_context():
            resolved = resolve_due_guesses(flask_app)
            print(f'Resolved {len(resolved)} guess(es).')

    flask_app.cli.add_command(db_reset_command)
    flask_app.cli.add_command(resolve_guesses_command)

    return flask_app
