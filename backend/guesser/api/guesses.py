from flask import Blueprint, jsonify, request, current_app
from guesser import db
from guesser.models import format_price
from guesser.services.guesses.errors import GuessError
from guesser.services.guesses.lifecycle import StatusReport, get_status, submit_guess
from guesser.services.guesses.notify import publish_status
from guesser.services.guesses.store import PlayerStore


guesses = Blueprint('guesses', __name__)


def _oracle():
    return current_app.extensions['price_oracle']


def _window() -> int:
    try:
        return int(current_app.config.get('RESOLUTION_WINDOW_SEC', 60))
    except (TypeError, ValueError):
        return 60


@guesses.errorhandler(GuessError)
def handle_guess_error(exc: GuessError):
    if exc.status_code >= 500:
        current_app.logger.error(f"[error] {request.method} {request.path} -> {exc.status_code}: {exc.message}")
    return jsonify(exc.to_dict()), exc.status_code


@guesses.route('/guesses', methods=['POST'])
def create_guess():
    data = request.get_json(silent=True) or {}
    # Accept the camelCase key the web client sends
    player_id = data.get('player_id', data.get('playerId'))
    direction = data.get('guess', data.get('direction'))

    store = PlayerStore(db.session)
    guess = submit_guess(store, _oracle(), player_id, direction)
    player_id = player_id.strip()

    # Emit live update to any client watching this player. The guess is
    # already committed, so a failed read here must not fail the request.
    try:
        record = store.get(player_id)
    except GuessError as exc:
        current_app.logger.warning(f"[push-skip] player={player_id} {exc.message}")
        record = None
    if record is not None:
        publish_status(StatusReport.of(record).to_dict())

    return jsonify({
        'message': 'Guess submitted successfully.',
        'player_id': player_id,
        'active_guess': guess.to_dict(),
    }), 201


@guesses.route('/players/<string:player_id>/status', methods=['GET'])
def player_status(player_id):
    report = get_status(PlayerStore(db.session), _oracle(), player_id, _window())
    if report.resolved:
        publish_status(report.to_dict())
    return jsonify(report.to_dict())


@guesses.route('/price', methods=['GET'])
def current_price():
    quote = _oracle().quote()
    return jsonify({
        'price': format_price(quote.price),
        'currency': quote.currency,
        'source': quote.source,
    })
