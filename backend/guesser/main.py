from flask import Blueprint, jsonify, current_app

main = Blueprint('main', __name__)

@main.route('/')
def index():
    return jsonify({
        'message': 'Welcome to the BTC guesser server!',
        'resolution_window_sec': int(current_app.config.get('RESOLUTION_WINDOW_SEC', 60)),
    })
