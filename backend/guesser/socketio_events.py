from flask_socketio import join_room, leave_room, emit
from guesser.services.guesses.notify import player_room


def handle_connect():
    emit('connected', {'message': 'Connected to /ws'})


def handle_watch_player(data):
    player_id = (data or {}).get('player_id')
    if not player_id:
        emit('error', {'message': 'player_id is required'})
        return
    room = player_room(player_id)
    join_room(room)
    emit('watching', {'room': room})


def handle_unwatch_player(data):
    player_id = (data or {}).get('player_id')
    if not player_id:
        emit('error', {'message': 'player_id is required'})
        return
    room = player_room(player_id)
    leave_room(room)
    emit('unwatched', {'room': room})


def handle_ping(data):
    emit('pong', data or {})


def register_socketio_handlers(testing: bool = False) -> None:
    """Register Socket.IO event handlers.

    Always register on namespace '/ws'. When testing is True, also mirror
    handlers on the default namespace '/' to accommodate the test harness.
    """
    from guesser import socketio

    handlers = {
        'connect': handle_connect,
        'watch_player': handle_watch_player,
        'unwatch_player': handle_unwatch_player,
        'ping': handle_ping,
    }
    namespaces = ['/ws', '/'] if testing else ['/ws']
    for namespace in namespaces:
        for event, handler in handlers.items():
            socketio.on_event(event, handler, namespace=namespace)
