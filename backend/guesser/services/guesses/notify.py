from guesser import socketio


def player_room(player_id: str) -> str:
    return f"player:{player_id}"


def publish_status(payload: dict) -> None:
    """Push a player's status to every socket watching that player."""
    socketio.emit('status_update', payload, to=player_room(payload['player_id']), namespace='/ws')
