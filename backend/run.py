from guesser import create_app, socketio
from guesser.services.guesses.sweeper import start_resolution_sweeper

app = create_app()

if __name__ == '__main__':
    # Sweeper is a no-op unless RESOLUTION_SWEEP_SEC is set
    start_resolution_sweeper(app)
    # Use SocketIO server to enable websockets in dev
    socketio.run(app, debug=True)
