import time
from typing import List, Optional

from guesser import db, socketio
from .errors import GuessError
from .lifecycle import StatusReport, get_status
from .notify import publish_status
from .store import PlayerStore

_sweeper_started = False


def resolve_due_guesses(app, now: Optional[float] = None) -> List[StatusReport]:
    """Resolve every guess older than the resolution window.

    Runs the same conditional resolution as a status poll, so a guess that a
    poller resolves concurrently is still scored only once. Must be called
    inside an app context.
    """
    now = time.time() if now is None else now
    window = int(app.config.get('RESOLUTION_WINDOW_SEC', 60))
    oracle = app.extensions['price_oracle']
    store = PlayerStore(db.session)

    resolved = []
    for player_id in store.due_player_ids(now - window):
        try:
            report = get_status(store, oracle, player_id, window, now=now)
        except GuessError as exc:
            app.logger.warning(f"[sweep-error] player={player_id} {exc.message}")
            continue
        if report.resolved:
            publish_status(report.to_dict())
            resolved.append(report)
    app.logger.info(f"[sweep] resolved={len(resolved)}")
    return resolved


def start_resolution_sweeper(app) -> bool:
    """Start the background sweep loop if RESOLUTION_SWEEP_SEC is set.

    - No-ops in TESTING mode, or when the interval is 0
    - Starts at most one loop per process
    """
    global _sweeper_started
    try:
        interval = int(app.config.get('RESOLUTION_SWEEP_SEC', 0))
    except (TypeError, ValueError):
        interval = 0
    if interval <= 0 or app.config.get('TESTING') or _sweeper_started:
        return False
    _sweeper_started = True

    def _worker(delay: int):
        while True:
            socketio.sleep(delay)
            with app.app_context():
                try:
                    resolve_due_guesses(app)
                except GuessError as exc:
                    app.logger.warning(f"[sweep-error] {exc.message}")
                finally:
                    db.session.remove()

    app.logger.info(f"[sweep-start] interval={interval}s")
    socketio.start_background_task(_worker, interval)
    return True
