"""Guess lifecycle: submission and pull-driven resolution.

A player holds at most one active guess. ``submit_guess`` attaches one,
``get_status`` scores it once it has aged past the resolution window and
the price has moved. Both commit through ``PlayerStore`` compare-and-swap
writes; the price oracle is always called outside of them.
"""
import logging
import time
from dataclasses import dataclass
from typing import Optional

from flask import current_app, has_app_context

from guesser.models import MAX_PLAYER_ID_LENGTH, ActiveGuess, Direction, PlayerRecord, quantize_price
from .errors import GuessAlreadyActive, InvalidInput, PriceUnavailable, StorageError
from .scoring import resolution_message, score_guess

NOT_FOUND_MESSAGE = 'Player not found, starting with score 0.'
MAX_SUBMIT_ATTEMPTS = 3


def _logger():
    return current_app.logger if has_app_context() else logging.getLogger(__name__)


@dataclass(frozen=True)
class StatusReport:
    player_id: str
    score: int
    active_guess: Optional[ActiveGuess] = None
    resolution_message: Optional[str] = None
    score_delta: int = 0

    @property
    def resolved(self) -> bool:
        return self.score_delta != 0

    def to_dict(self):
        return {
            'player_id': self.player_id,
            'score': self.score,
            'active_guess': self.active_guess.to_dict() if self.active_guess else None,
            'resolution_message': self.resolution_message,
            'score_delta': self.score_delta,
        }

    @classmethod
    def of(cls, record: PlayerRecord) -> 'StatusReport':
        return cls(player_id=record.player_id, score=record.score, active_guess=record.active_guess)


def _validate_player_id(player_id) -> str:
    if not isinstance(player_id, str) or not player_id.strip():
        raise InvalidInput('player_id is required')
    player_id = player_id.strip()
    if len(player_id) > MAX_PLAYER_ID_LENGTH:
        raise InvalidInput(f'player_id must be at most {MAX_PLAYER_ID_LENGTH} characters')
    return player_id


def _parse_direction(direction) -> Direction:
    try:
        return Direction(direction)
    except ValueError:
        raise InvalidInput(f'guess must be "up" or "down", got {direction!r}') from None


def submit_guess(store, oracle, player_id, direction, now: Optional[float] = None) -> ActiveGuess:
    """Attach a new active guess to the player, creating the player if needed.

    Raises InvalidInput, GuessAlreadyActive, PriceUnavailable or StorageError.
    Nothing is written unless the whole guess is committed.
    """
    player_id = _validate_player_id(player_id)
    direction = _parse_direction(direction)
    log = _logger()

    record = store.get(player_id)
    if record is not None and record.active_guess is not None:
        raise GuessAlreadyActive()

    # Prices are compared at column scale
    initial_price = quantize_price(oracle.current_price())
    guess = ActiveGuess(
        initial_price=initial_price,
        direction=direction,
        submitted_at=time.time() if now is None else now,
    )

    for attempt in range(MAX_SUBMIT_ATTEMPTS):
        if record is None:
            committed = store.put_if_absent(PlayerRecord(player_id=player_id, score=0, active_guess=guess))
        else:
            committed = store.conditional_update(player_id, record.version, active_guess=guess)
        if committed:
            log.info(f"[guess-submit] player={player_id} direction={direction.value} price={initial_price}")
            return guess

        # Someone else wrote first; only retry if the player is still guess-free
        log.info(f"[guess-conflict] player={player_id} attempt={attempt + 1}")
        record = store.get(player_id)
        if record is not None and record.active_guess is not None:
            raise GuessAlreadyActive()

    raise StorageError(f'Could not attach guess for {player_id} after {MAX_SUBMIT_ATTEMPTS} attempts')


def get_status(store, oracle, player_id, window_sec: float, now: Optional[float] = None) -> StatusReport:
    """Report the player's status, resolving the active guess if it is due.

    Resolution is deferred (guess left untouched) while the guess is younger
    than ``window_sec``, while the oracle is unavailable, and while the price
    equals the initial price. The score+clear write is conditioned on the
    version read with the guess, so concurrent pollers score it at most once.
    """
    player_id = _validate_player_id(player_id)
    now = time.time() if now is None else now
    log = _logger()

    record = store.get(player_id)
    if record is None:
        return StatusReport(player_id=player_id, score=0, resolution_message=NOT_FOUND_MESSAGE)

    guess = record.active_guess
    if guess is None:
        return StatusReport.of(record)

    age = guess.age(now)
    if age < window_sec:
        log.debug(f"[resolve-skip] player={player_id} age={age:.1f}s window={window_sec}s")
        return StatusReport.of(record)

    try:
        resolved_price = quantize_price(oracle.current_price())
    except PriceUnavailable:
        log.warning(f"[resolve-defer] player={player_id} price unavailable, guess remains active")
        return StatusReport.of(record)

    if resolved_price == guess.initial_price:
        log.info(f"[resolve-defer] player={player_id} price {resolved_price} unchanged, guess remains active")
        return StatusReport.of(record)

    delta = score_guess(guess.direction, guess.initial_price, resolved_price)
    new_score = record.score + delta
    if not store.conditional_update(player_id, record.version, score=new_score, active_guess=None):
        # Another poller already resolved (or changed) this record
        log.info(f"[resolve-conflict] player={player_id} version={record.version} already updated")
        current = store.get(player_id)
        return StatusReport.of(current) if current else StatusReport(player_id=player_id, score=0)

    message = resolution_message(delta, guess.initial_price, resolved_price)
    log.info(f"[resolve] player={player_id} delta={delta:+d} score={new_score} {message}")
    return StatusReport(
        player_id=player_id,
        score=new_score,
        active_guess=None,
        resolution_message=message,
        score_delta=delta,
    )
