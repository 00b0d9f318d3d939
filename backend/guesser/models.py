from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Optional

from guesser import db

MAX_PLAYER_ID_LENGTH = 128
# Matches the scale of the guess_initial_price column
PRICE_QUANTUM = Decimal('1e-8')


def quantize_price(price) -> Decimal:
    """Round a price to the precision the player table stores."""
    return Decimal(price).quantize(PRICE_QUANTUM)


def format_price(price) -> str:
    """Plain decimal text with trailing zeros dropped, e.g. '64000.5'."""
    return format(Decimal(price).normalize(), 'f')


class Direction(str, Enum):
    UP = 'up'
    DOWN = 'down'


@dataclass(frozen=True)
class ActiveGuess:
    initial_price: Decimal
    direction: Direction
    submitted_at: float  # epoch seconds

    def age(self, now: float) -> float:
        return now - self.submitted_at

    def to_dict(self):
        return {
            'initial_price': format_price(self.initial_price),
            'direction': self.direction.value,
            # Clients work in epoch milliseconds
            'timestamp': int(self.submitted_at * 1000),
        }


@dataclass(frozen=True)
class PlayerRecord:
    """Detached snapshot of a player row.

    ``version`` is the optimistic-concurrency token the snapshot was read at;
    writes conditioned on it fail if anyone else wrote in between.
    """
    player_id: str
    score: int = 0
    active_guess: Optional[ActiveGuess] = None
    version: int = 0


class Player(db.Model):
    __tablename__ = 'player'
    player_id = db.Column(db.String(MAX_PLAYER_ID_LENGTH), primary_key=True)
    score = db.Column(db.Integer, default=0, nullable=False)
    version = db.Column(db.Integer, default=0, nullable=False)
    # Active guess, embedded; all three set or all three null
    guess_direction = db.Column(db.String(8), nullable=True)
    guess_initial_price = db.Column(db.Numeric(20, 8), nullable=True)
    guess_submitted_at = db.Column(db.Float, nullable=True, index=True)

    @property
    def active_guess(self) -> Optional[ActiveGuess]:
        if self.guess_direction is None or self.guess_initial_price is None or self.guess_submitted_at is None:
            return None
        return ActiveGuess(
            initial_price=quantize_price(self.guess_initial_price),
            direction=Direction(self.guess_direction),
            submitted_at=float(self.guess_submitted_at),
        )

    def to_record(self) -> PlayerRecord:
        return PlayerRecord(
            player_id=self.player_id,
            score=int(self.score or 0),
            active_guess=self.active_guess,
            version=int(self.version or 0),
        )


def guess_columns(guess: Optional[ActiveGuess]) -> dict:
    """Column values that store (or clear, for ``None``) an embedded guess."""
    if guess is None:
        return {'guess_direction': None, 'guess_initial_price': None, 'guess_submitted_at': None}
    return {
        'guess_direction': guess.direction.value,
        'guess_initial_price': guess.initial_price,
        'guess_submitted_at': guess.submitted_at,
    }
