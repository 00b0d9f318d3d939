from typing import List, Optional

from sqlalchemy import insert
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from guesser.models import Player, PlayerRecord, guess_columns
from .errors import StorageError

_UNSET = object()


class PlayerStore:
    """Keyed player store with compare-and-swap writes.

    Every write is a single statement conditioned on the row's ``version``,
    so two requests racing on the same player cannot both win. Any database
    failure rolls the session back and surfaces as ``StorageError``.
    """

    def __init__(self, session):
        self.session = session

    def get(self, player_id: str) -> Optional[PlayerRecord]:
        try:
            # Bypass the identity map so we never act on a stale snapshot
            player = (
                self.session.query(Player)
                .populate_existing()
                .filter_by(player_id=player_id)
                .first()
            )
            record = player.to_record() if player else None
            self.session.commit()
            return record
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise StorageError(f'Failed to read player {player_id}') from exc

    def put_if_absent(self, record: PlayerRecord) -> bool:
        """Insert a brand-new player; False if the key already exists."""
        try:
            self.session.execute(
                insert(Player).values(
                    player_id=record.player_id,
                    score=record.score,
                    version=record.version,
                    **guess_columns(record.active_guess),
                )
            )
            self.session.commit()
            return True
        except IntegrityError:
            self.session.rollback()
            return False
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise StorageError(f'Failed to create player {record.player_id}') from exc

    def conditional_update(self, player_id: str, expected_version: int, score=_UNSET, active_guess=_UNSET) -> bool:
        """Apply changes iff the row is still at ``expected_version``.

        ``active_guess`` may be an ``ActiveGuess`` to attach or ``None`` to
        clear. Returns False on conflict (row changed or vanished).
        """
        values = {'version': expected_version + 1}
        if score is not _UNSET:
            values['score'] = int(score)
        if active_guess is not _UNSET:
            values.update(guess_columns(active_guess))
        try:
            changed = (
                self.session.query(Player)
                .filter_by(player_id=player_id, version=expected_version)
                .update(values, synchronize_session=False)
            )
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise StorageError(f'Failed to update player {player_id}') from exc
        return changed == 1

    def due_player_ids(self, cutoff: float) -> List[str]:
        """Players holding a guess submitted at or before ``cutoff``."""
        try:
            rows = (
                self.session.query(Player.player_id)
                .filter(Player.guess_submitted_at.isnot(None), Player.guess_submitted_at <= cutoff)
                .order_by(Player.guess_submitted_at)
                .all()
            )
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise StorageError('Failed to list players with due guesses') from exc
        return [r.player_id for r in rows]
