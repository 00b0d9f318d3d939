from decimal import Decimal

from guesser.models import Direction, format_price


def score_guess(direction: Direction, initial_price: Decimal, resolved_price: Decimal) -> int:
    """Return the score delta for a resolved guess.

    +1 when the price moved the way the player called it, -1 otherwise.
    There is no push: callers must defer resolution while the price is
    unchanged, so a tie here is a programming error.
    """
    if resolved_price == initial_price:
        raise ValueError('cannot score a guess while the price is unchanged')
    if Direction(direction) == Direction.UP:
        return 1 if resolved_price > initial_price else -1
    return 1 if resolved_price < initial_price else -1


def resolution_message(delta: int, initial_price: Decimal, resolved_price: Decimal) -> str:
    old, new = format_price(initial_price), format_price(resolved_price)
    if delta > 0:
        return f"Correct! Price went from {old} to {new}. You gained 1 point."
    return f"Incorrect. Price went from {old} to {new}. You lost 1 point."
