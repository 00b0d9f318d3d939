class GuessError(Exception):
    """Base class for failures surfaced to callers of the guess services."""
    status_code = 500
    retryable = False
    default_message = 'Guess operation failed'

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self):
        payload = {'error': self.message}
        if self.retryable:
            payload['retryable'] = True
        return payload


class InvalidInput(GuessError):
    status_code = 400
    default_message = 'Invalid request. Expecting { "player_id": "string", "guess": "up"|"down" }'


class GuessAlreadyActive(GuessError):
    status_code = 409
    default_message = 'An active guess already exists for this player. Please wait for it to resolve.'


class PriceUnavailable(GuessError):
    status_code = 503
    retryable = True
    default_message = 'Failed to fetch current BTC price. Please try again.'


class StorageError(GuessError):
    status_code = 500
    retryable = True
    default_message = 'Failed to process request due to a database error.'
