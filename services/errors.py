class MusicBotError(Exception):
    """Base class for errors raised by the search and delivery core."""


class ProviderFetchFailure(MusicBotError):
    """Download, conversion or publishing of a track failed."""


class DeliveryFailure(MusicBotError):
    def __init__(self, recipient_id: int, message: str):
        super().__init__(message)
        self.recipient_id = recipient_id


class TransientDeliveryFailure(DeliveryFailure):
    """Recipient could not be reached this time."""


class PermanentDeliveryFailure(DeliveryFailure):
    """Recipient blocked the bot or deleted their account."""
