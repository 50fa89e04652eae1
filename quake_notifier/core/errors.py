"""Exception hierarchy for the notifier.

Shell clients raise these; the orchestrator and the command services decide
which ones are fatal for an event, a tenant, or a request.
"""


class NotifierError(Exception):
    """Base exception for all notifier errors."""

    def __init__(self, message: str = "An unexpected error occurred") -> None:
        super().__init__(message)
        self.message = message


class FeedUnavailable(NotifierError):
    """The tenant's seismic feed could not be fetched or parsed."""


class GeoLookupFailed(NotifierError):
    """Reverse geocoding failed for an event's coordinates."""


class ChannelUnreachable(NotifierError):
    """The tenant's broadcast channel is missing or cannot receive text."""


class ChannelSendFailed(NotifierError):
    """Posting the alert to the broadcast channel failed."""


class DirectNotificationFailed(NotifierError):
    """A direct message to a single subscriber failed."""


class InvalidConfigValue(NotifierError):
    """A settings value was rejected at the configuration boundary."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(f"{field}: {message}")
        self.field = field


class PermissionDenied(NotifierError):
    """The acting subscriber may not manage the target subscriber."""


class CityNotFound(NotifierError):
    """The city name was not classified as a city by the validation service."""


class CityValidationUnavailable(NotifierError):
    """The city validation service could not be reached."""


class DuplicateSubscription(NotifierError):
    """The subscriber is already subscribed to this city."""


class SubscriptionNotFound(NotifierError):
    """The subscriber has no subscription for this city."""
