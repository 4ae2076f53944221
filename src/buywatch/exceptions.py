class BuyWatchError(Exception):
    """Base class for all buywatch errors."""


class ExternalServiceError(BuyWatchError):
    """Transient failure talking to the node or another provider. Retried on the next tick."""


class LogDecodeError(BuyWatchError):
    """A log entry does not have the shape of the event it was decoded as."""


class ConfigurationError(BuyWatchError):
    """Settings are inconsistent with what the chain reports. Fatal at startup."""


class BuyerResolutionError(BuyWatchError):
    """No usable buyer address could be derived for a transaction."""
