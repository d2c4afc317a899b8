"""Base exceptions for v6watch."""

from enum import Enum
from pathlib import Path


class ErrorKind(Enum):
    """Tag identifying which failure ended a run."""

    CONFIG_MISSING = "config_missing"
    CONFIG_INCOMPLETE = "config_incomplete"
    ADDRESS_UNDETECTABLE = "address_undetectable"
    DELIVERY_FAILED = "delivery_failed"
    PERSISTENCE_FAILED = "persistence_failed"


class V6WatchError(Exception):
    """Base exception for all v6watch errors."""

    kind: ErrorKind


class ConfigIncompleteError(V6WatchError):
    """Configuration is unusable until the operator edits it."""

    kind = ErrorKind.CONFIG_INCOMPLETE


class ConfigMissingError(ConfigIncompleteError):
    """Configuration file did not exist; a template was written in its place."""

    kind = ErrorKind.CONFIG_MISSING

    def __init__(self, path: Path | str, message: str = "配置文件未填写完整"):
        self.path = path
        super().__init__(message)


class AddressUndetectableError(V6WatchError):
    """No probe candidate yielded a local IPv6 address."""

    kind = ErrorKind.ADDRESS_UNDETECTABLE


class DeliveryFailedError(V6WatchError):
    """Notification email could not be delivered."""

    kind = ErrorKind.DELIVERY_FAILED


class PersistenceFailedError(V6WatchError):
    """Configuration could not be written back to disk."""

    kind = ErrorKind.PERSISTENCE_FAILED
