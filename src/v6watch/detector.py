"""IPv6 change detection.

One run is: load configuration, probe the current address, compare it
with the last notified one, notify on change, and only then persist the
new address. Because the address is persisted after delivery, a failed
send is retried on the next run instead of being lost.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Protocol

from v6watch.config import Config, ConfigStore, SmtpConfig
from v6watch.errors import AddressUndetectableError
from v6watch.ip_probe import detect_ipv6
from v6watch.notifier import EmailNotifier

logger = logging.getLogger(__name__)

NO_PREVIOUS_ADDRESS = "无"


class Notifier(Protocol):
    """Protocol for notification delivery."""

    def send(self, smtp: SmtpConfig, subject: str, body: str) -> None:
        """Deliver a notification.

        Raises:
            DeliveryFailedError: If the notification was not delivered.
        """
        ...


class Outcome(Enum):
    """Result of a successful check."""

    UNCHANGED = "unchanged"
    CHANGED = "changed"


@dataclass(frozen=True)
class NotificationEvent:
    """An address change worth telling the operator about."""

    previous: str | None
    current: str
    subject: str
    body: str

    @classmethod
    def for_change(cls, previous: str | None, current: str) -> "NotificationEvent":
        """Create the notification for ``previous`` -> ``current``."""
        return cls(
            previous=previous,
            current=current,
            subject="IPv6地址更新通知",
            body=(
                "IPv6地址已更新\n"
                f"旧地址: {previous or NO_PREVIOUS_ADDRESS}\n"
                f"新地址: {current}"
            ),
        )


@dataclass(frozen=True)
class CheckResult:
    """Outcome of one check.

    Attributes:
        outcome: Whether the address changed.
        address: Address detected during this run.
        previous: Address recorded before this run.
        config: Configuration to keep; carries ``address`` when changed.
    """

    outcome: Outcome
    address: str
    previous: str | None
    config: Config

    @property
    def changed(self) -> bool:
        return self.outcome is Outcome.CHANGED


def check_address(
    config: Config,
    probe: Callable[[], str | None],
    notifier: Notifier,
) -> CheckResult:
    """Compare the current address with ``config`` and notify on change.

    ``config`` is not modified; the updated value is returned in the result
    and it is up to the caller to persist it.

    Raises:
        AddressUndetectableError: If the probe found no address.
        DeliveryFailedError: If the notification could not be sent.
    """
    address = probe()
    if address is None:
        raise AddressUndetectableError("无法获取IPv6地址")

    previous = config.ipv6
    if address == previous:
        logger.info(f"IPv6 address unchanged: {address}")
        return CheckResult(Outcome.UNCHANGED, address, previous, config)

    logger.info(f"IPv6 address changed: {previous} -> {address}")
    event = NotificationEvent.for_change(previous, address)
    notifier.send(config.smtp, event.subject, event.body)

    return CheckResult(Outcome.CHANGED, address, previous, config.with_ipv6(address))


class ChangeDetector:
    """Runs a single check-and-notify cycle against a ConfigStore.

    Example:
        detector = ChangeDetector(ConfigStore("config.toml"))
        result = detector.run()
    """

    def __init__(
        self,
        store: ConfigStore,
        probe: Callable[[], str | None] = detect_ipv6,
        notifier: Notifier | None = None,
    ):
        """Initialize detector.

        Args:
            store: Where the configuration is loaded from and saved to.
            probe: Returns the current IPv6 address or None.
            notifier: Delivers the change notification. Defaults to email.
        """
        self._store = store
        self._probe = probe
        self._notifier = notifier or EmailNotifier()

    def run(self) -> CheckResult:
        """Run one check.

        Raises:
            ConfigMissingError: Config file was absent; template written.
            ConfigIncompleteError: Config file unusable or credentials empty.
            AddressUndetectableError: No IPv6 address could be determined.
            DeliveryFailedError: Notification not sent; nothing persisted.
            PersistenceFailedError: Notification sent but address not saved.
        """
        config = self._store.load()
        result = check_address(config, self._probe, self._notifier)

        if result.changed:
            self._store.save(result.config)
            logger.info(f"Recorded {result.address} in {self._store.path}")

        return result
