"""IPv6 address discovery.

There is no portable "what is my global address" call, so the address is
learned from the kernel's routing decision: a UDP socket is connected (no
datagram is sent) to a well-known public IPv6 host, and the local address
the kernel picked as source for that route is read back.
"""

import ipaddress
import logging
import socket
from dataclasses import dataclass
from typing import Callable, Iterable

logger = logging.getLogger(__name__)

SocketFactory = Callable[[int, int], socket.socket]


@dataclass(frozen=True)
class ProbeCandidate:
    """A public IPv6 endpoint used as routing target."""

    address: str
    port: int = 80
    label: str = ""

    def __str__(self) -> str:
        return f"[{self.address}]:{self.port}"


# Tried in order; first success wins. Several independent operators so one
# unreachable provider does not hide the address.
DEFAULT_CANDIDATES: tuple[ProbeCandidate, ...] = (
    ProbeCandidate("2001:4860:4860::8888", 80, "Google DNS"),
    ProbeCandidate("2001:4860:4860::8844", 80, "Google DNS secondary"),
    ProbeCandidate("2606:4700:4700::1111", 80, "Cloudflare DNS"),
    ProbeCandidate("2400:3200::1", 80, "AliDNS"),
)


def _local_address_for(
    candidate: ProbeCandidate, socket_factory: SocketFactory
) -> str | None:
    """Connect a UDP socket to ``candidate`` and return the chosen source address.

    Raises:
        OSError: Socket creation, bind or connect failed.
        ValueError: Candidate or local address is not a valid IPv6 address.
    """
    remote = ipaddress.IPv6Address(candidate.address)

    with socket_factory(socket.AF_INET6, socket.SOCK_DGRAM) as sock:
        sock.bind(("::", 0))
        sock.connect((str(remote), candidate.port))
        local = sock.getsockname()[0]

    # Link-local results carry a zone suffix, e.g. fe80::1%eth0
    address = ipaddress.ip_address(local.split("%", 1)[0])
    if not isinstance(address, ipaddress.IPv6Address) or address.is_unspecified:
        return None
    return str(address)


def detect_ipv6(
    candidates: Iterable[ProbeCandidate] = DEFAULT_CANDIDATES,
    socket_factory: SocketFactory | None = None,
) -> str | None:
    """Determine the host's outbound IPv6 address.

    Args:
        candidates: Remote endpoints to try, in priority order.
        socket_factory: Injectable socket constructor for testing.

    Returns:
        The local IPv6 address selected for the first reachable candidate,
        or None if no candidate could be associated (no IPv6 connectivity).
        Never raises.
    """
    factory = socket_factory or socket.socket

    for candidate in candidates:
        logger.debug(f"Probing {candidate} ({candidate.label or 'unnamed'})")
        try:
            address = _local_address_for(candidate, factory)
        except (OSError, ValueError) as e:
            logger.warning(f"Failed to associate with {candidate}: {e}")
            continue

        if address is None:
            logger.warning(f"No usable local IPv6 address for {candidate}")
            continue

        logger.debug(f"Local IPv6 address via {candidate}: {address}")
        return address

    logger.warning("All IPv6 probe candidates failed")
    return None
