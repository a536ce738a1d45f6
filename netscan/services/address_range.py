"""Host address derivation for an IPv4 network."""

import ipaddress
from ipaddress import IPv4Address

from ..exceptions import InvalidSpec
from ..models.network import NetworkSpec


def host_count(prefix_length: int) -> int:
    """Number of usable host addresses for a prefix length."""
    _check_prefix(prefix_length)
    if prefix_length >= 31:
        return 0
    return 2 ** (32 - prefix_length) - 2


def hosts(spec: NetworkSpec) -> list[IPv4Address]:
    """Return the usable host addresses of a network in ascending order.

    The network and broadcast addresses are excluded. A /31 or /32 has no
    usable hosts and yields an empty list. Host bits set in the address
    are ignored, so 10.0.0.5/29 describes 10.0.0.0/29.
    """
    _check_prefix(spec.prefix_length)

    try:
        address = IPv4Address(spec.address)
    except ValueError as e:
        raise InvalidSpec(f"Invalid network address '{spec.address}': {e}")

    if spec.prefix_length >= 31:
        return []

    network = ipaddress.IPv4Network((address, spec.prefix_length), strict=False)
    first = int(network.network_address) + 1
    last = int(network.broadcast_address) - 1
    return [IPv4Address(value) for value in range(first, last + 1)]


def _check_prefix(prefix_length: int) -> None:
    # bool is an int subclass but never a meaningful mask
    if isinstance(prefix_length, bool) or not isinstance(prefix_length, int):
        raise InvalidSpec(f"Prefix length must be an integer, got {prefix_length!r}")
    if not 0 <= prefix_length <= 32:
        raise InvalidSpec(f"Prefix length must be between 0 and 32, got {prefix_length}")
