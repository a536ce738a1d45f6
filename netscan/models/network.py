"""Network specification model."""

from ipaddress import IPv4Address

from pydantic import BaseModel, field_validator

from ..exceptions import InvalidSpec


class NetworkSpec(BaseModel):
    """A network address plus prefix length, e.g. 192.168.1.0/24.

    Values are range-checked when hosts are derived, so that bad input
    surfaces as InvalidSpec rather than a validation error.
    """

    address: str
    prefix_length: int

    @field_validator("address", mode="before")
    @classmethod
    def coerce_address(cls, v: object) -> object:
        """Accept IPv4Address instances as well as dotted-quad text."""
        if isinstance(v, IPv4Address):
            return str(v)
        return v

    @classmethod
    def from_cidr(cls, cidr: str) -> "NetworkSpec":
        """Parse CIDR text such as '10.0.0.0/29'."""
        address, sep, prefix = cidr.strip().partition("/")
        if not sep:
            raise InvalidSpec(f"Expected CIDR notation 'a.b.c.d/n', got '{cidr}'")
        try:
            prefix_length = int(prefix)
        except ValueError:
            raise InvalidSpec(f"Invalid prefix length '{prefix}'")
        return cls(address=address, prefix_length=prefix_length)

    @property
    def cidr(self) -> str:
        return f"{self.address}/{self.prefix_length}"
