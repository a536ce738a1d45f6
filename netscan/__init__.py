"""netscan - find free addresses in an IPv4 subnet."""

__version__ = "0.1.0"
