from .exceptions import CapabilityDenied
from .host_builder import KNOWN_CAPABILITIES, Host, make_host

__all__ = [
    "KNOWN_CAPABILITIES",
    "CapabilityDenied",
    "Host",
    "make_host",
]
