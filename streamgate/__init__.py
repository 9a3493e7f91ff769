"""StreamGate: authentication, token rotation and tiered access control."""

__version__ = "0.1.0"
