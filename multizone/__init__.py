"""multizone backend API: users, feature flags and zone health."""

__version__ = "0.1.0"
