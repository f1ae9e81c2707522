"""Channel Hub: channels, membership and the auth layer guarding them."""

__version__ = "0.1.0"
