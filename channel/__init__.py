"""Channel interfaces and built-in simulated channels."""

from .base import Channel
from .synthetic import AWGNChannel, BinarySymmetricChannel

__all__ = ["AWGNChannel", "BinarySymmetricChannel", "Channel"]
