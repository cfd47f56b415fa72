"""AWS API access."""

from .eks import EksClient

__all__ = ["EksClient"]
