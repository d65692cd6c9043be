"""Wrappers for the deployed RWAT and Multicall contracts."""
from .base import BaseContract
from .multicall import MulticallContract
from .rwat import RWATContract

__all__ = ["BaseContract", "MulticallContract", "RWATContract"]
