"""Artifact loading utilities for compiled smart contracts."""
from .loader import get_abi, get_bytecode, load_artifact, load_build_info

__all__ = ["get_abi", "get_bytecode", "load_artifact", "load_build_info"]
