"""
Data Generation Module
"""
from .generators import TyreStoreGenerator, build_snapshot

__all__ = [
    "TyreStoreGenerator",
    "build_snapshot",
]
