"""Pluggable JSON codec used to persist and transmit live objects such as rate limiters."""

from .serde import CORE, USER, Serde
from .transformer import SerdeTransformer

__all__ = [
    "CORE",
    "USER",
    "Serde",
    "SerdeTransformer",
]
