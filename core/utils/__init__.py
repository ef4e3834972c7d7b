"""Utility helpers shared across core packages.

Kept limited to environment helpers so that ``config`` modules can import
them without pulling feature packages in during start-up.
"""

from .env import get_bool_env, get_env, get_float_env, get_int_env, get_node_env, is_production

__all__ = [
    "get_bool_env",
    "get_env",
    "get_float_env",
    "get_int_env",
    "get_node_env",
    "is_production",
]
