"""
Authentication Module
JWT token management
"""

from badgeforge.auth.dependencies import (
    create_access_token,
    decode_access_token,
    get_current_user,
)

__all__ = [
    "create_access_token",
    "decode_access_token",
    "get_current_user",
]
