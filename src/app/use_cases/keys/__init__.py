"""
Key Use Cases

API key generation, validation and rotation.
"""

from .api_key_use_case import ApiKeyUseCase, create_secure_key, hash_api_key
from .key_rotation_use_case import KeyRotationUseCase

__all__ = [
    "ApiKeyUseCase",
    "KeyRotationUseCase",
    "create_secure_key",
    "hash_api_key",
]
