# booking_provisioning/utils/__init__.py

"""
Utility module initialization file.

Exposes token hashing and encryption helpers.
"""

from .security import FernetEncryptor, generate_fernet_key, generate_token_and_hash, hash_token

__all__ = ["FernetEncryptor", "generate_fernet_key", "generate_token_and_hash", "hash_token"]
