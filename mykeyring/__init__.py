"""
mykeyring - Local Secret Manager

Stores passwords per (service, user), encrypted under a locally held RSA key.
The private key is protected at rest by a passphrase; lose the passphrase and
the stored secrets are gone for good.

Components:
- config.py: file locations and crypto parameters (KeyringConfig)
- crypto.py: RSA/AES primitives and the KeyManager (key lifecycle)
- store.py: the YAML-backed SecretStore
- cli.py: command-line interface (argparse)

Usage:
    mykeyring                         # list services
    mykeyring github                  # list users for a service
    mykeyring github alice            # print a password
    mykeyring github alice --set      # store a password
"""

__version__ = "0.3.0"

from .config import KeyringConfig
from .crypto import KeyManager
from .errors import (
    AuthenticationError,
    CorruptKeyError,
    DecryptError,
    KeyGenerationError,
    KeyLockedError,
    KeyringError,
    ParseError,
)
from .store import SecretStore

__all__ = [
    "KeyringConfig",
    "KeyManager",
    "SecretStore",
    "KeyringError",
    "KeyGenerationError",
    "AuthenticationError",
    "CorruptKeyError",
    "KeyLockedError",
    "ParseError",
    "DecryptError",
]
