"""
mykeyring - Secret Store

This file handles:
- The YAML secrets file: {service: {user: base64_ciphertext}}
- Encrypt-on-write / decrypt-on-read through a KeyManager
- Full-document persistence after every mutation (atomic replace)

Known limitation: there is no file locking. Two processes writing at the
same time each replace the whole file, and the last rename wins.
"""

import base64
import binascii
import copy
import logging
from pathlib import Path
from typing import Dict, List, Optional

import yaml

from .config import DEFAULT_SCHEME, SCHEME_LEGACY, validate_scheme
from .crypto import KeyManager, secret_ad
from .errors import DecryptError, KeyringError, ParseError
from .fsutil import atomic_write_text

logger = logging.getLogger("mykeyring.store")

Secrets = Dict[str, Dict[str, str]]


# =============================================================================
# Encoding
# =============================================================================

def encode_ciphertext(raw: bytes) -> str:
    return base64.b64encode(raw).decode('ascii')


def decode_ciphertext(text: str) -> bytes:
    """
    Decode stored base64, ignoring embedded whitespace.

    Line-wrapped base64 (as written by the original tool) is accepted;
    anything else outside the alphabet is rejected.
    """
    try:
        return base64.b64decode("".join(text.split()), validate=True)
    except (binascii.Error, ValueError) as e:
        raise DecryptError(f"Stored ciphertext is not valid base64: {e}") from e


def validate_document(data) -> Secrets:
    """
    Check a parsed YAML document has the {str: {str: str}} shape.

    An empty document (None) is an empty store.
    """
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ParseError(f"Secrets file must be a mapping of services, got {type(data).__name__}")

    secrets: Secrets = {}
    for service, users in data.items():
        if not isinstance(service, str):
            raise ParseError(f"Service name must be a string, got {service!r}")
        if not isinstance(users, dict):
            raise ParseError(f"Entry for service {service!r} must be a mapping of users")
        for user, ciphertext in users.items():
            if not isinstance(user, str) or not isinstance(ciphertext, str):
                raise ParseError(f"Malformed entry under service {service!r}: {user!r}")
        secrets[service] = dict(users)
    return secrets


# =============================================================================
# SECRET STORE CLASS
# =============================================================================

class SecretStore:
    """
    Encrypted (service, user) → password mapping backed by a YAML file.

    Usage:
        keys = KeyManager(config.key_path, config.key_size)
        keys.ensure_key(prompt)

        store = SecretStore(config.secrets_path, keys).load()
        store.set("github", "alice", "s3cr3t")
        store.get("github", "alice")     # "s3cr3t"
        store.get("gitlab", "bob")       # None
    """

    def __init__(self, path, key_manager: KeyManager, scheme: str = DEFAULT_SCHEME):
        self.path = Path(path).expanduser()
        self.keys = key_manager
        self.scheme = validate_scheme(scheme)
        self.secrets: Optional[Secrets] = None

    def load(self) -> "SecretStore":
        """
        Read the secrets file, creating an empty one if it does not exist.

        Raises:
            ParseError: File is not valid YAML or has the wrong shape
        """
        if not self.path.exists():
            logger.info("No secrets file at %s, creating an empty one", self.path)
            self._persist({})
            self.secrets = {}
            return self

        try:
            data = yaml.safe_load(self.path.read_text(encoding='utf-8'))
        except yaml.YAMLError as e:
            raise ParseError(f"Secrets file {self.path} is not valid YAML: {e}") from e
        except (OSError, UnicodeDecodeError) as e:
            raise ParseError(f"Cannot read secrets file {self.path}: {e}") from e

        self.secrets = validate_document(data)
        logger.debug("Loaded %d service(s) from %s", len(self.secrets), self.path)
        return self

    # =========================================================================
    # Reads
    # =========================================================================

    def get(self, service: str, user: str) -> Optional[str]:
        """
        Decrypt the password for (service, user).

        Returns:
            The password, or None if nothing is stored for the pair

        Raises:
            DecryptError: An entry exists but cannot be decoded or decrypted
        """
        content = self._require_loaded().get(service, {}).get(user)
        if content is None:
            return None

        raw = decode_ciphertext(content)
        if len(raw) == self.keys.modulus_bytes:
            plaintext = self.keys.decrypt_with_public(raw)
        else:
            plaintext = self.keys.unseal(raw, secret_ad(service, user))

        try:
            return plaintext.decode('utf-8')
        except UnicodeDecodeError as e:
            raise DecryptError(f"Decrypted value for {service}/{user} is not UTF-8 text") from e

    def services(self) -> List[str]:
        return sorted(self._require_loaded())

    def users(self, service: str) -> List[str]:
        """Known users for a service; empty for an unknown service."""
        return sorted(self._require_loaded().get(service, {}))

    def __contains__(self, item) -> bool:
        service, user = item
        return user in self._require_loaded().get(service, {})

    # =========================================================================
    # Mutations
    # =========================================================================

    def set(self, service: str, user: str, password: str) -> None:
        """
        Encrypt and store a password, overwriting any previous value.

        The new mapping is written to disk before it replaces the in-memory
        one, so a failed write leaves the store as it was.
        """
        current = self._require_loaded()
        plaintext = password.encode('utf-8')
        if self.scheme == SCHEME_LEGACY:
            raw = self.keys.encrypt_with_private(plaintext)
        else:
            raw = self.keys.seal(plaintext, secret_ad(service, user))

        updated = copy.deepcopy(current)
        updated.setdefault(service, {})[user] = encode_ciphertext(raw)
        self._persist(updated)
        self.secrets = updated
        logger.info("Stored secret for %s/%s (%s)", service, user, self.scheme)

    def delete(self, service: str, user: str) -> bool:
        """
        Remove the entry for (service, user); drops the service once empty.

        Returns:
            True if an entry was removed, False if none existed
        """
        current = self._require_loaded()
        if user not in current.get(service, {}):
            return False

        updated = copy.deepcopy(current)
        del updated[service][user]
        if not updated[service]:
            del updated[service]
        self._persist(updated)
        self.secrets = updated
        logger.info("Removed secret for %s/%s", service, user)
        return True

    # =========================================================================
    # INTERNAL HELPERS
    # =========================================================================

    def _persist(self, secrets: Secrets) -> None:
        text = yaml.safe_dump(secrets, default_flow_style=False, sort_keys=True)
        try:
            atomic_write_text(self.path, text)
        except OSError as e:
            raise KeyringError(f"Cannot write secrets file {self.path}: {e}") from e

    def _require_loaded(self) -> Secrets:
        if self.secrets is None:
            raise KeyringError("Secret store is not loaded. Call load() first.")
        return self.secrets
