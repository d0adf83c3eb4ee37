"""
mykeyring - Error types

Every failure the core can raise derives from KeyringError, so the CLI can
report all of them the same way. None of these are retried: the tool runs
once per invocation and the user fixes the cause.

"Not found" is never an error: SecretStore.get() returns None instead.
"""


class KeyringError(Exception):
    """Base class for all mykeyring failures."""


class KeyGenerationError(KeyringError):
    """First-run key creation failed (bad passphrase, entropy or IO)."""


class AuthenticationError(KeyringError):
    """The passphrase does not unlock the key file."""


class CorruptKeyError(KeyringError):
    """The key file is unreadable or not a protected RSA private key."""


class KeyLockedError(KeyringError):
    """A transform was requested before ensure_key() unlocked the key."""


class ParseError(KeyringError):
    """The secrets file is not a {service: {user: ciphertext}} document."""


class DecryptError(KeyringError):
    """A stored ciphertext does not decode or decrypt under the current key."""
