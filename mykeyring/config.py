"""
mykeyring - Configuration

Where the key and the secrets live, and which parameters the crypto uses.
Both components take these values explicitly at construction; nothing in the
core reads globals or the environment.
"""

import os
from dataclasses import dataclass
from pathlib import Path


# =============================================================================
# Defaults
# =============================================================================

RSA_KEY_SIZE = 8192          # modulus bits for a freshly generated key
RSA_PUBLIC_EXPONENT = 65537
MIN_KEY_SIZE = 2048

DEFAULT_HOME = Path(os.path.expanduser("~")) / ".mykeyring"
KEY_FILENAME = "keyfile"
SECRETS_FILENAME = "secrets.yml"

SCHEME_HYBRID = "hybrid"     # RSA-OAEP wrapped AES-256-GCM
SCHEME_LEGACY = "legacy"     # raw private-key transform, original format
SCHEMES = (SCHEME_HYBRID, SCHEME_LEGACY)
DEFAULT_SCHEME = SCHEME_HYBRID


def validate_scheme(scheme: str) -> str:
    if scheme not in SCHEMES:
        raise ValueError(f"Unsupported scheme: {scheme!r} (expected one of {SCHEMES})")
    return scheme


@dataclass(frozen=True)
class KeyringConfig:
    """Paths and crypto parameters for one installation."""

    key_path: Path
    secrets_path: Path
    key_size: int = RSA_KEY_SIZE
    scheme: str = DEFAULT_SCHEME

    def __post_init__(self):
        validate_scheme(self.scheme)
        if self.key_size < MIN_KEY_SIZE:
            raise ValueError(f"key_size must be at least {MIN_KEY_SIZE}, got {self.key_size}")

    @classmethod
    def from_home(cls, home=None, **kwargs) -> "KeyringConfig":
        """Build a config with both files under one directory."""
        home = Path(home).expanduser() if home else DEFAULT_HOME
        return cls(
            key_path=home / KEY_FILENAME,
            secrets_path=home / SECRETS_FILENAME,
            **kwargs,
        )
