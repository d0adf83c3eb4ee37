"""
mykeyring - Attack Demonstration

Run: python attack_demo.py

What it shows (and why attacks fail):
1) Wrong passphrase cannot unlock the key file.
2) Flipping a byte of a stored ciphertext is detected (DecryptError).
3) Copying a ciphertext to another (service, user) slot is detected.
4) A damaged secrets file is reported, not silently reset.
5) Legacy raw-RSA entries are readable by anyone holding the public key,
   which is why new entries use the hybrid format.
"""

import tempfile
from pathlib import Path

import yaml
from cryptography.hazmat.primitives.asymmetric import padding

from mykeyring.config import KeyringConfig, SCHEME_LEGACY
from mykeyring.crypto import KeyManager
from mykeyring.errors import AuthenticationError, DecryptError, ParseError
from mykeyring.store import SecretStore, decode_ciphertext, encode_ciphertext


LINE = "=" * 70
PASSPHRASE = "CorrectHorseBatteryStaple!"
DEMO_KEY_SIZE = 2048


def section(title: str):
    print(f"\n{LINE}\n{title}\n{LINE}")


def open_store(config: KeyringConfig, passphrase: str = PASSPHRASE):
    keys = KeyManager(config.key_path, config.key_size)
    keys.ensure_key(lambda creating: passphrase)
    return keys, SecretStore(config.secrets_path, keys, scheme=config.scheme).load()


def main():
    home = Path(tempfile.mkdtemp(prefix="mykeyring-demo-"))
    config = KeyringConfig.from_home(home, key_size=DEMO_KEY_SIZE)
    print(f"Demo installation: {home}")

    keys, store = open_store(config)
    store.set("example.com", "alice", "super_secret_password")
    store.set("example.com", "mallory", "mallorys_password")

    # 1) Wrong passphrase
    section("Attack 1: Wrong passphrase")
    try:
        open_store(config, passphrase="wrong_passphrase")
        print("Unexpected: key unlocked with wrong passphrase")
    except AuthenticationError as e:
        print(f"Expected failure: {e}")

    # 2) Ciphertext tampering
    section("Attack 2: Flip one byte of alice's ciphertext")
    original = config.secrets_path.read_text()
    data = yaml.safe_load(original)
    raw = bytearray(decode_ciphertext(data["example.com"]["alice"]))
    raw[-1] ^= 0x01
    data["example.com"]["alice"] = encode_ciphertext(bytes(raw))
    config.secrets_path.write_text(yaml.safe_dump(data))
    try:
        open_store(config)[1].get("example.com", "alice")
        print("Unexpected: tampered ciphertext decrypted")
    except DecryptError as e:
        print(f"Expected failure: {e}")
    config.secrets_path.write_text(original)

    # 3) Ciphertext relocation
    section("Attack 3: Copy alice's ciphertext into mallory's slot")
    data = yaml.safe_load(original)
    data["example.com"]["mallory"] = data["example.com"]["alice"]
    config.secrets_path.write_text(yaml.safe_dump(data))
    try:
        open_store(config)[1].get("example.com", "mallory")
        print("Unexpected: relocated ciphertext decrypted")
    except DecryptError as e:
        print(f"Expected failure (slot bound in AES-GCM associated data): {e}")
    config.secrets_path.write_text(original)

    # 4) Damaged secrets file
    section("Attack 4: Truncate the secrets file mid-document")
    config.secrets_path.write_text(original[: len(original) // 2] + "\n  broken: [")
    try:
        open_store(config)
        print("Unexpected: damaged file accepted")
    except ParseError as e:
        print(f"Expected failure: {e}")
    config.secrets_path.write_text(original)

    # 5) Legacy format weakness
    section("Weakness 5: Legacy entries only need the PUBLIC key")
    legacy = KeyringConfig.from_home(home, key_size=DEMO_KEY_SIZE, scheme=SCHEME_LEGACY)
    _, legacy_store = open_store(legacy)
    legacy_store.set("legacy.example", "alice", "old_style_password")
    blob = decode_ciphertext(yaml.safe_load(config.secrets_path.read_text())["legacy.example"]["alice"])

    public_only = keys.private_key.public_key()
    recovered = public_only.recover_data_from_signature(blob, padding.PKCS1v15(), None)
    print(f"Recovered with public key alone: {recovered.decode('utf-8')!r}")
    print("Hybrid entries need the private key: the content key is RSA-OAEP wrapped.")

    section("Done")
    print(f"Demo files left in {home} for inspection.")


if __name__ == "__main__":
    main()
