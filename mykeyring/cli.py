"""
mykeyring - Command-Line Interface

    mykeyring                         list services
    mykeyring github                  list users stored for github
    mykeyring github alice            print alice's github password
    mykeyring github alice --set      prompt for a password and store it
    mykeyring github alice --generate store (and print) a random password
    mykeyring github alice --delete   remove the entry
    mykeyring github alice --copy     copy the password to the clipboard

Exit status: 0 on success, 1 when a requested password is not stored,
2 on any error (wrong passphrase, corrupted files, ...).
"""

import argparse
import getpass
import logging
import sys
from typing import Optional

import pyperclip

from . import __version__
from .config import RSA_KEY_SIZE, SCHEME_LEGACY, DEFAULT_SCHEME, KeyringConfig
from .crypto import KeyManager, PassphraseProvider, generate_password
from .errors import KeyGenerationError, KeyringError
from .store import SecretStore

logger = logging.getLogger("mykeyring.cli")

MIN_PASSPHRASE_LENGTH = 8
PROMPT_ATTEMPTS = 3
DEFAULT_LENGTH = 20


# =============================================================================
# Prompts
# =============================================================================

def prompt_passphrase(creating: bool) -> str:
    """Masked passphrase prompt; asks twice when a new key is being created."""
    if not creating:
        return getpass.getpass("Passphrase: ")

    print("No key file found. A new key will be generated (this can take a while).", file=sys.stderr)
    for _ in range(PROMPT_ATTEMPTS):
        pw = getpass.getpass("Choose a passphrase: ")
        if len(pw) < MIN_PASSPHRASE_LENGTH:
            print(f"Too short (min {MIN_PASSPHRASE_LENGTH} chars).\n", file=sys.stderr)
            continue
        if getpass.getpass("Confirm: ") != pw:
            print("Passphrases don't match.\n", file=sys.stderr)
            continue
        return pw
    raise KeyGenerationError("No valid passphrase entered")


def prompt_password(service: str, user: str) -> str:
    for _ in range(PROMPT_ATTEMPTS):
        pw = getpass.getpass(f"Password for {user} at {service}: ")
        if not pw:
            print("Empty password.\n", file=sys.stderr)
            continue
        if getpass.getpass("Confirm: ") != pw:
            print("Passwords don't match.\n", file=sys.stderr)
            continue
        return pw
    raise KeyringError("No password entered")


# =============================================================================
# Argument Parsing
# =============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mykeyring",
        description="Local secret manager: passwords per (service, user), "
                    "encrypted under a passphrase-protected RSA key.",
    )
    parser.add_argument("service", nargs="?", help="service name (omit to list services)")
    parser.add_argument("user", nargs="?", help="user name (omit to list users of SERVICE)")

    action = parser.add_mutually_exclusive_group()
    action.add_argument("--set", action="store_true", help="prompt for a password and store it")
    action.add_argument("--generate", action="store_true", help="store a random password and print it")
    action.add_argument("--delete", action="store_true", help="remove the stored password")
    action.add_argument("--fingerprint", action="store_true", help="print the key fingerprint")

    parser.add_argument("--length", type=int, default=DEFAULT_LENGTH,
                        help=f"generated password length, with --generate [{DEFAULT_LENGTH}]")
    parser.add_argument("--no-symbols", action="store_true", help="with --generate: letters and digits only")
    parser.add_argument("--copy", action="store_true",
                        help="copy the password to the clipboard instead of printing (lookups and --generate only)")
    parser.add_argument("--home", help="directory holding the key and secrets files [~/.mykeyring]")
    parser.add_argument("--key-size", type=int, default=RSA_KEY_SIZE,
                        help=f"RSA modulus bits for a new key [{RSA_KEY_SIZE}]")
    parser.add_argument("--legacy", action="store_true",
                        help="write entries in the original raw-RSA format")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


# =============================================================================
# Commands
# =============================================================================

def open_store(config: KeyringConfig, passphrase_provider: PassphraseProvider):
    keys = KeyManager(config.key_path, config.key_size)
    keys.ensure_key(passphrase_provider)
    return keys, SecretStore(config.secrets_path, keys, scheme=config.scheme).load()


def cmd_list(store: SecretStore, service: Optional[str]) -> int:
    names = store.services() if service is None else store.users(service)
    for name in names:
        print(name)
    return 0


def cmd_get(store: SecretStore, service: str, user: str, copy: bool) -> int:
    password = store.get(service, user)
    if password is None:
        logger.debug("Nothing stored for %s/%s", service, user)
        return 1
    if copy:
        try:
            pyperclip.copy(password)
        except pyperclip.PyperclipException as e:
            raise KeyringError(f"Clipboard unavailable: {e}") from e
        print(f"✓ Password for {user} at {service} copied to clipboard.")
    else:
        print(password)
    return 0


def cmd_set(store: SecretStore, service: str, user: str, password: str) -> int:
    store.set(service, user, password)
    print(f"✓ Stored password for {user} at {service}.", file=sys.stderr)
    return 0


def cmd_delete(store: SecretStore, service: str, user: str) -> int:
    if not store.delete(service, user):
        return 1
    print(f"✓ Removed password for {user} at {service}.", file=sys.stderr)
    return 0


def run(args, passphrase_provider: PassphraseProvider, password_prompt=prompt_password) -> int:
    config = KeyringConfig.from_home(
        args.home,
        key_size=args.key_size,
        scheme=SCHEME_LEGACY if args.legacy else DEFAULT_SCHEME,
    )
    keys, store = open_store(config, passphrase_provider)

    if args.fingerprint:
        print(keys.fingerprint())
        return 0
    if args.user is None:
        return cmd_list(store, args.service)
    if args.set:
        return cmd_set(store, args.service, args.user, password_prompt(args.service, args.user))
    if args.generate:
        password = generate_password(args.length, not args.no_symbols)
        cmd_set(store, args.service, args.user, password)
        return cmd_get(store, args.service, args.user, args.copy)
    if args.delete:
        return cmd_delete(store, args.service, args.user)
    return cmd_get(store, args.service, args.user, args.copy)


def main(argv=None, passphrase_provider: PassphraseProvider = prompt_passphrase) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if (args.set or args.generate or args.delete) and args.user is None:
        parser.error("--set, --generate and --delete need both SERVICE and USER")
    if args.copy and (args.user is None or args.fingerprint or args.set or args.delete):
        parser.error("--copy only applies when printing a password (SERVICE USER, optionally --generate)")
    if (args.length != DEFAULT_LENGTH or args.no_symbols) and not args.generate:
        parser.error("--length and --no-symbols only apply with --generate")

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        return run(args, passphrase_provider)
    except (KeyringError, ValueError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 2
    except (KeyboardInterrupt, EOFError):
        print("\nAborted.", file=sys.stderr)
        return 130


if __name__ == "__main__":
    sys.exit(main())
