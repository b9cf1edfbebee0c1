#!/usr/bin/env python3
"""
Authenticator Data Inspector

A shell-based tool for looking inside WebAuthn / passkey payloads:
- Parse authenticator data (RP ID hash, flags, counter, attested data)
- Extract the P-256 public key from authenticator data
- Extract the P-256 public key from a full attestation object
- Generate random challenges
- Capture a fresh attestation from a connected security key

Binary input can be pasted as hex, base64 or base64url.

Set AUTHDATA_LOG_LEVEL=DEBUG to see how each extraction was decided.
"""

import binascii
import logging
import os
import string
import sys

from fido2.hid import CtapHidDevice
from fido2.client import Fido2Client, UserInteraction, DefaultClientDataCollector
from fido2.server import Fido2Server
from fido2.utils import websafe_decode
from fido2.webauthn import (
    PublicKeyCredentialRpEntity,
    PublicKeyCredentialUserEntity,
    ResidentKeyRequirement,
    UserVerificationRequirement,
)

from .authdata import parse_authenticator_data
from .codec import base64_to_buffer, buffer_to_base64, generate_challenge
from .cose import COSE_KEY_X, COSE_KEY_Y
from .errors import AuthenticatorDataError
from .extract import (
    KeySource,
    extract_public_key,
    extract_public_key_from_attestation_object,
)

# Configuration
RP_ID = "localhost"
RP_NAME = "Authenticator Data Inspector"
INPUT_MAX_ATTEMPTS = 3  # Max attempts for undecodable input before giving up
LOG_LEVEL = os.environ.get("AUTHDATA_LOG_LEVEL", "WARNING").upper()


class CliInteraction(UserInteraction):
    """Handle user interaction prompts in the CLI."""

    def prompt_up(self):
        """Prompt for user presence (tap)."""
        print("\n" + "=" * 50)
        print("  >>> TAP YOUR SECURITY KEY NOW <<<")
        print("=" * 50 + "\n")

    def request_pin(self, permissions, rd_id):
        """Request PIN if device has PIN protection."""
        return input("Enter your FIDO2 PIN: ")

    def request_uv(self, permissions, rd_id):
        """Request user verification."""
        print("User verification required. Please verify on your device.")
        return True


def get_device():
    """Detect and return a FIDO2 device."""
    print("\nSearching for FIDO2 devices...")
    devices = list(CtapHidDevice.list_devices())

    if not devices:
        print("\nERROR: No FIDO2 device found!")
        print("Please insert your security key and try again.")
        return None

    if len(devices) == 1:
        print(f"Found device: {devices[0]}")
        return devices[0]

    print(f"\nFound {len(devices)} devices:")
    for i, dev in enumerate(devices):
        print(f"  [{i + 1}] {dev}")

    while True:
        try:
            choice = int(input("\nSelect device number: ")) - 1
            if 0 <= choice < len(devices):
                return devices[choice]
            print("Invalid selection.")
        except ValueError:
            print("Please enter a number.")


def decode_binary_input(text):
    """Decode pasted binary data given as hex, base64 or base64url.

    Hex wins when the text is valid hex, so "deadbeef" is read as four bytes.
    Raises ValueError when no encoding fits.
    """
    cleaned = "".join(text.split())
    if not cleaned:
        raise ValueError("No data entered")

    if len(cleaned) % 2 == 0 and all(c in string.hexdigits for c in cleaned):
        return bytes.fromhex(cleaned)

    if "-" in cleaned or "_" in cleaned:
        try:
            return websafe_decode(cleaned)
        except (binascii.Error, ValueError) as e:
            raise ValueError(f"Invalid base64url data: {e}") from e

    try:
        return base64_to_buffer(cleaned)
    except (binascii.Error, ValueError) as e:
        raise ValueError(f"Not valid hex or base64: {e}") from e


def read_binary_input(prompt):
    """Prompt until the user enters decodable binary data."""
    for attempt in range(INPUT_MAX_ATTEMPTS):
        text = input(prompt)
        try:
            return decode_binary_input(text)
        except ValueError as e:
            remaining = INPUT_MAX_ATTEMPTS - attempt - 1
            if remaining > 0:
                print(f"Could not decode input ({e}). {remaining} attempt(s) remaining.")
            else:
                print(f"Could not decode input ({e}). No attempts remaining.")
    return None


def print_public_key(public_key):
    """Print an extraction result, or the no-key notice."""
    if public_key is None:
        print("\n  No attested credential data present.")
        print("  (This is the normal shape of an authentication response.)")
        return

    print("\n" + "=" * 50)
    if public_key.source is KeySource.STRUCTURED:
        print("  PUBLIC KEY EXTRACTED")
    elif public_key.source is KeySource.HEURISTIC:
        print("  PUBLIC KEY GUESSED (UNVERIFIED)")
    else:
        print("  PUBLIC KEY EXTRACTION FAILED")
    print("=" * 50)
    print(f"  kty: {public_key.kty}  alg: {public_key.alg}  crv: {public_key.crv}")
    print(f"  x: {public_key.x}")
    print(f"  y: {public_key.y}")
    print(f"  Source: {public_key.source.value}")
    if public_key.source is KeySource.HEURISTIC:
        print("  WARNING: Coordinates came from a byte scan, not a decoded COSE key.")
        print("  Do not trust them for signature verification.")
    print("=" * 50)


def show_authenticator_data():
    """Parse authenticator data and print its fields."""
    print("\n" + "-" * 50)
    print("PARSE AUTHENTICATOR DATA")
    print("-" * 50)

    data = read_binary_input("\nPaste authenticator data (hex/base64): ")
    if data is None:
        return

    try:
        parsed = parse_authenticator_data(data)
    except AuthenticatorDataError as e:
        print(f"\nCould not parse authenticator data: {e}")
        return

    flags = parsed.flags
    print(f"\n  Length: {len(data)} bytes")
    print(f"  RP ID hash: {parsed.rp_id_hash.hex()}")
    print(f"  Flags: 0b{flags.raw:08b}")
    print(f"    User present:        {flags.user_present}")
    print(f"    User verified:       {flags.user_verified}")
    print(f"    Backup eligible:     {flags.backup_eligible}")
    print(f"    Backup state:        {flags.backup_state}")
    print(f"    Attested data:       {flags.attested_credential_data_included}")
    print(f"    Extension data:      {flags.extension_data_included}")
    print(f"  Sign count: {parsed.sign_count}")

    attested = parsed.attested_credential_data
    if attested:
        print(f"  AAGUID: {attested.aaguid.hex()}")
        print(f"  Credential ID ({len(attested.credential_id)} bytes): "
              f"{attested.credential_id.hex()[:48]}...")
        print(f"  Public key bytes: {len(attested.credential_public_key_bytes)}")


def show_public_key():
    """Extract the public key from authenticator data."""
    print("\n" + "-" * 50)
    print("EXTRACT PUBLIC KEY (authenticator data)")
    print("-" * 50)

    data = read_binary_input("\nPaste authenticator data (hex/base64): ")
    if data is None:
        return

    try:
        print_public_key(extract_public_key(data))
    except AuthenticatorDataError as e:
        print(f"\nExtraction failed: {e}")


def show_attestation_object_key():
    """Extract the public key from a full attestation object."""
    print("\n" + "-" * 50)
    print("EXTRACT PUBLIC KEY (attestation object)")
    print("-" * 50)

    data = read_binary_input("\nPaste attestation object (hex/base64): ")
    if data is None:
        return

    try:
        print_public_key(extract_public_key_from_attestation_object(data))
    except AuthenticatorDataError as e:
        print(f"\nExtraction failed: {e}")


def show_challenge():
    """Print a fresh random challenge."""
    challenge = generate_challenge()
    print("\n" + "-" * 50)
    print("NEW CHALLENGE")
    print("-" * 50)
    print(f"\n  Hex:    {challenge.hex()}")
    print(f"  Base64: {buffer_to_base64(challenge)}")


def capture_from_device():
    """Run a registration against a connected key and extract its public key."""
    print("\n" + "-" * 50)
    print("CAPTURE FROM SECURITY KEY")
    print("-" * 50)

    device = get_device()
    if not device:
        return

    rp = PublicKeyCredentialRpEntity(id=RP_ID, name=RP_NAME)
    server = Fido2Server(rp)
    client = Fido2Client(
        device,
        DefaultClientDataCollector(f"https://{RP_ID}"),
        user_interaction=CliInteraction(),
    )

    user = PublicKeyCredentialUserEntity(
        id=generate_challenge(),
        name="inspector",
        display_name="Authenticator Data Inspector",
    )
    create_options, _state = server.register_begin(
        user=user,
        resident_key_requirement=ResidentKeyRequirement.DISCOURAGED,
        user_verification=UserVerificationRequirement.DISCOURAGED,
        challenge=generate_challenge(),
    )

    print("\nPlease wait for the prompt to tap your security key...")

    try:
        result = client.make_credential(create_options.public_key)
    except Exception as e:
        print(f"\nCapture failed: {e}")
        return

    attestation_object = result.response.attestation_object
    auth_data = bytes(attestation_object.auth_data)

    print(f"\n  Attestation format: {attestation_object.fmt}")
    print(f"  Authenticator data: {auth_data.hex()}")

    public_key = extract_public_key(auth_data)
    print_public_key(public_key)

    # Cross-check against fido2's own COSE parse
    credential_data = attestation_object.auth_data.credential_data
    if public_key is not None and credential_data is not None:
        reference = credential_data.public_key
        matches = (
            public_key.x == buffer_to_base64(reference.get(COSE_KEY_X, b""))
            and public_key.y == buffer_to_base64(reference.get(COSE_KEY_Y, b""))
        )
        print(f"  Matches fido2 parse: {'Yes' if matches else 'No'}")


def main_menu():
    """Display main menu and get user choice."""
    print("\n" + "=" * 50)
    print("       AUTHENTICATOR DATA INSPECTOR")
    print("=" * 50)
    print("\n  [1] Parse Authenticator Data")
    print("  [2] Extract Public Key (authenticator data)")
    print("  [3] Extract Public Key (attestation object)")
    print("  [4] Generate Challenge")
    print("  [5] Capture From Security Key")
    print("  [0] Exit")
    print("\n" + "-" * 50)

    return input("Select option: ").strip()


def main():
    """Main application entry point."""
    logging.basicConfig(
        level=getattr(logging, LOG_LEVEL, logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    while True:
        choice = main_menu()

        if choice == "1":
            show_authenticator_data()
        elif choice == "2":
            show_public_key()
        elif choice == "3":
            show_attestation_object_key()
        elif choice == "4":
            show_challenge()
        elif choice == "5":
            capture_from_device()
        elif choice == "0":
            print("\nGoodbye!")
            break
        else:
            print("\nInvalid option. Please try again.")


def run():
    """Console script entry point."""
    try:
        main()
    except KeyboardInterrupt:
        print("\n\nInterrupted by user.")
        sys.exit(0)


if __name__ == "__main__":
    run()
