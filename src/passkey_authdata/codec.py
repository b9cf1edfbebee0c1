"""Base64 and challenge helpers shared by the extractor and its callers."""

import base64
import secrets

CHALLENGE_LENGTH = 32


def buffer_to_base64(data):
    """Encode bytes as standard (padded) base64 text."""
    return base64.b64encode(bytes(data)).decode("ascii")


def base64_to_buffer(text):
    """Decode standard base64 text. Missing padding is tolerated.

    Raises binascii.Error (a ValueError) on characters outside the alphabet.
    """
    text = text.strip()
    padded = text + "=" * (-len(text) % 4)
    return base64.b64decode(padded, validate=True)


def generate_challenge():
    """Return a fresh random challenge for a credential ceremony."""
    return secrets.token_bytes(CHALLENGE_LENGTH)
