"""
passkey-authdata - WebAuthn authenticator data parser and P-256 key extractor.
"""

__version__ = "0.1.0"

from .authdata import (
    AttestedCredentialData,
    AuthenticatorData,
    AuthenticatorFlag,
    Flags,
    parse_authenticator_data,
)
from .cbor import CBORMap, decode, loads
from .codec import base64_to_buffer, buffer_to_base64, generate_challenge
from .cose import COSEKey, extract_cose_key
from .cursor import ByteCursor
from .errors import (
    AuthenticatorDataError,
    NotAP256KeyError,
    OutOfBoundsError,
    TruncatedAttestedDataError,
    TruncatedHeaderError,
    UnsupportedEncodingError,
)
from .extract import (
    CredentialRecord,
    ExtractedPublicKey,
    KeySource,
    build_credential_record,
    extract_public_key,
    extract_public_key_from_attestation_object,
)
from .scanner import scan_for_coordinates

__all__ = [
    "AttestedCredentialData",
    "AuthenticatorData",
    "AuthenticatorFlag",
    "Flags",
    "parse_authenticator_data",
    "CBORMap",
    "decode",
    "loads",
    "base64_to_buffer",
    "buffer_to_base64",
    "generate_challenge",
    "COSEKey",
    "extract_cose_key",
    "ByteCursor",
    "AuthenticatorDataError",
    "NotAP256KeyError",
    "OutOfBoundsError",
    "TruncatedAttestedDataError",
    "TruncatedHeaderError",
    "UnsupportedEncodingError",
    "CredentialRecord",
    "ExtractedPublicKey",
    "KeySource",
    "build_credential_record",
    "extract_public_key",
    "extract_public_key_from_attestation_object",
    "scan_for_coordinates",
]
