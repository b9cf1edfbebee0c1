"""
Public key extraction.

extract_public_key() runs the full pipeline over raw authenticator data:

1. parse the header and attested credential data
2. decode the COSE key bytes as CBOR
3. validate them as an ES256 / P-256 key
4. on any failure in 2-3 (or a truncated attested block), scan the raw
   bytes for a plausible coordinate pair

Only a buffer too short for the 37-byte header raises. Every other problem
ends in an ExtractedPublicKey whose `source` says how much to trust it.
"""

import json
import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from .authdata import parse_authenticator_data
from .cbor import CBORMap, loads
from .codec import buffer_to_base64
from .cose import COSE_ALG_ES256, COSE_CRV_P256, COSE_KTY_EC2, extract_cose_key
from .errors import (
    AuthenticatorDataError,
    NotAP256KeyError,
    OutOfBoundsError,
    TruncatedAttestedDataError,
    UnsupportedEncodingError,
)
from .scanner import scan_for_coordinates

logger = logging.getLogger(__name__)

MARKER_CBOR_PARSE_REQUIRED = "CBOR_PARSE_REQUIRED"
MARKER_ERROR_EXTRACTING = "ERROR_EXTRACTING"

CREDENTIAL_TYPE = "public-key"


class KeySource(str, Enum):
    STRUCTURED = "structured"  # decoded and validated COSE key
    HEURISTIC = "heuristic"  # byte scan guess, unverified
    NONE = "none"


@dataclass(frozen=True)
class ExtractedPublicKey:
    x: str
    y: str
    extracted: bool
    source: KeySource
    kty: int = COSE_KTY_EC2
    alg: int = COSE_ALG_ES256
    crv: int = COSE_CRV_P256

    @property
    def is_verified_structure(self):
        """True only for keys decoded from a well-formed COSE map."""
        return self.source is KeySource.STRUCTURED

    @classmethod
    def failed(cls, marker):
        return cls(x=marker, y=marker, extracted=False, source=KeySource.NONE)

    def to_dict(self):
        return {
            "kty": self.kty,
            "alg": self.alg,
            "crv": self.crv,
            "x": self.x,
            "y": self.y,
            "extracted": self.extracted,
            "source": self.source.value,
        }


def _from_coordinates(x, y, source):
    return ExtractedPublicKey(
        x=buffer_to_base64(x),
        y=buffer_to_base64(y),
        extracted=True,
        source=source,
    )


def _heuristic_fallback(raw):
    coordinates = scan_for_coordinates(raw)
    if coordinates is None:
        logger.warning("Byte scan found no coordinates, extraction failed")
        return ExtractedPublicKey.failed(MARKER_CBOR_PARSE_REQUIRED)
    logger.warning("Using byte-scan coordinates; key is unverified")
    return _from_coordinates(*coordinates, source=KeySource.HEURISTIC)


def extract_public_key(authenticator_data):
    """Extract the P-256 public key from raw authenticator data.

    Returns None when the data carries no attested credential data (the
    normal case for an assertion). Raises TruncatedHeaderError when the
    buffer is shorter than the fixed header.
    """
    raw = bytes(authenticator_data)
    try:
        parsed = parse_authenticator_data(raw)
    except TruncatedAttestedDataError as e:
        logger.warning("Attested credential data unreadable (%s), trying byte scan", e)
        return _heuristic_fallback(raw)

    attested = parsed.attested_credential_data
    if attested is None:
        logger.debug("No attested credential data present")
        return None

    try:
        cose_key = extract_cose_key(loads(attested.credential_public_key_bytes))
    except (UnsupportedEncodingError, OutOfBoundsError) as e:
        logger.warning("COSE key could not be decoded (%s), trying byte scan", e)
        return _heuristic_fallback(raw)
    except NotAP256KeyError as e:
        logger.warning("COSE key rejected (%s), trying byte scan", e)
        return _heuristic_fallback(raw)

    return _from_coordinates(cose_key.x, cose_key.y, source=KeySource.STRUCTURED)


def _unwrap_auth_data(attestation_object):
    decoded = loads(attestation_object)
    if not isinstance(decoded, CBORMap):
        raise UnsupportedEncodingError("Attestation object is not a map")
    auth_data = decoded.get("authData")
    if not isinstance(auth_data, bytes):
        raise UnsupportedEncodingError("Attestation object has no authData byte string")
    return auth_data


def extract_public_key_from_attestation_object(attestation_object):
    """Unwrap `authData` from a CBOR attestation object and extract its key.

    Returns None when the unwrapped data carries no attested credential data.
    """
    try:
        auth_data = _unwrap_auth_data(attestation_object)
    except AuthenticatorDataError as e:
        logger.warning("Could not unwrap attestation object: %s", e)
        return ExtractedPublicKey.failed(MARKER_ERROR_EXTRACTING)
    return extract_public_key(auth_data)


@dataclass
class CredentialRecord:
    """Registration result handed to whatever stores credentials."""

    credential_id: str
    public_key: ExtractedPublicKey
    type: str = CREDENTIAL_TYPE
    algorithm: int = COSE_ALG_ES256
    attestation_object: Optional[str] = None
    client_data_json: Optional[str] = None
    authenticator_data: Optional[str] = None
    client_data: Optional[dict] = None
    transports: List[str] = field(default_factory=list)
    timestamp: int = 0
    note: str = ""
    error: Optional[str] = None
    fallback: bool = False

    def to_dict(self):
        data = {
            "credentialId": self.credential_id,
            "type": self.type,
            "algorithm": self.algorithm,
            "publicKey": self.public_key.to_dict(),
            "timestamp": self.timestamp,
            "note": self.note,
        }
        if self.fallback:
            data["error"] = self.error
            data["fallback"] = True
            return data
        data.update({
            "attestationObject": self.attestation_object,
            "clientDataJSON": self.client_data_json,
            "authenticatorData": self.authenticator_data,
            "clientData": self.client_data,
            "transports": list(self.transports),
        })
        return data


def _parse_client_data(client_data_json):
    client_data = json.loads(bytes(client_data_json).decode("utf-8"))
    if not isinstance(client_data, dict):
        raise ValueError("clientDataJSON is not a JSON object")
    return {
        "type": client_data.get("type"),
        "challenge": client_data.get("challenge"),
        "origin": client_data.get("origin"),
        "crossOrigin": client_data.get("crossOrigin", False),
    }


def _record_note(public_key):
    if public_key is None:
        return "Credential carries no attested credential data"
    if public_key.source is KeySource.STRUCTURED:
        return "Credential with extracted P-256 coordinates"
    if public_key.source is KeySource.HEURISTIC:
        return "Credential with unverified P-256 coordinates from byte scan"
    return "Credential without P-256 coordinates, COSE key could not be parsed"


def build_credential_record(credential_id, client_data_json, attestation_object,
                            authenticator_data=None, transports=None):
    """Assemble a CredentialRecord from a registration response.

    Uses `authenticator_data` when the caller has it, otherwise unwraps the
    one embedded in `attestation_object`. Never raises for malformed input:
    parse failures produce a record with fallback=True.
    """
    timestamp = int(time.time() * 1000)
    credential_id_b64 = buffer_to_base64(credential_id)

    try:
        client_data = _parse_client_data(client_data_json)
        if authenticator_data is not None:
            public_key = extract_public_key(authenticator_data)
        else:
            public_key = extract_public_key_from_attestation_object(attestation_object)
    except (AuthenticatorDataError, ValueError) as e:
        logger.error("Could not extract credential data: %s", e)
        return CredentialRecord(
            credential_id=credential_id_b64,
            public_key=ExtractedPublicKey.failed(MARKER_ERROR_EXTRACTING),
            timestamp=timestamp,
            note="Fallback record, credential data could not be parsed",
            error=str(e),
            fallback=True,
        )

    note = _record_note(public_key)
    if public_key is None:
        public_key = ExtractedPublicKey.failed(MARKER_CBOR_PARSE_REQUIRED)

    return CredentialRecord(
        credential_id=credential_id_b64,
        public_key=public_key,
        attestation_object=buffer_to_base64(attestation_object),
        client_data_json=buffer_to_base64(client_data_json),
        authenticator_data=(
            buffer_to_base64(authenticator_data) if authenticator_data is not None else None
        ),
        client_data=client_data,
        transports=list(transports or []),
        timestamp=timestamp,
        note=note,
    )
