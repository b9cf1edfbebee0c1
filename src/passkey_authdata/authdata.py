"""
Authenticator data parsing.

Layout (all multi-byte integers big-endian):

    offset  length  field
    0       32      RP ID hash
    32      1       flags
    33      4       signature counter
    37      16      AAGUID                  (only if AT flag set)
    53      2       credential ID length    (only if AT flag set)
    55      L       credential ID           (only if AT flag set)
    55+L    rest    COSE public key (CBOR)  (only if AT flag set)
"""

from dataclasses import dataclass
from enum import IntFlag
from typing import Optional

from .codec import buffer_to_base64
from .cursor import ByteCursor
from .errors import OutOfBoundsError, TruncatedAttestedDataError, TruncatedHeaderError

RP_ID_HASH_LENGTH = 32
HEADER_LENGTH = 37
AAGUID_LENGTH = 16


class AuthenticatorFlag(IntFlag):
    USER_PRESENT = 0x01
    USER_VERIFIED = 0x04
    BACKUP_ELIGIBLE = 0x08
    BACKUP_STATE = 0x10
    ATTESTED = 0x40
    EXTENSION_DATA = 0x80


@dataclass(frozen=True)
class Flags:
    """Decoded flags byte."""

    raw: int
    user_present: bool
    user_verified: bool
    backup_eligible: bool
    backup_state: bool
    attested_credential_data_included: bool
    extension_data_included: bool

    @classmethod
    def from_byte(cls, value):
        flags = AuthenticatorFlag(value & 0xFF)
        return cls(
            raw=value,
            user_present=bool(flags & AuthenticatorFlag.USER_PRESENT),
            user_verified=bool(flags & AuthenticatorFlag.USER_VERIFIED),
            backup_eligible=bool(flags & AuthenticatorFlag.BACKUP_ELIGIBLE),
            backup_state=bool(flags & AuthenticatorFlag.BACKUP_STATE),
            attested_credential_data_included=bool(flags & AuthenticatorFlag.ATTESTED),
            extension_data_included=bool(flags & AuthenticatorFlag.EXTENSION_DATA),
        )

    def to_dict(self):
        return {
            "userPresent": self.user_present,
            "userVerified": self.user_verified,
            "backupEligibility": self.backup_eligible,
            "backupState": self.backup_state,
            "attestedCredentialData": self.attested_credential_data_included,
            "extensionData": self.extension_data_included,
        }


@dataclass(frozen=True)
class AttestedCredentialData:
    aaguid: bytes
    credential_id: bytes
    credential_public_key_bytes: bytes


@dataclass(frozen=True)
class AuthenticatorData:
    rp_id_hash: bytes
    flags: Flags
    sign_count: int
    attested_credential_data: Optional[AttestedCredentialData] = None

    def to_dict(self):
        """Summary form: base64 RP ID hash, named flags and the counter."""
        return {
            "rpIdHash": buffer_to_base64(self.rp_id_hash),
            "flags": self.flags.to_dict(),
            "signCount": self.sign_count,
        }


def parse_authenticator_data(buffer):
    """Parse raw authenticator data into an AuthenticatorData.

    A clear AT flag is the normal shape of an assertion response and yields
    attested_credential_data=None. Raises TruncatedHeaderError for buffers
    shorter than 37 bytes and TruncatedAttestedDataError when the AT flag is
    set but the attested block is cut short.
    """
    data = bytes(buffer)
    if len(data) < HEADER_LENGTH:
        raise TruncatedHeaderError(
            f"Authenticator data was {len(data)} bytes, expected at least {HEADER_LENGTH} bytes"
        )

    cursor = ByteCursor(data)
    rp_id_hash = cursor.read_bytes(RP_ID_HASH_LENGTH)
    flags = Flags.from_byte(cursor.read_uint8())
    sign_count = cursor.read_uint32_be()

    if not flags.attested_credential_data_included:
        return AuthenticatorData(rp_id_hash=rp_id_hash, flags=flags, sign_count=sign_count)

    try:
        aaguid = cursor.read_bytes(AAGUID_LENGTH)
        credential_id_length = cursor.read_uint16_be()
        credential_id = cursor.read_bytes(credential_id_length)
    except OutOfBoundsError as e:
        raise TruncatedAttestedDataError(f"Attested credential data truncated: {e}") from e

    return AuthenticatorData(
        rp_id_hash=rp_id_hash,
        flags=flags,
        sign_count=sign_count,
        attested_credential_data=AttestedCredentialData(
            aaguid=aaguid,
            credential_id=credential_id,
            credential_public_key_bytes=cursor.read_rest(),
        ),
    )
