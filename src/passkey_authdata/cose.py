"""COSE EC2 / P-256 key extraction from a decoded CBOR map."""

from dataclasses import dataclass

from .cbor import CBORMap
from .errors import NotAP256KeyError

# COSE key map labels (RFC 9052 / RFC 9053)
COSE_KEY_KTY = 1
COSE_KEY_ALG = 3
COSE_KEY_CRV = -1
COSE_KEY_X = -2
COSE_KEY_Y = -3

COSE_KTY_EC2 = 2
COSE_ALG_ES256 = -7
COSE_CRV_P256 = 1


@dataclass(frozen=True)
class COSEKey:
    kty: int
    alg: int
    crv: int
    x: bytes
    y: bytes


def _coordinate(mapping, label, name):
    value = mapping.get(label)
    if not isinstance(value, bytes):
        raise NotAP256KeyError(f"{name} coordinate missing or not a byte string")
    if not value:
        raise NotAP256KeyError(f"{name} coordinate is empty")
    return value


def extract_cose_key(mapping):
    """Validate `mapping` as an ES256 key and return its coordinates."""
    if not isinstance(mapping, CBORMap):
        raise NotAP256KeyError(f"COSE key is not a map ({type(mapping).__name__})")

    kty = mapping.get(COSE_KEY_KTY)
    alg = mapping.get(COSE_KEY_ALG)
    crv = mapping.get(COSE_KEY_CRV)

    if kty != COSE_KTY_EC2 or alg != COSE_ALG_ES256 or crv != COSE_CRV_P256:
        raise NotAP256KeyError(f"Not an ES256 P-256 key (kty={kty}, alg={alg}, crv={crv})")

    return COSEKey(
        kty=kty,
        alg=alg,
        crv=crv,
        x=_coordinate(mapping, COSE_KEY_X, "x"),
        y=_coordinate(mapping, COSE_KEY_Y, "y"),
    )
