"""Exceptions raised while decoding authenticator data."""


class AuthenticatorDataError(ValueError):
    """Base class for all decoding failures."""


class OutOfBoundsError(AuthenticatorDataError):
    """A read went past the end of the buffer."""


class UnsupportedEncodingError(AuthenticatorDataError):
    """A CBOR construct outside the supported subset was encountered."""


class TruncatedHeaderError(AuthenticatorDataError):
    """Authenticator data is shorter than the fixed 37-byte header."""


class TruncatedAttestedDataError(AuthenticatorDataError):
    """The attested credential data block is shorter than it declares."""


class NotAP256KeyError(AuthenticatorDataError):
    """A decoded COSE key is not a valid EC2 / ES256 / P-256 key."""
