"""
Error taxonomy for the AI Vault security core.
Every failure raised by hashing, signing, token and codec helpers derives from SecurityError.
"""


class SecurityError(Exception):
    """Base class for all security core errors."""


class InvalidInput(SecurityError, ValueError):
    """Bad size, cost or format argument."""


class InvalidKeyFormat(InvalidInput):
    """Key bytes cannot be interpreted in the requested layout."""


class InvalidRecord(InvalidInput):
    """Stored password record is not a well-formed bcrypt hash."""


class MalformedToken(InvalidInput):
    """Token text cannot be split or parsed into JWT segments."""


class FileAccessError(SecurityError, OSError):
    """File could not be opened or read."""


class HashingFailure(SecurityError):
    """Password hashing failed (bad cost factor or backend failure)."""


class SigningFailure(SecurityError):
    """Claims could not be serialized or signed."""


class TokenError(SecurityError):
    """Base class for token validation failures."""


class SignatureInvalid(TokenError):
    """Token signature does not match its header and claims."""


class AlgorithmMismatch(TokenError):
    """Token declares a signing algorithm other than the fixed scheme."""


class TokenExpired(TokenError):
    """Token expiration time has been reached."""


class ClaimsInvalid(TokenError):
    """Token claims are structurally invalid or not yet valid."""


class CodecError(SecurityError):
    """Base class for text codec failures."""


class EncoderNotConfigured(CodecError):
    """No encoding variant has been selected."""


class DecodeError(CodecError, ValueError):
    """Input text is not valid for the selected encoding."""
