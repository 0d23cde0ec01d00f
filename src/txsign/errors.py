"""Error taxonomy for the signing service.

Every failure raised while handling a sign request is one of the classes
below. Each carries a ``category`` and an HTTP-equivalent ``status_code`` so
the API layer can turn it into a structured error response without
inspecting messages:

- decode: the request body could not be decoded (400)
- validation: numeric fields, chain id or embedded transaction invalid (422)
- signer: key lookup, passphrase or key storage failures (401/404/503)
- encoding: the signed transaction could not be serialized (500)
"""

from typing import Any, Optional


class SignServiceError(Exception):
    """Base class for all signing service errors."""

    category: str = "internal"
    status_code: int = 500

    def __init__(self, message: str, field: Optional[str] = None, value: Any = None):
        self.message = message
        self.field = field
        self.value = value
        super().__init__(message)

    def to_dict(self) -> dict:
        """Structured error payload."""
        return {
            "error": self.message,
            "category": self.category,
            "field": self.field,
            "value": None if self.value is None else str(self.value),
        }


# ======================
# Transport / decode
# ======================

class DecodeError(SignServiceError):
    """Request body is not a decodable sign request."""

    category = "decode"
    status_code = 400


# ======================
# Validation
# ======================

class ValidationError(SignServiceError):
    """Input decoded but failed validation."""

    category = "validation"
    status_code = 422


class InvalidNumberError(ValidationError):
    """A decimal string could not be parsed as an unsigned 64-bit integer."""

    def __init__(self, field: str, value: Any):
        super().__init__(
            f"{field}: {value!r} is not a base-10 unsigned 64-bit integer",
            field=field,
            value=value,
        )


class OutOfRangeError(ValidationError):
    """A numeric value does not fit the width required by the sign bytes."""

    def __init__(self, field: str, value: Any):
        super().__init__(
            f"{field}: {value!r} is out of range for an unsigned 64-bit integer",
            field=field,
            value=value,
        )


class InvalidChainIDError(ValidationError):
    """Chain id is missing or empty."""

    def __init__(self, value: Any = ""):
        super().__init__("chain_id must be a non-empty string", field="chain_id", value=value)


class MalformedTransactionError(ValidationError):
    """The embedded transaction cannot be parsed from its wire form."""


# ======================
# Signer
# ======================

class SigningError(SignServiceError):
    """Exception raised when signing fails."""

    category = "signer"
    status_code = 502


class KeyNotFoundError(SigningError):
    """Exception raised when signing key is not found."""

    status_code = 404

    def __init__(self, name: str):
        super().__init__(f"Key {name!r} not found", field="name", value=name)


class InvalidPassphraseError(SigningError):
    """Passphrase does not unlock the key."""

    status_code = 401

    def __init__(self, name: str):
        super().__init__(f"Invalid passphrase for key {name!r}", field="name", value=name)


class KeyStoreUnavailableError(SigningError):
    """Key storage could not be read."""

    status_code = 503


# ======================
# Encoding
# ======================

class EncodingError(SignServiceError):
    """Signed transaction could not be serialized."""

    category = "encoding"
    status_code = 500
