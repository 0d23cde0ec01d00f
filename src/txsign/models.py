"""Transaction and request contracts.

Wire shapes follow the amino JSON encoding of a standard transaction:

    {"msg": [...], "fee": {"amount": [...], "gas": "200000"},
     "signatures": [...], "memo": ""}

All models are frozen. Sequences are tuples, so a transaction can be shared
between requests and stages without being mutated.
"""

import base64
import re
from typing import Any, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    SecretStr,
    field_serializer,
    field_validator,
    model_validator,
)

from txsign.errors import InvalidChainIDError, InvalidNumberError, OutOfRangeError

UINT64_MAX = (1 << 64) - 1

_DECIMAL = re.compile(r"[0-9]+")
_SIGNED_DECIMAL = re.compile(r"-?[0-9]+")


def parse_uint64(field: str, value: Any) -> int:
    """Parse a base-10 string as an unsigned 64-bit integer.

    Only ASCII digits are accepted: no sign, whitespace, underscores or
    radix prefix.

    Raises:
        InvalidNumberError: If the value is not a decimal string or does not
            fit in 64 bits.
    """
    if not isinstance(value, str) or not _DECIMAL.fullmatch(value):
        raise InvalidNumberError(field, value)
    number = int(value)
    if number > UINT64_MAX:
        raise InvalidNumberError(field, value)
    return number


def to_uint64(field: str, value: int) -> int:
    """Narrow an in-memory integer to the unsigned 64-bit range.

    Raises:
        OutOfRangeError: If the value is negative or wider than 64 bits.
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise OutOfRangeError(field, value)
    if value < 0 or value > UINT64_MAX:
        raise OutOfRangeError(field, value)
    return value


def _b64decode(value: Any) -> Any:
    if isinstance(value, str):
        return base64.b64decode(value, validate=True)
    return value


def _wire_uint64(value: Any) -> Any:
    if isinstance(value, bool) or isinstance(value, float):
        raise ValueError("must be an integer or decimal string")
    if isinstance(value, str):
        if not _DECIMAL.fullmatch(value):
            raise ValueError("must be a base-10 unsigned integer")
        value = int(value)
    if isinstance(value, int) and not 0 <= value <= UINT64_MAX:
        raise ValueError("out of range for an unsigned 64-bit integer")
    return value


class Coin(BaseModel):
    """A (denomination, quantity) pair."""

    model_config = ConfigDict(frozen=True)

    denom: str
    amount: str

    @field_validator("amount", mode="before")
    @classmethod
    def _integer_amount(cls, value: Any) -> str:
        if isinstance(value, bool) or not isinstance(value, (int, str)):
            raise ValueError("amount must be an integer or decimal string")
        text = str(value)
        if not _DECIMAL.fullmatch(text):
            raise ValueError("amount must be a non-negative base-10 integer")
        return str(int(text))


class Fee(BaseModel):
    """Transaction fee.

    ``gas`` is held as a signed integer, the way the transaction carries it
    in memory. It is narrowed to uint64 only when sign bytes are built.
    """

    model_config = ConfigDict(frozen=True)

    amount: tuple[Coin, ...] = ()
    gas: int = 0

    @field_validator("amount", mode="before")
    @classmethod
    def _null_amount(cls, value: Any) -> Any:
        return () if value is None else value

    @field_validator("gas", mode="before")
    @classmethod
    def _integer_gas(cls, value: Any) -> Any:
        if isinstance(value, bool) or isinstance(value, float):
            raise ValueError("gas must be an integer or decimal string")
        if isinstance(value, str):
            if not _SIGNED_DECIMAL.fullmatch(value):
                raise ValueError("gas must be a base-10 integer")
            return int(value)
        return value

    @field_serializer("gas")
    def _gas_string(self, gas: int) -> str:
        return str(gas)


class PubKey(BaseModel):
    """Amino-typed public key; ``value`` is base64 on the wire."""

    model_config = ConfigDict(frozen=True)

    type: str
    value: bytes

    @field_validator("value", mode="before")
    @classmethod
    def _decode_value(cls, value: Any) -> Any:
        return _b64decode(value)

    @field_serializer("value")
    def _encode_value(self, value: bytes) -> str:
        return base64.b64encode(value).decode()


class StdSignature(BaseModel):
    """A signature record embedded in a transaction.

    Account number and sequence are carried per signature so each signer of
    a multi-signature transaction can have its own counters.
    """

    model_config = ConfigDict(frozen=True)

    pub_key: Optional[PubKey] = None
    signature: bytes
    account_number: int = 0
    sequence: int = 0

    @field_validator("signature", mode="before")
    @classmethod
    def _decode_signature(cls, value: Any) -> Any:
        return _b64decode(value)

    @field_validator("account_number", "sequence", mode="before")
    @classmethod
    def _check_counters(cls, value: Any) -> Any:
        return _wire_uint64(value)

    @field_serializer("signature")
    def _encode_signature(self, signature: bytes) -> str:
        return base64.b64encode(signature).decode()

    @field_serializer("account_number", "sequence")
    def _counter_string(self, value: int) -> str:
        return str(value)


class StdTx(BaseModel):
    """A standard transaction: messages, fee, signatures and memo."""

    model_config = ConfigDict(frozen=True)

    msg: tuple[Any, ...] = ()
    fee: Fee
    signatures: tuple[StdSignature, ...] = ()
    memo: str = ""

    @field_validator("msg", "signatures", mode="before")
    @classmethod
    def _null_sequence(cls, value: Any) -> Any:
        return () if value is None else value


UnsignedTransaction = StdTx


class SignedTransaction(StdTx):
    """A transaction carrying at least one signature."""

    @model_validator(mode="after")
    def _has_signature(self) -> "SignedTransaction":
        if not self.signatures:
            raise ValueError("signed transaction requires at least one signature")
        return self


class SigningContext(BaseModel):
    """Chain id and account counters a signature is bound to.

    Built once per request and passed to both the sign-bytes builder and the
    signature assembler, so the counters signed over are the counters
    recorded in the signature.
    """

    model_config = ConfigDict(frozen=True)

    chain_id: str
    account_number: int = Field(ge=0, le=UINT64_MAX)
    sequence: int = Field(ge=0, le=UINT64_MAX)

    @classmethod
    def from_strings(cls, chain_id: str, account_number: str, sequence: str) -> "SigningContext":
        """Parse the decimal strings of a sign request."""
        if not chain_id:
            raise InvalidChainIDError(chain_id)
        return cls(
            chain_id=chain_id,
            account_number=parse_uint64("account_number", account_number),
            sequence=parse_uint64("sequence", sequence),
        )


class SignRequest(BaseModel):
    """Body of a sign request.

    ``tx`` is the still-encoded transaction; it is decoded separately so a
    malformed transaction is reported as a validation failure rather than a
    malformed request.
    """

    model_config = ConfigDict(frozen=True)

    tx: Any = None
    name: str = ""
    password: SecretStr = SecretStr("")
    chain_id: str = ""
    account_number: str = ""
    sequence: str = ""
