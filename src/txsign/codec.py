"""Wire codec.

A ``Codec`` is built once from settings and handed to every component that
reads or writes the wire format. It holds no mutable state.

Canonical JSON rules (used for sign bytes):
- Object keys sorted at every depth, no whitespace, UTF-8 output
- ``<``, ``>``, ``&``, U+2028 and U+2029 escaped as ``\\uXXXX``, the way
  the reference node encoder writes them
- No floats, NaN or infinities; integers limited to the range a double
  represents exactly
"""

import json
import logging
from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from txsign.errors import DecodeError, EncodingError, MalformedTransactionError
from txsign.models import PubKey, SignedTransaction, SignRequest, StdTx

logger = logging.getLogger(__name__)

# Integers above 2^53 do not survive a round trip through a double
MAX_SAFE_INTEGER = (1 << 53) - 1

_ESCAPES = str.maketrans({ch: "\\u%04x" % ord(ch) for ch in ("<", ">", "&", chr(0x2028), chr(0x2029))})


def _reject_duplicates(pairs: list[tuple[str, Any]]) -> dict:
    obj = {}
    for key, value in pairs:
        if key in obj:
            raise ValueError(f"duplicate key {key!r}")
        obj[key] = value
    return obj


def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not valid JSON")


def _is_utf8(text: str) -> bool:
    # False for lone surrogates, which a "\ud800" escape decodes to
    try:
        text.encode("utf-8")
    except UnicodeEncodeError:
        return False
    return True


def _reject_surrogates(value: Any, path: str = "$") -> None:
    if isinstance(value, str):
        if not _is_utf8(value):
            raise ValueError(f"{path}: string is not valid unicode")
    elif isinstance(value, dict):
        for key, item in value.items():
            if not _is_utf8(key):
                raise ValueError(f"{path}: object key is not valid unicode")
            _reject_surrogates(item, f"{path}.{key}")
    elif isinstance(value, list):
        for index, item in enumerate(value):
            _reject_surrogates(item, f"{path}[{index}]")


def _check_canonical(value: Any, path: str) -> None:
    """Reject values whose JSON rendering is not reproducible byte-for-byte."""
    if value is None or isinstance(value, bool):
        return
    if isinstance(value, str):
        if not _is_utf8(value):
            raise MalformedTransactionError(f"{path}: string is not valid unicode", field=path)
        return
    if isinstance(value, int):
        if abs(value) > MAX_SAFE_INTEGER:
            raise MalformedTransactionError(
                f"{path}: integer {value} cannot be encoded canonically", field=path, value=value
            )
        return
    if isinstance(value, float):
        raise MalformedTransactionError(
            f"{path}: floating-point numbers are not allowed", field=path, value=value
        )
    if isinstance(value, dict):
        for key, item in value.items():
            if not isinstance(key, str):
                raise MalformedTransactionError(f"{path}: object keys must be strings", field=path)
            if not _is_utf8(key):
                raise MalformedTransactionError(f"{path}: object key is not valid unicode", field=path)
            _check_canonical(item, f"{path}.{key}")
        return
    if isinstance(value, (list, tuple)):
        for index, item in enumerate(value):
            _check_canonical(item, f"{path}[{index}]")
        return
    raise MalformedTransactionError(
        f"{path}: unsupported value of type {type(value).__name__}", field=path
    )


def _summarize(error: PydanticValidationError) -> str:
    first = error.errors()[0]
    location = ".".join(str(part) for part in first["loc"]) or "<root>"
    return f"{location}: {first['msg']}"


@dataclass(frozen=True)
class Codec:
    """Encoding configuration shared by the builder, assembler and service.

    Attributes:
        tx_type: Amino type tag wrapping an encoded transaction
        pub_key_type: Amino type tag of public keys produced by the signer
    """

    tx_type: str = "auth/StdTx"
    pub_key_type: str = "tendermint/PubKeySecp256k1"

    @classmethod
    def from_settings(cls, settings) -> "Codec":
        return cls(tx_type=settings.tx_type, pub_key_type=settings.pub_key_type)

    # ======================
    # Canonical JSON
    # ======================

    def canonical_json(self, obj: Any, path: str = "$") -> bytes:
        """Serialize to canonical JSON bytes.

        Raises:
            MalformedTransactionError: If ``obj`` holds a value without a
                canonical rendering.
        """
        _check_canonical(obj, path)
        text = json.dumps(
            obj,
            sort_keys=True,
            separators=(",", ":"),
            ensure_ascii=False,
            allow_nan=False,
        )
        return text.translate(_ESCAPES).encode("utf-8")

    @staticmethod
    def loads(raw: bytes) -> Any:
        """Parse JSON, rejecting duplicate keys, NaN/Infinity and lone surrogates.

        Raises:
            ValueError: If ``raw`` is not strict JSON.
        """
        if isinstance(raw, (bytes, bytearray)):
            raw = raw.decode("utf-8")
        value = json.loads(
            raw,
            object_pairs_hook=_reject_duplicates,
            parse_constant=_reject_constant,
        )
        _reject_surrogates(value)
        return value

    # ======================
    # Requests
    # ======================

    def decode_sign_request(self, body: bytes) -> SignRequest:
        """Decode a sign request body.

        Raises:
            DecodeError: If the body is not a JSON object of the request shape.
        """
        try:
            data = self.loads(body)
        except ValueError as e:
            raise DecodeError(f"Invalid request body: {e}") from e

        if not isinstance(data, dict):
            raise DecodeError("Request body must be a JSON object")

        try:
            return SignRequest.model_validate(data)
        except PydanticValidationError as e:
            raise DecodeError(f"Invalid request body: {_summarize(e)}") from e

    # ======================
    # Transactions
    # ======================

    def decode_tx(self, value: Any) -> StdTx:
        """Decode a transaction, bare or wrapped in its amino type tag.

        Raises:
            MalformedTransactionError: If the value is not a transaction.
        """
        if isinstance(value, (bytes, bytearray, str)):
            try:
                value = self.loads(value)
            except ValueError as e:
                raise MalformedTransactionError(f"tx: {e}", field="tx") from e

        if not isinstance(value, dict):
            raise MalformedTransactionError("tx must be a JSON object", field="tx")

        if set(value) == {"type", "value"}:
            if value["type"] != self.tx_type:
                raise MalformedTransactionError(
                    f"tx: unexpected type {value['type']!r}, want {self.tx_type!r}",
                    field="tx.type",
                    value=value["type"],
                )
            value = value["value"]

        try:
            return StdTx.model_validate(value)
        except PydanticValidationError as e:
            raise MalformedTransactionError(f"tx.{_summarize(e)}", field="tx") from e

    def encode_tx(self, tx: SignedTransaction) -> bytes:
        """Encode a signed transaction wrapped in its amino type tag.

        Raises:
            EncodingError: If the transaction cannot be serialized.
        """
        try:
            payload = {"type": self.tx_type, "value": tx.model_dump(mode="json")}
            return json.dumps(payload, separators=(",", ":"), ensure_ascii=False, allow_nan=False).encode("utf-8")
        except (TypeError, ValueError) as e:
            logger.error(f"Failed to encode signed transaction: {e}")
            raise EncodingError(f"Failed to encode signed transaction: {e}") from e

    def pub_key(self, raw: bytes) -> PubKey:
        """Wrap raw public key bytes in the configured amino type."""
        return PubKey(type=self.pub_key_type, value=raw)
