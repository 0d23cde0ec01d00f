"""Sign request handling.

A request moves through fixed states:

    RECEIVED -> DECODED -> BYTES_BUILT -> SIGNED -> ASSEMBLED -> ENCODED

Any failure ends the request with one of the errors in ``txsign.errors``.
Nothing is retried and no partial output is produced.
"""

import logging
from dataclasses import dataclass
from enum import Enum

from txsign.assembler import SignatureAssembler
from txsign.codec import Codec
from txsign.errors import SignServiceError
from txsign.models import SigningContext, SignRequest, StdTx
from txsign.signbytes import SignBytesBuilder
from txsign.signing.base import SignerBackend

logger = logging.getLogger(__name__)


class SignState(str, Enum):
    """Processing state of a sign request."""
    RECEIVED = "received"
    DECODED = "decoded"
    BYTES_BUILT = "bytes_built"
    SIGNED = "signed"
    ASSEMBLED = "assembled"
    ENCODED = "encoded"


@dataclass(frozen=True)
class PreparedSign:
    """A validated request ready to be signed."""
    tx: StdTx
    context: SigningContext
    sign_bytes: bytes


class SigningService:
    """Turns sign requests into signed transactions."""

    def __init__(self, signer: SignerBackend, codec: Codec):
        self.signer = signer
        self.codec = codec
        self.builder = SignBytesBuilder(codec)
        self.assembler = SignatureAssembler(codec)

    def prepare(self, request: SignRequest) -> PreparedSign:
        """Decode the embedded transaction and build its sign bytes.

        Raises:
            ValidationError: If the transaction, chain id or counters are invalid
        """
        tx = self.codec.decode_tx(request.tx)
        context = SigningContext.from_strings(
            request.chain_id, request.account_number, request.sequence
        )
        return PreparedSign(tx=tx, context=context, sign_bytes=self.builder.build_for(context, tx))

    async def sign(self, body: bytes) -> bytes:
        """Handle a raw sign request body.

        Returns:
            Encoded signed transaction

        Raises:
            SignServiceError: On any failure; see ``txsign.errors``
        """
        state = SignState.RECEIVED
        try:
            request = self.codec.decode_sign_request(body)
            state = SignState.DECODED
            prepared = self.prepare(request)
            state = SignState.BYTES_BUILT

            result = await self.signer.sign(
                request.name, request.password.get_secret_value(), prepared.sign_bytes
            )
            state = SignState.SIGNED

            signed = self.assembler.assemble(
                prepared.tx, result.signature, result.public_key, prepared.context
            )
            state = SignState.ASSEMBLED

            out = self.codec.encode_tx(signed)
            state = SignState.ENCODED
        except SignServiceError as e:
            logger.warning(f"Sign request failed after {state.value}: {e.category}: {e.message}")
            raise

        logger.info(
            f"Signed transaction with key {request.name} "
            f"({len(signed.signatures)} signature(s), chain {request.chain_id})"
        )
        return out
