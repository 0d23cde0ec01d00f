"""Sign bytes construction.

The bytes a signature covers are the canonical JSON of a sign document:

    {"account_number":"5","chain_id":"test-chain",
     "fee":{"amount":[],"gas":"200000"},"memo":"",
     "msgs":[...],"sequence":"2"}

(shown wrapped; the real output has no whitespace). Every node that
verifies the signature rebuilds this document independently, so the field
set, key order and number rendering must never change.
"""

import logging
from typing import Any, Sequence

from txsign.codec import Codec
from txsign.errors import InvalidChainIDError
from txsign.models import Fee, SigningContext, StdTx, to_uint64

logger = logging.getLogger(__name__)


class SignBytesBuilder:
    """Builds the canonical bytes a transaction signature is computed over."""

    def __init__(self, codec: Codec):
        self.codec = codec

    def build(
        self,
        chain_id: str,
        account_number: int,
        sequence: int,
        fee: Fee,
        msgs: Sequence[Any],
        memo: str,
    ) -> bytes:
        """Build sign bytes from loose values.

        Args:
            chain_id: Chain the signature is valid on (non-empty)
            account_number: Signer's account number (uint64)
            sequence: Signer's sequence (uint64)
            fee: Transaction fee; gas is narrowed to uint64
            msgs: Transaction messages, in order
            memo: Transaction memo

        Returns:
            Canonical sign bytes

        Raises:
            InvalidChainIDError: If chain_id is empty
            OutOfRangeError: If a counter or gas does not fit in uint64
            MalformedTransactionError: If a message has no canonical encoding
        """
        if not isinstance(chain_id, str) or not chain_id:
            raise InvalidChainIDError(chain_id)

        document = {
            "account_number": str(to_uint64("account_number", account_number)),
            "chain_id": chain_id,
            "fee": {
                "amount": [coin.model_dump() for coin in fee.amount],
                "gas": str(to_uint64("fee.gas", fee.gas)),
            },
            "memo": memo,
            "msgs": list(msgs),
            "sequence": str(to_uint64("sequence", sequence)),
        }
        sign_bytes = self.codec.canonical_json(document, path="tx")
        logger.debug(f"Built {len(sign_bytes)} sign bytes for chain {chain_id}")
        return sign_bytes

    def build_for(self, context: SigningContext, tx: StdTx) -> bytes:
        """Build sign bytes for a decoded transaction under a signing context."""
        return self.build(
            context.chain_id,
            context.account_number,
            context.sequence,
            tx.fee,
            tx.msg,
            tx.memo,
        )
