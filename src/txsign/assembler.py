"""Signature assembly.

Attaches a freshly produced signature to a transaction. Signatures are only
ever appended: signers of a multi-signature transaction sign one after the
other, each call adding its record after the ones already present.
"""

from txsign.codec import Codec
from txsign.models import SignedTransaction, SigningContext, StdSignature, StdTx


class SignatureAssembler:
    """Builds signed transactions from a signature and its signing context."""

    def __init__(self, codec: Codec):
        self.codec = codec

    def assemble(
        self,
        tx: StdTx,
        signature: bytes,
        public_key: bytes,
        context: SigningContext,
    ) -> SignedTransaction:
        """Append a signature record to a transaction.

        The record takes its account number and sequence from ``context``,
        which must be the context the sign bytes were built with. ``tx`` is
        left untouched; a new transaction is returned.
        """
        record = StdSignature(
            pub_key=self.codec.pub_key(public_key),
            signature=signature,
            account_number=context.account_number,
            sequence=context.sequence,
        )
        return SignedTransaction(
            msg=tx.msg,
            fee=tx.fee,
            signatures=tx.signatures + (record,),
            memo=tx.memo,
        )
