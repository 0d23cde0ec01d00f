"""Tests for signature assembly."""

import pytest

from txsign.assembler import SignatureAssembler
from txsign.models import SignedTransaction, SigningContext, StdSignature, StdTx


@pytest.fixture
def assembler(codec) -> SignatureAssembler:
    return SignatureAssembler(codec)


@pytest.fixture
def context() -> SigningContext:
    return SigningContext(chain_id="test-chain", account_number=5, sequence=2)


@pytest.fixture
def tx_with_signatures(unsigned_tx) -> StdTx:
    unsigned_tx["signatures"] = [
        {"signature": "AQ==", "account_number": "1", "sequence": "0"},
        {"signature": "Ag==", "account_number": "2", "sequence": "7"},
    ]
    return StdTx.model_validate(unsigned_tx)


class TestAssemble:
    """Tests for SignatureAssembler.assemble."""

    def test_appends_after_existing(self, assembler, tx_with_signatures, context):
        s1, s2 = tx_with_signatures.signatures

        signed = assembler.assemble(tx_with_signatures, b"\x09" * 64, b"\x02" * 33, context)

        assert len(signed.signatures) == 3
        assert signed.signatures[0] is s1
        assert signed.signatures[1] is s2
        assert signed.signatures[2].signature == b"\x09" * 64

    def test_record_uses_context_counters(self, assembler, tx_with_signatures, context):
        signed = assembler.assemble(tx_with_signatures, b"\x09", b"\x02" * 33, context)
        record = signed.signatures[-1]

        assert record.account_number == 5
        assert record.sequence == 2
        assert record.pub_key.type == "tendermint/PubKeySecp256k1"
        assert record.pub_key.value == b"\x02" * 33

    def test_original_untouched(self, assembler, tx_with_signatures, context):
        before = tx_with_signatures.model_dump()

        signed = assembler.assemble(tx_with_signatures, b"\x09", b"\x02", context)

        assert tx_with_signatures.model_dump() == before
        assert len(tx_with_signatures.signatures) == 2
        assert signed is not tx_with_signatures

    def test_body_reused(self, assembler, unsigned_tx, context):
        tx = StdTx.model_validate(unsigned_tx)

        signed = assembler.assemble(tx, b"\x09", b"\x02", context)

        assert isinstance(signed, SignedTransaction)
        assert signed.msg == tx.msg
        assert signed.fee is tx.fee
        assert signed.memo == tx.memo

    def test_same_inputs_same_record(self, assembler, unsigned_tx, context):
        tx = StdTx.model_validate(unsigned_tx)

        first = assembler.assemble(tx, b"\x09" * 64, b"\x02" * 33, context)
        second = assembler.assemble(tx, b"\x09" * 64, b"\x02" * 33, context)

        assert first.signatures == second.signatures

    def test_signature_bytes_unaltered(self, assembler, unsigned_tx, context):
        tx = StdTx.model_validate(unsigned_tx)
        raw = bytes(range(64))

        signed = assembler.assemble(tx, raw, b"\x02", context)

        assert signed.signatures[-1].signature == raw

    def test_signed_transaction_requires_signature(self, unsigned_tx):
        with pytest.raises(ValueError):
            SignedTransaction.model_validate(unsigned_tx)

    def test_chained_assembly(self, assembler, unsigned_tx, context):
        """Signatures from successive sign calls accumulate in call order."""
        tx = StdTx.model_validate(unsigned_tx)
        other = SigningContext(chain_id="test-chain", account_number=8, sequence=0)

        once = assembler.assemble(tx, b"\x01", b"\x02", context)
        twice = assembler.assemble(once, b"\x03", b"\x04", other)

        assert [s.account_number for s in twice.signatures] == [5, 8]
        assert twice.signatures[0] == once.signatures[0]
        assert isinstance(twice.signatures[1], StdSignature)
