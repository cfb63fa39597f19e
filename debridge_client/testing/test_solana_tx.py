import base64
import unittest

from solders.message import Message
from solders.transaction import Transaction

from ..common_debridge.config import Config
from ..common_debridge.errors import SolTxSizeError
from ..common_debridge.solana_tx import SolLegacyTx, SolTxIx, SolAccountMeta, SolAccount, SolBlockHash, SolCommit
from ..common_debridge.tx_sender import TxSender, TxEncoding

from .testing_helpers import FakeSolInteractor


class FakeConfig(Config):
    def __init__(self, wallet: SolAccount):
        self._wallet = wallet
        self._commit_type = SolCommit.Confirmed


class TestSolLegacyTx(unittest.TestCase):
    def setUp(self) -> None:
        self.signer = SolAccount()
        self.program_id = SolAccount().pubkey()

    def _make_ix(self, data: bytes) -> SolTxIx:
        return SolTxIx(
            program_id=self.program_id,
            data=data,
            accounts=[SolAccountMeta(pubkey=self.signer.pubkey(), is_signer=True, is_writable=True)]
        )

    def test_sign(self):
        tx = SolLegacyTx('test', [self._make_ix(b'\x01')])
        self.assertIsNone(tx.recent_block_hash)
        with self.assertRaises(AssertionError):
            tx.sign(self.signer)

        block_hash = SolBlockHash(bytes([3] * 32))
        tx.recent_block_hash = block_hash
        tx.sign(self.signer)
        self.assertTrue(tx.is_signed)
        self.assertEqual(tx.recent_block_hash, block_hash)
        self.assertGreater(len(tx.serialize()), 0)

    def test_block_hash_keeps_instructions(self):
        readonly = SolAccountMeta(pubkey=SolAccount().pubkey(), is_signer=False, is_writable=False)
        ix = SolTxIx(
            program_id=self.program_id,
            data=b'\x05\x06',
            accounts=[SolAccountMeta(pubkey=self.signer.pubkey(), is_signer=True, is_writable=True), readonly]
        )
        tx = SolLegacyTx('test', [ix])
        self.assertEqual(tx.ix_list, [ix])

        block_hash = SolBlockHash(bytes([4] * 32))
        tx.recent_block_hash = block_hash
        tx.recent_block_hash = block_hash
        tx.sign(self.signer)

        expected_msg = Message.new_with_blockhash([ix], self.signer.pubkey(), block_hash)
        self.assertEqual(Transaction.from_bytes(tx.serialize()).message, expected_msg)
        self.assertEqual(tx.ix_list, [ix])

    def test_size_limit(self):
        tx = SolLegacyTx('big', [self._make_ix(bytes(1300))])
        tx.recent_block_hash = SolBlockHash(bytes([3] * 32))
        tx.sign(self.signer)
        with self.assertRaises(SolTxSizeError):
            tx.serialize()


class TestTxSender(unittest.TestCase):
    def test_process(self):
        wallet = SolAccount()
        solana = FakeSolInteractor()
        sender = TxSender(FakeConfig(wallet), solana)
        ix = SolTxIx(
            program_id=SolAccount().pubkey(),
            data=b'\x02',
            accounts=[SolAccountMeta(pubkey=wallet.pubkey(), is_signer=True, is_writable=True)]
        )

        tx = sender.build_tx('test', [ix])
        self.assertTrue(tx.is_signed)
        self.assertEqual(
            base64.b64decode(TxSender.encode_tx(tx, TxEncoding.Base64)),
            bytes.fromhex(TxSender.encode_tx(tx, TxEncoding.Hex))
        )

        self.assertEqual(sender.send_tx(tx), str(tx.sig))
        self.assertEqual(solana.sent_tx_list, [tx])


if __name__ == '__main__':
    unittest.main()
