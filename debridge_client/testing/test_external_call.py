import unittest

from ..common_debridge.constants import SUBMISSION_AUTH_PLACEHOLDER, TOKEN_PROGRAM_ID, SIGNATURE_FEE
from ..common_debridge.errors import ExternalCallDecodeError
from ..common_debridge.external_call import (
    ExternalCall, ExternalInstruction, ExternalAccountMeta, AmountSubstitution, WalletSubstitution,
    build_transfer_ext_call, make_init_ata_ext_ix, make_transfer_ext_ix, external_call_shortcut
)
from ..common_debridge.keys import AccountsResolver
from ..common_debridge.solana_tx import SolPubKey


class TestExternalCall(unittest.TestCase):
    @classmethod
    def setUpClass(cls) -> None:
        cls.mint = SolPubKey.from_string('So11111111111111111111111111111111111111112')
        cls.wallet = SolPubKey.from_string('BHvfz1GvtQgmJgGZcBLuGsDCbnXBrGu8QwgKgBaoHMBn')
        cls.rent = 2039280

    def test_init_ata_ext_ix(self):
        ext_ix = make_init_ata_ext_ix(self.mint, self.wallet, self.rent)

        self.assertEqual(ext_ix.reward, 100)
        self.assertEqual(ext_ix.expenses, SIGNATURE_FEE + self.rent)
        self.assertEqual(ext_ix.amount_substitutions, [])
        self.assertEqual(ext_ix.wallet_substitutions, [WalletSubstitution(index=1, token_mint=str(self.mint))])

        self.assertEqual(ext_ix.keys[0].pubkey, str(SUBMISSION_AUTH_PLACEHOLDER))
        self.assertTrue(ext_ix.keys[0].is_signer)
        self.assertEqual(ext_ix.keys[2].pubkey, str(self.wallet))

    def test_transfer_ext_ix(self):
        ext_ix = make_transfer_ext_ix(self.mint, self.wallet)

        self.assertEqual(ext_ix.program_id, str(TOKEN_PROGRAM_ID))
        self.assertEqual(ext_ix.reward, 10)
        self.assertEqual(ext_ix.expenses, SIGNATURE_FEE)
        self.assertEqual(
            ext_ix.amount_substitutions,
            [AmountSubstitution(account_index=0, is_big_endian=False, offset=1, subtraction=0)]
        )
        self.assertEqual(ext_ix.wallet_substitutions, [WalletSubstitution(index=0, token_mint=str(self.mint))])

        source = AccountsResolver.find_associated_token_address(SUBMISSION_AUTH_PLACEHOLDER, self.mint)
        dest = AccountsResolver.find_associated_token_address(self.wallet, self.mint)
        self.assertEqual(
            [meta.pubkey for meta in ext_ix.keys[:3]],
            [str(source), str(dest), str(SUBMISSION_AUTH_PLACEHOLDER)]
        )

        # the amount lives right after the instruction tag
        self.assertEqual(ext_ix.data[0], 3)
        self.assertEqual(int.from_bytes(ext_ix.data[1:9], 'little'), 1)

    def test_transfer_ext_call_per_wallet(self):
        wallet_list = [self.wallet, SolPubKey.from_string('DeSetTwWhjZq6Pz9Kfdo1KoS5NqtsM6G8ERbX4SSCSft')]
        ext_call = build_transfer_ext_call(self.mint, wallet_list, self.rent)

        self.assertEqual(len(ext_call), 4)
        self.assertEqual([ix.reward for ix in ext_call.ix_list], [100, 10, 100, 10])

        expected = b''.join([
            make_init_ata_ext_ix(self.mint, wallet_list[0], self.rent).serialize(),
            make_transfer_ext_ix(self.mint, wallet_list[0]).serialize(),
            make_init_ata_ext_ix(self.mint, wallet_list[1], self.rent).serialize(),
            make_transfer_ext_ix(self.mint, wallet_list[1]).serialize(),
        ])
        self.assertEqual(ext_call.serialize(), expected)

    def test_serialization_is_deterministic(self):
        first = build_transfer_ext_call(self.mint, [self.wallet], self.rent).serialize()
        second = build_transfer_ext_call(self.mint, [self.wallet], self.rent).serialize()
        self.assertEqual(first, second)
        self.assertEqual(external_call_shortcut(first), external_call_shortcut(second))

    def test_serialized_layout(self):
        ext_ix = ExternalInstruction(
            program_id=str(TOKEN_PROGRAM_ID),
            keys=[ExternalAccountMeta(str(self.wallet), is_signer=False, is_writable=True)],
            data=b'\x01\x02',
            reward=7,
            expenses=9,
            amount_substitutions=[AmountSubstitution(0, True, 1, 5)],
            wallet_substitutions=[WalletSubstitution(0, str(self.mint))]
        )
        data = ext_ix.serialize()

        body_len = 8 + 8 + 1 + (4 + 17) + (4 + 36) + 32 + (4 + 34) + (4 + 2)
        self.assertEqual(len(data), 8 + body_len)
        self.assertEqual(int.from_bytes(data[:8], 'little'), body_len)
        self.assertEqual(int.from_bytes(data[8:16], 'little'), 7)
        self.assertEqual(int.from_bytes(data[16:24], 'little'), 9)
        self.assertEqual(data[24], 0)
        self.assertEqual(data[-2:], b'\x01\x02')

        parsed = ExternalCall.parse(data)
        self.assertEqual(parsed.ix_list, [ext_ix])

    def test_parse_truncated(self):
        data = build_transfer_ext_call(self.mint, [self.wallet], self.rent).serialize()
        with self.assertRaises(ExternalCallDecodeError):
            ExternalCall.parse(data[:-1])
        with self.assertRaises(ExternalCallDecodeError):
            ExternalCall.parse(data[:4])

    def test_parse_transfer_call(self):
        wallet_list = [self.wallet, SolPubKey.from_string('DeSetTwWhjZq6Pz9Kfdo1KoS5NqtsM6G8ERbX4SSCSft')]
        ext_call = build_transfer_ext_call(self.mint, wallet_list, self.rent)

        parsed = ExternalCall.parse(ext_call.serialize())
        self.assertEqual(len(parsed), 4)
        self.assertEqual(parsed.ix_list, ext_call.ix_list)
        self.assertEqual(parsed.ix_list[0].keys[0].pubkey, str(SUBMISSION_AUTH_PLACEHOLDER))
        self.assertTrue(parsed.ix_list[0].keys[0].is_signer)
        self.assertEqual(parsed.shortcut(), ext_call.shortcut())

    def test_empty_shortcut(self):
        self.assertEqual(
            external_call_shortcut(b'').hex(),
            'c5d2460186f7233c927e7db2dcc703c0e500b653ca82273b7bfad8045d85a470'
        )


if __name__ == '__main__':
    unittest.main()
