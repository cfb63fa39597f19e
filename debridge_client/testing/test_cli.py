import argparse
import base64
import io
import json
import unittest

from unittest.mock import patch

from solders.transaction import Transaction

from ..cli import estimate as estimate_module
from ..cli import external_call as external_call_module
from ..cli import send as send_module
from ..cli.__main__ import main, init_args_parser
from ..cli.validators import parse_pubkey, parse_hex, parse_bool, parse_u64, parse_u256
from ..common_debridge.constants import DEBRIDGE_PROGRAM_ID, SETTINGS_PROGRAM_ID, POLYGON_CHAIN_ID
from ..common_debridge.errors import ConfigError
from ..common_debridge.example_instruction import anchor_ix_discriminator
from ..common_debridge.external_call import build_transfer_ext_call
from ..common_debridge.keys import AccountsResolver
from ..common_debridge.solana_tx import SolAccount, SolPubKey, SolCommit

from .testing_helpers import build_settings_accounts


class FakeConfig:
    def __init__(self):
        self.debridge_program_id = DEBRIDGE_PROGRAM_ID
        self.settings_program_id = SETTINGS_PROGRAM_ID
        self.example_program_id = SolPubKey.from_string('BHvfz1GvtQgmJgGZcBLuGsDCbnXBrGu8QwgKgBaoHMBn')
        self.wallet = SolAccount()
        self.commit_type = SolCommit.Finalized


class TestValidators(unittest.TestCase):
    def test_parse_pubkey(self):
        self.assertEqual(parse_pubkey(str(DEBRIDGE_PROGRAM_ID)), DEBRIDGE_PROGRAM_ID)
        with self.assertRaises(argparse.ArgumentTypeError):
            parse_pubkey('0xdead')

    def test_parse_hex(self):
        self.assertEqual(parse_hex('0x0102'), b'\x01\x02')
        self.assertEqual(parse_hex('0A0b'), b'\x0a\x0b')
        with self.assertRaises(argparse.ArgumentTypeError):
            parse_hex('xyz')

    def test_parse_bool(self):
        self.assertTrue(parse_bool('True'))
        self.assertFalse(parse_bool('false'))
        with self.assertRaises(argparse.ArgumentTypeError):
            parse_bool('maybe')

    def test_parse_u64(self):
        self.assertEqual(parse_u64('1000'), 1000)
        with self.assertRaises(argparse.ArgumentTypeError):
            parse_u64('-1')
        with self.assertRaises(argparse.ArgumentTypeError):
            parse_u64(str(2 ** 64))

    def test_parse_u256(self):
        self.assertEqual(parse_u256('8'), 8)
        self.assertEqual(parse_u256(str(2 ** 256 - 1)), 2 ** 256 - 1)
        with self.assertRaises(argparse.ArgumentTypeError):
            parse_u256('-1')
        with self.assertRaises(argparse.ArgumentTypeError):
            parse_u256(str(2 ** 256))
        with self.assertRaises(argparse.ArgumentTypeError):
            parse_u256('flags')


class TestCli(unittest.TestCase):
    @classmethod
    def setUpClass(cls) -> None:
        cls.mint = 'So11111111111111111111111111111111111111112'
        cls.receiver = '0xbd1e27ae1c6b4ff9e7bfe6a8fb5a8bf8a2c82b6e'

    def setUp(self) -> None:
        self.config = FakeConfig()
        self.solana = build_settings_accounts(
            AccountsResolver(), SolPubKey.from_string(self.mint), self.config.wallet.pubkey(), POLYGON_CHAIN_ID,
            asset_chain_fee=300
        )

    def test_parser(self):
        parser, handler_dict = init_args_parser()
        self.assertEqual(
            sorted(handler_dict.keys()),
            sorted([
                'send', 'send-native-fee', 'send-asset-fee', 'send-exact-amount', 'send-execution-fee',
                'send-external-call', 'send-message', 'build-external-call', 'estimate'
            ])
        )

        args = parser.parse_args([
            'send-exact-amount', '--mint', self.mint, '--chain', '137', '--receiver', self.receiver,
            '--amount', '1000', '--execFee', '10', '--assetFee', 'true'
        ])
        self.assertEqual(args.mint, SolPubKey.from_string(self.mint))
        self.assertEqual(args.chain, 137)
        self.assertEqual(args.receiver, bytes.fromhex(self.receiver[2:]))
        self.assertEqual(args.exec_fee, 10)
        self.assertTrue(args.asset_fee)
        self.assertEqual(args.mode, 'client')
        self.assertEqual(args.encoding, 'base64')
        self.assertFalse(args.submit)

    def test_missing_required_flag(self):
        with patch('sys.stderr', new_callable=io.StringIO):
            with self.assertRaises(SystemExit):
                main(['send', '--mint', self.mint, '--chain', '137', '--receiver', self.receiver])

            with self.assertRaises(SystemExit):
                main(['send', '--mint', self.mint, '--chain', '137', '--receiver', self.receiver,
                      '--amount', '1', '--mode', 'auto'])

    def _run_send(self, argv):
        with patch.object(send_module, 'Config', return_value=self.config), \
                patch.object(send_module, 'SolInteractor', return_value=self.solana), \
                patch('sys.stdout', new_callable=io.StringIO) as stdout:
            exit_code = main(argv)
        return exit_code, stdout.getvalue().splitlines()

    def test_send(self):
        exit_code, line_list = self._run_send([
            'send', '--mint', self.mint, '--chain', '137', '--receiver', self.receiver, '--amount', '1000'
        ])
        self.assertEqual(exit_code, 0)
        self.assertEqual(len(line_list), 1)
        self.assertEqual(self.solana.sent_tx_list, [])

        tx = Transaction.from_bytes(base64.b64decode(line_list[0]))
        self.assertEqual(len(tx.message.instructions), 1)
        ix = tx.message.instructions[0]
        self.assertEqual(tx.message.account_keys[ix.program_id_index], self.config.example_program_id)
        self.assertEqual(bytes(ix.data)[:8], anchor_ix_discriminator('send_via_debridge'))
        self.assertEqual(bytes(ix.data)[:8], bytes([86, 156, 250, 187, 21, 213, 32, 40]))
        self.assertEqual(len(ix.accounts), 18)
        self.assertEqual(tx.message.account_keys[0], self.config.wallet.pubkey())

    def test_send_message_submit_hex(self):
        exit_code, line_list = self._run_send([
            'send-message', '--mint', self.mint, '--chain', '137', '--receiver', self.receiver,
            '--data', '0x0102', '--encoding', 'hex', '--submit'
        ])
        self.assertEqual(exit_code, 0)
        self.assertEqual(len(self.solana.sent_tx_list), 1)

        tx = Transaction.from_bytes(bytes.fromhex(line_list[0]))
        self.assertEqual(line_list[1], f'Sent tx: {tx.signatures[0]}')
        ix = tx.message.instructions[0]
        self.assertEqual(bytes(ix.data)[:8], anchor_ix_discriminator('send_message_via_debridge'))

    def test_send_with_wrong_receiver(self):
        with patch('sys.stderr', new_callable=io.StringIO) as stderr:
            exit_code, line_list = self._run_send([
                'send-asset-fee', '--mint', self.mint, '--chain', '137', '--receiver', '0x01', '--amount', '1000'
            ])
        self.assertEqual(exit_code, 1)
        self.assertEqual(line_list, [])
        self.assertIn('Wrong receiver length', stderr.getvalue())

    def test_send_external_call_wrong_hash(self):
        with patch('sys.stderr', new_callable=io.StringIO) as stderr:
            exit_code, line_list = self._run_send([
                'send-external-call', '--mint', self.mint, '--chain', '137', '--receiver', self.receiver,
                '--amount', '1000', '--flags', '8', '--data', '0x0102'
            ])
        self.assertEqual(exit_code, 1)
        self.assertEqual(line_list, [])
        self.assertIn('32-byte hash, got 2 bytes', stderr.getvalue())

    def test_send_external_call_wrong_flags(self):
        with patch('sys.stderr', new_callable=io.StringIO):
            with self.assertRaises(SystemExit):
                main([
                    'send-external-call', '--mint', self.mint, '--chain', '137', '--receiver', self.receiver,
                    '--amount', '1000', '--flags', '-1', '--data', '0x0102'
                ])

    def test_config_error(self):
        with patch.object(send_module, 'Config', side_effect=ConfigError('RPC', 'field RPC expected to be in .env')), \
                patch('sys.stderr', new_callable=io.StringIO):
            exit_code = main([
                'send-native-fee', '--mint', self.mint, '--chain', '137', '--receiver', self.receiver,
                '--amount', '1'
            ])
        self.assertEqual(exit_code, 1)

    def test_build_external_call(self):
        wallet = 'BHvfz1GvtQgmJgGZcBLuGsDCbnXBrGu8QwgKgBaoHMBn'
        with patch.object(external_call_module, 'Config') as config_mock, \
                patch('sys.stdout', new_callable=io.StringIO) as stdout, \
                patch('sys.stderr', new_callable=io.StringIO):
            exit_code = main(['build-external-call', '--mint', self.mint, '--wallets', wallet, '--rent', '2039280'])

        self.assertEqual(exit_code, 0)
        config_mock.assert_not_called()
        expected = build_transfer_ext_call(
            SolPubKey.from_string(self.mint), [SolPubKey.from_string(wallet)], 2039280
        ).serialize()
        self.assertEqual(stdout.getvalue().strip(), expected.hex())

    def test_estimate(self):
        with patch.object(estimate_module, 'Config', return_value=self.config), \
                patch.object(estimate_module, 'SolInteractor', return_value=self.solana), \
                patch('sys.stdout', new_callable=io.StringIO) as stdout:
            exit_code = main([
                'estimate', '--mint', self.mint, '--chain', '137', '--amount', '9000', '--execFee', '690',
                '--assetFee', 'true'
            ])

        self.assertEqual(exit_code, 0)
        result = json.loads(stdout.getvalue())
        self.assertEqual(result['amount'], 10000)
        self.assertEqual(result['asset_fix_fee'], 300)
        self.assertEqual(result['transfer_fee_bps'], 10)
        self.assertEqual(result['native_lamports_expenses'], (128 + 8) * 6960 + (128 + 40) * 6960)


if __name__ == '__main__':
    unittest.main()
