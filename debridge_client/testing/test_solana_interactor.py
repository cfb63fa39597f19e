import base64
import unittest

from unittest.mock import patch, MagicMock

import requests

from ..common_debridge.errors import RpcError
from ..common_debridge.solana_interactor import SolInteractor, SolClient
from ..common_debridge.solana_tx import SolPubKey, SolBlockHash


class FakeConfig:
    rpc_url = 'http://localhost:8899'
    rpc_timeout = 1.0
    rpc_retry_cnt = 3
    hide_rpc_url = True


class TestSolInteractor(unittest.TestCase):
    def setUp(self) -> None:
        self.solana = SolInteractor(FakeConfig())
        self.address = SolPubKey.from_string('DeSetTwWhjZq6Pz9Kfdo1KoS5NqtsM6G8ERbX4SSCSft')

    @patch.object(SolClient, 'post')
    def test_get_account_info(self, mock_post: MagicMock):
        mock_post.return_value = {
            'jsonrpc': '2.0', 'id': 1,
            'result': {'value': {
                'data': [base64.b64encode(b'\x01\x02').decode(), 'base64'],
                'lamports': 10,
                'owner': str(self.address),
            }}
        }
        info = self.solana.get_account_info(self.address)

        self.assertEqual(info.address, self.address)
        self.assertEqual(info.owner, self.address)
        self.assertEqual(info.lamports, 10)
        self.assertEqual(info.data, b'\x01\x02')

        request = mock_post.call_args[0][0]
        self.assertEqual(request['method'], 'getAccountInfo')
        self.assertEqual(request['params'][0], str(self.address))

    @patch.object(SolClient, 'post')
    def test_missing_account(self, mock_post: MagicMock):
        mock_post.return_value = {'jsonrpc': '2.0', 'id': 1, 'result': {'value': None}}
        self.assertIsNone(self.solana.get_account_info(self.address))

    @patch.object(SolClient, 'post')
    def test_rpc_error(self, mock_post: MagicMock):
        mock_post.return_value = {'jsonrpc': '2.0', 'id': 1, 'error': {'code': -32602, 'message': 'bad params'}}
        with self.assertRaises(RpcError) as ctx:
            self.solana.get_rent_exempt_balance_for_size(165)
        self.assertEqual(ctx.exception.error['code'], -32602)

    @patch('time.sleep')
    @patch.object(SolClient, 'post')
    def test_retry_on_connection_error(self, mock_post: MagicMock, mock_sleep: MagicMock):
        mock_post.side_effect = [
            requests.ConnectionError('refused'),
            {'jsonrpc': '2.0', 'id': 2, 'result': 2039280}
        ]
        self.assertEqual(self.solana.get_rent_exempt_balance_for_size(165), 2039280)
        self.assertEqual(mock_post.call_count, 2)
        mock_sleep.assert_called_once_with(1)

    @patch('time.sleep')
    @patch.object(SolClient, 'post')
    def test_give_up_after_retries(self, mock_post: MagicMock, mock_sleep: MagicMock):
        mock_post.side_effect = requests.ConnectionError('refused')
        with self.assertRaises(requests.ConnectionError):
            self.solana.get_rent_exempt_balance_for_size(165)
        self.assertEqual(mock_post.call_count, FakeConfig.rpc_retry_cnt)

    @patch.object(SolClient, 'post')
    def test_recent_block_hash(self, mock_post: MagicMock):
        block_hash = SolBlockHash(bytes([7] * 32))
        mock_post.return_value = {
            'jsonrpc': '2.0', 'id': 1,
            'result': {'value': {'blockhash': str(block_hash), 'lastValidBlockHeight': 300}}
        }
        result = self.solana.get_recent_block_hash()
        self.assertEqual(result.block_hash, block_hash)
        self.assertEqual(result.last_valid_block_height, 300)


if __name__ == '__main__':
    unittest.main()
