from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Union, Any, Optional

import base64
import itertools
import time
import logging

import base58
import requests

from .config import Config
from .errors import RpcError
from .layouts import AccountInfo
from .solana_tx import SolLegacyTx, SolBlockHash, SolPubKey, SolCommit
from .utils import get_from_dict


LOG = logging.getLogger(__name__)
RPCRequest = Dict[str, Any]
RPCResponse = Dict[str, Any]


@dataclass(frozen=True)
class SolRecentBlockHash:
    block_hash: SolBlockHash
    last_valid_block_height: int


class SolClient:
    def __init__(self, rpc_url: str, rpc_timeout: float):
        self._rpc_url = rpc_url
        self._rpc_timeout = rpc_timeout
        self._session: Optional[requests.Session] = None
        self._headers = {
            'Content-Type': 'application/json',
            'Accept-Encoding': 'gzip,deflate'
        }

    def __del__(self):
        self._close()

    @property
    def rpc_url(self) -> str:
        return self._rpc_url

    def post(self, request: RPCRequest) -> RPCResponse:
        try:
            if self._session is None:
                self._session = requests.Session()
                self._session.headers.update(self._headers)

            raw_response = self._session.post(self._rpc_url, json=request, timeout=self._rpc_timeout)
            raw_response.raise_for_status()

            return raw_response.json()

        except requests.RequestException:
            self._close()
            raise

    def _close(self) -> None:
        if self._session is None:
            return

        self._session.close()
        self._session = None


class SolInteractor:
    def __init__(self, config: Config, rpc_url: Optional[str] = None) -> None:
        self._config = config
        self._request_cnt = itertools.count()
        self._client = SolClient(rpc_url or config.rpc_url, config.rpc_timeout)

    def _clean_rpc_err(self, exc: BaseException) -> str:
        s = str(exc)
        if self._config.hide_rpc_url:
            s = s.replace(self._client.rpc_url, 'XXXXX')
        return s

    def _send_post_request(self, request: RPCRequest) -> RPCResponse:
        retry_cnt = self._config.rpc_retry_cnt
        for retry in itertools.count():
            try:
                return self._client.post(request)
            except requests.RequestException as exc:
                str_err = self._clean_rpc_err(exc)
                if retry + 1 >= retry_cnt:
                    LOG.error(f'Receive connection error {str_err} on connection to Solana, give up')
                    raise

                LOG.warning(
                    f'Receive connection error {str_err} on connection to Solana. '
                    f'Attempt {retry + 2} to send the request to Solana node...'
                )
                time.sleep(1)

    def _build_rpc_request(self, method: str, *param_list: Any) -> RPCRequest:
        request_id = next(self._request_cnt) + 1

        return {
            'jsonrpc': '2.0',
            'id': request_id,
            'method': method,
            'params': list(param_list)
        }

    def _send_rpc_request(self, method: str, *param_list: Any) -> RPCResponse:
        request = self._build_rpc_request(method, *param_list)
        response = self._send_post_request(request)
        error = response.get('error', None)
        if error is not None:
            raise RpcError(method, error)
        return response

    @staticmethod
    def _decode_account_info(address: Union[str, SolPubKey], raw_account: Dict[str, Any]) -> AccountInfo:
        data = base64.b64decode(raw_account.get('data', None)[0])
        lamports = raw_account.get('lamports', 0)
        owner = SolPubKey.from_string(raw_account.get('owner', None))
        if isinstance(address, str):
            address = SolPubKey.from_string(address)
        return AccountInfo(address, lamports, owner, data)

    def get_account_info(self, pubkey: Union[str, SolPubKey], commitment=SolCommit.Confirmed) -> Optional[AccountInfo]:
        opts = {
            'encoding': 'base64',
            'commitment': commitment,
        }

        result = self._send_rpc_request('getAccountInfo', str(pubkey), opts)
        raw_account = get_from_dict(result, ('result', 'value'), None)
        if raw_account is None:
            LOG.debug(f"Can't get information about {str(pubkey)}")
            return None

        return self._decode_account_info(pubkey, raw_account)

    def get_rent_exempt_balance_for_size(self, size: int, commitment=SolCommit.Confirmed) -> int:
        opts = {
            'commitment': commitment
        }
        response = self._send_rpc_request('getMinimumBalanceForRentExemption', size, opts)
        return response.get('result', 0)

    def get_recent_block_hash(self, commitment=SolCommit.Finalized) -> SolRecentBlockHash:
        opts = {
            'commitment': commitment
        }
        response = self._send_rpc_request('getLatestBlockhash', opts)
        result = get_from_dict(response, ('result', 'value'), None)
        if result is None:
            raise RpcError('getLatestBlockhash', {'message': 'failed to get recent block hash'})

        return SolRecentBlockHash(
            block_hash=SolBlockHash.from_string(result.get('blockhash')),
            last_valid_block_height=result.get('lastValidBlockHeight')
        )

    def send_tx(self, tx: SolLegacyTx, skip_preflight: bool = False) -> str:
        opts = {
            'skipPreflight': skip_preflight,
            'encoding': 'base64',
            'preflightCommitment': SolCommit.Processed
        }

        base64_tx = base64.b64encode(tx.serialize()).decode('utf-8')
        response = self._send_rpc_request('sendTransaction', base64_tx, opts)

        raw_result = response.get('result', None)
        if isinstance(raw_result, str):
            return base58.b58encode(base58.b58decode(raw_result)).decode('utf-8')

        LOG.debug(f'Got strange result on transaction execution: {str(raw_result)}')
        return str(tx.sig)
