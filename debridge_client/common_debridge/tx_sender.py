from __future__ import annotations

import base64
import logging

from typing import Optional, Sequence

from .config import Config
from .solana_interactor import SolInteractor
from .solana_tx import SolLegacyTx, SolTxIx


LOG = logging.getLogger(__name__)


class TxEncoding:
    Base64 = 'base64'
    Hex = 'hex'

    Order = [Base64, Hex]


class TxSender:
    def __init__(self, config: Config, solana: SolInteractor):
        self._config = config
        self._solana = solana

    def build_tx(self, name: str, ix_list: Sequence[SolTxIx]) -> SolLegacyTx:
        tx = SolLegacyTx(name=name, ix_list=ix_list)
        block_hash = self._solana.get_recent_block_hash(self._config.commit_type)
        tx.recent_block_hash = block_hash.block_hash
        tx.sign(self._config.wallet)
        LOG.debug(f'Signed tx {name} with {len(ix_list)} instructions, block hash {block_hash.block_hash}')
        return tx

    @staticmethod
    def encode_tx(tx: SolLegacyTx, encoding: str = TxEncoding.Base64) -> str:
        data = tx.serialize()
        if encoding == TxEncoding.Hex:
            return data.hex()
        return base64.b64encode(data).decode('utf-8')

    def send_tx(self, tx: SolLegacyTx) -> str:
        sig = self._solana.send_tx(tx)
        LOG.info(f'Sent tx {tx.name}: {sig}')
        return sig

    def process(self, name: str, ix_list: Sequence[SolTxIx],
                encoding: str = TxEncoding.Base64, submit: bool = False) -> Optional[str]:
        """Prints the signed transaction, submits it when asked, returns the signature of the sent tx."""
        tx = self.build_tx(name, ix_list)
        print(self.encode_tx(tx, encoding))
        if not submit:
            return None

        sig = self.send_tx(tx)
        print(f'Sent tx: {sig}')
        return sig
