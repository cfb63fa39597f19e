from __future__ import annotations

from typing import Sequence, Optional, List, NewType

import solders.hash
import solders.keypair
import solders.message
import solders.pubkey
import solders.instruction
import solders.signature
import solders.transaction

from .errors import SolTxSizeError


SolTxIx = solders.instruction.Instruction
SolAccountMeta = solders.instruction.AccountMeta
SolBlockHash = solders.hash.Hash
SolAccount = solders.keypair.Keypair
SolSig = solders.signature.Signature
SolPubKey = solders.pubkey.Pubkey

_SoldersLegacyTx = solders.transaction.Transaction
_SoldersLegacyMsg = solders.message.Message
_SolPktDataSize = 1280 - 40 - 8


class SolCommit:
    Type = NewType('SolCommit', str)

    Processed = Type('processed')
    Confirmed = Type('confirmed')
    Finalized = Type('finalized')

    Order = [Processed, Confirmed, Finalized]

    @staticmethod
    def to_type(value: str) -> Type:
        for commitment in SolCommit.Order:
            if commitment == value:
                return commitment

        raise ValueError(f'Wrong commitment {value}')


class SolLegacyTx:
    """Legacy Solana transaction: a named list of instructions, a block hash and signatures."""

    _empty_block_hash = SolBlockHash.default()

    def __init__(self, name: str, ix_list: Optional[Sequence[SolTxIx]]) -> None:
        self._name = name
        self._is_signed = False
        self._ix_list: List[SolTxIx] = list(ix_list) if ix_list is not None else list()
        self._solders_legacy_tx = self._build_legacy_tx(recent_block_hash=None)

    @property
    def name(self) -> str:
        return self._name

    @property
    def ix_list(self) -> List[SolTxIx]:
        return self._ix_list

    @property
    def recent_block_hash(self) -> Optional[SolBlockHash]:
        block_hash = self._solders_legacy_tx.message.recent_blockhash
        if block_hash == self._empty_block_hash:
            return None
        return block_hash

    @recent_block_hash.setter
    def recent_block_hash(self, value: Optional[SolBlockHash]) -> None:
        self._solders_legacy_tx = self._build_legacy_tx(recent_block_hash=value)

    def serialize(self) -> bytes:
        assert self._is_signed, 'transaction has not been signed'
        result = bytes(self._solders_legacy_tx)
        if len(result) > _SolPktDataSize:
            raise SolTxSizeError(self._name, len(result))
        return result

    def sign(self, signer: SolAccount) -> None:
        assert self.recent_block_hash is not None, 'transaction has no recent block hash'
        self._solders_legacy_tx.sign([signer], self._solders_legacy_tx.message.recent_blockhash)
        self._is_signed = True

    @property
    def is_signed(self) -> bool:
        return self._is_signed

    @property
    def sig(self) -> SolSig:
        assert self._is_signed, 'Transaction has not been signed'
        return self._solders_legacy_tx.signatures[0]

    def _build_legacy_tx(self, recent_block_hash: Optional[SolBlockHash]) -> _SoldersLegacyTx:
        self._is_signed = False

        if recent_block_hash is None:
            recent_block_hash = SolBlockHash.default()

        fee_payer: Optional[SolPubKey] = None
        for ix in self._ix_list:
            for acct_meta in ix.accounts:
                if acct_meta.is_signer:
                    fee_payer = acct_meta.pubkey
                    break
            if fee_payer is not None:
                break

        msg = _SoldersLegacyMsg.new_with_blockhash(self._ix_list, fee_payer, recent_block_hash)
        return _SoldersLegacyTx.new_unsigned(msg)
