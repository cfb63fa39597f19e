from __future__ import annotations

import logging

from dataclasses import dataclass
from typing import List, Optional, Sequence

from construct import Bytes, Flag, Int32ul, Int64ul, Struct

from .chain_ids import normalize_chain_id
from .constants import SEND_DISCRIMINATOR, INIT_EXTERNAL_CALL_DISCRIMINATOR, SOLANA_CHAIN_ID
from .external_call import external_call_shortcut
from .flags import ReservedFlags
from .layouts import BorshBytes, BorshOption, ChainIdBytes
from .solana_tx import SolTxIx, SolAccountMeta, SolPubKey


LOG = logging.getLogger(__name__)


SUBMISSION_PARAMS_LAYOUT = Struct(
    "execution_fee" / Int64ul,
    "reserved_flag" / Bytes(ReservedFlags.LENGTH),
    "fallback_address" / BorshBytes,
    "external_call_shortcut" / Bytes(32),
)

SEND_IX_LAYOUT = Struct(
    "target_chain_id" / ChainIdBytes,
    "receiver" / BorshBytes,
    "is_use_asset_fee" / Flag,
    "amount" / Int64ul,
    "submission_params" / BorshOption(SUBMISSION_PARAMS_LAYOUT),
    "referral_code" / BorshOption(Int32ul),
)

INIT_EXTERNAL_CALL_IX_LAYOUT = Struct(
    "external_call_len" / Int32ul,
    "chain_id" / ChainIdBytes,
    "external_call_shortcut" / Bytes(32),
    "external_call" / BorshBytes,
)

# Positions in the send context
_SYSTEM_PROGRAM_INDEX = 11
_EXTERNAL_CALL_STORAGE_INDEX = 12
_EXTERNAL_CALL_META_INDEX = 13
_SEND_FROM_INDEX = 14
SEND_CONTEXT_LEN = 18


@dataclass(frozen=True)
class SendSubmissionParams:
    execution_fee: int
    reserved_flag: ReservedFlags
    fallback_address: bytes
    external_call_shortcut: bytes

    @staticmethod
    def execution_fee_only(execution_fee: int) -> SendSubmissionParams:
        return SendSubmissionParams(
            execution_fee=execution_fee,
            reserved_flag=ReservedFlags(),
            fallback_address=bytes(20),
            external_call_shortcut=external_call_shortcut(b'')
        )

    @staticmethod
    def with_external_call(external_call: bytes, execution_fee: int, fallback_address: bytes,
                           reserved_flag: Optional[ReservedFlags] = None) -> SendSubmissionParams:
        return SendSubmissionParams(
            execution_fee=execution_fee,
            reserved_flag=reserved_flag or ReservedFlags(),
            fallback_address=fallback_address,
            external_call_shortcut=external_call_shortcut(external_call)
        )

    def to_container(self) -> dict:
        return dict(
            execution_fee=self.execution_fee,
            reserved_flag=bytes(self.reserved_flag),
            fallback_address=self.fallback_address,
            external_call_shortcut=self.external_call_shortcut
        )


@dataclass(frozen=True)
class SendIx:
    target_chain_id: bytes
    receiver: bytes
    is_use_asset_fee: bool
    amount: int
    submission_params: Optional[SendSubmissionParams] = None
    referral_code: Optional[int] = None

    def serialize(self) -> bytes:
        params = self.submission_params.to_container() if self.submission_params is not None else None
        return SEND_DISCRIMINATOR + SEND_IX_LAYOUT.build(dict(
            target_chain_id=normalize_chain_id(self.target_chain_id),
            receiver=self.receiver,
            is_use_asset_fee=self.is_use_asset_fee,
            amount=self.amount,
            submission_params=params,
            referral_code=self.referral_code
        ))


@dataclass(frozen=True)
class InitExternalCallIx:
    external_call: bytes

    def serialize(self) -> bytes:
        return INIT_EXTERNAL_CALL_DISCRIMINATOR + INIT_EXTERNAL_CALL_IX_LAYOUT.build(dict(
            external_call_len=len(self.external_call),
            chain_id=normalize_chain_id(SOLANA_CHAIN_ID),
            external_call_shortcut=external_call_shortcut(self.external_call),
            external_call=self.external_call
        ))


class DebridgeIxBuilder:
    """Instructions of the deBridge program itself, called directly from the client."""

    def __init__(self, debridge_program_id: SolPubKey):
        self._debridge_program_id = debridge_program_id

    def make_send_ix(self, send_ix: SendIx, send_context: Sequence[SolAccountMeta]) -> SolTxIx:
        assert len(send_context) == SEND_CONTEXT_LEN, f'send context must have {SEND_CONTEXT_LEN} accounts'
        LOG.debug(f'Make send instruction with amount {send_ix.amount}')
        return SolTxIx(
            program_id=self._debridge_program_id,
            data=send_ix.serialize(),
            accounts=list(send_context)
        )

    def make_init_external_call_ix(self, external_call: bytes, send_context: Sequence[SolAccountMeta]) -> SolTxIx:
        assert len(send_context) == SEND_CONTEXT_LEN, f'send context must have {SEND_CONTEXT_LEN} accounts'
        account_list: List[SolAccountMeta] = [
            SolAccountMeta(send_context[_EXTERNAL_CALL_STORAGE_INDEX].pubkey, is_signer=False, is_writable=True),
            SolAccountMeta(send_context[_EXTERNAL_CALL_META_INDEX].pubkey, is_signer=False, is_writable=True),
            SolAccountMeta(send_context[_SEND_FROM_INDEX].pubkey, is_signer=True, is_writable=True),
            SolAccountMeta(send_context[_SYSTEM_PROGRAM_INDEX].pubkey, is_signer=False, is_writable=False),
        ]
        return SolTxIx(
            program_id=self._debridge_program_id,
            data=InitExternalCallIx(external_call).serialize(),
            accounts=account_list
        )
