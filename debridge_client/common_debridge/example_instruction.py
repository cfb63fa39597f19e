from __future__ import annotations

import hashlib
import logging

from typing import Sequence

from construct import Flag, Int64ul, Struct

from .chain_ids import normalize_chain_id
from .flags import ReservedFlags
from .layouts import BorshBytes, ChainIdBytes
from .solana_tx import SolTxIx, SolAccountMeta, SolPubKey


LOG = logging.getLogger(__name__)


def anchor_ix_discriminator(name: str) -> bytes:
    return hashlib.sha256(f'global:{name}'.encode('utf-8')).digest()[:8]


SEND_VIA_DEBRIDGE_LAYOUT = Struct(
    "amount" / Int64ul,
    "target_chain_id" / ChainIdBytes,
    "receiver" / BorshBytes,
    "is_use_asset_fee" / Flag,
)

SEND_WITH_FIXED_FEE_LAYOUT = Struct(
    "amount" / Int64ul,
    "target_chain_id" / ChainIdBytes,
    "receiver" / BorshBytes,
)

SEND_WITH_EXACT_AMOUNT_LAYOUT = Struct(
    "exact_amount" / Int64ul,
    "target_chain_id" / ChainIdBytes,
    "receiver" / BorshBytes,
    "execution_fee" / Int64ul,
    "is_use_asset_fee" / Flag,
)

SEND_WITH_EXECUTION_FEE_LAYOUT = Struct(
    "amount" / Int64ul,
    "target_chain_id" / ChainIdBytes,
    "receiver" / BorshBytes,
    "execution_fee" / Int64ul,
)

SEND_WITH_EXTERNAL_CALL_LAYOUT = Struct(
    "amount" / Int64ul,
    "target_chain_id" / ChainIdBytes,
    "receiver" / BorshBytes,
    "execution_fee" / Int64ul,
    "fallback_address" / BorshBytes,
    "reserved_flag" / ChainIdBytes,
    "external_call" / BorshBytes,
)

SEND_MESSAGE_LAYOUT = Struct(
    "target_chain_id" / ChainIdBytes,
    "receiver" / BorshBytes,
    "execution_fee" / Int64ul,
    "fallback_address" / BorshBytes,
    "message" / BorshBytes,
)


class ExampleIxBuilder:
    """
    Builds instructions of the deBridge example program.

    The program takes no named accounts, the whole send context goes as the
    instruction accounts, in the order produced by `build_send_context`.
    """

    def __init__(self, example_program_id: SolPubKey):
        self._example_program_id = example_program_id

    @property
    def program_id(self) -> SolPubKey:
        return self._example_program_id

    def _make_ix(self, name: str, layout: Struct, send_context: Sequence[SolAccountMeta], **kwargs) -> SolTxIx:
        LOG.debug(f'{name}: {len(send_context)} accounts')
        return SolTxIx(
            program_id=self._example_program_id,
            data=anchor_ix_discriminator(name) + layout.build(kwargs),
            accounts=list(send_context)
        )

    def make_send_via_debridge_ix(self, send_context: Sequence[SolAccountMeta],
                                  amount: int, target_chain_id: int, receiver: bytes,
                                  is_use_asset_fee: bool) -> SolTxIx:
        return self._make_ix(
            'send_via_debridge', SEND_VIA_DEBRIDGE_LAYOUT, send_context,
            amount=amount,
            target_chain_id=normalize_chain_id(target_chain_id),
            receiver=receiver,
            is_use_asset_fee=is_use_asset_fee
        )

    def make_send_via_debridge_with_native_fixed_fee_ix(self, send_context: Sequence[SolAccountMeta],
                                                        amount: int, target_chain_id: int,
                                                        receiver: bytes) -> SolTxIx:
        return self._make_ix(
            'send_via_debridge_with_native_fixed_fee', SEND_WITH_FIXED_FEE_LAYOUT, send_context,
            amount=amount,
            target_chain_id=normalize_chain_id(target_chain_id),
            receiver=receiver
        )

    def make_send_via_debridge_with_asset_fixed_fee_ix(self, send_context: Sequence[SolAccountMeta],
                                                       amount: int, target_chain_id: int,
                                                       receiver: bytes) -> SolTxIx:
        return self._make_ix(
            'send_via_debridge_with_asset_fixed_fee', SEND_WITH_FIXED_FEE_LAYOUT, send_context,
            amount=amount,
            target_chain_id=normalize_chain_id(target_chain_id),
            receiver=receiver
        )

    def make_send_via_debridge_with_exact_amount_ix(self, send_context: Sequence[SolAccountMeta],
                                                    exact_amount: int, target_chain_id: int, receiver: bytes,
                                                    execution_fee: int, is_use_asset_fee: bool) -> SolTxIx:
        return self._make_ix(
            'send_via_debridge_with_exact_amount', SEND_WITH_EXACT_AMOUNT_LAYOUT, send_context,
            exact_amount=exact_amount,
            target_chain_id=normalize_chain_id(target_chain_id),
            receiver=receiver,
            execution_fee=execution_fee,
            is_use_asset_fee=is_use_asset_fee
        )

    def make_send_via_debridge_with_execution_fee_ix(self, send_context: Sequence[SolAccountMeta],
                                                     amount: int, target_chain_id: int, receiver: bytes,
                                                     execution_fee: int) -> SolTxIx:
        return self._make_ix(
            'send_via_debridge_with_execution_fee', SEND_WITH_EXECUTION_FEE_LAYOUT, send_context,
            amount=amount,
            target_chain_id=normalize_chain_id(target_chain_id),
            receiver=receiver,
            execution_fee=execution_fee
        )

    def make_send_via_debridge_with_external_call_ix(self, send_context: Sequence[SolAccountMeta],
                                                     amount: int, target_chain_id: int, receiver: bytes,
                                                     execution_fee: int, fallback_address: bytes,
                                                     reserved_flag: ReservedFlags, external_call: bytes) -> SolTxIx:
        return self._make_ix(
            'send_via_debridge_with_external_call', SEND_WITH_EXTERNAL_CALL_LAYOUT, send_context,
            amount=amount,
            target_chain_id=normalize_chain_id(target_chain_id),
            receiver=receiver,
            execution_fee=execution_fee,
            fallback_address=fallback_address,
            reserved_flag=bytes(reserved_flag),
            external_call=external_call
        )

    def make_send_message_via_debridge_ix(self, send_context: Sequence[SolAccountMeta],
                                          target_chain_id: int, receiver: bytes, execution_fee: int,
                                          fallback_address: bytes, message: bytes) -> SolTxIx:
        return self._make_ix(
            'send_message_via_debridge', SEND_MESSAGE_LAYOUT, send_context,
            target_chain_id=normalize_chain_id(target_chain_id),
            receiver=receiver,
            execution_fee=execution_fee,
            fallback_address=fallback_address,
            message=message
        )
