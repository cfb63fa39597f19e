from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from construct import Adapter, Bytes, ConstructError, Flag, GreedyBytes, If, Int8ul, Int16ul, Int32ul, Int64ul
from construct import Prefixed, PrefixedArray, Struct, this

from .constants import (
    STATE_ACCOUNT_DISCRIMINATOR, CHAIN_SUPPORT_INFO_ACCOUNT_DISCRIMINATOR, ASSET_FEE_ACCOUNT_DISCRIMINATOR
)
from .errors import AccountDecodeError
from .solana_tx import SolPubKey


class _BorshOptionAdapter(Adapter):
    def _decode(self, obj, context, path):
        return obj.value if obj.is_some else None

    def _encode(self, obj, context, path):
        return dict(is_some=obj is not None, value=obj)


def BorshOption(subcon):
    return _BorshOptionAdapter(Struct(
        "is_some" / Flag,
        "value" / If(this.is_some, subcon)
    ))


BorshBytes = Prefixed(Int32ul, GreedyBytes)
SolPubKeyBytes = Bytes(SolPubKey.LENGTH)
ChainIdBytes = Bytes(32)


CONFIRMATION_PARAMS_GUARD_LAYOUT = Struct(
    "current_timeslot" / BorshOption(Int64ul),
    "submission_in_timeslot_count" / Int32ul,
    "confirmation_threshold" / Int32ul,
    "excess_confirmations" / Int32ul,
    "min_confirmations" / Int32ul,
    "excess_confirmation_timeslot" / Int64ul,
)

STATE_LAYOUT = Struct(
    "status" / Int8ul,
    "protocol_authority" / SolPubKeyBytes,
    "stop_tap" / SolPubKeyBytes,
    "fee_beneficiary" / SolPubKeyBytes,
    "oracles" / PrefixedArray(Int32ul, Bytes(20)),
    "required_oracles" / PrefixedArray(Int32ul, Bytes(20)),
    "confirmation_guard" / CONFIRMATION_PARAMS_GUARD_LAYOUT,
    "global_fixed_fee" / Int64ul,
    "global_transfer_fee_bps" / Int64ul,
)

CHAIN_SUPPORT_INFO_LAYOUT = Struct(
    "variant" / Int8ul,
    "supported" / If(this.variant == 1, Struct(
        "fixed_fee" / BorshOption(Int64ul),
        "transfer_fee_bps" / BorshOption(Int64ul),
        "chain_address_len" / Int16ul,
    )),
)

ASSET_FEE_INFO_LAYOUT = Struct(
    "bridge_fee_bump" / Int8ul,
    "asset_chain_fee" / BorshOption(Int64ul),
)


@dataclass
class AccountInfo:
    address: SolPubKey
    lamports: int
    owner: SolPubKey
    data: bytes


def _parse_anchor_account(name: str, info: AccountInfo, discriminator: bytes, layout: Struct):
    if info.data[:len(discriminator)] != discriminator:
        raise AccountDecodeError(name, f'wrong discriminator {info.data[:len(discriminator)].hex()}')

    try:
        return layout.parse(info.data[len(discriminator):])
    except ConstructError as exc:
        raise AccountDecodeError(name, str(exc))


@dataclass(frozen=True)
class StateInfo:
    address: SolPubKey
    is_working: bool
    fee_beneficiary: SolPubKey
    global_fixed_fee: int
    global_transfer_fee_bps: int

    @staticmethod
    def from_account_info(info: AccountInfo) -> StateInfo:
        state = _parse_anchor_account('State', info, STATE_ACCOUNT_DISCRIMINATOR, STATE_LAYOUT)
        return StateInfo(
            address=info.address,
            is_working=(state.status == 0),
            fee_beneficiary=SolPubKey.from_bytes(state.fee_beneficiary),
            global_fixed_fee=state.global_fixed_fee,
            global_transfer_fee_bps=state.global_transfer_fee_bps
        )


@dataclass(frozen=True)
class ChainSupportInfo:
    address: SolPubKey
    is_supported: bool
    fixed_fee: Optional[int]
    transfer_fee_bps: Optional[int]
    chain_address_len: Optional[int]

    @staticmethod
    def from_account_info(info: AccountInfo) -> ChainSupportInfo:
        chain_info = _parse_anchor_account(
            'ChainSupportInfo', info,
            CHAIN_SUPPORT_INFO_ACCOUNT_DISCRIMINATOR, CHAIN_SUPPORT_INFO_LAYOUT
        )
        supported = chain_info.supported
        if supported is None:
            return ChainSupportInfo(
                address=info.address,
                is_supported=False,
                fixed_fee=None,
                transfer_fee_bps=None,
                chain_address_len=None
            )

        return ChainSupportInfo(
            address=info.address,
            is_supported=True,
            fixed_fee=supported.fixed_fee,
            transfer_fee_bps=supported.transfer_fee_bps,
            chain_address_len=supported.chain_address_len
        )


@dataclass(frozen=True)
class AssetFeeInfo:
    address: SolPubKey
    bridge_fee_bump: int
    asset_chain_fee: Optional[int]

    @staticmethod
    def from_account_info(info: AccountInfo) -> AssetFeeInfo:
        fee_info = _parse_anchor_account('AssetFeeInfo', info, ASSET_FEE_ACCOUNT_DISCRIMINATOR, ASSET_FEE_INFO_LAYOUT)
        return AssetFeeInfo(
            address=info.address,
            bridge_fee_bump=fee_info.bridge_fee_bump,
            asset_chain_fee=fee_info.asset_chain_fee
        )
