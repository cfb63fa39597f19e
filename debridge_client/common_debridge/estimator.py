from __future__ import annotations

from typing import Callable, Optional

from .constants import BPS_DENOMINATOR, U64_MAX, EXTERNAL_CALL_META_SPACE
from .errors import AmountOverflowError
from .layouts import StateInfo, ChainSupportInfo


def _check_u64(value: int) -> int:
    if value < 0 or value > U64_MAX:
        raise AmountOverflowError()
    return value


def get_transfer_fee_bps(state: StateInfo, chain_support_info: ChainSupportInfo) -> int:
    if chain_support_info.transfer_fee_bps is not None:
        return chain_support_info.transfer_fee_bps
    return state.global_transfer_fee_bps


def get_chain_native_fix_fee(state: StateInfo, chain_support_info: ChainSupportInfo) -> int:
    if chain_support_info.fixed_fee is not None:
        return chain_support_info.fixed_fee
    return state.global_fixed_fee


def add_transfer_fee(amount: int, transfer_fee_bps: int) -> int:
    """Amount to send so that `amount` is left after the transfer fee is taken."""
    if transfer_fee_bps >= BPS_DENOMINATOR:
        raise AmountOverflowError()
    return _check_u64(amount * BPS_DENOMINATOR // (BPS_DENOMINATOR - transfer_fee_bps))


def add_all_fees(exact_amount: int, execution_fee: int, transfer_fee_bps: int,
                 asset_fix_fee: Optional[int] = None) -> int:
    """
    Amount to send so that exactly `exact_amount` arrives on the target chain.

    The execution fee and the optional fixed fee paid in the asset are added
    before the transfer fee is applied on top.
    """
    amount = _check_u64(exact_amount + execution_fee)
    if asset_fix_fee is not None:
        amount = _check_u64(amount + asset_fix_fee)
    return add_transfer_fee(amount, transfer_fee_bps)


def get_native_sender_lamports_expenses(fix_fee: int, external_call_len: int,
                                        get_rent: Callable[[int], int]) -> int:
    """Lamports the sender spends: external call storage and meta rent, plus the native fixed fee."""
    storage_rent = get_rent(8 + external_call_len)
    meta_rent = get_rent(EXTERNAL_CALL_META_SPACE)
    return _check_u64(storage_rent + meta_rent + fix_fee)
