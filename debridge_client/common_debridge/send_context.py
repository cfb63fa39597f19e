from __future__ import annotations

import logging

from dataclasses import dataclass
from typing import List, Optional

import requests

from .constants import SYS_PROGRAM_ID, TOKEN_PROGRAM_ID
from .errors import (
    AccountNotFoundError, AccountDecodeError, ChainNotSupportedError, WrongReceiverLengthError,
    AssetFeeNotSupportedError, UnknownModeError, RpcError, WrongExternalCallShortcutError
)
from .external_call import external_call_shortcut
from .flags import ReservedFlags
from .keys import AccountsResolver
from .layouts import AccountInfo, StateInfo, ChainSupportInfo, AssetFeeInfo
from .solana_interactor import SolInteractor
from .solana_tx import SolPubKey, SolAccountMeta


LOG = logging.getLogger(__name__)


class SendContextMode:
    Client = 'client'
    Manual = 'manual'

    Order = [Client, Manual]


@dataclass(frozen=True)
class ExternalCallInfo:
    """External call attached to a send.

    With the SEND_HASHED_DATA flag `data` is already the 32-byte hash of the external call.
    """
    flags: ReservedFlags
    data: bytes
    fallback_address: Optional[bytes] = None

    def get_shortcut(self) -> bytes:
        if self.flags.is_send_hashed_data():
            if len(self.data) != 32:
                raise WrongExternalCallShortcutError(len(self.data))
            return self.data
        return external_call_shortcut(self.data)


@dataclass(frozen=True)
class SendContext:
    bridge: SolPubKey
    token_mint: SolPubKey
    staking_wallet: SolPubKey
    mint_authority: SolPubKey
    chain_support_info: SolPubKey
    settings_program: SolPubKey
    state: SolPubKey
    fee_beneficiary: SolPubKey
    nonce_storage: SolPubKey
    send_from_wallet: SolPubKey
    external_call_storage: SolPubKey
    external_call_meta: SolPubKey
    sender: SolPubKey
    discount: SolPubKey
    bridge_fee: SolPubKey
    debridge_program: SolPubKey

    def to_account_meta_list(self) -> List[SolAccountMeta]:
        return [
            SolAccountMeta(self.bridge, is_signer=False, is_writable=True),
            SolAccountMeta(self.token_mint, is_signer=False, is_writable=True),
            SolAccountMeta(self.staking_wallet, is_signer=False, is_writable=True),
            SolAccountMeta(self.mint_authority, is_signer=False, is_writable=False),
            SolAccountMeta(self.chain_support_info, is_signer=False, is_writable=False),
            SolAccountMeta(self.settings_program, is_signer=False, is_writable=False),
            SolAccountMeta(TOKEN_PROGRAM_ID, is_signer=False, is_writable=False),
            SolAccountMeta(self.state, is_signer=False, is_writable=True),
            SolAccountMeta(self.fee_beneficiary, is_signer=False, is_writable=True),
            SolAccountMeta(self.nonce_storage, is_signer=False, is_writable=True),
            SolAccountMeta(self.send_from_wallet, is_signer=False, is_writable=True),
            SolAccountMeta(SYS_PROGRAM_ID, is_signer=False, is_writable=False),
            SolAccountMeta(self.external_call_storage, is_signer=False, is_writable=True),
            SolAccountMeta(self.external_call_meta, is_signer=False, is_writable=True),
            SolAccountMeta(self.sender, is_signer=True, is_writable=True),
            SolAccountMeta(self.discount, is_signer=False, is_writable=False),
            SolAccountMeta(self.bridge_fee, is_signer=False, is_writable=False),
            SolAccountMeta(self.debridge_program, is_signer=False, is_writable=False),
        ]


def get_state_info(resolver: AccountsResolver, solana: SolInteractor) -> StateInfo:
    state_address, _ = resolver.find_state_address()
    info = solana.get_account_info(state_address)
    if info is None:
        raise AccountNotFoundError('State', state_address)
    return StateInfo.from_account_info(info)


def get_chain_support_info(resolver: AccountsResolver, solana: SolInteractor, chain_id: int) -> ChainSupportInfo:
    address, _ = resolver.find_chain_support_info_address(chain_id)
    info = solana.get_account_info(address)
    if info is None:
        raise ChainNotSupportedError(chain_id)
    return ChainSupportInfo.from_account_info(info)


def _read_optional_account(solana: SolInteractor, name: str, address: SolPubKey) -> Optional[AccountInfo]:
    try:
        return solana.get_account_info(address)
    except (RpcError, requests.RequestException) as exc:
        LOG.debug(f'Failed to read {name} {address}: {str(exc)}')
        return None


def _get_discount_address(resolver: AccountsResolver, solana: SolInteractor, sender: SolPubKey) -> SolPubKey:
    discount, _ = resolver.find_discount_info_address(sender)
    if _read_optional_account(solana, 'discount info', discount) is not None:
        return discount

    no_discount, _ = resolver.find_no_discount_address()
    LOG.debug(f'No discount info {discount} for sender {sender}, use {no_discount}')
    return no_discount


def get_asset_fee_info(resolver: AccountsResolver, solana: SolInteractor,
                       bridge: SolPubKey, chain_id: int) -> Optional[AssetFeeInfo]:
    bridge_fee, _ = resolver.find_bridge_fee_address(bridge, chain_id)
    info = _read_optional_account(solana, 'bridge fee', bridge_fee)
    if info is None:
        return None

    try:
        return AssetFeeInfo.from_account_info(info)
    except AccountDecodeError as exc:
        LOG.debug(f'Skip bridge fee {bridge_fee}: {str(exc)}')
        return None


def _get_bridge_fee_address(resolver: AccountsResolver, solana: SolInteractor,
                            bridge: SolPubKey, chain_id: int) -> SolPubKey:
    asset_fee_info = get_asset_fee_info(resolver, solana, bridge, chain_id)
    if asset_fee_info is not None:
        return asset_fee_info.address

    no_bridge_fee, _ = resolver.find_no_bridge_fee_address()
    LOG.debug(f'No bridge fee for chain {chain_id}, use {no_bridge_fee}')
    return no_bridge_fee


def _build_send_context(resolver: AccountsResolver, state: StateInfo, sender: SolPubKey, token_mint: SolPubKey,
                        chain_to: int, ext_call_shortcut: bytes,
                        discount: SolPubKey, bridge_fee: SolPubKey) -> SendContext:
    bridge, _ = resolver.find_bridge_address(token_mint)
    mint_authority, _ = resolver.find_mint_authority_address(bridge)
    chain_support_info, _ = resolver.find_chain_support_info_address(chain_to)
    external_call_storage, _ = resolver.find_external_call_storage_address(ext_call_shortcut, sender)
    external_call_meta, _ = resolver.find_external_call_meta_address(external_call_storage)
    nonce_storage, _ = resolver.find_nonce_address()

    return SendContext(
        bridge=bridge,
        token_mint=token_mint,
        staking_wallet=resolver.find_associated_token_address(mint_authority, token_mint),
        mint_authority=mint_authority,
        chain_support_info=chain_support_info,
        settings_program=resolver.settings_program_id,
        state=state.address,
        fee_beneficiary=state.fee_beneficiary,
        nonce_storage=nonce_storage,
        send_from_wallet=resolver.find_associated_token_address(sender, token_mint),
        external_call_storage=external_call_storage,
        external_call_meta=external_call_meta,
        sender=sender,
        discount=discount,
        bridge_fee=bridge_fee,
        debridge_program=resolver.debridge_program_id
    )


def build_send_context_manual(resolver: AccountsResolver, solana: SolInteractor,
                              sender: SolPubKey, token_mint: SolPubKey, chain_to: int,
                              ext_call_shortcut: bytes) -> List[SolAccountMeta]:
    """
    Derives the send accounts locally. Reads only the state (for the fee beneficiary)
    and the optional discount and bridge fee accounts, does not check anything else.
    """
    state = get_state_info(resolver, solana)
    bridge, _ = resolver.find_bridge_address(token_mint)
    ctx = _build_send_context(
        resolver, state, sender, token_mint, chain_to, ext_call_shortcut,
        discount=_get_discount_address(resolver, solana, sender),
        bridge_fee=_get_bridge_fee_address(resolver, solana, bridge, chain_to)
    )
    return ctx.to_account_meta_list()


def _check_address_len(name: str, chain_id: int, address: bytes, chain_info: ChainSupportInfo) -> None:
    if len(address) != chain_info.chain_address_len:
        raise WrongReceiverLengthError(name, chain_id, len(address), chain_info.chain_address_len)


def build_send_context_with_client(resolver: AccountsResolver, solana: SolInteractor,
                                   sender: SolPubKey, token_mint: SolPubKey, receiver: bytes, chain_to: int,
                                   use_asset_fee: bool,
                                   external_call: Optional[ExternalCallInfo] = None) -> List[SolAccountMeta]:
    state = get_state_info(resolver, solana)

    chain_info = get_chain_support_info(resolver, solana, chain_to)
    if not chain_info.is_supported:
        raise ChainNotSupportedError(chain_to)

    _check_address_len('receiver', chain_to, receiver, chain_info)

    ext_call_shortcut = external_call_shortcut(b'')
    if external_call is not None:
        fallback_address = external_call.fallback_address or receiver
        _check_address_len('fallback address', chain_to, fallback_address, chain_info)
        ext_call_shortcut = external_call.get_shortcut()

    bridge, _ = resolver.find_bridge_address(token_mint)
    if use_asset_fee:
        asset_fee_info = get_asset_fee_info(resolver, solana, bridge, chain_to)
        if (asset_fee_info is None) or (asset_fee_info.asset_chain_fee is None):
            raise AssetFeeNotSupportedError(chain_to)
        bridge_fee = asset_fee_info.address
    else:
        bridge_fee = _get_bridge_fee_address(resolver, solana, bridge, chain_to)

    ctx = _build_send_context(
        resolver, state, sender, token_mint, chain_to, ext_call_shortcut,
        discount=_get_discount_address(resolver, solana, sender),
        bridge_fee=bridge_fee
    )
    return ctx.to_account_meta_list()


def build_send_context(mode: str, resolver: AccountsResolver, solana: SolInteractor,
                       sender: SolPubKey, token_mint: SolPubKey, receiver: bytes, chain_to: int,
                       use_asset_fee: bool = False,
                       external_call: Optional[ExternalCallInfo] = None) -> List[SolAccountMeta]:
    LOG.debug(f'Build send context in {mode} mode for chain {chain_to}')
    if mode == SendContextMode.Client:
        return build_send_context_with_client(
            resolver, solana, sender, token_mint, receiver, chain_to, use_asset_fee, external_call
        )
    elif mode == SendContextMode.Manual:
        if external_call is not None:
            ext_call_shortcut = external_call.get_shortcut()
        else:
            ext_call_shortcut = external_call_shortcut(b'')
        return build_send_context_manual(resolver, solana, sender, token_mint, chain_to, ext_call_shortcut)

    raise UnknownModeError(mode)
