from __future__ import annotations

from typing import Tuple

from spl.token.instructions import get_associated_token_address

from .chain_ids import normalize_chain_id
from .constants import (
    DEBRIDGE_PROGRAM_ID, SETTINGS_PROGRAM_ID, SOLANA_CHAIN_ID,
    BRIDGE_SEED, CHAIN_SUPPORT_INFO_SEED, BRIDGE_FEE_INFO_SEED, DEFAULT_BRIDGE_FEE_INFO_SEED,
    STATE_SEED, DISCOUNT_INFO_SEED, NO_DISCOUNT_INFO_SEED,
    MINT_AUTHORITY_SEED, NONCE_SEED, EXTERNAL_CALL_STORAGE_SEED, EXTERNAL_CALL_META_SEED
)
from .errors import WrongExternalCallShortcutError
from .solana_tx import SolPubKey


SolPda = Tuple[SolPubKey, int]


class AccountsResolver:
    """Derives the addresses of deBridge and deBridge-settings accounts."""

    def __init__(self, debridge_program_id: SolPubKey = DEBRIDGE_PROGRAM_ID,
                 settings_program_id: SolPubKey = SETTINGS_PROGRAM_ID):
        self._debridge_program_id = debridge_program_id
        self._settings_program_id = settings_program_id

    @property
    def debridge_program_id(self) -> SolPubKey:
        return self._debridge_program_id

    @property
    def settings_program_id(self) -> SolPubKey:
        return self._settings_program_id

    def _find_settings_address(self, *seed_list: bytes) -> SolPda:
        return SolPubKey.find_program_address(list(seed_list), self._settings_program_id)

    def _find_debridge_address(self, *seed_list: bytes) -> SolPda:
        return SolPubKey.find_program_address(list(seed_list), self._debridge_program_id)

    def find_bridge_address(self, token_mint: SolPubKey) -> SolPda:
        return self._find_settings_address(BRIDGE_SEED, bytes(token_mint))

    def find_chain_support_info_address(self, chain_id: int) -> SolPda:
        return self._find_settings_address(CHAIN_SUPPORT_INFO_SEED, normalize_chain_id(chain_id))

    def find_bridge_fee_address(self, bridge: SolPubKey, chain_id: int) -> SolPda:
        return self._find_settings_address(BRIDGE_FEE_INFO_SEED, bytes(bridge), normalize_chain_id(chain_id))

    def find_no_bridge_fee_address(self) -> SolPda:
        return self._find_settings_address(DEFAULT_BRIDGE_FEE_INFO_SEED)

    def find_state_address(self) -> SolPda:
        return self._find_settings_address(STATE_SEED)

    def find_discount_info_address(self, sender: SolPubKey) -> SolPda:
        return self._find_settings_address(DISCOUNT_INFO_SEED, bytes(sender))

    def find_no_discount_address(self) -> SolPda:
        return self._find_settings_address(NO_DISCOUNT_INFO_SEED)

    def find_mint_authority_address(self, bridge: SolPubKey) -> SolPda:
        return self._find_debridge_address(MINT_AUTHORITY_SEED, bytes(bridge))

    def find_nonce_address(self) -> SolPda:
        return self._find_debridge_address(NONCE_SEED)

    def find_external_call_storage_address(self, shortcut: bytes, owner: SolPubKey) -> SolPda:
        if len(shortcut) != 32:
            raise WrongExternalCallShortcutError(len(shortcut))
        return self._find_debridge_address(
            EXTERNAL_CALL_STORAGE_SEED, shortcut, bytes(owner), normalize_chain_id(SOLANA_CHAIN_ID)
        )

    def find_external_call_meta_address(self, external_call_storage: SolPubKey) -> SolPda:
        return self._find_debridge_address(EXTERNAL_CALL_META_SEED, bytes(external_call_storage))

    @staticmethod
    def find_associated_token_address(owner: SolPubKey, token_mint: SolPubKey) -> SolPubKey:
        return get_associated_token_address(owner, token_mint)
