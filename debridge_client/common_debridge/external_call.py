from __future__ import annotations

import logging

from dataclasses import dataclass, field
from typing import List, Sequence

import sha3

from construct import ConstructError, Flag, Int32ul, Int64ul, PrefixedArray, Struct
from spl.token.instructions import create_idempotent_associated_token_account, transfer
from spl.token.models import TransferParams

from .constants import SUBMISSION_AUTH_PLACEHOLDER, SIGNATURE_FEE, TOKEN_PROGRAM_ID
from .errors import ExternalCallDecodeError
from .keys import AccountsResolver
from .layouts import BorshBytes, SolPubKeyBytes
from .solana_tx import SolPubKey, SolTxIx


LOG = logging.getLogger(__name__)


AMOUNT_SUBSTITUTION_LAYOUT = Struct(
    "account_index" / Int32ul,
    "is_big_endian" / Flag,
    "offset" / Int32ul,
    "subtraction" / Int64ul,
)

WALLET_SUBSTITUTION_LAYOUT = Struct(
    "index" / Int32ul,
    "token_mint" / SolPubKeyBytes,
)

EXTERNAL_ACCOUNT_META_LAYOUT = Struct(
    "pubkey" / SolPubKeyBytes,
    "is_signer" / Flag,
    "is_writable" / Flag,
)

EXTERNAL_INSTRUCTION_LAYOUT = Struct(
    "reward" / Int64ul,
    "expenses" / Int64ul,
    "is_in_mandatory_block" / Flag,
    "amount_substitutions" / PrefixedArray(Int32ul, AMOUNT_SUBSTITUTION_LAYOUT),
    "wallet_substitutions" / PrefixedArray(Int32ul, WALLET_SUBSTITUTION_LAYOUT),
    "program_id" / SolPubKeyBytes,
    "accounts" / PrefixedArray(Int32ul, EXTERNAL_ACCOUNT_META_LAYOUT),
    "data" / BorshBytes,
)

_SIZE_PREFIX = Int64ul

INIT_ATA_REWARD = 100
TRANSFER_REWARD = 10


def _pubkey_bytes(value: str) -> bytes:
    return bytes(SolPubKey.from_string(value))


@dataclass(frozen=True)
class WalletSubstitution:
    """The account at `index` is replaced by ATA(submission authority, token_mint) on execution."""
    index: int
    token_mint: str


@dataclass(frozen=True)
class AmountSubstitution:
    """The u64 at `offset` of the data is replaced by balance(accounts[account_index]) - subtraction."""
    account_index: int
    is_big_endian: bool
    offset: int
    subtraction: int


@dataclass(frozen=True)
class ExternalAccountMeta:
    pubkey: str
    is_signer: bool
    is_writable: bool


@dataclass
class ExternalInstruction:
    program_id: str
    keys: List[ExternalAccountMeta]
    data: bytes
    reward: int = 0
    expenses: int = 0
    is_in_mandatory_block: bool = False
    amount_substitutions: List[AmountSubstitution] = field(default_factory=list)
    wallet_substitutions: List[WalletSubstitution] = field(default_factory=list)

    def _to_container(self) -> dict:
        return dict(
            reward=self.reward,
            expenses=self.expenses,
            is_in_mandatory_block=self.is_in_mandatory_block,
            amount_substitutions=[
                dict(
                    account_index=subst.account_index,
                    is_big_endian=subst.is_big_endian,
                    offset=subst.offset,
                    subtraction=subst.subtraction
                )
                for subst in self.amount_substitutions
            ],
            wallet_substitutions=[
                dict(index=subst.index, token_mint=_pubkey_bytes(subst.token_mint))
                for subst in self.wallet_substitutions
            ],
            program_id=_pubkey_bytes(self.program_id),
            accounts=[
                dict(pubkey=_pubkey_bytes(meta.pubkey), is_signer=meta.is_signer, is_writable=meta.is_writable)
                for meta in self.keys
            ],
            data=self.data,
        )

    def serialize(self) -> bytes:
        body = EXTERNAL_INSTRUCTION_LAYOUT.build(self._to_container())
        return _SIZE_PREFIX.build(len(body)) + body

    @staticmethod
    def from_container(value) -> ExternalInstruction:
        return ExternalInstruction(
            program_id=str(SolPubKey.from_bytes(value.program_id)),
            keys=[
                ExternalAccountMeta(str(SolPubKey.from_bytes(meta.pubkey)), meta.is_signer, meta.is_writable)
                for meta in value.accounts
            ],
            data=bytes(value.data),
            reward=value.reward,
            expenses=value.expenses,
            is_in_mandatory_block=value.is_in_mandatory_block,
            amount_substitutions=[
                AmountSubstitution(subst.account_index, subst.is_big_endian, subst.offset, subst.subtraction)
                for subst in value.amount_substitutions
            ],
            wallet_substitutions=[
                WalletSubstitution(subst.index, str(SolPubKey.from_bytes(subst.token_mint)))
                for subst in value.wallet_substitutions
            ],
        )


class ExternalCall:
    """Ordered list of external instructions, serialized back to back."""

    def __init__(self, ix_list: Sequence[ExternalInstruction] = ()):
        self._ix_list: List[ExternalInstruction] = list(ix_list)

    def add(self, *ix_list: ExternalInstruction) -> ExternalCall:
        self._ix_list.extend(ix_list)
        return self

    @property
    def ix_list(self) -> List[ExternalInstruction]:
        return self._ix_list

    def __len__(self) -> int:
        return len(self._ix_list)

    def serialize(self) -> bytes:
        return b''.join(ix.serialize() for ix in self._ix_list)

    def shortcut(self) -> bytes:
        return external_call_shortcut(self.serialize())

    @staticmethod
    def parse(data: bytes) -> ExternalCall:
        ix_list: List[ExternalInstruction] = list()
        pos = 0
        while pos < len(data):
            if pos + _SIZE_PREFIX.sizeof() > len(data):
                raise ExternalCallDecodeError(f'truncated size prefix at {pos}')
            size = _SIZE_PREFIX.parse(data[pos:pos + _SIZE_PREFIX.sizeof()])
            pos += _SIZE_PREFIX.sizeof()

            if pos + size > len(data):
                raise ExternalCallDecodeError(f'instruction at {pos} needs {size} bytes, {len(data) - pos} left')
            try:
                value = EXTERNAL_INSTRUCTION_LAYOUT.parse(data[pos:pos + size])
            except ConstructError as exc:
                raise ExternalCallDecodeError(str(exc))

            ix_list.append(ExternalInstruction.from_container(value))
            pos += size
        return ExternalCall(ix_list)


def external_call_shortcut(data: bytes) -> bytes:
    return sha3.keccak_256(data).digest()


def instruction_to_external(ix: SolTxIx, **kwargs) -> ExternalInstruction:
    return ExternalInstruction(
        program_id=str(ix.program_id),
        keys=[ExternalAccountMeta(str(meta.pubkey), meta.is_signer, meta.is_writable) for meta in ix.accounts],
        data=bytes(ix.data),
        **kwargs
    )


def make_init_ata_ext_ix(claim_mint: SolPubKey, wallet: SolPubKey, rent_exempt_balance: int) -> ExternalInstruction:
    ix = create_idempotent_associated_token_account(
        payer=SUBMISSION_AUTH_PLACEHOLDER,
        owner=wallet,
        mint=claim_mint
    )
    return instruction_to_external(
        ix,
        reward=INIT_ATA_REWARD,
        expenses=SIGNATURE_FEE + rent_exempt_balance,
        wallet_substitutions=[WalletSubstitution(index=1, token_mint=str(claim_mint))]
    )


def make_transfer_ext_ix(claim_mint: SolPubKey, wallet: SolPubKey) -> ExternalInstruction:
    ix = transfer(TransferParams(
        program_id=TOKEN_PROGRAM_ID,
        source=AccountsResolver.find_associated_token_address(SUBMISSION_AUTH_PLACEHOLDER, claim_mint),
        dest=AccountsResolver.find_associated_token_address(wallet, claim_mint),
        owner=SUBMISSION_AUTH_PLACEHOLDER,
        amount=1
    ))
    # Transfer data is [3] + u64 LE amount, the whole balance of the source goes out
    return instruction_to_external(
        ix,
        reward=TRANSFER_REWARD,
        expenses=SIGNATURE_FEE,
        amount_substitutions=[AmountSubstitution(account_index=0, is_big_endian=False, offset=1, subtraction=0)],
        wallet_substitutions=[WalletSubstitution(index=0, token_mint=str(claim_mint))]
    )


def build_transfer_ext_call(claim_mint: SolPubKey, destination_wallet_list: Sequence[SolPubKey],
                            rent_exempt_balance: int) -> ExternalCall:
    """
    Builds the external call that spreads the claimed tokens to the destination wallets.

    `rent_exempt_balance` is the rent-exempt minimum for an SPL token account,
    it is charged on top of the signature fee for every created ATA.
    """
    ext_call = ExternalCall()
    for wallet in destination_wallet_list:
        ext_call.add(
            make_init_ata_ext_ix(claim_mint, wallet, rent_exempt_balance),
            make_transfer_ext_ix(claim_mint, wallet)
        )

    LOG.debug(f'Built external call with {len(ext_call)} instructions for {len(destination_wallet_list)} wallets')
    return ext_call
