from __future__ import annotations

import sys

from typing import List, Optional

from ..common_debridge.config import Config
from ..common_debridge.constants import SPL_TOKEN_ACCOUNT_SIZE
from ..common_debridge.example_instruction import ExampleIxBuilder
from ..common_debridge.external_call import build_transfer_ext_call
from ..common_debridge.flags import ReservedFlags
from ..common_debridge.send_context import ExternalCallInfo
from ..common_debridge.solana_interactor import SolInteractor
from ..common_debridge.solana_tx import SolTxIx, SolAccountMeta

from .send import SendHandlerBase
from .validators import parse_hex, parse_pubkey, parse_u64, parse_u256


class SendExternalCallHandler(SendHandlerBase):
    command = 'send-external-call'
    description = 'send tokens together with an external call executed in the target chain'

    def _add_args(self, parser) -> None:
        parser.add_argument('--amount', type=parse_u64, required=True)
        parser.add_argument('--execFee', dest='exec_fee', type=parse_u64, default=0)
        parser.add_argument('--fallback', type=parse_hex, default=None, help='fallback address, receiver by default')
        parser.add_argument('--data', type=parse_hex, required=True, help='serialized external call, hex')
        parser.add_argument('--flags', type=parse_u256, default=0, help='reserved flags as an integer')

    def _get_external_call(self, args) -> Optional[ExternalCallInfo]:
        return ExternalCallInfo(ReservedFlags.from_int(args.flags), args.data, args.fallback)

    def _make_ix(self, builder: ExampleIxBuilder, send_context: List[SolAccountMeta], args) -> SolTxIx:
        return builder.make_send_via_debridge_with_external_call_ix(
            send_context, args.amount, args.chain, args.receiver, args.exec_fee,
            fallback_address=args.fallback or args.receiver,
            reserved_flag=ReservedFlags.from_int(args.flags),
            external_call=args.data
        )


class BuildExternalCallHandler:
    def __init__(self):
        self.command = 'build-external-call'

    @staticmethod
    def init_args_parser(parsers) -> BuildExternalCallHandler:
        h = BuildExternalCallHandler()
        h.root_parser = parsers.add_parser(h.command, help='build external call spreading claimed tokens to wallets')
        h.root_parser.add_argument('--mint', type=parse_pubkey, required=True, help='claimed token mint')
        h.root_parser.add_argument('--wallets', type=parse_pubkey, nargs='+', required=True, help='destination wallets')
        h.root_parser.add_argument(
            '--rent', type=parse_u64, default=None,
            help='rent-exempt balance of a token account, requested from Solana if not set'
        )
        return h

    def execute(self, args) -> str:
        rent = args.rent
        if rent is None:
            config = Config()
            rent = SolInteractor(config).get_rent_exempt_balance_for_size(SPL_TOKEN_ACCOUNT_SIZE)

        ext_call = build_transfer_ext_call(args.mint, args.wallets, rent)
        data = ext_call.serialize().hex()
        print(data)
        print(f'Shortcut: {ext_call.shortcut().hex()}', file=sys.stderr)
        return data
