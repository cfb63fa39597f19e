from __future__ import annotations

import json

from typing import Any, Dict

from ..common_debridge.config import Config
from ..common_debridge.errors import AssetFeeNotSupportedError, ChainNotSupportedError
from ..common_debridge.estimator import (
    add_all_fees, get_transfer_fee_bps, get_chain_native_fix_fee, get_native_sender_lamports_expenses
)
from ..common_debridge.keys import AccountsResolver
from ..common_debridge.send_context import get_state_info, get_chain_support_info, get_asset_fee_info
from ..common_debridge.solana_interactor import SolInteractor

from .validators import parse_bool, parse_hex, parse_pubkey, parse_u64


class EstimateHandler:
    def __init__(self):
        self.command = 'estimate'

    @staticmethod
    def init_args_parser(parsers) -> EstimateHandler:
        h = EstimateHandler()
        h.root_parser = parsers.add_parser(h.command, help='amount to send for an exact amount in the target chain')
        h.root_parser.add_argument('--amount', type=parse_u64, required=True, help='amount to receive')
        h.root_parser.add_argument('--chain', type=int, required=True, help='target chain id')
        h.root_parser.add_argument('--mint', type=parse_pubkey, required=True, help='token mint to send')
        h.root_parser.add_argument('--execFee', dest='exec_fee', type=parse_u64, default=0)
        h.root_parser.add_argument('--assetFee', dest='asset_fee', type=parse_bool, default=False)
        h.root_parser.add_argument('--data', type=parse_hex, default=b'', help='external call, hex')
        return h

    def execute(self, args) -> Dict[str, Any]:
        config = Config()
        solana = SolInteractor(config)
        resolver = AccountsResolver(config.debridge_program_id, config.settings_program_id)

        state = get_state_info(resolver, solana)
        chain_info = get_chain_support_info(resolver, solana, args.chain)
        if not chain_info.is_supported:
            raise ChainNotSupportedError(args.chain)

        asset_fix_fee = None
        native_fix_fee = get_chain_native_fix_fee(state, chain_info)
        if args.asset_fee:
            bridge, _ = resolver.find_bridge_address(args.mint)
            asset_fee_info = get_asset_fee_info(resolver, solana, bridge, args.chain)
            if (asset_fee_info is None) or (asset_fee_info.asset_chain_fee is None):
                raise AssetFeeNotSupportedError(args.chain)
            asset_fix_fee = asset_fee_info.asset_chain_fee
            native_fix_fee = 0

        transfer_fee_bps = get_transfer_fee_bps(state, chain_info)
        result = {
            'amount': add_all_fees(args.amount, args.exec_fee, transfer_fee_bps, asset_fix_fee),
            'transfer_fee_bps': transfer_fee_bps,
            'asset_fix_fee': asset_fix_fee,
            'native_lamports_expenses': get_native_sender_lamports_expenses(
                native_fix_fee, len(args.data), solana.get_rent_exempt_balance_for_size
            ),
        }
        print(json.dumps(result))
        return result
