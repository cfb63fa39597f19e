from __future__ import annotations

import logging

from typing import List, Optional

from ..common_debridge.config import Config
from ..common_debridge.example_instruction import ExampleIxBuilder
from ..common_debridge.keys import AccountsResolver
from ..common_debridge.send_context import SendContextMode, ExternalCallInfo, build_send_context
from ..common_debridge.solana_interactor import SolInteractor
from ..common_debridge.solana_tx import SolTxIx, SolAccountMeta
from ..common_debridge.tx_sender import TxSender, TxEncoding

from .validators import parse_pubkey, parse_hex, parse_bool, parse_u64


LOG = logging.getLogger(__name__)


class SendHandlerBase:
    command = ''
    description = ''

    def __init__(self):
        self.root_parser = None

    @classmethod
    def init_args_parser(cls, parsers) -> SendHandlerBase:
        h = cls()
        h.root_parser = parsers.add_parser(h.command, help=h.description)
        h.root_parser.add_argument('--mint', type=parse_pubkey, required=True, help='token mint to send')
        h.root_parser.add_argument('--chain', type=int, required=True, help='target chain id')
        h.root_parser.add_argument('--receiver', type=parse_hex, required=True, help='receiver in target chain, hex')
        h.root_parser.add_argument(
            '--mode', choices=SendContextMode.Order, default=SendContextMode.Client,
            help='client reads and checks settings accounts, manual only derives addresses'
        )
        h.root_parser.add_argument('--encoding', choices=TxEncoding.Order, default=TxEncoding.Base64)
        h.root_parser.add_argument('--submit', action='store_true', help='send the signed transaction')
        h._add_args(h.root_parser)
        return h

    def _add_args(self, parser) -> None:
        pass

    def _use_asset_fee(self, args) -> bool:
        return False

    def _get_external_call(self, args) -> Optional[ExternalCallInfo]:
        return None

    def _make_ix(self, builder: ExampleIxBuilder, send_context: List[SolAccountMeta], args) -> SolTxIx:
        raise NotImplementedError

    def execute(self, args) -> Optional[str]:
        config = Config()
        solana = SolInteractor(config)
        resolver = AccountsResolver(config.debridge_program_id, config.settings_program_id)

        send_context = build_send_context(
            args.mode, resolver, solana,
            sender=config.wallet.pubkey(),
            token_mint=args.mint,
            receiver=args.receiver,
            chain_to=args.chain,
            use_asset_fee=self._use_asset_fee(args),
            external_call=self._get_external_call(args)
        )

        ix = self._make_ix(ExampleIxBuilder(config.example_program_id), send_context, args)
        LOG.debug(f'{self.command}: instruction data {bytes(ix.data).hex()}')
        return TxSender(config, solana).process(self.command, [ix], args.encoding, args.submit)


class SendHandler(SendHandlerBase):
    command = 'send'
    description = 'send tokens, fee is taken from the amount'

    def _add_args(self, parser) -> None:
        parser.add_argument('--amount', type=parse_u64, required=True)
        parser.add_argument('--assetFee', dest='asset_fee', type=parse_bool, default=False, help='pay fee in asset')

    def _use_asset_fee(self, args) -> bool:
        return args.asset_fee

    def _make_ix(self, builder: ExampleIxBuilder, send_context: List[SolAccountMeta], args) -> SolTxIx:
        return builder.make_send_via_debridge_ix(send_context, args.amount, args.chain, args.receiver, args.asset_fee)


class SendNativeFeeHandler(SendHandlerBase):
    command = 'send-native-fee'
    description = 'send tokens, fixed fee is paid in SOL'

    def _add_args(self, parser) -> None:
        parser.add_argument('--amount', type=parse_u64, required=True)

    def _make_ix(self, builder: ExampleIxBuilder, send_context: List[SolAccountMeta], args) -> SolTxIx:
        return builder.make_send_via_debridge_with_native_fixed_fee_ix(
            send_context, args.amount, args.chain, args.receiver
        )


class SendAssetFeeHandler(SendHandlerBase):
    command = 'send-asset-fee'
    description = 'send tokens, fixed fee is paid in the sent asset'

    def _add_args(self, parser) -> None:
        parser.add_argument('--amount', type=parse_u64, required=True)

    def _use_asset_fee(self, args) -> bool:
        return True

    def _make_ix(self, builder: ExampleIxBuilder, send_context: List[SolAccountMeta], args) -> SolTxIx:
        return builder.make_send_via_debridge_with_asset_fixed_fee_ix(
            send_context, args.amount, args.chain, args.receiver
        )


class SendExactAmountHandler(SendHandlerBase):
    command = 'send-exact-amount'
    description = 'send tokens so that exactly --amount arrives in the target chain'

    def _add_args(self, parser) -> None:
        parser.add_argument('--amount', type=parse_u64, required=True, help='amount to receive')
        parser.add_argument('--execFee', dest='exec_fee', type=parse_u64, default=0)
        parser.add_argument('--assetFee', dest='asset_fee', type=parse_bool, default=False)

    def _use_asset_fee(self, args) -> bool:
        return args.asset_fee

    def _make_ix(self, builder: ExampleIxBuilder, send_context: List[SolAccountMeta], args) -> SolTxIx:
        return builder.make_send_via_debridge_with_exact_amount_ix(
            send_context, args.amount, args.chain, args.receiver, args.exec_fee, args.asset_fee
        )


class SendExecutionFeeHandler(SendHandlerBase):
    command = 'send-execution-fee'
    description = 'send tokens with a reward for the claim executor'

    def _add_args(self, parser) -> None:
        parser.add_argument('--amount', type=parse_u64, required=True)
        parser.add_argument('--execFee', dest='exec_fee', type=parse_u64, required=True)

    def _make_ix(self, builder: ExampleIxBuilder, send_context: List[SolAccountMeta], args) -> SolTxIx:
        return builder.make_send_via_debridge_with_execution_fee_ix(
            send_context, args.amount, args.chain, args.receiver, args.exec_fee
        )
