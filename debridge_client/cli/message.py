from __future__ import annotations

from typing import List, Optional

from ..common_debridge.example_instruction import ExampleIxBuilder
from ..common_debridge.flags import ReservedFlags
from ..common_debridge.send_context import ExternalCallInfo
from ..common_debridge.solana_tx import SolTxIx, SolAccountMeta

from .send import SendHandlerBase
from .validators import parse_hex, parse_u64


class SendMessageHandler(SendHandlerBase):
    command = 'send-message'
    description = 'send a message without liquidity, it is executed as an external call'

    def _add_args(self, parser) -> None:
        parser.add_argument('--execFee', dest='exec_fee', type=parse_u64, default=0)
        parser.add_argument('--fallback', type=parse_hex, default=None, help='fallback address, receiver by default')
        parser.add_argument('--data', type=parse_hex, required=True, help='message, hex')

    def _get_external_call(self, args) -> Optional[ExternalCallInfo]:
        return ExternalCallInfo(ReservedFlags(), args.data, args.fallback)

    def _make_ix(self, builder: ExampleIxBuilder, send_context: List[SolAccountMeta], args) -> SolTxIx:
        return builder.make_send_message_via_debridge_ix(
            send_context, args.chain, args.receiver, args.exec_fee,
            fallback_address=args.fallback or args.receiver,
            message=args.data
        )
