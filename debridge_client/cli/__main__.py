import argparse
import logging
import sys

from typing import List, Optional

from ..common_debridge.errors import DebridgeClientError
from ..common_debridge.logger import Logger

from .estimate import EstimateHandler
from .external_call import SendExternalCallHandler, BuildExternalCallHandler
from .message import SendMessageHandler
from .send import SendHandler, SendNativeFeeHandler, SendAssetFeeHandler, SendExactAmountHandler
from .send import SendExecutionFeeHandler


LOG = logging.getLogger(__name__)


def init_args_parser():
    parser = argparse.ArgumentParser(
        prog='debridge-client',
        description='Client command line utility for the deBridge example program on Solana.'
    )
    subparsers = parser.add_subparsers(title='command', dest='command', description='valid commands')

    handler_list = [
        SendHandler.init_args_parser(subparsers),
        SendNativeFeeHandler.init_args_parser(subparsers),
        SendAssetFeeHandler.init_args_parser(subparsers),
        SendExactAmountHandler.init_args_parser(subparsers),
        SendExecutionFeeHandler.init_args_parser(subparsers),
        SendExternalCallHandler.init_args_parser(subparsers),
        SendMessageHandler.init_args_parser(subparsers),
        BuildExternalCallHandler.init_args_parser(subparsers),
        EstimateHandler.init_args_parser(subparsers),
    ]
    return parser, {h.command: h for h in handler_list}


def main(argv: Optional[List[str]] = None) -> int:
    Logger.setup()

    parser, handler_dict = init_args_parser()
    args = parser.parse_args(argv)

    handler = handler_dict.get(args.command, None)
    if handler is None:
        print(f'Unknown command {args.command}', file=sys.stderr)
        parser.print_usage(sys.stderr)
        return 1

    try:
        handler.execute(args)
    except DebridgeClientError as exc:
        LOG.error(f'{args.command} failed: {str(exc)}')
        print(f'Error: {str(exc)}', file=sys.stderr)
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
