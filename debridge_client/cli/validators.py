import argparse

from ..common_debridge.solana_tx import SolPubKey
from ..common_debridge.utils import hex_to_bytes


def parse_pubkey(value: str) -> SolPubKey:
    try:
        return SolPubKey.from_string(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f'{value} is not a valid Solana address')


def parse_hex(value: str) -> bytes:
    try:
        return hex_to_bytes(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f'{value} is not a valid hex string')


def parse_bool(value: str) -> bool:
    value = value.lower().strip()
    if value in ('true', 'yes', '1'):
        return True
    elif value in ('false', 'no', '0'):
        return False
    raise argparse.ArgumentTypeError(f'{value} is not a boolean, expected true or false')


def _parse_uint(value: str, bits: int) -> int:
    try:
        result = int(value, base=10)
    except ValueError:
        raise argparse.ArgumentTypeError(f'{value} is not an integer')

    if result < 0 or result >= 2 ** bits:
        raise argparse.ArgumentTypeError(f'{value} does not fit into u{bits}')
    return result


def parse_u64(value: str) -> int:
    return _parse_uint(value, 64)


def parse_u256(value: str) -> int:
    return _parse_uint(value, 256)
