from __future__ import annotations

from enum import IntEnum
from typing import Union

from .errors import WrongReservedFlagsError


class ReservedFlag(IntEnum):
    UnwrapEth = 0
    RevertIfExternalFail = 1
    ProxyWithSender = 2
    SendHashedData = 3
    DirectWalletFlow = 31


class ReservedFlags:
    """32-byte flag set passed with the submission params, bit N lives at byte 31 - N // 8."""

    LENGTH = 32
    MAX_VALUE = 2 ** (LENGTH * 8) - 1

    def __init__(self, data: Union[bytes, bytearray, None] = None):
        if data is None:
            data = bytes(self.LENGTH)
        if len(data) != self.LENGTH:
            raise WrongReservedFlagsError(f'expected {self.LENGTH} bytes, got {len(data)}')
        self._data = bytearray(data)

    @staticmethod
    def from_int(value: int) -> ReservedFlags:
        if not (0 <= value <= ReservedFlags.MAX_VALUE):
            raise WrongReservedFlagsError(f'{value} does not fit into {ReservedFlags.LENGTH * 8} bits')
        return ReservedFlags(value.to_bytes(ReservedFlags.LENGTH, 'big'))

    def set_bit(self, bit: int) -> ReservedFlags:
        self._data[31 - bit // 8] |= 1 << (bit % 8)
        return self

    def check_bit(self, bit: int) -> bool:
        mask = 1 << (bit % 8)
        return (self._data[31 - bit // 8] & mask) == mask

    def set_unwrap_eth(self) -> ReservedFlags:
        return self.set_bit(ReservedFlag.UnwrapEth)

    def set_revert_if_external_fail(self) -> ReservedFlags:
        return self.set_bit(ReservedFlag.RevertIfExternalFail)

    def set_proxy_with_sender(self) -> ReservedFlags:
        return self.set_bit(ReservedFlag.ProxyWithSender)

    def set_send_hashed_data(self) -> ReservedFlags:
        return self.set_bit(ReservedFlag.SendHashedData)

    def set_direct_flow(self) -> ReservedFlags:
        return self.set_bit(ReservedFlag.DirectWalletFlow)

    def is_send_hashed_data(self) -> bool:
        return self.check_bit(ReservedFlag.SendHashedData)

    def to_int(self) -> int:
        return int.from_bytes(self._data, 'big')

    def __bytes__(self) -> bytes:
        return bytes(self._data)

    def __eq__(self, other) -> bool:
        return isinstance(other, ReservedFlags) and self._data == other._data

    def __repr__(self) -> str:
        return f'ReservedFlags({hex(self.to_int())})'
