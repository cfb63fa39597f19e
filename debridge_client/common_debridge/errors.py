from __future__ import annotations

from typing import Any, Dict, Optional


class DebridgeClientError(Exception):
    pass


class ConfigError(DebridgeClientError):
    def __init__(self, name: str, msg: str):
        super().__init__(name, msg)
        self._name = name
        self._msg = msg

    def __str__(self) -> str:
        return f'{self._name}: {self._msg}'


class UnknownModeError(DebridgeClientError):
    def __init__(self, mode: str):
        super().__init__(mode)
        self._mode = mode

    def __str__(self) -> str:
        return f'Unknown mode {self._mode}, expected one of: client, manual'


class AccountNotFoundError(DebridgeClientError):
    def __init__(self, name: str, address: Any):
        super().__init__(name, address)
        self._name = name
        self._address = str(address)

    def __str__(self) -> str:
        return f'{self._name} account {self._address} does not exist'


class AccountDecodeError(DebridgeClientError):
    def __init__(self, name: str, msg: str):
        super().__init__(name, msg)
        self._name = name
        self._msg = msg

    def __str__(self) -> str:
        return f'Failed to decode {self._name} account: {self._msg}'


class ChainNotSupportedError(DebridgeClientError):
    def __init__(self, chain_id: int):
        super().__init__(chain_id)
        self._chain_id = chain_id

    def __str__(self) -> str:
        return f'Target chain {self._chain_id} is not supported'


class WrongReceiverLengthError(DebridgeClientError):
    def __init__(self, name: str, chain_id: int, actual_len: int, expected_len: int):
        super().__init__(name, chain_id, actual_len, expected_len)
        self._name = name
        self._chain_id = chain_id
        self._actual_len = actual_len
        self._expected_len = expected_len

    def __str__(self) -> str:
        return (
            f'Wrong {self._name} length {self._actual_len} for chain {self._chain_id}, '
            f'expected {self._expected_len} bytes'
        )


class AssetFeeNotSupportedError(DebridgeClientError):
    def __init__(self, chain_id: int):
        super().__init__(chain_id)
        self._chain_id = chain_id

    def __str__(self) -> str:
        return f'Asset fee is not supported for chain {self._chain_id}'


class AmountOverflowError(DebridgeClientError):
    def __str__(self) -> str:
        return 'Amount too big for sending. Adding fee overflow max sending amount'


class RpcError(DebridgeClientError):
    def __init__(self, method: str, error: Optional[Dict[str, Any]]):
        super().__init__(method, error)
        self._method = method
        self._error = error or dict()

    @property
    def error(self) -> Dict[str, Any]:
        return self._error

    def __str__(self) -> str:
        return f'RPC method {self._method} failed: {self._error.get("message", self._error)}'


class SolTxSizeError(DebridgeClientError):
    def __init__(self, name: str, size: int):
        super().__init__(name, size)
        self._name = name
        self._size = size

    def __str__(self) -> str:
        return f'Transaction {self._name} size {self._size} is exceeded'


class ExternalCallDecodeError(DebridgeClientError):
    def __init__(self, msg: str):
        super().__init__(msg)
        self._msg = msg

    def __str__(self) -> str:
        return f'Failed to decode external call: {self._msg}'


class WrongExternalCallShortcutError(DebridgeClientError):
    def __init__(self, length: int):
        super().__init__(length)
        self._length = length

    def __str__(self) -> str:
        return f'External call shortcut must be a 32-byte hash, got {self._length} bytes'


class WrongReservedFlagsError(DebridgeClientError):
    def __init__(self, msg: str):
        super().__init__(msg)
        self._msg = msg

    def __str__(self) -> str:
        return f'Wrong reserved flags: {self._msg}'
