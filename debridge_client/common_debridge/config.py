import os
import logging

from decimal import Decimal
from typing import Optional, Union, Dict, Any

from dotenv import find_dotenv, load_dotenv

from .errors import ConfigError
from .solana_tx import SolPubKey, SolAccount, SolCommit
from .utils import hex_to_bytes


LOG = logging.getLogger(__name__)


class Config:
    debridge_name = 'DEBRIDGE'
    settings_name = 'SETTINGS'
    example_name = 'EXAMPLE'
    wallet_name = 'WALLET'
    rpc_name = 'RPC'

    def __init__(self, dotenv_path: Optional[str] = None):
        load_dotenv(dotenv_path or find_dotenv(usecwd=True))

        self._debridge_program_id = self._env_required_sol_acct(self.debridge_name)
        self._settings_program_id = self._env_required_sol_acct(self.settings_name)
        self._example_program_id = self._env_required_sol_acct(self.example_name)
        self._wallet = self._env_required_keypair(self.wallet_name)
        self._rpc_url = self._env_required(self.rpc_name)

        self._rpc_timeout = self._env_num('RPC_TIMEOUT', Decimal('15.0'), Decimal('1.0'), Decimal('3600'))
        self._rpc_retry_cnt = self._env_num('RPC_RETRY_CNT', 3, 1, 50)
        self._hide_rpc_url = self._env_bool('HIDE_RPC_URL', True)
        self._commit_type = self._env_commit_type('COMMIT_LEVEL', SolCommit.Finalized)

    @staticmethod
    def _env_required(name: str) -> str:
        value = os.environ.get(name, None)
        if value is None or not len(value.strip()):
            raise ConfigError(name, f'field {name} expected to be in .env')
        return value.strip()

    def _env_required_sol_acct(self, name: str) -> SolPubKey:
        value = self._env_required(name)
        try:
            return SolPubKey.from_string(value)
        except ValueError:
            raise ConfigError(name, f'contains bad Solana account {value}')

    def _env_required_keypair(self, name: str) -> SolAccount:
        value = self._env_required(name)
        try:
            return SolAccount.from_bytes(hex_to_bytes(value))
        except ValueError:
            raise ConfigError(name, 'contains bad hex-encoded secret key')

    @staticmethod
    def _env_commit_type(name: str, default_value: SolCommit.Type) -> SolCommit.Type:
        value = os.environ.get(name, None)
        if value is None:
            return default_value

        try:
            return SolCommit.to_type(value.lower().strip())
        except ValueError:
            LOG.error(f'Bad value for {name}, force to use default value {default_value}')
            return default_value

    @staticmethod
    def _env_bool(name: str, default_value: bool) -> bool:
        true_value_list = ('YES', 'ON', 'TRUE')
        false_value_list = ('NO', 'OFF', 'FALSE')

        value = os.environ.get(name, true_value_list[0] if default_value else false_value_list[0]).upper().strip()
        if (value not in true_value_list) and (value not in false_value_list):
            LOG.error(f'{name} cannot be: {true_value_list} or {false_value_list}')
            return default_value

        return value in true_value_list

    @staticmethod
    def _env_num(
        name: str, default_value: Union[int, Decimal],
        min_value: Optional[Union[int, Decimal]] = None,
        max_value: Optional[Union[int, Decimal]] = None
    ) -> Union[int, Decimal]:
        value = os.environ.get(name, None)
        if value is None:
            return default_value

        try:
            if isinstance(default_value, int):
                value = int(value, base=10)
            else:
                value = Decimal(value)
        except (ArithmeticError, ValueError):
            LOG.error(f'Bad value for {name}, force to use default value {default_value}')
            return default_value

        if (min_value is not None) and (value < min_value):
            LOG.error(f'{name} cannot be less than min value {min_value}')
            value = min_value
        elif (max_value is not None) and (value > max_value):
            LOG.error(f'{name} cannot be bigger than max value {max_value}')
            value = max_value
        return value

    @property
    def debridge_program_id(self) -> SolPubKey:
        return self._debridge_program_id

    @property
    def settings_program_id(self) -> SolPubKey:
        return self._settings_program_id

    @property
    def example_program_id(self) -> SolPubKey:
        return self._example_program_id

    @property
    def wallet(self) -> SolAccount:
        return self._wallet

    @property
    def rpc_url(self) -> str:
        return self._rpc_url

    @property
    def rpc_timeout(self) -> float:
        return float(self._rpc_timeout)

    @property
    def rpc_retry_cnt(self) -> int:
        return self._rpc_retry_cnt

    @property
    def hide_rpc_url(self) -> bool:
        return self._hide_rpc_url

    @property
    def commit_type(self) -> SolCommit.Type:
        return self._commit_type

    def as_dict(self) -> Dict[str, Any]:
        config_dict = {
            self.debridge_name: str(self.debridge_program_id),
            self.settings_name: str(self.settings_program_id),
            self.example_name: str(self.example_program_id),
            self.wallet_name: str(self.wallet.pubkey()),
            'RPC_TIMEOUT': self.rpc_timeout,
            'RPC_RETRY_CNT': self.rpc_retry_cnt,
            'HIDE_RPC_URL': self.hide_rpc_url,
            'COMMIT_LEVEL': self.commit_type,
        }
        if not self.hide_rpc_url:
            config_dict[self.rpc_name] = self.rpc_url
        return config_dict
