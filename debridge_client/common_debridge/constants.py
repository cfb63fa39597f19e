from solders.system_program import ID as _SYS_PROGRAM_ID
from spl.token.constants import TOKEN_PROGRAM_ID as _TOKEN_PROGRAM_ID

from .solana_tx import SolPubKey


SYS_PROGRAM_ID = _SYS_PROGRAM_ID
TOKEN_PROGRAM_ID = _TOKEN_PROGRAM_ID

# Production deployments
DEBRIDGE_PROGRAM_ID = SolPubKey.from_string('DEbrdGj3HsRsAzx6uH4MKyREKxVAfBydijLUF3ygsFfh')
SETTINGS_PROGRAM_ID = SolPubKey.from_string('DeSetTwWhjZq6Pz9Kfdo1KoS5NqtsM6G8ERbX4SSCSft')

# Stands for the submission authority, which is unknown until the claim is executed
SUBMISSION_AUTH_PLACEHOLDER = SolPubKey.from_bytes(b'SUBMISSION_AUTH_PLACEHOLDER'.ljust(SolPubKey.LENGTH, b'\0'))

SOLANA_CHAIN_ID = 7565164  # b'sol'
ETHEREUM_CHAIN_ID = 1
BNB_CHAIN_CHAIN_ID = 56
HECO_CHAIN_ID = 128
POLYGON_CHAIN_ID = 137
FANTOM_CHAIN_ID = 250
ARBITRUM_CHAIN_ID = 42161
AVALANCHE_CHAIN_ID = 43114

CHAIN_ID_LEN = 32
BPS_DENOMINATOR = 10_000
U64_MAX = 2 ** 64 - 1

SIGNATURE_FEE = 5000
SPL_TOKEN_ACCOUNT_SIZE = 165
EXTERNAL_CALL_META_SPACE = 40

# Settings program seeds
BRIDGE_SEED = b'BRIDGE'
CHAIN_SUPPORT_INFO_SEED = b'CHAIN_SUPPORT_INFO'
BRIDGE_FEE_INFO_SEED = b'BRIDGE_FEE_INFO'
DEFAULT_BRIDGE_FEE_INFO_SEED = b'DEFAULT_BRIDGE_FEE_INFO'
STATE_SEED = b'STATE'
DISCOUNT_INFO_SEED = b'DISCOUNT_INFO'
NO_DISCOUNT_INFO_SEED = b'NO_DISCOUNT_INFO'

# deBridge program seeds
MINT_AUTHORITY_SEED = b'AUTHORITY'
NONCE_SEED = b'NONCE'
EXTERNAL_CALL_STORAGE_SEED = b'EXTERNAL_CALL_STORAGE'
EXTERNAL_CALL_META_SEED = b'EXTERNAL_CALL_META'

# Anchor discriminators of the deBridge program
SEND_DISCRIMINATOR = bytes([102, 251, 20, 187, 65, 75, 12, 69])
INIT_EXTERNAL_CALL_DISCRIMINATOR = bytes([82, 77, 58, 138, 145, 157, 41, 253])

# Anchor discriminators of the settings accounts
STATE_ACCOUNT_DISCRIMINATOR = bytes([216, 146, 107, 94, 104, 75, 182, 177])
CHAIN_SUPPORT_INFO_ACCOUNT_DISCRIMINATOR = bytes([175, 59, 40, 127, 55, 33, 200, 203])
ASSET_FEE_ACCOUNT_DISCRIMINATOR = bytes([37, 184, 34, 110, 54, 84, 57, 85])
