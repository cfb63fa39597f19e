from typing import Union

from .constants import CHAIN_ID_LEN


def normalize_chain_id(chain_id: Union[int, bytes]) -> bytes:
    """Chain id as the 32-byte big-endian value used by the protocol."""
    if isinstance(chain_id, (bytes, bytearray)):
        if len(chain_id) != CHAIN_ID_LEN:
            raise ValueError(f'Chain id must be {CHAIN_ID_LEN} bytes, got {len(chain_id)}')
        return bytes(chain_id)
    return chain_id.to_bytes(CHAIN_ID_LEN, 'big')


def chain_id_to_int(chain_id: bytes) -> int:
    return int.from_bytes(chain_id, 'big')
