"""KeyInfo, Signature, MsgMeta."""

from typing import NamedTuple

from .key_type import KeyType

MSG_TYPE_UNKNOWN = "unknown"
MSG_TYPE_CHAIN_MSG = "message"
MSG_TYPE_BLOCK = "block"
MSG_TYPE_DEAL_PROPOSAL = "deal_proposal"

MSG_TYPES = (
    MSG_TYPE_UNKNOWN,
    MSG_TYPE_CHAIN_MSG,
    MSG_TYPE_BLOCK,
    MSG_TYPE_DEAL_PROPOSAL,
)


class KeyInfo(NamedTuple):
    """Exportable key material."""

    key_type: KeyType
    private_key: bytes


class Signature(NamedTuple):
    """Signature produced by a wallet backend."""

    key_type: KeyType
    data: bytes


class MsgMeta(NamedTuple):
    """Context describing what is being signed."""

    type: str = MSG_TYPE_UNKNOWN
    extra: bytes = b""
