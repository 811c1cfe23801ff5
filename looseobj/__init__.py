from .errors import (
    LooseObjectError,
    InvalidInput,
    CorruptObject,
    InvalidObjectType,
    TruncatedHeader,
    ObjectNotFound,
)
from .header import ObjectKind, is_legacy
from .objects import RawObject, compute_digest, decode_object
from .data import LooseStorage, path_of, digest_of

__all__ = [
    'LooseStorage',
    'RawObject',
    'ObjectKind',
    'compute_digest',
    'decode_object',
    'is_legacy',
    'path_of',
    'digest_of',
    'LooseObjectError',
    'InvalidInput',
    'CorruptObject',
    'InvalidObjectType',
    'TruncatedHeader',
    'ObjectNotFound',
]
