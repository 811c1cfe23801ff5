#object kinds, the legacy and packed header encodings, and the format detector
#legacy: b"<kind> <size>\0" deflated together with the content, the only form written
#packed: uncompressed varint header (bit 7 more, bits 6-4 kind code, bits 3-0 low size bits,
#then 7 size bits per byte, low bits first) followed by the separately deflated content
import re
from enum import Enum
from types import MappingProxyType

from .errors import InvalidInput, CorruptObject, InvalidObjectType, TruncatedHeader


class ObjectKind(str, Enum):
    BLOB = 'blob'
    TREE = 'tree'
    COMMIT = 'commit'
    TAG = 'tag'

    def __str__(self):
        return self.value

    @property
    def code(self):
        return KIND_CODES[self]

    @classmethod
    def parse(cls, value): #kind, str or bytes -> ObjectKind
        if isinstance(value, cls):
            return value
        if isinstance(value, (bytes, bytearray)):
            value = _NAME_TO_KIND.get(bytes(value))
        elif isinstance(value, str):
            value = _NAME_TO_KIND.get(value.encode('ascii', 'replace'))
        else:
            value = None
        if value is None:
            raise InvalidInput(f'unsupported object kind, expected one of {KIND_NAMES}')
        return value


#type codes shared with the pack format, slots 0 and 5-7 are never valid here
KIND_CODES = MappingProxyType({
    ObjectKind.COMMIT: 1,
    ObjectKind.TREE: 2,
    ObjectKind.BLOB: 3,
    ObjectKind.TAG: 4,
})
_CODE_TO_KIND = MappingProxyType({code: kind for kind, code in KIND_CODES.items()})
_NAME_TO_KIND = MappingProxyType({kind.value.encode('ascii'): kind for kind in ObjectKind})
KIND_NAMES = tuple(kind.value for kind in ObjectKind)

_DIGITS = re.compile(r'[0-9]+')


def verify_header(kind, size):
    #normalizes (kind, size), raising InvalidInput for anything a header can't carry
    kind = ObjectKind.parse(kind)
    if isinstance(size, str) and _DIGITS.fullmatch(size):
        size = int(size)
    if isinstance(size, bool) or not isinstance(size, int):
        raise InvalidInput(f'object size must be a non-negative integer, got {size!r}')
    if size < 0:
        raise InvalidInput(f'object size must be a non-negative integer, got {size}')
    return kind, size


def encode_legacy(kind, size):
    kind, size = verify_header(kind, size)
    return f'{kind.value} {size}\0'.encode('ascii')


def decode_legacy(data): #inflated legacy record -> (kind, declared size, content), size checked by the caller
    header, nul, content = data.partition(b'\0')
    if not nul:
        raise CorruptObject('invalid object header: no NUL terminator')
    name, space, size = header.partition(b' ')
    if not space or not _DIGITS.fullmatch(size.decode('ascii', 'replace')):
        raise CorruptObject(f'invalid object header {bytes(header[:64])!r}')
    kind = _NAME_TO_KIND.get(bytes(name))
    if kind is None:
        raise InvalidObjectType(f'invalid object type {bytes(name[:32])!r}')
    return kind, int(size), content


def encode_packed(kind, size):
    kind, size = verify_header(kind, size)
    c = (kind.code << 4) | (size & 0x0F)
    size >>= 4
    out = bytearray()
    while size:
        out.append(c | 0x80)
        c = size & 0x7F
        size >>= 7
    out.append(c)
    return bytes(out)


def decode_packed(buf): #returns (kind, size, used), deflated content starts at buf[used:]
    if not buf:
        raise TruncatedHeader('object header is empty')
    used = 0
    c = buf[used]
    used += 1
    code = (c >> 4) & 7
    size = c & 0x0F
    shift = 4
    while c & 0x80:
        if len(buf) <= used:
            raise TruncatedHeader('object header runs past the end of the file')
        c = buf[used]
        used += 1
        size += (c & 0x7F) << shift
        shift += 7
    kind = _CODE_TO_KIND.get(code)
    if kind is None:
        raise InvalidObjectType(f'invalid loose object type code {code}')
    return kind, size, used


#a zlib stream header: deflate with 32K window (0x78) and the big-endian first two bytes a multiple of 31
def is_legacy(prefix): #leading bytes of a record, or a binary file left at its original position
    if hasattr(prefix, 'read'):
        stream = prefix
        position = stream.tell()
        try:
            prefix = stream.read(2)
        finally:
            stream.seek(position)
    if len(prefix) < 2:
        return False
    word = (prefix[0] << 8) | prefix[1]
    return prefix[0] == 0x78 and word % 31 == 0
