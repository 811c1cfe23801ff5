#decoding stored records, and streaming (kind, content) into digests and deflated records
import hashlib
import io
import tempfile
import zlib

from collections import namedtuple

from .errors import InvalidInput, CorruptObject
from .header import ObjectKind, verify_header, encode_legacy, decode_legacy, decode_packed, is_legacy

CHUNK_SIZE = 8192 #bytes read, hashed and deflated per step
SPOOL_MAX_SIZE = 1024 * 1024 #non-seekable streams beyond this spill to disk
COMPRESSION_LEVEL = zlib.Z_DEFAULT_COMPRESSION #gives the 0x78 0x9c stream header is_legacy looks for

RawObject = namedtuple('RawObject', ['kind', 'content'])


#one stored record, legacy or packed -> RawObject; anything wrong is CorruptObject carrying path and digest
def decode_object(buf, path=None, digest=None):
    try:
        if len(buf) < 2:
            raise CorruptObject('object file too small')
        if is_legacy(buf):
            kind, size, content = _decode_legacy(buf)
        else:
            kind, size, content = _decode_packed(buf)
        if len(content) != size:
            raise CorruptObject(f'size mismatch: header declares {size} bytes, content has {len(content)}')
    except CorruptObject as e:
        raise e.locate(path, digest)
    return RawObject(kind, content)


def _decode_legacy(buf):
    #header and content were deflated together
    return decode_legacy(_inflate(buf))


def _decode_packed(buf):
    #the header sits uncompressed in front of the deflated content
    kind, size, used = decode_packed(buf)
    return kind, size, _inflate(memoryview(buf)[used:])


def _inflate(data):
    decompressor = zlib.decompressobj()
    try:
        content = decompressor.decompress(data)
        content += decompressor.flush()
    except zlib.error as e:
        raise CorruptObject(f'cannot inflate object: {e}') from e
    if not decompressor.eof:
        raise CorruptObject('compressed stream is truncated')
    if decompressor.unused_data:
        raise CorruptObject(f'{len(decompressor.unused_data)} bytes of garbage after compressed stream')
    return content


#content handed to put()/compute_digest(), readable more than once: bytes-like, a seekable
#stream rewound to where it started, or any other stream spooled once
class ContentSource:

    def __init__(self, content, size=None):
        self._buffer = None
        self._stream = None
        self._start = 0
        self._spool = None

        if isinstance(content, (bytes, bytearray, memoryview)):
            self._buffer = memoryview(content).cast('B')
            actual = len(self._buffer)
            if size is not None and size != actual:
                raise InvalidInput(f'declared size {size} does not match content length {actual}')
            self.size = actual
        elif hasattr(content, 'read'):
            seekable = getattr(content, 'seekable', None)
            if seekable is not None and seekable():
                self._stream = content
                self._start = content.tell()
                if size is None:
                    size = content.seek(0, io.SEEK_END) - self._start
                    content.seek(self._start)
                self.size = size
            else:
                self._spool_stream(content, size)
        else:
            raise InvalidInput(f'content must be bytes or a binary stream, got {type(content).__name__}')

    def _spool_stream(self, content, size):
        self._spool = tempfile.SpooledTemporaryFile(max_size=SPOOL_MAX_SIZE)
        actual = 0
        try:
            while True:
                chunk = _check_chunk(content.read(CHUNK_SIZE))
                if not chunk:
                    break
                self._spool.write(chunk)
                actual += len(chunk)
        except BaseException:
            self.close()
            raise
        if size is not None and size != actual:
            self.close()
            raise InvalidInput(f'declared size {size} does not match content length {actual}')
        self._stream = self._spool
        self.size = actual

    def chunks(self): #pieces of at most CHUNK_SIZE bytes
        if self._buffer is not None:
            for offset in range(0, len(self._buffer), CHUNK_SIZE):
                yield self._buffer[offset:offset + CHUNK_SIZE]
            return

        self._stream.seek(self._start)
        remaining = self.size
        while remaining:
            chunk = _check_chunk(self._stream.read(min(CHUNK_SIZE, remaining)))
            if not chunk:
                raise InvalidInput(f'content ended {remaining} bytes short of declared size {self.size}')
            remaining -= len(chunk)
            yield chunk
        if self._stream.read(1):
            raise InvalidInput(f'content is longer than declared size {self.size}')

    def close(self):
        if self._spool is not None:
            self._spool.close()
            self._spool = None

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()


def _check_chunk(chunk):
    if not isinstance(chunk, (bytes, bytearray, memoryview)):
        raise InvalidInput('content stream must be opened in binary mode')
    return chunk


def validate(kind, size=None):
    #checks kind (and size when known) before any content is read
    if size is None:
        return ObjectKind.parse(kind), None
    return verify_header(kind, size)


def hash_source(kind, source): #returns (digest, header), hashing chunk by chunk
    header = encode_legacy(kind, source.size)
    sha = hashlib.sha1(header)
    for chunk in source.chunks():
        sha.update(chunk)
    return sha.hexdigest(), header


def deflate_to(out, header, source):
    #writes deflate(header + content) to out as a single zlib stream
    compressor = zlib.compressobj(COMPRESSION_LEVEL)
    out.write(compressor.compress(header))
    for chunk in source.chunks():
        out.write(compressor.compress(chunk))
    out.write(compressor.flush())


#digest content would be stored under, sha1(b"<kind> <size>\0" + content); no disk access
def compute_digest(content, kind, size=None):
    kind, size = validate(kind, size)
    with ContentSource(content, size) as source:
        return hash_source(kind, source)[0]
