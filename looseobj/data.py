#serves as disk: loose objects under <root>/<2 hex>/<38 hex>, one deflated file each
import logging
import os
import re
import tempfile

from contextlib import contextmanager, suppress

from .errors import InvalidInput, CorruptObject, ObjectNotFound
from .objects import ContentSource, validate, hash_source, deflate_to, decode_object

logger = logging.getLogger(__name__)

GIT_DIR = None #repository directory, set through change_git_dir
REPO_DIR_NAME = '.looseobj'

_HEX_DIGEST = re.compile(r'[0-9a-fA-F]{40}')
_HEX_DIRECTORY = re.compile(r'[0-9a-fA-F]{2}')
_HEX_FILENAME = re.compile(r'[0-9a-fA-F]{38}')


@contextmanager
def change_git_dir (new_dir):
    global GIT_DIR
    old_dir = GIT_DIR
    GIT_DIR = f'{new_dir}/{REPO_DIR_NAME}'
    try:
        yield
    finally:
        GIT_DIR = old_dir #restoring


def init(): #makes the repository directory and the objects directory inside it
    os.makedirs (GIT_DIR)
    os.makedirs (f'{GIT_DIR}/objects')


#40 lowercase hex chars from hex (str or ascii bytes, any case) or the raw 20-byte form
def normalize_digest(digest):
    if isinstance(digest, (bytes, bytearray)):
        if len(digest) == 20:
            return bytes(digest).hex()
        digest = digest.decode('ascii', 'replace')
    if not isinstance(digest, str) or not _HEX_DIGEST.fullmatch(digest):
        raise InvalidInput(f'malformed object digest {digest!r}')
    return digest.lower()


def path_of(digest):
    #digest -> (directory, filename): first 2 hex chars, remaining 38
    digest = normalize_digest(digest)
    return digest[:2], digest[2:]


def digest_of(directory, filename):
    if not _HEX_DIRECTORY.fullmatch(directory) or not _HEX_FILENAME.fullmatch(filename):
        raise InvalidInput(f'{directory}/{filename} is not an object path')
    return (directory + filename).lower()


def _check_not_occupied(path, digest):
    #a directory or other non-file at an object path is a broken store, not a missing object
    if os.path.exists(path) and not os.path.isfile(path):
        raise CorruptObject('object path is not a regular file', path=path, digest=digest)


#content-addressed store rooted at directory; every call goes to disk, nothing is cached.
#writes the legacy encoding, reads either
class LooseStorage:

    def __init__(self, directory):
        self.directory = os.fspath(directory)

    def __repr__(self):
        return f'{type(self).__name__}({self.directory!r})'

    def object_path(self, digest):
        return os.path.join(self.directory, *path_of(digest))

    def get(self, digest): #RawObject, None if absent, CorruptObject if the file can't be decoded
        digest = normalize_digest(digest)
        path = self.object_path(digest)
        _check_not_occupied(path, digest)
        try:
            with open(path, 'rb') as f:
                buf = f.read()
        except FileNotFoundError:
            logger.debug('object %s not found in %s', digest, self.directory)
            return None
        try:
            return decode_object(buf, path=path, digest=digest)
        except CorruptObject as e:
            logger.warning('corrupt object %s: %s', digest, e.message)
            raise

    def __getitem__(self, digest):
        obj = self.get(digest)
        if obj is None:
            raise ObjectNotFound(normalize_digest(digest))
        return obj

    #content is bytes or a binary stream, size is measured when not given.
    #nothing is written when a file for the digest already exists
    def put(self, content, kind, size=None):
        kind, size = validate(kind, size)
        with ContentSource(content, size) as source:
            digest, header = hash_source(kind, source)
            path = self.object_path(digest)
            _check_not_occupied(path, digest)
            if os.path.isfile(path):
                logger.debug('object %s already stored, skipping write', digest)
                return digest
            self._publish(path, lambda out: deflate_to(out, header, source))
            logger.debug('wrote %s object %s (%d bytes) to %s', kind.value, digest, source.size, path)
        return digest

    def contains(self, digest):
        return os.path.isfile(self.object_path(digest))

    __contains__ = contains

    def iter_digests(self): #skips anything that is not a <2 hex>/<38 hex> file, e.g. temp files of writes in progress
        try:
            fanout = sorted(os.listdir(self.directory))
        except FileNotFoundError:
            return
        for directory in fanout:
            dirpath = os.path.join(self.directory, directory)
            if not _HEX_DIRECTORY.fullmatch(directory) or not os.path.isdir(dirpath):
                continue
            for filename in sorted(os.listdir(dirpath)):
                if _HEX_FILENAME.fullmatch(filename) and os.path.isfile(os.path.join(dirpath, filename)):
                    yield digest_of(directory, filename)

    __iter__ = iter_digests

    def _publish(self, path, write):
        #write to a temporary file next to path, then rename it into place
        dirname = os.path.dirname(path)
        os.makedirs(dirname, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=dirname, prefix='tmp_obj_')
        try:
            with os.fdopen(fd, 'wb') as out:
                write(out)
                out.flush()
                os.fsync(out.fileno())
            os.chmod(tmp_path, 0o444) #objects are immutable
            os.replace(tmp_path, path)
        except BaseException:
            with suppress(FileNotFoundError):
                os.remove(tmp_path)
            raise


def object_store():
    assert GIT_DIR, 'no repository selected, use change_git_dir'
    return LooseStorage(f'{GIT_DIR}/objects')


def hash_object(content, type_='blob', size=None): #stores content in the object database and returns its digest
    return object_store().put(content, type_, size)

