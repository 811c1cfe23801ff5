#every error the object store raises derives from LooseObjectError


class LooseObjectError(Exception):
    pass


class InvalidInput(LooseObjectError, ValueError):
    #bad kind name, bad size, malformed digest or unusable content
    pass


class CorruptObject(LooseObjectError):
    #a stored record that cannot be decoded; path/digest say where it lives

    def __init__(self, message, path=None, digest=None):
        self.message = message
        self.path = path
        self.digest = digest
        super().__init__(self._describe())

    def _describe(self):
        where = []
        if self.digest:
            where.append(f'object {self.digest}')
        if self.path:
            where.append(f'at {self.path}')
        if not where:
            return self.message
        return f'{self.message} ({" ".join(where)})'

    def locate(self, path, digest):
        #fill in the location once the caller knows it
        self.path = self.path or path
        self.digest = self.digest or digest
        self.args = (self._describe(),)
        return self


class InvalidObjectType(CorruptObject):
    pass


class TruncatedHeader(CorruptObject):
    pass


class ObjectNotFound(LooseObjectError, KeyError):

    def __init__(self, digest):
        self.digest = digest
        super().__init__(digest)

    def __str__(self):
        return f'object {self.digest} not found'

