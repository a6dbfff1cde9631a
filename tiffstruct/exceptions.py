class TiffStructException(Exception):
    '''Base class to extend in order to throw exception in tiffstruct.

    It takes as first argument the chain of the elements that
    caused the exception (e.g. ['ifd[0]', 'tag 273']).
    '''

    def __init__(self, chain, message=None):
        self.chain = chain
        self.message = message
        super().__init__(message)

    def __str__(self):
        where = '.'.join(str(_) for _ in self.chain)
        if not where:
            return self.message or ''

        return f'{where}: {self.message}' if self.message else where


class ValidationException(TiffStructException):
    '''Raised when a directory, an entry or a set of values is built
    in a way that cannot be serialized.'''
    pass


class StreamException(TiffStructException):
    '''The underlying destination refused the data.'''
    pass


class PhaseException(TiffStructException):
    '''A document has been asked to do something its phase doesn't allow,
    like being written twice.'''
    pass


class UnrecoverableException(TiffStructException):
    '''The layout computed before writing and the bytes actually written
    disagree: continuing would produce a corrupted file.'''
    pass
