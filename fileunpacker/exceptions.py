class UnpackerException(Exception):
    '''Base class to extend in order to throw exception in fileunpacker.

    It takes an optional message and the chain of the layers (field names)
    that caused the exception.
    '''

    def __init__(self, message=None, chain=None):
        self.message = message
        self.chain = chain if chain is not None else []
        super().__init__(message)

    def __str__(self):
        msg = self.message or self.__class__.__name__
        if self.chain:
            msg = '%s (at %s)' % (msg, '.'.join(reversed(self.chain)))

        return msg


class UnpackException(UnpackerException):
    pass


class TruncatedException(UnpackException):
    '''The data ends before what the format declares.'''
    pass


class ChunkUnpackException(UnpackException):
    pass


class MalformedFrameTableException(UnpackException):
    '''The frame table of a graphic resource is empty or points outside of it.'''
    pass


class MagicException(UnpackerException):
    pass


class PixelIndexOutOfRangeException(UnpackerException):
    pass


class LayoutTooLargeException(UnpackerException):
    pass
