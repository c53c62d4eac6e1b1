class ResParserError(Exception):
    """Exception for the parsers"""

    pass


class IndexOutOfBounds(ResParserError, IndexError):
    """A string or entry index exceeds the declared count"""

    pass


class DecodeError(ResParserError, ValueError):
    """Bytes could not be decoded into text or a field holds an invalid value"""

    pass


class UnexpectedEndOfData(ResParserError, EOFError):
    """A read would run past the buffer or the chunk bounds"""

    pass
