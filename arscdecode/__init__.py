from .chunk_header import ChunkHeader
from .chunks import decode_chunk, iter_chunks
from .errors import DecodeError, IndexOutOfBounds, ResParserError, UnexpectedEndOfData
from .string_pool import StringPool, StringPoolDecoder, StringPoolWrapper
from .table_type import (
    ComplexEntry,
    Entry,
    EntryHeader,
    Region,
    ResourceConfiguration,
    SimpleEntry,
    TableType,
    TableTypeDecoder,
)

__version__ = "0.1.0"
