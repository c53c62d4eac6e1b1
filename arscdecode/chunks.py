import io
from typing import BinaryIO, Iterator, Tuple, Union

from loguru import logger

from .chunk_header import ChunkHeader
from .errors import UnexpectedEndOfData
from .internal_types import (
    CONTAINER_CHUNK_TYPES,
    RES_STRING_POOL_TYPE,
    RES_TABLE_TYPE_TYPE,
)
from .string_pool import StringPool, StringPoolDecoder
from .table_type import TableType, TableTypeDecoder

Chunk = Union[StringPool, TableType, None]


def decode_chunk(
    cursor: BinaryIO, header: ChunkHeader, raw_data: Union[bytes, None] = None
) -> Chunk:
    """
    Decode the chunk described by `header` with the matching decoder.
    Chunks without decoder return `None`.

    Whatever happens, the cursor is left at the end of the chunk.
    """
    chunk_type = header.get_type()
    try:
        if chunk_type == RES_STRING_POOL_TYPE:
            return StringPoolDecoder.decode(cursor, header, raw_data)
        if chunk_type == RES_TABLE_TYPE_TYPE:
            return TableTypeDecoder.decode(cursor, header)

        logger.debug(f"No decoder for {header!r}")
        return None
    finally:
        cursor.seek(header.get_chunk_end())


def iter_chunks(
    raw_data: bytes, start: int = 0, end: Union[int, None] = None
) -> Iterator[Tuple[ChunkHeader, Chunk]]:
    """
    Walk the sibling chunks between `start` and `end` and yield every header
    together with its decoded content.

    Container chunks (table, package, xml) are yielded with `None` first, then
    the chunks following their header are walked.

    :raises UnexpectedEndOfData: if a chunk claims more bytes than its parent holds
    """
    if end is None:
        end = len(raw_data)

    cursor = io.BytesIO(raw_data)
    position = start

    while position + ChunkHeader.SIZE <= end:
        cursor.seek(position)
        header = ChunkHeader.read(cursor)
        logger.debug(f"NEXT HEADER {header}")

        if header.get_chunk_end() > end:
            raise UnexpectedEndOfData(
                "Chunk {} exceeds its parent, which ends at {}".format(header, end)
            )

        if header.get_type() in CONTAINER_CHUNK_TYPES:
            yield header, None
            yield from iter_chunks(
                raw_data, header.get_data_offset(), header.get_chunk_end()
            )
        else:
            yield header, decode_chunk(cursor, header, raw_data)

        position = header.get_chunk_end()

    if position < end:
        logger.warning(f"{end - position} trailing bytes after the last chunk @{position}")
