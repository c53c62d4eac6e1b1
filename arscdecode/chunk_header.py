from dataclasses import dataclass
from typing import BinaryIO, ClassVar, Union

from loguru import logger

from .errors import ResParserError
from .internal_types import chunk_type_name
from .reader import read


@dataclass(frozen=True)
class ChunkHeader:
    """
    Position of a chunk inside the source buffer.
    This is an implementation of the `ResChunk_header` anchored at the absolute
    offset where the chunk starts.

    All the offsets stored inside a chunk are relative to the start of the chunk,
    `relative` and `absolute` convert between both worlds.

    See http://androidxref.com/9.0.0_r3/xref/frameworks/base/libs/androidfw/include/androidfw/ResourceTypes.h#196
    """

    # This is the minimal size such a header must have. There might be other header data too!
    SIZE: ClassVar[int] = 2 + 2 + 4

    offset: int
    header_size: int
    chunk_size: int
    chunk_type: int

    @classmethod
    def read(
        cls, buff: BinaryIO, expected_type: Union[int, None] = None
    ) -> "ChunkHeader":
        """
        Read a chunk header at the current position of `buff`.

        It is not checked if the chunk fits into the buffer nor into the parent chunk (if any)!

        :raises UnexpectedEndOfData: if the buffer is too short for a header
        :raises ResParserError: if header malformed
        :param buff: the buffer set to the position where the header starts.
        :param int expected_type: the type of the header which is expected.
        """
        start = buff.tell()
        chunk_type, header_size, chunk_size = read(buff, '<HHL')
        logger.debug(f"ChunkHeader read: {chunk_type}, {header_size} {chunk_size}")

        if expected_type is not None and chunk_type != expected_type:
            raise ResParserError(
                "Header type is not equal the expected type: Got 0x{:04x}, wanted 0x{:04x}".format(
                    chunk_type, expected_type
                )
            )
        if header_size < cls.SIZE:
            raise ResParserError(
                "declared header size is smaller than required size of {}! Offset={}".format(
                    cls.SIZE, start
                )
            )
        if chunk_size < cls.SIZE:
            raise ResParserError(
                "declared chunk size is smaller than required size of {}! Offset={}".format(
                    cls.SIZE, start
                )
            )
        if chunk_size < header_size:
            raise ResParserError(
                "declared chunk size ({}) is smaller than header size ({})! Offset={}".format(
                    chunk_size, header_size, start
                )
            )

        return cls(start, header_size, chunk_size, chunk_type)

    def get_offset(self) -> int:
        """
        Absolute offset inside the buffer where the chunk starts.
        """
        return self.offset

    def get_type(self) -> int:
        """
        Type identifier for this chunk
        """
        return self.chunk_type

    def get_header_size(self) -> int:
        """
        Size of the chunk header (in bytes).  Adding this value to
        the address of the chunk allows you to find its associated data
        (if any).
        """
        return self.header_size

    def get_size(self) -> int:
        """
        Total size of this chunk (in bytes), header and data included.
        """
        return self.chunk_size

    def get_data_offset(self) -> int:
        return self.offset + self.header_size

    def get_chunk_end(self) -> int:
        """
        Get the absolute offset inside the buffer, where the chunk ends.
        This is equal to `get_offset() + get_size()`.
        """
        return self.offset + self.chunk_size

    def relative(self, absolute: int) -> int:
        if self.offset > absolute:
            return 0
        return absolute - self.offset

    def absolute(self, relative: int) -> int:
        return self.offset + relative

    def __str__(self):
        return "(Token:{:X}; Start: {}; Data: {}; End {})".format(
            self.chunk_type,
            self.offset,
            self.get_data_offset(),
            self.get_chunk_end(),
        )

    def __repr__(self):
        return "<ChunkHeader idx='0x{:08x}' type='{}' header_size='{}' size='{}'>".format(
            self.offset,
            chunk_type_name(self.chunk_type),
            self.header_size,
            self.chunk_size,
        )
