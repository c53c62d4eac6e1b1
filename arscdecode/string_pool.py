from typing import BinaryIO, Dict, Iterator, Tuple, Union

from loguru import logger

from .chunk_header import ChunkHeader
from .errors import DecodeError, IndexOutOfBounds, ResParserError, UnexpectedEndOfData
from .reader import unpack_at

# Offsets of the ResStringPool_header fields, relative to the chunk start
STRING_COUNT_OFFSET = 8
STYLE_COUNT_OFFSET = 12
FLAGS_OFFSET = 16
STRINGS_START_OFFSET = 20
STRING_OFFSETS_OFFSET = 28

UNKNOWN_STRING = "<UNKNOWN>"


class StringPoolDecoder:
    @staticmethod
    def decode(
        cursor: BinaryIO,
        header: ChunkHeader,
        raw_data: Union[bytes, None] = None,
    ) -> "StringPool":
        """
        Build a `StringPool` over the buffer behind `cursor`.
        Nothing is parsed up front, strings are located when requested.

        :param raw_data: the whole source buffer, if the caller already holds it
        """
        if raw_data is None:
            raw_data = cursor.getvalue()
        logger.info(f"String pool decoding @{header.get_offset()}")

        return StringPool(StringPoolWrapper(raw_data, header))


class StringPoolWrapper:
    """
    Read-only view on a `ResStringPool_header` chunk and its data.

    Every lookup goes back to the raw buffer, there is no caching at this level.

    See http://androidxref.com/9.0.0_r3/xref/frameworks/base/libs/androidfw/include/androidfw/ResourceTypes.h#436
    """

    def __init__(self, raw_data: bytes, header: ChunkHeader) -> None:
        self.raw_data = raw_data
        self.header = header

    def get_strings_len(self) -> int:
        return self._read_u32(STRING_COUNT_OFFSET)

    def get_styles_len(self) -> int:
        return self._read_u32(STYLE_COUNT_OFFSET)

    def get_flags(self) -> int:
        return self._read_u32(FLAGS_OFFSET)

    def get_string(self, idx: int) -> str:
        """
        Return the string at the index in the string table

        The index equal to the string count is not rejected, its offset is read
        from whatever follows the string offsets table.

        :raises IndexOutOfBounds: if idx is negative or bigger than the string count
        :raises DecodeError: if the string is not valid UTF-8
        :raises UnexpectedEndOfData: if the string lies outside the buffer
        """
        amount = self.get_strings_len()
        if idx < 0 or idx > amount:
            raise IndexOutOfBounds(
                "Trying to get index {} outside StringTable of {} strings".format(
                    idx, amount
                )
            )

        return self._parse_string(self._get_string_position(idx))

    def _read_u32(self, relative: int) -> int:
        return unpack_at(self.raw_data, self.header.absolute(relative), '<I')[0]

    def _get_string_position(self, idx: int) -> int:
        # The strings start is counted from the beginning of the chunk
        str_offset = self.header.get_offset() + self._read_u32(STRINGS_START_OFFSET)

        position = str_offset
        for i in range(idx + 1):
            current_offset = self._read_u32(STRING_OFFSETS_OFFSET + 4 * i)
            position = str_offset + current_offset

        logger.debug(f"get_string_position: {idx}: {position}")
        return position

    def _parse_string(self, offset: int) -> str:
        size1, size2 = unpack_at(self.raw_data, offset, '<BB')
        position = offset + 2

        if size1 == size2:
            data = self._slice(position, size1)
        else:
            # Two bytes per character, only the low byte is kept
            str_len = ((size2 << 8) & 0xFF00) | (size1 & 0xFF)
            data = self._slice(position, str_len * 2)[::2]

        try:
            return data.decode('utf-8')
        except UnicodeDecodeError as e:
            raise DecodeError(
                "Could not convert string at offset {} to UTF-8".format(offset)
            ) from e

    def _slice(self, start: int, length: int) -> bytes:
        end = start + length
        if end > len(self.raw_data):
            raise UnexpectedEndOfData(
                "String at offset {} with {} bytes exceeds the buffer size {}".format(
                    start, length, len(self.raw_data)
                )
            )
        return bytes(self.raw_data[start:end])


class StringPool:
    """
    String pool with a per index cache of the decoded strings.

    Cached strings are shared: every lookup of the same index returns the same
    object. The cache is not synchronized, guard the pool with a lock when
    sharing it between threads.
    """

    def __init__(self, wrapper: StringPoolWrapper) -> None:
        self.wrapper = wrapper
        self._cache: Dict[int, str] = {}

    @property
    def header(self) -> ChunkHeader:
        return self.wrapper.header

    def __repr__(self):
        try:
            strings, styles = self.get_strings_len(), self.get_styles_len()
        except ResParserError:
            strings = styles = "?"
        return "<StringPool #strings={}, #styles={} @{}>".format(
            strings, styles, self.header.get_offset()
        )

    def __str__(self):
        return "".join("{} - {}\n".format(i, string) for i, string in self.iter_uncached())

    def __getitem__(self, idx: int) -> str:
        return self.get_string(idx)

    def __len__(self):
        """
        Get the number of strings stored in this table
        """
        return self.get_strings_len()

    def __iter__(self) -> Iterator[str]:
        for i in range(self.get_strings_len()):
            yield self.get_string(i)

    def get_strings_len(self) -> int:
        return self.wrapper.get_strings_len()

    def get_styles_len(self) -> int:
        return self.wrapper.get_styles_len()

    def get_string(self, idx: int) -> str:
        """
        Return the string at the index, decoding it on the first request only.

        :raises IndexOutOfBounds: if idx is negative or bigger than the string count
        """
        if idx < 0 or idx > self.get_strings_len():
            raise IndexOutOfBounds("Index {} out of bounds".format(idx))

        if idx in self._cache:
            logger.debug(f"get_string: {idx}: FROM CACHE: {self._cache[idx]}")
            return self._cache[idx]

        string = self.wrapper.get_string(idx)
        self._cache[idx] = string
        logger.debug(f"get_string: {idx}: CACHED: {string}")

        return string

    def get_uncached_string(self, idx: int) -> str:
        return self.wrapper.get_string(idx)

    def iter_uncached(self) -> Iterator[Tuple[int, str]]:
        """
        Yield every index with its string, bypassing the cache.
        Strings which can not be decoded are logged and replaced by `<UNKNOWN>`.
        """
        for i in range(self.get_strings_len()):
            try:
                string = self.get_uncached_string(i)
            except ResParserError as e:
                logger.warning(f"String {i} could not be decoded: {e}")
                string = UNKNOWN_STRING
            yield i, string
