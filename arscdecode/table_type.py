from dataclasses import dataclass
from typing import BinaryIO, List, Optional, Tuple, Union

from loguru import logger

from .chunk_header import ChunkHeader
from .errors import DecodeError, UnexpectedEndOfData
from .internal_types import FLAG_COMPLEX, NO_ENTRY
from .reader import read, read_u32

UNKNOWN_REGION = "<UNKNOWN>"


@dataclass(frozen=True)
class Region:
    """
    Packed two bytes code of a language or a region (`ResTable_config.language`
    and `ResTable_config.country`).

    With the high bit of `low` set, the two bytes hold three 5 bit characters.
    Those are returned as they are, without adding the 'a' base letter.
    """

    low: int
    high: int

    def is_packed(self) -> bool:
        return ((self.low >> 7) & 1) == 1

    def to_bytes(self) -> bytes:
        if self.is_packed():
            return bytes(
                [
                    self.high & 0x1F,
                    ((self.high & 0xE0) >> 5) + ((self.low & 0x03) << 3),
                    (self.low & 0x7C) >> 2,
                ]
            )
        return bytes([self.low, self.high])

    def to_string(self) -> str:
        """
        :raises DecodeError: if the code does not decode as UTF-8
        """
        chrs = self.to_bytes()
        try:
            return chrs.decode('utf-8')
        except UnicodeDecodeError as e:
            raise DecodeError(
                "Could not UTF-8 decode region code {!r}".format(chrs)
            ) from e


def _read_region(cursor: BinaryIO) -> str:
    low, high = read(cursor, '<BB')
    try:
        return Region(low, high).to_string()
    except DecodeError as e:
        logger.warning(f"{e}. Using {UNKNOWN_REGION}")
        return UNKNOWN_REGION


@dataclass(frozen=True)
class ResourceConfiguration:
    """
    Device and locale qualifiers of a table type: `ResTable_config`.

    The descriptor grew over the Android releases, `size` tells which of the
    optional groups are present. Missing groups stay zero.

    See http://androidxref.com/9.0.0_r3/xref/frameworks/base/libs/androidfw/include/androidfw/ResourceTypes.h#928
    """

    size: int
    mcc: int
    mnc: int
    language: str
    region: str
    orientation: int
    touchscreen: int
    density: int
    keyboard: int
    navigation: int
    input_flags: int
    width: int
    height: int
    sdk_version: int
    min_sdk_version: int
    screen_layout: int = 0
    ui_mode: int = 0
    smallest_screen: int = 0
    screen_width_dp: int = 0
    screen_height_dp: int = 0
    locale_script: Optional[str] = None
    locale_variant: Optional[str] = None
    secondary_screen_layout: Optional[int] = None

    @classmethod
    def from_cursor(cls, cursor: BinaryIO) -> "ResourceConfiguration":
        """
        Read a configuration at the current position of `cursor`.

        Only the groups announced by `size` are read. The cursor is left after
        the last field read, which is not necessarily the end of the
        descriptor: callers seek to the next structure themselves.

        :raises UnexpectedEndOfData: if the buffer ends inside the descriptor
        """
        logger.debug(f"ResourceConfiguration @{cursor.tell()}")
        size, mcc, mnc = read(cursor, '<IHH')

        language = _read_region(cursor)
        region = _read_region(cursor)

        orientation, touchscreen, density = read(cursor, '<BBH')
        # keyboard, navigation, input_flags and one byte of padding
        keyboard, navigation, input_flags, _ = read(cursor, '<BBBB')
        width, height, sdk_version, min_sdk_version = read(cursor, '<HHHH')

        optional = {}
        if size >= 32:
            screen_layout, ui_mode, smallest_screen = read(cursor, '<BBH')
            optional.update(
                screen_layout=screen_layout,
                ui_mode=ui_mode,
                smallest_screen=smallest_screen,
            )

        if size >= 36:
            screen_width_dp, screen_height_dp = read(cursor, '<HH')
            optional.update(
                screen_width_dp=screen_width_dp,
                screen_height_dp=screen_height_dp,
            )

        if size >= 48:
            # localeScript, localeVariant and the secondary layout are skipped
            read(cursor, '<III')

        logger.debug(f"ResourceConfiguration size: {size}, language: {language}, region: {region}")

        return cls(
            size=size,
            mcc=mcc,
            mnc=mnc,
            language=language,
            region=region,
            orientation=orientation,
            touchscreen=touchscreen,
            density=density,
            keyboard=keyboard,
            navigation=navigation,
            input_flags=input_flags,
            width=width,
            height=height,
            sdk_version=sdk_version,
            min_sdk_version=min_sdk_version,
            **optional,
        )


@dataclass(frozen=True)
class EntryHeader:
    header_size: int
    flags: int
    key_index: int

    def is_complex(self) -> bool:
        return (self.flags & FLAG_COMPLEX) > 0


@dataclass(frozen=True)
class SimpleEntry:
    key_index: int
    size: int
    value_type: int
    value_data: int


@dataclass(frozen=True)
class ComplexEntry:
    """
    A map entry (bag). Its values are always simple entries.
    """

    key_index: int
    parent_entry_id: int
    entries: Tuple[SimpleEntry, ...]


Entry = Union[SimpleEntry, ComplexEntry]


@dataclass(frozen=True)
class TableType:
    id: int
    configuration: ResourceConfiguration
    entries: Tuple[Entry, ...]

    def get_id(self) -> int:
        return self.id


class TableTypeDecoder:
    """
    Decoder of a `ResTable_type` chunk.

    See http://androidxref.com/9.0.0_r3/xref/frameworks/base/libs/androidfw/include/androidfw/ResourceTypes.h#1364
    """

    @classmethod
    def decode(cls, cursor: BinaryIO, header: ChunkHeader) -> TableType:
        """
        :raises UnexpectedEndOfData: if any part of the chunk is truncated.
            The message names the part which failed.
        """
        logger.info(f"Table type decoding @{header.get_offset()}")
        cursor.seek(header.absolute(ChunkHeader.SIZE))

        try:
            # id, then one byte and one short of padding
            type_id, _, _ = read(cursor, '<BBH')
            count = read_u32(cursor)
            start = read_u32(cursor)
        except UnexpectedEndOfData as e:
            raise UnexpectedEndOfData(f"Table type header decoding failed: {e}") from e

        logger.info(f"Resources count: {count} starting @{start}")

        try:
            config = ResourceConfiguration.from_cursor(cursor)
        except UnexpectedEndOfData as e:
            raise UnexpectedEndOfData(f"Configuration decoding failed: {e}") from e

        cursor.seek(header.get_data_offset())

        try:
            entries = cls.decode_entries(cursor, count)
        except UnexpectedEndOfData as e:
            raise UnexpectedEndOfData(f"Entry decoding failed: {e}") from e

        return TableType(type_id, config, tuple(entries))

    @classmethod
    def decode_entries(cls, cursor: BinaryIO, entry_amount: int) -> List[Entry]:
        # Every offset of the table is counted from the start of the table itself
        base_offset = cursor.tell()
        entries = []

        for i in range(entry_amount):
            logger.debug(f"Entry {i}/{entry_amount - 1}")
            offset = read_u32(cursor)

            if offset == NO_ENTRY:
                continue

            prev_pos = cursor.tell()
            try:
                entry = cls.decode_entry(cursor, base_offset, offset)
            finally:
                cursor.seek(prev_pos)

            if entry is None:
                logger.warning(f"Entry {i} with a negative count, skipping it")
            else:
                entries.append(entry)

        return entries

    @classmethod
    def decode_entry(
        cls, cursor: BinaryIO, base_offset: int, offset: int
    ) -> Optional[Entry]:
        cursor.seek(base_offset + offset)

        header_size, flags, key_index = read(cursor, '<HHI')
        header_entry = EntryHeader(header_size, flags, key_index)

        if header_entry.is_complex():
            return cls.decode_complex_entry(cursor, header_entry)
        return cls.decode_simple_entry(cursor, header_entry)

    @staticmethod
    def _read_value(cursor: BinaryIO, key_index: int) -> SimpleEntry:
        # Res_value: size, one byte of padding, type and data
        size, _, val_type, data = read(cursor, '<HBBI')
        return SimpleEntry(key_index, size, val_type, data)

    @classmethod
    def decode_simple_entry(
        cls, cursor: BinaryIO, header: EntryHeader
    ) -> Optional[Entry]:
        return cls._read_value(cursor, header.key_index)

    @classmethod
    def decode_complex_entry(
        cls, cursor: BinaryIO, header: EntryHeader
    ) -> Optional[Entry]:
        parent_entry, value_count = read(cursor, '<II')

        if value_count == NO_ENTRY:
            return None

        entries = []
        for j in range(value_count):
            logger.debug(f"Parsing value: {j}/{value_count - 1} (@{cursor.tell()})")
            # The ResTable_map name is read but the values keep the key of the bag
            read_u32(cursor)
            entries.append(cls._read_value(cursor, header.key_index))

        return ComplexEntry(header.key_index, parent_entry, tuple(entries))
