from struct import calcsize, unpack_from
from typing import BinaryIO, Tuple

from .errors import UnexpectedEndOfData


def read(buff: BinaryIO, fmt: str) -> Tuple[int, ...]:
    """
    Read and unpack `fmt` at the current position of `buff`.

    :raises UnexpectedEndOfData: if the buffer holds fewer bytes than `fmt` needs
    """
    size = calcsize(fmt)
    position = buff.tell()
    data = buff.read(size)
    if len(data) < size:
        raise UnexpectedEndOfData(
            "Can not read {} bytes at offset {}, only {} left".format(
                size, position, len(data)
            )
        )
    return unpack_from(fmt, data)


def read_u32(buff: BinaryIO) -> int:
    return read(buff, '<I')[0]


def unpack_at(raw_data: bytes, position: int, fmt: str) -> Tuple[int, ...]:
    """
    Unpack `fmt` at an absolute position of `raw_data` without any cursor.

    :raises UnexpectedEndOfData: if `fmt` does not fit at `position`
    """
    size = calcsize(fmt)
    if position < 0 or position + size > len(raw_data):
        raise UnexpectedEndOfData(
            "Can not read {} bytes at offset {} of a {} bytes buffer".format(
                size, position, len(raw_data)
            )
        )
    return unpack_from(fmt, raw_data, position)
