import re
from struct import pack, unpack
from typing import Callable, Union

from loguru import logger
from lxml import etree

from .chunks import iter_chunks
from .errors import ResParserError
from .internal_types import (
    COMPLEX_UNIT_MASK,
    DIMENSION_UNITS,
    FRACTION_UNITS,
    TYPE_ATTRIBUTE,
    TYPE_DIMENSION,
    TYPE_FIRST_COLOR_INT,
    TYPE_FIRST_INT,
    TYPE_FLOAT,
    TYPE_FRACTION,
    TYPE_INT_BOOLEAN,
    TYPE_INT_HEX,
    TYPE_LAST_COLOR_INT,
    TYPE_LAST_INT,
    TYPE_REFERENCE,
    TYPE_STRING,
    TYPE_TABLE,
    chunk_type_name,
    complex_to_float,
)
from .string_pool import UNKNOWN_STRING, StringPool
from .table_type import ComplexEntry, ResourceConfiguration, SimpleEntry, TableType

_INVALID_XML_CHARS = re.compile(
    '[^\u0020-\uD7FF\u0009\u000A\u000D\uE000-\uFFFD\U00010000-\U0010FFFF]'
)

CONFIGURATION_FIELDS = (
    "size",
    "mcc",
    "mnc",
    "language",
    "region",
    "orientation",
    "touchscreen",
    "density",
    "keyboard",
    "navigation",
    "input_flags",
    "width",
    "height",
    "sdk_version",
    "min_sdk_version",
    "screen_layout",
    "ui_mode",
    "smallest_screen",
    "screen_width_dp",
    "screen_height_dp",
)


def format_value(
    _type: int, _data: int, lookup_string=lambda ix: "<string>"
) -> str:
    """
    Format a value based on type and data.
    By default, no strings are looked up and `"<string>"` is returned.
    You need to define `lookup_string` in order to actually lookup strings from
    the string table.

    :param _type: The numeric type of the value
    :param _data: The numeric data of the value
    :param lookup_string: A function how to resolve strings from integer IDs
    :returns: the formatted string
    """

    # Function to prepend android prefix for attributes/references from the
    # android library
    fmt_package = lambda x: "android:" if x >> 24 == 1 else ""

    # Function to represent integers
    fmt_int = lambda x: (0x7FFFFFFF & x) - 0x80000000 if x > 0x7FFFFFFF else x

    logger.debug(f"_type: {_type}: {TYPE_TABLE.get(_type, 'unknown')}")

    if _type == TYPE_STRING:
        return lookup_string(_data)

    elif _type == TYPE_ATTRIBUTE:
        return "?{}{:08X}".format(fmt_package(_data), _data)

    elif _type == TYPE_REFERENCE:
        return "@{}{:08X}".format(fmt_package(_data), _data)

    elif _type == TYPE_FLOAT:
        return "%f" % unpack("=f", pack("=L", _data))[0]

    elif _type == TYPE_INT_HEX:
        return "0x%08X" % _data

    elif _type == TYPE_INT_BOOLEAN:
        if _data == 0:
            return "false"
        return "true"

    elif _type == TYPE_DIMENSION:
        unit = _data & COMPLEX_UNIT_MASK
        if unit < len(DIMENSION_UNITS):
            return "{:f}{}".format(complex_to_float(_data), DIMENSION_UNITS[unit])

    elif _type == TYPE_FRACTION:
        unit = _data & COMPLEX_UNIT_MASK
        if unit < len(FRACTION_UNITS):
            return "{:f}{}".format(
                complex_to_float(_data) * 100, FRACTION_UNITS[unit]
            )

    elif TYPE_FIRST_COLOR_INT <= _type <= TYPE_LAST_COLOR_INT:
        return "#%08X" % _data

    elif TYPE_FIRST_INT <= _type <= TYPE_LAST_INT:
        return "%d" % fmt_int(_data)

    return "<0x{:X}, type 0x{:02X}>".format(_data, _type)


def _fix_value(value: str) -> str:
    """
    Return a version of `value` which lxml accepts as text or attribute.
    Characters outside the XML charset are replaced by '_'.

    See <https://www.w3.org/TR/xml/#charsets>
    """
    if _INVALID_XML_CHARS.search(value):
        logger.warning(
            "Invalid character in value {!r} found. Replacing with '_'.".format(value)
        )
        value = _INVALID_XML_CHARS.sub('_', value)
    return value


def _safe_lookup(pool: Union[StringPool, None]) -> Callable[[int], str]:
    def lookup(idx: int) -> str:
        if pool is None:
            return "<string>"
        try:
            return pool.get_string(idx)
        except ResParserError as e:
            logger.warning(f"String {idx} could not be resolved: {e}")
            return UNKNOWN_STRING

    return lookup


def string_pool_to_xml(pool: StringPool) -> etree.Element:
    elem = etree.Element(
        "string-pool",
        offset=str(pool.header.get_offset()),
        strings=str(pool.get_strings_len()),
        styles=str(pool.get_styles_len()),
    )
    for i, value in pool.iter_uncached():
        string = etree.SubElement(elem, "string", index=str(i))
        string.text = _fix_value(value)
    return elem


def configuration_to_xml(config: ResourceConfiguration) -> etree.Element:
    return etree.Element(
        "config",
        {name: _fix_value(str(getattr(config, name))) for name in CONFIGURATION_FIELDS},
    )


def _value_to_xml(tag: str, entry: SimpleEntry, lookup: Callable[[int], str]) -> etree.Element:
    elem = etree.Element(
        tag,
        key=str(entry.key_index),
        type=TYPE_TABLE.get(entry.value_type, "0x{:02X}".format(entry.value_type)),
        data="0x{:08X}".format(entry.value_data),
    )
    elem.text = _fix_value(format_value(entry.value_type, entry.value_data, lookup))
    return elem


def table_type_to_xml(
    table: TableType, string_pool: Union[StringPool, None] = None
) -> etree.Element:
    """
    Render a decoded table type. String values are resolved with `string_pool`
    when one is given.
    """
    lookup = _safe_lookup(string_pool)
    elem = etree.Element("type", id=str(table.id), entries=str(len(table.entries)))
    elem.append(configuration_to_xml(table.configuration))

    for entry in table.entries:
        if isinstance(entry, ComplexEntry):
            bag = etree.SubElement(
                elem,
                "bag",
                key=str(entry.key_index),
                parent="0x{:08X}".format(entry.parent_entry_id),
            )
            for value in entry.entries:
                bag.append(_value_to_xml("item", value, lookup))
        else:
            elem.append(_value_to_xml("entry", entry, lookup))
    return elem


def dump_chunks(raw_data: bytes) -> etree.Element:
    """
    Decode every chunk of `raw_data` into a `<resources>` tree.
    The first string pool found is used to resolve string values.
    """
    root = etree.Element("resources")
    global_pool = None

    for header, decoded in iter_chunks(raw_data):
        if isinstance(decoded, StringPool):
            if global_pool is None:
                global_pool = decoded
            root.append(string_pool_to_xml(decoded))
        elif isinstance(decoded, TableType):
            root.append(table_type_to_xml(decoded, global_pool))
        else:
            etree.SubElement(
                root,
                "chunk",
                type=chunk_type_name(header.get_type()),
                offset=str(header.get_offset()),
                size=str(header.get_size()),
            )
    return root


def get_xml(raw_data: bytes, pretty: bool = True) -> bytes:
    """
    Get the dump as UTF-8 encoded XML
    """
    return etree.tostring(dump_chunks(raw_data), encoding="utf-8", pretty_print=pretty)
