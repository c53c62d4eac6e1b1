# Constants for ARSC Files
# see http://aospxref.com/android-13.0.0_r3/xref/frameworks/base/libs/androidfw/include/androidfw/ResourceTypes.h#233
RES_NULL_TYPE = 0x0000
RES_STRING_POOL_TYPE = 0x0001
RES_TABLE_TYPE = 0x0002
RES_XML_TYPE = 0x0003

RES_XML_FIRST_CHUNK_TYPE = 0x0100
RES_XML_LAST_CHUNK_TYPE = 0x017F
RES_XML_RESOURCE_MAP_TYPE = 0x0180

RES_TABLE_PACKAGE_TYPE = 0x0200
RES_TABLE_TYPE_TYPE = 0x0201
RES_TABLE_TYPE_SPEC_TYPE = 0x0202
RES_TABLE_LIBRARY_TYPE = 0x0203
RES_TABLE_OVERLAYABLE_TYPE = 0x0204
RES_TABLE_OVERLAYABLE_POLICY_TYPE = 0x0205
RES_TABLE_STAGED_ALIAS_TYPE = 0x0206

CHUNK_TYPE_NAMES = {
    RES_NULL_TYPE: "NULL",
    RES_STRING_POOL_TYPE: "STRING_POOL",
    RES_TABLE_TYPE: "TABLE",
    RES_XML_TYPE: "XML",
    RES_XML_RESOURCE_MAP_TYPE: "XML_RESOURCE_MAP",
    RES_TABLE_PACKAGE_TYPE: "TABLE_PACKAGE",
    RES_TABLE_TYPE_TYPE: "TABLE_TYPE",
    RES_TABLE_TYPE_SPEC_TYPE: "TABLE_TYPE_SPEC",
    RES_TABLE_LIBRARY_TYPE: "TABLE_LIBRARY",
    RES_TABLE_OVERLAYABLE_TYPE: "TABLE_OVERLAYABLE",
    RES_TABLE_OVERLAYABLE_POLICY_TYPE: "TABLE_OVERLAYABLE_POLICY",
    RES_TABLE_STAGED_ALIAS_TYPE: "TABLE_STAGED_ALIAS",
}

# Chunks which only hold other chunks after their header
CONTAINER_CHUNK_TYPES = (RES_TABLE_TYPE, RES_TABLE_PACKAGE_TYPE, RES_XML_TYPE)

# Flags of a ResTable_entry
FLAG_COMPLEX = 0x0001

# Marks an offset table slot without entry and an empty map
NO_ENTRY = 0xFFFFFFFF

# Type of the data value inside a Res_value
TYPE_NULL = 0x00
TYPE_REFERENCE = 0x01
TYPE_ATTRIBUTE = 0x02
TYPE_STRING = 0x03
TYPE_FLOAT = 0x04
TYPE_DIMENSION = 0x05
TYPE_FRACTION = 0x06
TYPE_DYNAMIC_REFERENCE = 0x07
TYPE_DYNAMIC_ATTRIBUTE = 0x08
TYPE_FIRST_INT = 0x10
TYPE_INT_DEC = 0x10
TYPE_INT_HEX = 0x11
TYPE_INT_BOOLEAN = 0x12
TYPE_FIRST_COLOR_INT = 0x1C
TYPE_INT_COLOR_ARGB8 = 0x1C
TYPE_INT_COLOR_RGB8 = 0x1D
TYPE_INT_COLOR_ARGB4 = 0x1E
TYPE_INT_COLOR_RGB4 = 0x1F
TYPE_LAST_COLOR_INT = 0x1F
TYPE_LAST_INT = 0x1F

# Table used to name the value types in dumps
TYPE_TABLE = {
    TYPE_ATTRIBUTE: "attribute",
    TYPE_DIMENSION: "dimension",
    TYPE_DYNAMIC_ATTRIBUTE: "dynamic_attribute",
    TYPE_DYNAMIC_REFERENCE: "dynamic_reference",
    TYPE_FLOAT: "float",
    TYPE_FRACTION: "fraction",
    TYPE_INT_BOOLEAN: "int_boolean",
    TYPE_INT_COLOR_ARGB4: "int_color_argb4",
    TYPE_INT_COLOR_ARGB8: "int_color_argb8",
    TYPE_INT_COLOR_RGB4: "int_color_rgb4",
    TYPE_INT_COLOR_RGB8: "int_color_rgb8",
    TYPE_INT_DEC: "int_dec",
    TYPE_INT_HEX: "int_hex",
    TYPE_NULL: "null",
    TYPE_REFERENCE: "reference",
    TYPE_STRING: "string",
}

RADIX_MULTS = [0.00390625, 3.051758e-005, 1.192093e-007, 4.656613e-010]
DIMENSION_UNITS = ["px", "dip", "sp", "pt", "in", "mm"]
FRACTION_UNITS = ["%", "%p"]

COMPLEX_UNIT_MASK = 0x0F


def complex_to_float(xcomplex: int) -> float:
    """
    Convert a complex (dimension or fraction) value into a float.
    The upper 24 bits hold the mantissa, bits 4-5 select the radix.
    """
    return float(xcomplex & 0xFFFFFF00) * RADIX_MULTS[(xcomplex >> 4) & 3]


def chunk_type_name(chunk_type: int) -> str:
    return CHUNK_TYPE_NAMES.get(chunk_type, "UNKNOWN_0x{:04X}".format(chunk_type))
