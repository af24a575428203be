"""
Guess how a property value should be displayed.

Device tree values carry no type information, so the display kind is inferred
from the property name and from the bytes themselves. The rules are tried in
order and the first one that matches wins.
"""

from collections import namedtuple
from enum import Enum

from dtparse.devicetree.structure import (
    devicetree_structure,
    ADDRESS_RANGE_SIZE,
    SEGMENT_RANGE_SIZE,
)


class DisplayKind(Enum):
    RAW_HEX_DUMP = 'hexdump'
    SMALL_HEX_INTEGER = 'hexint'
    DECIMAL_INTEGER = 'decint'
    PRINTABLE_STRING = 'string'
    QUOTED_HEX_STRING = 'hexstring'
    FUNCTION_DESCRIPTOR = 'function'
    ADDRESS_RANGE_TABLE = 'ranges'
    SEGMENT_RANGE_TABLE = 'segments'


SEGMENT_RANGES_PROPERTY = 'segment-ranges'
FUNCTION_PROPERTY_PREFIX = 'function-'

# Plausibility limits for an unnamed table of (phys, size) pairs.
MAX_PHYS_ADDRESS = 0x980000000
PAGE_MASK = 0xFFF
MAX_RANGE_SIZE = 0x80000000

MIN_PRINTABLE_RUN = 8

StringInfo = namedtuple('StringInfo', [
    'printable',            # number of printable bytes
    'first_null',           # index of the first NUL, or the length
    'after_null',           # number of non-NUL bytes after the first NUL
    'null_count',           # number of NUL bytes
    'printable_run_count',  # bytes in printable runs of MIN_PRINTABLE_RUN or more
])


def is_printable(byte):
    return 0x20 <= byte < 0x7F


def measure_string(data):
    printable = 0
    first_null = len(data)
    after_null = 0
    null_count = 0
    run_count = 0
    current_run = 0

    for i, byte in enumerate(data):
        if byte == 0:
            null_count += 1
        if is_printable(byte):
            printable += 1
            current_run += 1
        else:
            if current_run >= MIN_PRINTABLE_RUN:
                run_count += current_run
            current_run = 0
        if first_null != len(data) and byte != 0:
            after_null += 1
        if byte == 0 and first_null == len(data):
            first_null = i

    if current_run >= MIN_PRINTABLE_RUN:
        run_count += current_run

    return StringInfo(printable, first_null, after_null, null_count, run_count)


def check_address_ranges(data):
    """Does `data` look like a table of page-aligned physical memory ranges?"""
    count = len(data) // ADDRESS_RANGE_SIZE
    ranges = devicetree_structure.AddressRange[count].read(data[:count * ADDRESS_RANGE_SIZE])
    for entry in ranges:
        if entry.phys > MAX_PHYS_ADDRESS:
            return False
        if entry.phys & PAGE_MASK:
            return False
        if entry.size > MAX_RANGE_SIZE:
            return False
    return True


def classify(name, data):
    """Return the DisplayKind for property `name` holding `data` (non-empty)."""
    size = len(data)

    if size in (1, 2):
        return DisplayKind.SMALL_HEX_INTEGER

    if name.startswith('#'):
        return DisplayKind.DECIMAL_INTEGER

    if size > 0 and size % SEGMENT_RANGE_SIZE == 0 and name == SEGMENT_RANGES_PROPERTY:
        return DisplayKind.SEGMENT_RANGE_TABLE

    info = measure_string(data)

    if info.printable == info.first_null and info.after_null == 0:
        if size not in (4, 8) or info.printable >= size - 1:
            return DisplayKind.PRINTABLE_STRING

    if name.startswith(FUNCTION_PROPERTY_PREFIX) and size >= 8 and size % 4 == 0:
        if all(is_printable(byte) for byte in data[4:8]):
            return DisplayKind.FUNCTION_DESCRIPTOR

    if info.printable >= 0.75 * size:
        return DisplayKind.QUOTED_HEX_STRING

    if size > 0 and size % ADDRESS_RANGE_SIZE == 0:
        if 'reg' in name or check_address_ranges(data):
            return DisplayKind.ADDRESS_RANGE_TABLE

    if info.printable >= 2 and size >= 24 and info.printable + info.null_count >= 0.90 * size:
        return DisplayKind.QUOTED_HEX_STRING

    if info.printable_run_count > 0 and size >= 24 \
            and info.printable_run_count + info.null_count >= 0.6 * size:
        return DisplayKind.QUOTED_HEX_STRING

    if size in (4, 8):
        return DisplayKind.SMALL_HEX_INTEGER

    return DisplayKind.RAW_HEX_DUMP
