"""
Render property values as text.

Every renderer writes into a TextSink. A sink created with a maximum size stops
accepting text once the maximum is reached; the renderer then gives up and the
value is reported as incomplete, keeping whatever was written so far.
"""

import io

from dtparse.devicetree.classify import DisplayKind, classify, is_printable
from dtparse.devicetree.structure import (
    devicetree_structure,
    ADDRESS_RANGE_SIZE,
    SEGMENT_RANGE_SIZE,
)

DEFAULT_CAPACITY = 0x4000

INVALID_INTEGER = '<invalid>'


class SinkFull(Exception):
    pass


class TextSink(object):
    """Growable text buffer with an optional hard maximum (None = unbounded)."""

    def __init__(self, max_size=None, initial_size=DEFAULT_CAPACITY):
        self.max_size = max_size
        self.capacity = initial_size if max_size is None else min(initial_size, max_size)
        self._buffer = io.StringIO()
        self._length = 0

    def __len__(self):
        return self._length

    def write(self, text):
        needed = self._length + len(text)
        if needed > self.capacity:
            self._grow(needed)
        if needed > self.capacity:
            fits = self.capacity - self._length
            self._buffer.write(text[:fits])
            self._length += fits
            raise SinkFull(f"value exceeds {self.max_size} characters")
        self._buffer.write(text)
        self._length = needed

    def _grow(self, needed):
        capacity = max(self.capacity * 2, needed)
        if self.max_size is not None:
            capacity = min(capacity, self.max_size)
        self.capacity = capacity

    def getvalue(self):
        return self._buffer.getvalue()

    def reset(self):
        self._buffer.seek(0)
        self._buffer.truncate()
        self._length = 0


def read_uint(data):
    if len(data) not in (1, 2, 4, 8):
        return None
    return int.from_bytes(data, 'little')


def escape_byte(byte):
    if byte in (0x5C, 0x22):  # backslash, double quote
        return '\\' + chr(byte)
    if byte == 0:
        return '\\0'
    if is_printable(byte):
        return chr(byte)
    return '\\x%02x' % byte


def format_hex_dump(sink, data):
    last = len(data) - 1
    for i, byte in enumerate(data):
        sink.write('%02x%s' % (byte, '' if i == last else ' '))


def format_hex_int(sink, data):
    value = read_uint(data)
    if value is None:
        sink.write(INVALID_INTEGER)
    elif value == 0:
        sink.write('0')
    else:
        sink.write('0x%x' % value)


def format_dec_int(sink, data):
    value = read_uint(data)
    sink.write(INVALID_INTEGER if value is None else str(value))


def format_hex_string(sink, data):
    sink.write('"')
    for byte in data:
        sink.write(escape_byte(byte))
    sink.write('"')


def format_string(sink, data):
    end = bytes(data).find(b'\x00')
    format_hex_string(sink, data if end < 0 else data[:end])


def format_address_ranges(sink, data):
    count = len(data) // ADDRESS_RANGE_SIZE
    if not count:
        return
    ranges = devicetree_structure.AddressRange[count].read(data[:count * ADDRESS_RANGE_SIZE])
    for i, entry in enumerate(ranges):
        sep = '' if i == count - 1 else '; '
        sink.write('0x%x,%x%s' % (entry.phys, entry.size, sep))


def format_segment_ranges(sink, data):
    count = len(data) // SEGMENT_RANGE_SIZE
    if not count:
        return
    segments = devicetree_structure.SegmentRange[count].read(data[:count * SEGMENT_RANGE_SIZE])
    for i, entry in enumerate(segments):
        sep = '' if i == count - 1 else '; '
        sink.write('{ phys=0x%x, virt=0x%x, remap=0x%x, size=0x%x, flags=0x%x }%s' % (
            entry.phys, entry.virt, entry.remap, entry.size, entry.flags, sep))


FORMATTERS = {
    DisplayKind.RAW_HEX_DUMP: format_hex_dump,
    DisplayKind.SMALL_HEX_INTEGER: format_hex_int,
    DisplayKind.DECIMAL_INTEGER: format_dec_int,
    DisplayKind.PRINTABLE_STRING: format_string,
    DisplayKind.QUOTED_HEX_STRING: format_hex_string,
    DisplayKind.FUNCTION_DESCRIPTOR: format_hex_string,
    DisplayKind.ADDRESS_RANGE_TABLE: format_address_ranges,
    DisplayKind.SEGMENT_RANGE_TABLE: format_segment_ranges,
}


def format_value(kind, data, sink):
    """Write `data` rendered as `kind` to `sink`. Returns False if it was cut short."""
    try:
        FORMATTERS[kind](sink, data)
    except SinkFull:
        return False
    return True


def render_property(name, data, max_size=None):
    """Classify and render a non-empty property value; returns (text, complete)."""
    sink = TextSink(max_size)
    complete = format_value(classify(name, data), data, sink)
    return sink.getvalue(), complete
