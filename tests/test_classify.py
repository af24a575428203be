"""
Tests for property value classification.
"""

import struct

import pytest

from dtparse.devicetree.classify import (
    DisplayKind, StringInfo,
    classify, measure_string, check_address_ranges,
)


class TestMeasureString:
    """Tests for the byte statistics."""

    def test_plain_string(self):
        assert measure_string(b'hello\x00') == StringInfo(
            printable=5, first_null=5, after_null=0, null_count=1, printable_run_count=0)

    def test_no_null(self):
        info = measure_string(b'\x01\x02ab')
        assert info.first_null == 4
        assert info.printable == 2
        assert info.null_count == 0

    def test_bytes_after_null(self):
        info = measure_string(b'ab\x00cd\x00\x01')
        assert info.first_null == 2
        assert info.after_null == 3
        assert info.null_count == 2

    def test_printable_runs(self):
        info = measure_string(b'abcdefgh\x00abc\x00abcdefghij')
        assert info.printable_run_count == 8 + 10

    def test_empty(self):
        assert measure_string(b'') == StringInfo(0, 0, 0, 0, 0)


class TestCheckAddressRanges:
    """Tests for the physical range plausibility check."""

    def test_aligned_ranges(self):
        assert check_address_ranges(struct.pack("<IIII", 0x20000000, 0x1000, 0x0, 0x80000000))

    def test_unaligned_address(self):
        assert not check_address_ranges(struct.pack("<II", 0x20000010, 0x1000))

    def test_size_too_large(self):
        assert not check_address_ranges(struct.pack("<II", 0x20000000, 0x80001000))


class TestClassify:
    """Tests for the ordered classification rules."""

    @pytest.mark.parametrize("data", [b'\x01', b'ab', b'\x00\x00'])
    def test_one_or_two_bytes_are_hex(self, data):
        assert classify('anything', data) == DisplayKind.SMALL_HEX_INTEGER

    def test_size_rule_wins_over_name_rule(self):
        assert classify('#interrupt-cells', b'\x01\x00') == DisplayKind.SMALL_HEX_INTEGER

    def test_cell_counts_are_decimal(self):
        assert classify('#size-cells', struct.pack("<I", 2)) == DisplayKind.DECIMAL_INTEGER
        assert classify('#address-cells', b'abc\x00') == DisplayKind.DECIMAL_INTEGER

    def test_segment_ranges(self):
        data = struct.pack("<QQQII", 0x800000000, 0xfffffff007004000, 0x0, 0x4000, 0x1)
        assert classify('segment-ranges', data) == DisplayKind.SEGMENT_RANGE_TABLE
        assert classify('segment-ranges', data[:24]) != DisplayKind.SEGMENT_RANGE_TABLE

    @pytest.mark.parametrize("data", [
        b'hello\x00',
        b'AppleARM',
        b'abc\x00',
        b'\x00\x00\x00\x00\x00\x00',
        b'arm-io\x00\x00\x00\x00',
    ])
    def test_strings(self, data):
        assert classify('compatible', data) == DisplayKind.PRINTABLE_STRING

    def test_short_string_in_word_is_integer(self):
        assert classify('value', b'ab\x00\x00') == DisplayKind.SMALL_HEX_INTEGER

    def test_function_property(self):
        data = struct.pack("<I", 0x5a) + b'lpmr' + struct.pack("<I", 3)
        assert classify('function-power_control', data) == DisplayKind.FUNCTION_DESCRIPTOR
        assert classify('power_control', data) != DisplayKind.FUNCTION_DESCRIPTOR

    def test_mostly_printable(self):
        assert classify('model', b'abcdefgh\x01\x02') == DisplayKind.QUOTED_HEX_STRING

    def test_multiple_strings(self):
        data = b'N71AP\x00iPhone8,1\x00AppleARM\x00'
        assert classify('compatible', data) == DisplayKind.QUOTED_HEX_STRING

    def test_reg_by_name(self):
        data = struct.pack("<IIII", 0x20000010, 0x1000, 0x30000000, 0x4000)
        assert classify('reg', data) == DisplayKind.ADDRESS_RANGE_TABLE
        assert classify('reg-private', data) == DisplayKind.ADDRESS_RANGE_TABLE

    def test_reg_by_content(self):
        data = struct.pack("<IIII", 0x20000000, 0x1000, 0x30000000, 0x4000)
        assert classify('ranges', data) == DisplayKind.ADDRESS_RANGE_TABLE

    def test_implausible_ranges(self):
        data = struct.pack("<IIII", 0x20000010, 1, 0x20000020, 2)
        assert classify('interrupts', data) == DisplayKind.RAW_HEX_DUMP

    def test_sparse_printable_with_nulls(self):
        data = b'ab' + b'\x00' * 20 + b'cd'
        assert classify('model', data) == DisplayKind.QUOTED_HEX_STRING

    def test_long_printable_run(self):
        data = b'abcdefghij' + b'\x01' * 8 + b'\x00' * 6
        assert classify('model', data) == DisplayKind.QUOTED_HEX_STRING

    def test_words(self):
        assert classify('clock-frequency', struct.pack("<I", 0xdeadbeef)) == DisplayKind.SMALL_HEX_INTEGER
        assert classify('timebase', struct.pack("<Q", 0x123456789)) == DisplayKind.SMALL_HEX_INTEGER

    def test_fallback_hex_dump(self):
        assert classify('blob', b'\x01\x02\x03\x04\x05') == DisplayKind.RAW_HEX_DUMP

    def test_memoryview_input(self):
        data = memoryview(b'xx' + struct.pack("<I", 2) + b'yy')[2:6]
        assert classify('#size-cells', data) == DisplayKind.DECIMAL_INTEGER
