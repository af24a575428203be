"""Text output - prints one line per node and per property."""
import logging
from rich.console import Console

from dtparse.config import DisplayConfig, IndentStyle, NODE_NAME_PLACEHOLDER
from dtparse.devicetree.classify import classify
from dtparse.devicetree.format import TextSink, format_value
from dtparse.devicetree.walker import iterate, find_node_name


class TreeTextOutput:
    """Handles the indented text listing of a device tree."""

    def __init__(self, buffer, config: DisplayConfig, console: Console):
        self.data = memoryview(buffer)
        self.config = config
        self.console = console
        self.sink = TextSink(config.value_limit)

    def indent(self, depth):
        if self.config.style == IndentStyle.Tree:
            if depth == 0:
                return ''
            return '|   ' * (depth - 1) + '|-- '
        return '    ' * depth

    def emit(self, line):
        self.console.out(line, highlight=False)

    def format_property(self, depth, name, value, size):
        line = f"{self.indent(depth)}{name} ({size})"
        if size == 0:
            return line

        self.sink.reset()
        complete = format_value(classify(name, value), value, self.sink)
        return f"{line}: {self.sink.getvalue()}{'' if complete else '...'}"

    def process(self):
        """Print the whole tree. Returns True if the buffer was a complete, valid tree."""
        def node_cb(depth, offset, size, n_properties, n_children):
            name = find_node_name(self.data[offset:offset + size], NODE_NAME_PLACEHOLDER)
            self.emit(f"{self.indent(depth)}{name}:")

        def property_cb(depth, name, value, size):
            self.emit(self.format_property(depth, name, value, size))

        ok, consumed = iterate(self.data, node_cb, property_cb)
        if not ok:
            logging.error("Malformed device tree")
            return False

        if consumed != len(self.data):
            logging.error(f"Trailing data after device tree ({len(self.data) - consumed} bytes)")
            return False

        return True

    def close(self):
        self.data.release()
