"""
Bounds-checked traversal of a flattened device tree.

The tree is stored depth-first: a node header, the node's properties and then
each child's complete subtree. Nothing is copied out of the buffer except the
fixed-size headers; property values are handed out as memoryview slices.
"""

import logging
from collections import namedtuple

from dtparse.devicetree.structure import (
    devicetree_structure,
    NODE_HEADER_SIZE,
    PROPERTY_HEADER_SIZE,
    PROPERTY_NAME_SIZE,
    PROPERTY_SIZE_MASK,
    PROPERTY_ALIGNMENT,
)


NodeEntered = namedtuple('NodeEntered', ['depth', 'offset', 'size', 'n_properties', 'n_children'])
PropertyFound = namedtuple('PropertyFound', ['depth', 'name', 'value', 'size'])
NodeExited = namedtuple('NodeExited', ['depth', 'offset', 'size'])


class StructuralError(ValueError):
    """The buffer is not a well-formed device tree."""

    def __init__(self, message, offset):
        super().__init__(f"{message} at offset 0x{offset:x}")
        self.offset = offset


class TreeWalker(object):
    """
    Depth-first walk over a device tree buffer.

    walk() yields NodeEntered, PropertyFound and NodeExited events in pre-order.
    Stopping early is done by no longer pulling events. `offset` always points
    just past the last element that passed validation.
    """

    def __init__(self, buffer):
        self.data = memoryview(buffer)
        self.end = len(self.data)
        self.offset = 0

    def walk(self):
        self.offset = 0
        # [depth, offset, children still to visit] for every open node
        open_nodes = []
        depth = 0

        while True:
            start = self.offset
            node = devicetree_structure.Node.read(self._take(NODE_HEADER_SIZE, 'node header'))

            yield NodeEntered(depth, start, self.end - start, node.n_properties, node.n_children)

            for _ in range(node.n_properties):
                yield self._read_property(depth)

            open_nodes.append([depth, start, node.n_children])
            while open_nodes[-1][2] == 0:
                closed_depth, closed_start, _ = open_nodes.pop()
                yield NodeExited(closed_depth, closed_start, self.offset - closed_start)
                if not open_nodes:
                    return

            open_nodes[-1][2] -= 1
            depth = open_nodes[-1][0] + 1

    def _take(self, size, what):
        start = self.offset
        if start + size > self.end:
            raise StructuralError(f"truncated {what}", start)
        self.offset = start + size
        return self.data[start:self.offset]

    def _read_property(self, depth):
        header_offset = self.offset
        prop = devicetree_structure.Property.read(self._take(PROPERTY_HEADER_SIZE, 'property header'))

        name = bytes(prop.name)
        if name[PROPERTY_NAME_SIZE - 1] != 0:
            raise StructuralError("unterminated property name", header_offset)

        # Bit 31 marks values that iBoot substitutes at boot; it is not part of the size.
        size = prop.size & PROPERTY_SIZE_MASK
        padded_size = (size + PROPERTY_ALIGNMENT - 1) & ~(PROPERTY_ALIGNMENT - 1)

        value_offset = self.offset
        if value_offset + padded_size > self.end:
            # The very last property of the blob may come without its padding.
            if value_offset + size != self.end:
                raise StructuralError("property value overruns buffer", value_offset)
            self.offset = self.end
        else:
            self.offset = value_offset + padded_size

        value = self.data[value_offset:value_offset + size]
        name = name.split(b'\x00', 1)[0].decode('ascii', 'backslashreplace')
        return PropertyFound(depth + 1, name, value, size)


def walk(buffer):
    """Lazily yield the traversal events of `buffer`; raises StructuralError."""
    return TreeWalker(buffer).walk()


def iterate(buffer, on_node=None, on_property=None):
    """
    Walk `buffer` and call the observers for every node and property.

    on_node(depth, offset, size, n_properties, n_children) and
    on_property(depth, name, value, size) request a stop by returning a true
    value. A stop from on_node skips that node's properties and children.

    Returns (ok, consumed_offset). A requested stop is not a failure.
    """
    walker = TreeWalker(buffer)
    events = walker.walk()
    try:
        for event in events:
            if isinstance(event, NodeEntered):
                if on_node is not None and on_node(*event):
                    break
            elif isinstance(event, PropertyFound):
                if on_property is not None and on_property(*event):
                    break
    except StructuralError as e:
        logging.debug(f"Device tree walk failed: {e}")
        return False, walker.offset
    finally:
        events.close()

    return True, walker.offset


def scan_immediate_properties(buffer, on_property):
    """Visit only the properties of the node at the start of `buffer`."""
    def do_not_scan_children(depth, offset, size, n_properties, n_children):
        return depth != 0

    ok, _ = iterate(buffer, do_not_scan_children, on_property)
    return ok


def find_node_name(buffer, placeholder='NODE'):
    """Return the value of the node's own "name" property."""
    found = []

    def find_name(depth, name, value, size):
        if name == 'name':
            found.append(bytes(value).split(b'\x00', 1)[0].decode('ascii', 'backslashreplace'))

    if not scan_immediate_properties(buffer, find_name) or not found:
        return placeholder
    return found[-1]
