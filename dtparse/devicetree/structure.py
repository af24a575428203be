from dissect.cstruct import cstruct

devicetree_structure = cstruct()
devicetree_structure.load("""
    // Node header, followed by n_properties properties and then n_children child nodes
    struct Node {
        uint32 n_properties;
        uint32 n_children;
    };

    // Property header, followed by size bytes of data padded to a multiple of 4
    struct Property {
        char   name[32];                // NUL-terminated, zero-filled
        uint32 size;                    // bit 31: value is replaced by iBoot (syscfg)
    };

    // Entry of a "reg"-style property
    struct AddressRange {
        uint32 phys;
        uint32 size;
    };

    // Entry of the "segment-ranges" property
    struct SegmentRange {
        uint64 phys;
        uint64 virt;
        uint64 remap;
        uint32 size;
        uint32 flags;
    };
""", compiled=True)

NODE_HEADER_SIZE = 8
PROPERTY_HEADER_SIZE = 36
PROPERTY_NAME_SIZE = 32
PROPERTY_SIZE_MASK = 0x7FFFFFFF
PROPERTY_ALIGNMENT = 4

ADDRESS_RANGE_SIZE = 8
SEGMENT_RANGE_SIZE = 32
