"""Core partitioning and assembly modules.

WHY: The core is the stable heart of cire: the IR dataclasses, the
position ordering, the sweep-line partitioner and the block assembler.
Every analyzer feeds it and every renderer consumes its output.

HOW: ir.py defines the data structures, positions.py orders positions
and slices text, partitioner.py flattens overlapping tokens into
segments, assembler.py interleaves segments with comment prose.

RULES:
- Pure and synchronous: no I/O, no threads, no global state
- No output-syntax escaping here; renderers own that
- Run only on the complete, final token list of a file
"""
