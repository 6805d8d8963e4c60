"""
Benchmark suite for jtree parsing and rendering performance.

Compares jtree against standard JSON libraries including:
- Python standard library json
- orjson (C-optimized)
- ujson (ultra-fast JSON)

Also compares jtree's own buffered and fragment printers.
"""
