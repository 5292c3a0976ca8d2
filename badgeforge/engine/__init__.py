"""
Card layout engine
Records, layouts, label resolution and schema inference; no I/O
"""
