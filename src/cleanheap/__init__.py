"""cleanheap: strip weak-retainer edges from V8 heap snapshots."""

__version__ = "0.3.0"
