"""rsync-style block signatures and application of librsync-format deltas."""

__version__ = "0.1.0"