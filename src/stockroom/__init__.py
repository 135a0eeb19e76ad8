"""Stockroom: local inventory tracking.

Product records persisted through an embedded SQL database or, where only a
flat key/value primitive is available, a single serialized collection.
"""

__version__ = "0.1.0"
