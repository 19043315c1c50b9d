"""State layer.

This package holds the in-memory mirror of the signed-in account's entity
collections, the session-change events that drive it and the pure policy
functions (streak arithmetic, bulk-load triggering) the store applies.
"""
