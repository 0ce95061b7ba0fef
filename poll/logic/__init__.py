"""Core business logic layer.

Modules:
- summary: per-week availability totals and best weeks

The stateful board lives in poll.domain.Board; this package holds pure helpers.
"""
__all__ = ["summary"]
