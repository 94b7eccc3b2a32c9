"""
Asset Processing Domain

Keeps the output tree in sync with the staging tree:
- Scanner walks the staging tree every tick and queues stale files
- Processors transform each file by kind (raw copy, texture, mesh)
- Executor runs queued work and retires it once the output is written

Only modification times are compared; unchanged assets are never reprocessed.
"""

__all__ = ["executor", "paths", "pipeline", "processors", "scanner", "staleness", "work"]
