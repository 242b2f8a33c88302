"""Shift and availability scheduling engine for team rosters.

Modules:
- config: load and validate configuration (JSON or YAML)
- log: logging setup for the ``shiftplan`` logger namespace
- exceptions: error taxonomy shared by services and callers
- domain: SQLAlchemy models, repositories and session helpers (schedule store)
- services: time windows, recurrence, conflicts, assignments, matrix, availability, tasks
- io: CSV import/export helpers
- cli: command-line interface entrypoints
"""

__version__ = "0.3.0"

__all__ = [
    "config",
    "log",
    "exceptions",
    "domain",
    "services",
    "io",
    "cli",
]
