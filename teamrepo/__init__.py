"""Load, query and check team, people and repository membership data."""

__version__ = "0.1.0"