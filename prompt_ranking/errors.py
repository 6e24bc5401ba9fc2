"""
Exception types raised by the ranking engine.

Degraded input (bad dates, empty corpora, empty queries) never raises; these
are reserved for invalid call shapes and unreadable configuration.
"""


class RankingError(Exception):
    """Base class for ranking engine errors."""


class InvalidOptionError(RankingError, ValueError):
    """An option bag or signal bundle has an invalid shape (e.g. negative limit)."""


class ConfigError(RankingError):
    """A ranking config file could not be read or validated."""
