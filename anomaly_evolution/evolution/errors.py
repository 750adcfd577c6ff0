"""
Error types raised by the evolutionary engine.

- ConfigurationError: the caller asked for something the engine cannot do
  (rates that do not sum to 100, a population too small for tournaments, ...)
- DataError: the input series cannot be used (too short, unparseable, empty)

Both derive from ValueError so existing ``except ValueError`` handlers keep
working. Neither is ever retried.
"""


class EvolutionError(Exception):
    """Base class for all engine errors."""


class ConfigurationError(EvolutionError, ValueError):
    """Invalid or incompatible engine configuration."""


class DataError(EvolutionError, ValueError):
    """Input series that cannot be evaluated."""
