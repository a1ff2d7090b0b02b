"""Custom exceptions for map generation."""


class ArchipelagoError(Exception):
    """Base exception for map generation errors."""

    pass


class ConfigurationError(ArchipelagoError):
    """Raised when a generation configuration is invalid."""

    pass


class OutOfBoundsError(ArchipelagoError):
    """Raised when a lookup falls outside the grid."""

    pass


class NoMapError(ArchipelagoError):
    """Raised when an operation needs a map but none has been generated or loaded."""

    pass


class PersistenceError(ArchipelagoError):
    """Base exception for recoverable save/load failures."""

    pass


class MapNotFoundError(PersistenceError):
    """Raised when a saved map does not exist."""

    pass


class InvalidMapFileError(PersistenceError):
    """Raised when a saved map cannot be decoded."""

    pass


class SaveNameExhaustedError(PersistenceError):
    """Raised when no unique save name was found within the retry bound."""

    pass
