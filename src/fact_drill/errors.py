"""Exceptions raised by the drill core."""


class FactDrillError(Exception):
    """Base class for drill errors."""


class SettingsError(FactDrillError, ValueError):
    """A settings value could not be normalized into a usable range or mode."""
