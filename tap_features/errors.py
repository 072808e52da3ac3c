"""Exceptions raised while building and running the feature pipeline."""


class TapFeaturesError(ValueError):
    """Base class for tap feature extraction errors."""


class ConfigurationError(TapFeaturesError):
    """The keyboard layout or n-gram input cannot be used."""


class FormatError(TapFeaturesError):
    """A record does not follow the event layout of its declared format."""
