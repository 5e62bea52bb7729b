"""
Exception types raised by kmactions.

Normalizers never raise; builders raise ConfigurationError for missing or
conflicting options and the styled-text codec raises StyledTextError when a
payload cannot be decoded.
"""


class KMActionsError(Exception):
    """Base class for all kmactions errors."""


class ConfigurationError(KMActionsError, ValueError):
    """An action was given a missing, conflicting or unknown option."""


class StyledTextError(KMActionsError, ValueError):
    """A StyledText payload could not be decoded."""
