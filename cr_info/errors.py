"""
Exception classes for cr_info.
"""


class CrInfoError(Exception):
    """Base exception for all cr_info errors"""

    def __init__(self, message: str, details: str | None = None):
        self.message = message
        self.details = details
        super().__init__(self.message)


class ConfigError(CrInfoError, ValueError):
    """Raised when a command line option holds a value we can't use"""

    def __init__(self, option: str, value: str, choices: list[str] | None = None):
        message = f"'{value}' is not a valid {option}"
        details = f"Available options are: {', '.join(choices)}" if choices else None
        super().__init__(message, details)
        self.option = option
        self.value = value


class CatalogError(CrInfoError):
    """Raised when a call to the remote catalog fails"""

    def __init__(self, message: str, details: str | None = None):
        super().__init__(message, details)
