from typing import Optional


class DysLinkException(Exception):
    exit_code = 1


class UsageError(DysLinkException):
    def __init__(self, message: str, usage: Optional[str] = None):
        super().__init__(message)
        self.usage = usage


class InvalidCommandError(UsageError):
    pass


class FlagError(UsageError):
    """Malformed or missing flags of a subcommand."""

    exit_code = 2


class InvalidArgumentException(DysLinkException):
    pass


class ConnectionFailedException(DysLinkException):
    pass


class DeviceMessageException(DysLinkException):
    pass
