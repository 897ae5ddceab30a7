"""
file-notify - Exception types.
"""


class FileNotifyError(Exception):
    """Base class for file-notify errors."""


class RuleFileError(FileNotifyError):
    """The rule file could not be opened or read."""

    def __init__(self, path: str, cause: OSError) -> None:
        super().__init__(f"cannot read rules file {path}: {cause}")
        self.path = path
        self.cause = cause


class WalkFailure(FileNotifyError):
    """Directory traversal failed; carries the offending path."""

    def __init__(self, path: str, cause: OSError) -> None:
        super().__init__(f"error walking directory {path!r}: {cause}")
        self.path = path
        self.cause = cause


class ConnectionAttemptsExhausted(FileNotifyError):
    """Every connection attempt to the collector was refused."""

    def __init__(self, address: tuple[str, int], attempts: int) -> None:
        super().__init__(f"TCP connection attempts exhausted ({attempts} to {address[0]}:{address[1]})")
        self.address = address
        self.attempts = attempts
