"""Exceptions for the rbs_inline_lint module."""
from typing import Optional


class RbsInlineLintException(Exception):
    """An exception coming from the linter."""

    def __init__(self, msg: Optional[str] = None) -> None:
        """
        Create a new exception instance.

        :param msg: Message describing exception.
        """
        if not msg:
            msg = "Exception in rbs-inline-lint"

        super(RbsInlineLintException, self).__init__(msg)


class ConfigError(RbsInlineLintException):
    """The configuration file could not be loaded or is invalid."""

    def __init__(self, msg: Optional[str] = None) -> None:
        """
        Create a new exception instance.

        :param msg: Message describing exception.
        """
        if not msg:
            msg = "config file invalid"

        super(ConfigError, self).__init__(msg)


class SourceError(RbsInlineLintException):
    """A source file could not be read or decoded."""

    def __init__(self, path: str, msg: Optional[str] = None) -> None:
        """
        Create a new exception instance.

        :param path: File that failed to load.
        :param msg: Message describing exception.
        """
        if not msg:
            msg = "unable to read source"

        super(SourceError, self).__init__(f"{path}: {msg}")

        self.path = path


class RBSSyntaxError(RbsInlineLintException):
    """A signature failed to parse under the RBS grammar."""

    def __init__(self, message: str, offset: int, length: int = 0) -> None:
        """
        Create a new exception instance.

        :param message: Description of the syntax error.
        :param offset: Byte offset of the error, relative to the parsed text.
        :param length: Byte length of the offending token, 0 at end of input.
        """
        super(RBSSyntaxError, self).__init__(message)

        self.message = message
        self.offset = offset
        self.length = length

