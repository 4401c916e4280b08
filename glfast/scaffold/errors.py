"""Exceptions raised while materializing a template."""
from pathlib import Path
from typing import Optional, Union


class ScaffoldError(Exception):
    """Base class for template materialization failures."""
    pass


class ExtractionError(ScaffoldError):
    """Raised when a template archive cannot be unpacked."""
    pass


class UnsafeArchivePathError(ExtractionError):
    """Raised when an archive member would land outside the destination."""

    def __init__(self, member: str, reason: str):
        self.member = member
        self.reason = reason
        super().__init__(f"Refusing to extract '{member}': {reason}")


class TemplateError(ScaffoldError):
    """Raised when a file template cannot be parsed or executed."""

    def __init__(self, message: str, source: Optional[str] = None):
        self.source = source
        if source:
            message = f"{source}: {message}"
        super().__init__(message)


class FileReadError(ScaffoldError):
    """Raised when a file found during the walk cannot be read or decoded."""

    def __init__(self, path: Union[str, Path], reason: str):
        self.path = str(path)
        super().__init__(f"Cannot read {path}: {reason}")


class PathCollisionError(ScaffoldError):
    """Raised when two files are renamed onto the same repository path."""

    def __init__(self, repository_path: str, first: str, second: str):
        self.repository_path = repository_path
        super().__init__(
            f"'{first}' and '{second}' both materialize to '{repository_path}'"
        )


class ClassificationAmbiguity(UserWarning):
    """An extension is configured for more than one encoding class."""
    pass
