"""Decide how each template file is stored in the new repository."""
from enum import Enum
from pathlib import PurePosixPath
from typing import Iterable, Optional

from glfast.models.config import (
    DEFAULT_BASE64_EXTENSIONS,
    DEFAULT_TEMPLATE_EXTENSIONS,
    DEFAULT_TEMPLATE_FILES,
    TemplateSettings,
)


class Classification(str, Enum):
    """How a file's bytes are turned into commit content."""

    TEXT = "text"          # UTF-8 text, copied verbatim
    TEMPLATE = "template"  # UTF-8 text, rendered with the project parameters
    BASE64 = "base64"      # opaque bytes, base64 encoded


class EncodingClassifier:
    """Classifies files by extension and file name.

    Precedence is fixed: base64 extensions first, then template extensions
    and always-template file names, then plain text. An extension listed as
    both base64 and template is therefore treated as base64.
    """

    def __init__(
        self,
        template_extensions: Optional[Iterable[str]] = None,
        base64_extensions: Optional[Iterable[str]] = None,
        template_files: Optional[Iterable[str]] = None,
    ):
        self.template_extensions = frozenset(
            ext.lower() for ext in (
                DEFAULT_TEMPLATE_EXTENSIONS if template_extensions is None else template_extensions
            )
        )
        self.base64_extensions = frozenset(
            ext.lower() for ext in (
                DEFAULT_BASE64_EXTENSIONS if base64_extensions is None else base64_extensions
            )
        )
        self.template_files = frozenset(
            DEFAULT_TEMPLATE_FILES if template_files is None else template_files
        )

    @classmethod
    def from_settings(cls, settings: TemplateSettings) -> "EncodingClassifier":
        return cls(
            template_extensions=settings.extensions,
            base64_extensions=settings.base64_extensions,
            template_files=settings.files,
        )

    def classify(self, path: str) -> Classification:
        """Classify a file by its (renamed) path."""
        pure = PurePosixPath(path)
        extension = pure.suffix.lower()

        if extension and extension in self.base64_extensions:
            return Classification.BASE64
        if (extension and extension in self.template_extensions) or pure.name in self.template_files:
            return Classification.TEMPLATE
        return Classification.TEXT
