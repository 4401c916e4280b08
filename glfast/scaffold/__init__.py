"""Template materialization engine.

Unpacks a template repository archive, renames paths, renders file
templates and builds the manifest committed to the new project.
"""

from .archive import extract_archive
from .classifier import Classification, EncodingClassifier
from .core import Materializer, materialize_archive
from .errors import (
    ClassificationAmbiguity,
    ExtractionError,
    FileReadError,
    PathCollisionError,
    ScaffoldError,
    TemplateError,
    UnsafeArchivePathError,
)
from .manifest import FileEncoding, Manifest, ManifestBuilder, MaterializedFile
from .paths import rename_path
from .renderer import TemplateRenderer

__all__ = [
    "Classification",
    "ClassificationAmbiguity",
    "EncodingClassifier",
    "ExtractionError",
    "FileEncoding",
    "FileReadError",
    "Manifest",
    "ManifestBuilder",
    "MaterializedFile",
    "Materializer",
    "PathCollisionError",
    "ScaffoldError",
    "TemplateError",
    "TemplateRenderer",
    "UnsafeArchivePathError",
    "extract_archive",
    "materialize_archive",
    "rename_path",
]
