"""Configuration models for glfast."""
import warnings
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

DEFAULT_GITLAB_URL = "https://gitlab.com"

DEFAULT_TEMPLATE_EXTENSIONS = [
    ".go", ".java", ".py", ".vue",     # source code
    ".md",                             # documentation
    ".html", ".css", ".js", ".scss",   # web
    ".json", ".xml", ".yml", ".yaml",  # data
    ".kt", ".gradle",                  # android
]

DEFAULT_BASE64_EXTENSIONS = [".png", ".jar", ".jpg", ".jks"]

DEFAULT_TEMPLATE_FILES = ["Dockerfile", "Makefile"]


class ConfigValidationError(Exception):
    """Raised when the configuration file is unreadable or invalid."""
    pass


def _normalize_extension(value: str) -> str:
    value = value.strip().lower()
    if not value:
        raise ValueError("Extension must not be empty")
    return value if value.startswith(".") else f".{value}"


class GitLabSettings(BaseModel):
    """Connection settings for the GitLab instance."""

    model_config = ConfigDict(extra='forbid')

    baseurl: str = DEFAULT_GITLAB_URL
    token: Optional[str] = None
    timeout: float = Field(30.0, gt=0, description="HTTP timeout in seconds")

    @field_validator('baseurl')
    @classmethod
    def validate_baseurl(cls, v):
        """Require an http(s) URL and drop trailing slashes."""
        if not v.startswith(('https://', 'http://')):
            raise ValueError(f"GitLab baseurl must start with https:// or http://. Got: {v}")
        return v.rstrip('/')


class TemplateSettings(BaseModel):
    """Template lookup and materialization settings."""

    model_config = ConfigDict(extra='forbid')

    namespace: str = Field("template", description="Group holding template projects")
    extensions: List[str] = Field(default_factory=lambda: list(DEFAULT_TEMPLATE_EXTENSIONS))
    base64_extensions: List[str] = Field(default_factory=lambda: list(DEFAULT_BASE64_EXTENSIONS))
    files: List[str] = Field(default_factory=lambda: list(DEFAULT_TEMPLATE_FILES))
    branch: str = "master"
    dev_branch: Optional[str] = "dev"
    commit_message: str = "init project [skip ci]"
    allow_path_collisions: bool = False

    @field_validator('extensions', 'base64_extensions')
    @classmethod
    def normalize_extensions(cls, v):
        """Lower-case extensions and make sure they start with a dot."""
        return [_normalize_extension(ext) for ext in v]

    @field_validator('files')
    @classmethod
    def validate_files(cls, v):
        """File names are matched exactly and must not contain a path."""
        for name in v:
            if not name or '/' in name:
                raise ValueError(f"Template file entry must be a bare file name, got '{name}'")
        return v

    @model_validator(mode='after')
    def warn_overlapping_extensions(self) -> 'TemplateSettings':
        """Overlaps are legal (base64 wins) but almost always a mistake."""
        from glfast.scaffold.errors import ClassificationAmbiguity

        overlap = sorted(set(self.extensions) & set(self.base64_extensions))
        if overlap:
            warnings.warn(
                f"Extensions configured as both template and base64 "
                f"(treated as base64): {', '.join(overlap)}",
                ClassificationAmbiguity,
                stacklevel=2,
            )
        return self


class GlfastSettings(BaseModel):
    """Top-level configuration file layout."""

    model_config = ConfigDict(extra='forbid')

    gitlab: GitLabSettings = Field(default_factory=GitLabSettings)
    template: TemplateSettings = Field(default_factory=TemplateSettings)
