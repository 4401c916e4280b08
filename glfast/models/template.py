"""Per-project parameters for materializing a template."""
from dataclasses import dataclass

# Port value for templates that do not listen on a port (frontends).
NO_PORT = -1

PATH_SEPARATORS = ("/", "\\", "\x00")


@dataclass(frozen=True)
class TemplateParameters:
    """Values substituted into a template.

    Attributes:
        name: New project identifier, e.g. ``billing-svc``
        port: Application port, or ``NO_PORT`` when not applicable
    """

    name: str
    port: int = NO_PORT

    def __post_init__(self):
        if not isinstance(self.name, str) or not self.name.strip():
            raise ValueError("Project name must be a non-empty string")
        if any(char in self.name for char in PATH_SEPARATORS):
            raise ValueError(f"Project name must not contain path separators: {self.name!r}")

        # Imported here: glfast.scaffold imports this module.
        from glfast.scaffold.naming import NamingTokens

        # Every spelling of the name can become a whole path segment.
        for value in NamingTokens.for_name(self.name).replacements().values():
            if value in (".", ".."):
                raise ValueError(f"Project name {self.name!r} yields the path segment {value!r}")
        if isinstance(self.port, bool) or not isinstance(self.port, int):
            raise ValueError(f"Port must be an integer, got {self.port!r}")

    @property
    def has_port(self) -> bool:
        return self.port != NO_PORT
