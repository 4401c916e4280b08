"""glfast - GitLab project scaffolding from template repositories."""

__version__ = "0.1.0"
