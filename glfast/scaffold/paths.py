"""Placeholder substitution in file and directory names."""
import re
from typing import Union

from glfast.models.template import TemplateParameters
from glfast.scaffold.naming import NamingTokens


def rename_path(parameters: Union[TemplateParameters, str], path: str) -> str:
    """Replace naming tokens in ``path`` in a single pass.

    ``src/{{Name_ToCamelCase}}/App.java`` becomes ``src/billingSvc/App.java``
    for the name ``billing-svc``. Substituted values are never scanned
    again, so a project name that itself looks like a token stays literal.

    Args:
        parameters: Template parameters, or the bare project name
        path: Path to rewrite; separators are left untouched
    """
    name = parameters if isinstance(parameters, str) else parameters.name
    replacements = NamingTokens.for_name(name).replacements()
    pattern = re.compile("|".join(re.escape(token) for token in replacements))
    return pattern.sub(lambda match: replacements[match.group(0)], path)
