"""Naming transforms applied to a project name.

Project names are ``-`` delimited (``billing-svc``, ``hello-world-android``).
The functions here derive the case variants and truncated forms that
templates refer to, either through path tokens such as
``{{Name_ToPascalCase}}`` or through template functions such as
``{{ToPascalCase .Name}}``.
"""
from dataclasses import dataclass
from typing import Callable, Dict

DELIMITER = "-"


def _upper_first(segment: str) -> str:
    return segment[:1].upper() + segment[1:]


def to_pascal_case(value: str) -> str:
    """Convert ``hello-world`` to ``HelloWorld``.

    Empty segments (``a--b``, leading or trailing ``-``) are dropped.
    """
    return "".join(_upper_first(part) for part in value.split(DELIMITER) if part)


def to_camel_case(value: str) -> str:
    """Convert ``hello-world`` to ``helloWorld``."""
    pascal = to_pascal_case(value)
    return pascal[:1].lower() + pascal[1:]


def skip_first_part(value: str) -> str:
    """Drop the first segment and camel-case the rest.

    ``hello-world-android`` becomes ``worldAndroid``; a name without
    ``-`` is returned unchanged.
    """
    if DELIMITER not in value:
        return value
    return to_camel_case(DELIMITER.join(value.split(DELIMITER)[1:]))


def skip_last_part(value: str) -> str:
    """``hello-world-android`` becomes ``hello-world``."""
    parts = value.split(DELIMITER)
    if len(parts) < 2:
        return value
    return DELIMITER.join(parts[:-1])


def skip_first_and_last_part(value: str) -> str:
    """``hello-world-golang`` becomes ``world``.

    With exactly two segments the second one is kept (``hello-world`` gives
    ``world``); a single segment is returned unchanged.
    """
    parts = value.split(DELIMITER)
    if len(parts) == 2:
        return parts[1]
    if len(parts) < 2:
        return value
    return DELIMITER.join(parts[1:-1])


# Function names as they are spelled inside file templates.
TEMPLATE_FUNCTIONS: Dict[str, Callable[[str], str]] = {
    "ToPascalCase": to_pascal_case,
    "ToCamelCase": to_camel_case,
    "SkipFirstPart": skip_first_part,
    "SkipLastPart": skip_last_part,
    "SkipFirstAndLastPart": skip_first_and_last_part,
}


@dataclass(frozen=True)
class NamingTokens:
    """Placeholder tokens recognised in file and directory names."""

    name: str
    pascal_case: str
    camel_case: str
    skip_first: str
    skip_last: str
    skip_first_and_last: str

    @classmethod
    def for_name(cls, name: str) -> "NamingTokens":
        return cls(
            name=name,
            pascal_case=to_pascal_case(name),
            camel_case=to_camel_case(name),
            skip_first=skip_first_part(name),
            skip_last=skip_last_part(name),
            skip_first_and_last=skip_first_and_last_part(name),
        )

    def replacements(self) -> Dict[str, str]:
        """Map each token spelling to its value.

        The ``{{...}}`` brackets keep every spelling from being a substring
        of another one, so replacement order never matters.
        """
        return {
            "{{Name}}": self.name,
            "{{Name_ToPascalCase}}": self.pascal_case,
            "{{Name_ToCamelCase}}": self.camel_case,
            "{{Name_SkipFirstPart}}": self.skip_first,
            "{{Name_SkipLastPart}}": self.skip_last,
            "{{Name_SkipFirstAndLastPart}}": self.skip_first_and_last,
        }
