"""Rendering of file templates.

Template files use the ``{{ ... }}`` action syntax that GitLab template
projects are written in::

    module {{.Name}}
    const Port = {{.Port}}
    type {{ToPascalCase .Name}}Service struct{}
    {{if gt .Port 0}}EXPOSE {{.Port}}{{end}}
    {{with .Port}}port: {{printf "%d" .}}{{end}}

Each template is compiled to an equivalent Jinja2 template and executed in a
strict environment, so unknown fields and functions are errors instead of
silently rendering as empty strings.
"""
import ast
import json
import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple

import jinja2

from glfast.core.logger import get_logger
from glfast.models.template import TemplateParameters
from glfast.scaffold.errors import TemplateError
from glfast.scaffold.naming import TEMPLATE_FUNCTIONS

logger = get_logger(__name__)

FIELDS = ("Name", "Port")

# ``{{- `` and `` -}}`` trim surrounding whitespace; the dash must be
# separated from the action body by whitespace. Quoted literals may
# contain ``}}``.
ACTION_RE = re.compile(
    r"""\{\{(-[ \t\r\n])?
    (
        /\*.*?\*/
      | (?:"(?:[^"\\\n]|\\.)*"
          | `[^`]*`
          | [^"`]
        )*?
    )
    ([ \t\r\n]-)?\}\}""",
    re.DOTALL | re.VERBOSE,
)

TOKEN_RE = re.compile(
    r"""\s*(?:
        (?P<string>"(?:[^"\\\n]|\\.)*")
      | (?P<raw>`[^`]*`)
      | (?P<number>-?\d+)
      | (?P<field>(?:\.[A-Za-z_][A-Za-z0-9_]*)+)
      | (?P<dot>\.)
      | (?P<variable>\$[A-Za-z0-9_]*)
      | (?P<ident>[A-Za-z_][A-Za-z0-9_]*)
      | (?P<punct>[()|])
    )""",
    re.VERBOSE,
)

UNSUPPORTED_ACTIONS = {"range", "define", "template", "block", "break", "continue"}

PRINTF_VERB_RE = re.compile(r"%([-+# 0]*\d*(?:\.\d+)?)([a-zA-Z%])")

CONSTANTS = {"true": "true", "false": "false", "nil": "none"}

WHITESPACE = " \t\r\n"


def _eq(first, *others):
    if not others:
        raise TypeError("eq needs at least two arguments")
    return any(first == other for other in others)


def _and(*args):
    value = None
    for value in args:
        if not value:
            return value
    return value


def _or(*args):
    value = None
    for value in args:
        if value:
            return value
    return value


def _format_value(value) -> str:
    if value is None:
        return "<nil>"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _print(*args) -> str:
    """Operands joined like Go's ``fmt.Sprint``."""
    out = []
    for i, arg in enumerate(args):
        if i and not isinstance(arg, str) and not isinstance(args[i - 1], str):
            out.append(" ")
        out.append(_format_value(arg))
    return "".join(out)


def _println(*args) -> str:
    return " ".join(_format_value(arg) for arg in args) + "\n"


def _printf(fmt, *args) -> str:
    """Go-style format verbs mapped onto ``%`` formatting.

    ``%v``, ``%s`` and ``%t`` print the Go representation of any value,
    ``%q`` a double-quoted string; numeric verbs pass through.
    """
    if not isinstance(fmt, str):
        raise TypeError(f"printf expects a format string, got {type(fmt).__name__}")
    pending = list(args)
    values = []

    def convert(match):
        flags, verb = match.groups()
        if verb == "%":
            return "%%"
        if not pending:
            raise ValueError(f"printf: missing argument for %{flags}{verb}")
        value = pending.pop(0)
        if verb in "vst":
            values.append(_format_value(value))
            return f"%{flags}s"
        if verb == "q":
            values.append(json.dumps(_format_value(value), ensure_ascii=False))
            return f"%{flags}s"
        if verb == "b":
            values.append(format(value, "b"))
            return f"%{flags}s"
        if verb in "dxXocfFeEgG":
            values.append(value)
            return f"%{flags}{verb}"
        raise ValueError(f"printf: unsupported verb %{verb}")

    pattern = PRINTF_VERB_RE.sub(convert, fmt)
    if pending:
        raise ValueError(f"printf: {len(pending)} extra argument(s) for {fmt!r}")
    return pattern % tuple(values)


def _len(value) -> int:
    # Strings are measured in bytes.
    if isinstance(value, str):
        return len(value.encode("utf-8"))
    if isinstance(value, (int, bool)) or value is None:
        raise TypeError(f"len of type {type(value).__name__}")
    return len(value)


def _index(item, *keys):
    for key in keys:
        if isinstance(item, str):
            item = item.encode("utf-8")
        item = item[key]
    return item


BUILTIN_FUNCTIONS: Dict[str, Callable[..., Any]] = {
    "print": _print,
    "printf": _printf,
    "println": _println,
    "len": _len,
    "index": _index,
    "eq": _eq,
    "ne": lambda a, b: a != b,
    "lt": lambda a, b: a < b,
    "le": lambda a, b: a <= b,
    "gt": lambda a, b: a > b,
    "ge": lambda a, b: a >= b,
    "and": _and,
    "or": _or,
    "not": lambda a: not a,
}

# Names that are keywords in Jinja expressions.
JINJA_ALIASES = {"and": "_and", "or": "_or", "not": "_not"}


def _string_function(name: str, func: Callable[[str], str]) -> Callable[[Any], str]:
    def call(value):
        if not isinstance(value, str):
            raise TypeError(f"{name} expects a string argument, got {type(value).__name__}")
        return func(value)

    call.__name__ = name
    return call


def _finalize(value):
    if value is None:
        return "<no value>"
    if isinstance(value, bool):
        return "true" if value else "false"
    return value


@dataclass
class _Block:
    """An open ``if`` or ``with`` action waiting for its ``{{end}}``."""

    keyword: str
    dots: int = 0  # dot bindings currently pushed by this block
    ends: int = 1  # Jinja endif tags owed at {{end}}


class _ActionCompiler:
    """Translates one action body into a Jinja2 expression."""

    def __init__(self, functions: Dict[str, Callable[..., Any]], source: str):
        self.functions = functions
        self.source = source
        self.tokens: List[Tuple[str, str]] = []
        self.pos = 0
        self.dots: List[str] = []
        self.bindings = 0

    def error(self, message: str) -> TemplateError:
        return TemplateError(message, self.source)

    def bind_dot(self) -> str:
        """Allocate the Jinja variable holding dot inside a ``with`` block."""
        self.bindings += 1
        name = f"_dot{self.bindings}"
        self.dots.append(name)
        return name

    def compile(self, body: str) -> str:
        self.tokens = self._tokenize(body)
        self.pos = 0
        if not self.tokens:
            raise self.error("missing value for command")
        expression = self._pipeline()
        if self.pos != len(self.tokens):
            raise self.error(f"unexpected {self.tokens[self.pos][1]!r} in command")
        return expression

    def _tokenize(self, body: str) -> List[Tuple[str, str]]:
        tokens = []
        index = 0
        while index < len(body):
            if body[index:].strip() == "":
                break
            match = TOKEN_RE.match(body, index)
            if not match or match.end() == index:
                raise self.error(f"unexpected character {body[index:].lstrip()[:1]!r} in command")
            kind = match.lastgroup
            tokens.append((kind, match.group(kind)))
            index = match.end()
        return tokens

    def _peek(self) -> Optional[Tuple[str, str]]:
        return self.tokens[self.pos] if self.pos < len(self.tokens) else None

    def _at_command_end(self) -> bool:
        token = self._peek()
        return token is None or token in (("punct", ")"), ("punct", "|"))

    def _pipeline(self) -> str:
        value = self._command(piped=None)
        while self._peek() == ("punct", "|"):
            self.pos += 1
            value = self._command(piped=value)
        return value

    def _command(self, piped: Optional[str]) -> str:
        token = self._peek()
        if token is None or self._at_command_end():
            raise self.error("missing value for command")

        kind, text = token
        if kind == "ident" and text not in CONSTANTS:
            self.pos += 1
            if text not in self.functions:
                raise self.error(f'function "{text}" not defined')
            args = []
            while not self._at_command_end():
                args.append(self._operand())
            if piped is not None:
                args.append(piped)
            return f"{JINJA_ALIASES.get(text, text)}({', '.join(args)})"

        if piped is not None:
            raise self.error(f"non executable command in pipeline stage: {text}")
        value = self._operand()
        if not self._at_command_end():
            raise self.error(f"can't give argument to non-function {text}")
        return value

    def _operand(self) -> str:
        kind, text = self.tokens[self.pos]
        self.pos += 1

        if kind == "string":
            try:
                return repr(ast.literal_eval(text))
            except (SyntaxError, ValueError) as exc:
                raise self.error(f"invalid string literal {text}: {exc}") from exc
        if kind == "raw":
            return repr(text[1:-1])
        if kind == "number":
            return text
        if kind == "field":
            parts = text.split(".")[1:]
            if len(parts) > 1:
                raise self.error(f"field chains are not supported: {text}")
            if self.dots:
                raise self.error(f"can't evaluate field {parts[0]}: dot is rebound by {{{{with}}}}")
            if parts[0] not in FIELDS:
                raise self.error(f"can't evaluate field {parts[0]}")
            return parts[0]
        if kind == "dot":
            if self.dots:
                return self.dots[-1]
            raise self.error("the bare dot is only supported inside {{with}}; use .Name or .Port")
        if kind == "variable":
            raise self.error(f"variables are not supported: {text}")
        if kind == "ident":
            if text in CONSTANTS:
                return CONSTANTS[text]
            if text in self.functions:
                raise self.error(f"function {text} used as an argument must be parenthesized")
            raise self.error(f'function "{text}" not defined')
        if text == "(":
            value = self._pipeline()
            if self._peek() != ("punct", ")"):
                raise self.error("unclosed left paren")
            self.pos += 1
            return value
        raise self.error(f"unexpected {text!r} in operand")


class TemplateRenderer:
    """Renders file templates with the project parameters.

    Args:
        functions: Extra template functions, merged over the naming
            transforms and the print, index and comparison builtins
    """

    def __init__(self, functions: Optional[Dict[str, Callable[..., Any]]] = None):
        self.functions: Dict[str, Callable[..., Any]] = dict(BUILTIN_FUNCTIONS)
        for name, func in TEMPLATE_FUNCTIONS.items():
            self.functions[name] = _string_function(name, func)
        if functions:
            self.functions.update(functions)

        self.env = jinja2.Environment(
            autoescape=False,
            undefined=jinja2.StrictUndefined,
            keep_trailing_newline=True,
            finalize=_finalize,
        )
        self.env.globals.update(
            {JINJA_ALIASES.get(name, name): func for name, func in self.functions.items()}
        )

    def translate(self, content: str, source: str = "<template>") -> str:
        """Translate template text into Jinja2 source."""
        compiler = _ActionCompiler(self.functions, source)
        output: List[str] = []
        blocks: List[_Block] = []
        trim_next = False
        position = 0

        def emit_text(text: str):
            if "{{" in text:
                raise TemplateError("unclosed action", source)
            if not text:
                return
            # Jinja would interpret block/comment openers and normalize
            # CRLF in plain data, so such text goes in as a string literal.
            if "{%" in text or "{#" in text or "\r" in text or text.endswith("{"):
                output.append("{{ %r }}" % text)
            else:
                output.append(text)

        for match in ACTION_RE.finditer(content):
            text = content[position:match.start()]
            if trim_next:
                text = text.lstrip(WHITESPACE)
            if match.group(1):
                text = text.rstrip(WHITESPACE)
            emit_text(text)
            trim_next = bool(match.group(3))
            position = match.end()

            output.append(self._translate_action(match.group(2).strip(), compiler, blocks, source))

        tail = content[position:]
        if trim_next:
            tail = tail.lstrip(WHITESPACE)
        emit_text(tail)

        if blocks:
            raise TemplateError(f"unexpected EOF: {{{{{blocks[-1].keyword}}}}} is never closed", source)
        return "".join(output)

    @staticmethod
    def _open_block(keyword: str, pipeline: str, compiler: _ActionCompiler, block: _Block) -> str:
        # The pipeline is evaluated with the enclosing dot.
        condition = compiler.compile(pipeline)
        if keyword == "if":
            return "{%% if %s %%}" % condition
        dot = compiler.bind_dot()
        block.dots += 1
        return "{%% set %s = %s %%}{%% if %s %%}" % (dot, condition, dot)

    @staticmethod
    def _release_dots(block: _Block, compiler: _ActionCompiler) -> None:
        for _ in range(block.dots):
            compiler.dots.pop()
        block.dots = 0

    def _translate_action(self, body: str, compiler: _ActionCompiler, blocks: List[_Block], source: str) -> str:
        if body.startswith("/*"):
            if not body.endswith("*/"):
                raise TemplateError("unclosed comment", source)
            return ""

        words = body.split(None, 1)
        keyword = words[0] if words else ""
        rest = words[1].strip() if len(words) > 1 else ""

        if keyword in ("if", "with"):
            if not rest:
                raise TemplateError(f"missing value for {keyword}", source)
            block = _Block(keyword)
            blocks.append(block)
            return self._open_block(keyword, rest, compiler, block)
        if keyword == "else":
            if not blocks:
                raise TemplateError("unexpected {{else}}", source)
            block = blocks[-1]
            # else branches see the dot from outside the with
            self._release_dots(block, compiler)
            if not rest:
                return "{% else %}"
            nested = rest.split(None, 1)
            if nested[0] not in ("if", "with") or len(nested) < 2:
                raise TemplateError(f"unexpected {{{{else {rest}}}}}", source)
            if nested[0] == "if":
                return "{%% elif %s %%}" % compiler.compile(nested[1])
            block.ends += 1
            return "{% else %}" + self._open_block("with", nested[1], compiler, block)
        if keyword == "end":
            if rest:
                raise TemplateError("unexpected argument to {{end}}", source)
            if not blocks:
                raise TemplateError("unexpected {{end}}", source)
            block = blocks.pop()
            self._release_dots(block, compiler)
            return "{% endif %}" * block.ends
        if keyword in UNSUPPORTED_ACTIONS:
            raise TemplateError(f"{{{{{keyword}}}}} actions are not supported", source)
        return "{{ %s }}" % compiler.compile(body)

    def render(self, parameters: TemplateParameters, content: str, source: str = "<template>") -> str:
        """Render ``content`` for the given project.

        Raises:
            TemplateError: The template is malformed, references an unknown
                field or function, or a function fails during execution
        """
        jinja_source = self.translate(content, source)
        try:
            template = self.env.from_string(jinja_source)
            return template.render(Name=parameters.name, Port=parameters.port)
        except jinja2.TemplateError as exc:
            logger.debug(f"Jinja source for {source}:\n{jinja_source}")
            raise TemplateError(str(exc), source) from exc
        except (TypeError, ValueError, LookupError) as exc:
            raise TemplateError(f"error calling function: {exc}", source) from exc
