"""Reusable test templates: named attribute sets applied to many test functions."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, Sequence

_SHOULD_PANIC = "should_panic"
_PATH_RE = re.compile(r"^(::)?\s*([A-Za-z_]\w*(?:\s*::\s*[A-Za-z_]\w*)*)")


def _attribute_body(attr: str) -> str:
    text = attr.strip()
    if text.startswith("#[") and text.endswith("]"):
        text = text[2:-1].strip()
    return text


def _attribute_path(attr: str) -> tuple[str, ...]:
    match = _PATH_RE.match(_attribute_body(attr))
    if match is None:
        return ()
    leading, path = match.groups()
    segments = tuple(segment.strip() for segment in path.split("::"))
    return ("",) + segments if leading else segments


def is_should_panic(attr: str) -> bool:
    """Whether the attribute's path is exactly ``should_panic``."""
    return _attribute_path(attr) == (_SHOULD_PANIC,)


def sanitize_should_panic_duplication(attrs: Sequence[str]) -> list[str]:
    """Drop the second of two identical ``should_panic`` attributes.

    Some compilers hand the attribute over twice; any other list of
    attributes is returned unchanged.
    """
    attrs = list(attrs)
    if len(attrs) != 2 or attrs[0] != attrs[1] or not is_should_panic(attrs[0]):
        return attrs
    return attrs[:1]


def merge_attrs(
    template_attrs: Iterable[str],
    function_attrs: Iterable[str],
    sanitize: bool = False,
) -> list[str]:
    """Put the template's attributes in front of the function's own."""
    own = list(function_attrs)
    if sanitize:
        own = sanitize_should_panic_duplication(own)
    return [*template_attrs, *own]


@dataclass(frozen=True)
class Template:
    """A named set of attributes that can be applied to test functions."""

    name: str
    attrs: tuple[str, ...]
    local: bool = False

    def apply(self, function_attrs: Iterable[str], sanitize: bool = False) -> list[str]:
        return merge_attrs(self.attrs, function_attrs, sanitize)


class TemplateRegistry:
    """Templates defined so far; a template must be defined before it is applied."""

    def __init__(self, sanitize: bool = False) -> None:
        self.sanitize = sanitize
        self._templates: dict[str, Template] = {}

    def template(self, name: str, attrs: Iterable[str], local: bool = False) -> Template:
        """Define (or redefine) the template called ``name``."""
        defined = Template(str(name), tuple(attrs), local)
        self._templates.pop(defined.name, None)
        self._templates[defined.name] = defined
        return defined

    def apply(self, name: str, function_attrs: Iterable[str]) -> list[str]:
        """Return the attributes of a function after applying template ``name``."""
        try:
            found = self._templates[name]
        except KeyError:
            raise KeyError(f"cannot find template `{name}` in this scope") from None
        return found.apply(function_attrs, self.sanitize)

    def exported(self) -> tuple[Template, ...]:
        """Templates visible outside their defining scope, in definition order."""
        return tuple(t for t in self._templates.values() if not t.local)

    def __contains__(self, name: object) -> bool:
        return name in self._templates

    def __len__(self) -> int:
        return len(self._templates)