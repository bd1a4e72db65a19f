"""For path templates."""
from collections.abc import Mapping
from re import compile

from attrs import frozen

__all__ = ["CompiledPath", "compile_path", "parse_curly_path_params"]

#: The pattern used for placeholders without a constraint.
DEFAULT_CONSTRAINT = "[^/]+"

_curly_path_pattern = compile(r"{([a-zA-Z0-9]+)}")
_unescaped_group_pattern = compile(r"(?<!\\)\(")


@frozen
class CompiledPath:
    """A path template compiled into a positional-capture pattern."""

    template: str
    pattern: str
    #: 1-based capture group index -> placeholder name, in index order.
    params: Mapping[int, str]

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(dict.fromkeys(self.params.values()))

    @property
    def indices(self) -> dict[str, int]:
        """Placeholder name -> its capture group index."""
        res: dict[str, int] = {}
        for index, name in self.params.items():
            res.setdefault(name, index)
        return res


def parse_curly_path_params(path_str: str) -> list[str]:
    return _curly_path_pattern.findall(path_str)


def compile_path(template: str, constraints: Mapping[str, str] = {}) -> CompiledPath:
    """
    Compile a path template into a regular expression string.

    Every `{name}` placeholder is replaced by a capture group containing
    its constraint (or `[^/]+`). The index of the group is derived from
    the unescaped opening parentheses preceding it, so constraints with
    their own groups shift the indices of placeholders after them.

    A name used more than once is substituted everywhere on its first
    occurrence; only that occurrence is recorded.
    """
    path = template
    params: dict[int, str] = {}
    for name in dict.fromkeys(parse_curly_path_params(template)):
        parts = path.split(f"{{{name}}}")
        index = len(_unescaped_group_pattern.findall(parts[0])) + 1
        params[index] = name
        path = f"({constraints.get(name, DEFAULT_CONSTRAINT)})".join(parts)
    return CompiledPath(template, path, dict(sorted(params.items())))
