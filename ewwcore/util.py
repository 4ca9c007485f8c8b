"""Small string and collection helpers."""

from __future__ import annotations

import math
import os
import re
from collections.abc import Iterable, Mapping, Sequence
from typing import TypeVar

T = TypeVar("T")

_ENV_VAR_REFERENCE = re.compile(r"\$\{([^\s]*)\}")


def _lines(text: str) -> list[str]:
    """Split into lines the way line iteration does: no trailing empty line, CR stripped."""
    parts = text.split("\n")
    if parts and parts[-1] == "":
        parts.pop()
    return [p[:-1] if p.endswith("\r") else p for p in parts]


def list_difference(a: Sequence[T], b: Sequence[T]) -> tuple[list[T], list[T]]:
    """Return (elements of a missing from b, elements of b missing from a)."""
    missing = [elem for elem in a if elem not in b]
    new = [elem for elem in b if elem not in a]
    return missing, new


def replace_env_var_references(text: str) -> str:
    """Replace ``${NAME}`` by the value of the environment variable, or by nothing if unset."""
    return _ENV_VAR_REFERENCE.sub(lambda m: os.environ.get(m.group(1), ""), text)


def unindent(text: str) -> str:
    """Strip leading empty lines and the common leading-space indentation."""
    lines = _lines(text)
    start = 0
    while start < len(lines) and lines[start] == "":
        start += 1
    lines = lines[start:]
    if not lines:
        return ""
    indent = min(len(line) - len(line.lstrip(" ")) for line in lines)
    return "\n".join(line[indent:] for line in lines)


def is_blank(text: str) -> bool:
    """True if the text is empty after removing line breaks and surrounding whitespace."""
    return text.replace("\n", "").strip() == ""


def trim_lines(text: str) -> str:
    """Trim every line of the text."""
    return "\n".join(line.strip() for line in _lines(text))


def average(values: Iterable[float]) -> float:
    """Arithmetic mean; NaN for no values."""
    total = 0.0
    count = 0
    for value in values:
        total += value
        count += 1
    return total / count if count else math.nan


def parse_enum(name: str, value: str, options: Mapping[str | tuple[str, ...], T]) -> T:
    """Look up ``value`` case-insensitively among the option strings.

    Keys of ``options`` are either a single string or a tuple of alternative spellings.
    """
    wanted = value.lower()
    spellings: list[str] = []
    for key, result in options.items():
        alternatives = (key,) if isinstance(key, str) else tuple(key)
        if wanted in alternatives:
            return result
        spellings.extend(alternatives)
    possible = "".join(f"{s} " for s in spellings)
    raise ValueError(f"Couldn't parse {name}: '{wanted}'. Possible values are {possible}")