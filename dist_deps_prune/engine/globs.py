"""Minimal glob matching for dist scanning (``dist/**/*.js`` style patterns)."""

from __future__ import annotations

import re
from collections.abc import Iterable

# Characters with a meaning in regex syntax; ``*`` and ``?`` are handled
# as glob tokens before escaping applies.
_REGEX_SPECIAL = re.compile(r"[.+^${}()|\[\]\\]")


def normalize_slashes(value: str) -> str:
    return value.replace("\\", "/")


def strip_dot_slash(value: str) -> str:
    return value[2:] if value.startswith("./") else value


def _normalize(value: str) -> str:
    return strip_dot_slash(normalize_slashes(value))


def glob_to_regex(pattern: str) -> re.Pattern[str]:
    """Translate a glob into an anchored regex.

    ``*`` never crosses ``/``; ``**/`` matches zero or more directories;
    a bare ``**`` matches anything; ``?`` matches one non-separator char.
    """
    normalized = _normalize(pattern)
    parts = ["^"]
    index = 0
    length = len(normalized)
    while index < length:
        char = normalized[index]
        if char == "*" and normalized[index + 1 : index + 2] == "*":
            if normalized[index + 2 : index + 3] == "/":
                parts.append("(?:.*/)?")
                index += 3
                continue
            parts.append(".*")
            index += 2
            continue
        if char == "*":
            parts.append("[^/]*")
        elif char == "?":
            parts.append("[^/]")
        else:
            parts.append(_REGEX_SPECIAL.sub(lambda m: "\\" + m.group(0), char))
        index += 1
    parts.append("$")
    return re.compile("".join(parts), re.DOTALL)


def compile_globs(patterns: Iterable[str]) -> list[re.Pattern[str]]:
    return [glob_to_regex(pattern) for pattern in patterns]


def matches_any_glob(globs: Iterable[re.Pattern[str]], candidate: str) -> bool:
    normalized = _normalize(candidate)
    return any(glob.fullmatch(normalized) for glob in globs)


def matches_patterns(
    include: list[re.Pattern[str]],
    exclude: list[re.Pattern[str]],
    candidates: list[str],
) -> bool:
    """True if any candidate form is included and no candidate form is excluded."""
    if not any(matches_any_glob(include, c) for c in candidates):
        return False
    return not any(matches_any_glob(exclude, c) for c in candidates)
