"""Selection of the files that get reviewed."""

import fnmatch
from collections.abc import Iterable
from functools import lru_cache

from diffcritic.services.review.diff_parser import FileDiff


def parse_patterns(raw: str) -> list[str]:
    """Split a comma-separated pattern list, dropping blanks."""
    return [pattern.strip() for pattern in raw.split(",") if pattern.strip()]


def _split_alternatives(body: str) -> list[str]:
    """Split the inside of a brace group on its top-level commas."""
    alternatives = []
    depth = 0
    start = 0
    for i, c in enumerate(body):
        if c == "{":
            depth += 1
        elif c == "}":
            depth -= 1
        elif c == "," and depth == 0:
            alternatives.append(body[start:i])
            start = i + 1
    alternatives.append(body[start:])
    return alternatives


@lru_cache(maxsize=256)
def expand_braces(pattern: str) -> tuple[str, ...]:
    """
    Expand ``{a,b}`` alternatives into separate patterns.

    Groups nest, and a group without a comma (``{a}``) or without a closing
    brace is kept as literal text.
    """
    depth = 0
    start = 0
    for i, c in enumerate(pattern):
        if c == "{":
            if depth == 0:
                start = i
            depth += 1
        elif c == "}" and depth:
            depth -= 1
            if depth:
                continue
            alternatives = _split_alternatives(pattern[start + 1 : i])
            if len(alternatives) < 2:
                continue
            prefix, suffix = pattern[:start], pattern[i + 1 :]
            return tuple(
                expanded
                for alternative in alternatives
                for expanded in expand_braces(prefix + alternative + suffix)
            )
    return (pattern,)


def _match_segments(segments: tuple[str, ...], parts: tuple[str, ...]) -> bool:
    if not segments:
        return not parts
    head, rest = segments[0], segments[1:]
    if head == "**":
        return any(_match_segments(rest, parts[i:]) for i in range(len(parts) + 1))
    return bool(parts) and fnmatch.fnmatchcase(parts[0], head) and _match_segments(rest, parts[1:])


def glob_match(path: str, pattern: str) -> bool:
    """
    Whether ``path`` matches a shell-style glob as a whole.

    ``*``, ``?`` and ``[...]`` (``[!...]`` negates) stay within one path
    segment, a ``**`` segment spans any number of directories (including
    none), and ``{a,b}`` lists alternatives.
    """
    pattern = pattern.lstrip("/")
    if pattern.startswith("./"):
        pattern = pattern[2:]

    parts = tuple(path.split("/"))
    return any(
        _match_segments(tuple(expanded.split("/")), parts) for expanded in expand_braces(pattern)
    )


def is_excluded(path: str, patterns: Iterable[str]) -> bool:
    """Whether ``path`` matches any of the exclusion globs."""
    return any(glob_match(path, pattern) for pattern in patterns)


def filter_reviewable(files: list[FileDiff], exclude_patterns: Iterable[str]) -> list[FileDiff]:
    """Keep files that still exist after the change and are not excluded."""
    patterns = tuple(exclude_patterns)
    return [
        f
        for f in files
        if f.new_path is not None and not is_excluded(f.new_path, patterns)
    ]
