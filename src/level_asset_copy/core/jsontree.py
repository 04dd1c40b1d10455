"""Generic JSON tree helpers.

Material and placement records are never mapped onto fixed classes. They
are parsed into plain ``dict``/``list``/scalar trees, edited in place by
key, and serialized back so that fields this package does not know about
survive a copy untouched.
"""

import copy
import json
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any, Union

from ..errors import AggregateParseError

JsonValue = Union[None, bool, int, float, str, list["JsonValue"], dict[str, "JsonValue"]]
JsonObject = dict[str, JsonValue]


def _keep_first(pairs: list[tuple[str, Any]]) -> dict[str, Any]:
    """Object hook that keeps the first occurrence of a duplicate key."""
    result: dict[str, Any] = {}
    for key, value in pairs:
        if key not in result:
            result[key] = value
    return result


def _strip_comments_and_trailing_commas(text: str) -> str:
    """Remove // and /* */ comments and trailing commas outside of strings."""
    out: list[str] = []
    i = 0
    length = len(text)
    in_string = False

    while i < length:
        char = text[i]
        if in_string:
            out.append(char)
            if char == "\\" and i + 1 < length:
                out.append(text[i + 1])
                i += 2
                continue
            if char == '"':
                in_string = False
            i += 1
            continue

        if char == '"':
            in_string = True
            out.append(char)
            i += 1
        elif text.startswith("//", i):
            newline = text.find("\n", i)
            i = length if newline < 0 else newline
        elif text.startswith("/*", i):
            end = text.find("*/", i + 2)
            i = length if end < 0 else end + 2
        elif char == ",":
            j = i + 1
            while j < length and text[j].isspace():
                j += 1
            # Drop commas directly before a closing bracket
            if j >= length or text[j] not in "}]":
                out.append(char)
            i += 1
        else:
            out.append(char)
            i += 1

    return "".join(out)


def loads(text: str, origin: str = "<string>") -> JsonValue:
    """Parse JSON text, tolerating comments, trailing commas and duplicate keys.

    Args:
        text: JSON document
        origin: File name or label used in error messages

    Returns:
        The parsed tree

    Raises:
        AggregateParseError: If the text is not valid JSON even after repair
    """
    try:
        return json.loads(text, object_pairs_hook=_keep_first)
    except json.JSONDecodeError:
        pass

    try:
        return json.loads(_strip_comments_and_trailing_commas(text), object_pairs_hook=_keep_first)
    except json.JSONDecodeError as e:
        raise AggregateParseError(origin, str(e)) from e


def load_file(path: Path) -> JsonValue:
    """Read and parse a JSON file with the tolerant parser."""
    with path.open("r", encoding="utf-8-sig") as f:
        return loads(f.read(), str(path))


def load_object_file(path: Path) -> JsonObject:
    """Read a JSON file whose root must be an object (an aggregate file)."""
    tree = load_file(path)
    if not isinstance(tree, dict):
        raise AggregateParseError(path, "root is not a JSON object")
    return tree


def dumps(tree: JsonValue) -> str:
    """Serialize a tree the way aggregate files are written (indented)."""
    return json.dumps(tree, indent=2, ensure_ascii=False)


def dumps_line(tree: JsonValue) -> str:
    """Serialize a tree onto a single line for newline-delimited files."""
    return json.dumps(tree, ensure_ascii=False, separators=(",", ":"))


def write_file(path: Path, tree: JsonValue) -> None:
    """Write a complete JSON document, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        f.write(dumps(tree))
        f.write("\n")


def clone(tree: JsonValue) -> JsonValue:
    return copy.deepcopy(tree)


def get_str(node: JsonValue, key: str) -> str:
    """Return ``node[key]`` as a string, or "" when missing or not a scalar."""
    if not isinstance(node, dict):
        return ""
    value = node.get(key)
    if value is None or isinstance(value, (dict, list)):
        return ""
    return str(value)


def replace_strings(tree: JsonValue, replacements: Mapping[str, str]) -> int:
    """Replace string leaves matching a key of ``replacements`` (case-insensitive).

    The whole tree is walked, nested objects and arrays included. No
    assumption is made about which property holds which reference; every
    string leaf that equals an original path is rewritten.

    Args:
        tree: Tree to edit in place
        replacements: Original string -> replacement string

    Returns:
        Number of leaves rewritten
    """
    lookup = {original.lower(): new for original, new in replacements.items() if original}
    if not lookup:
        return 0
    return _replace(tree, lookup)


def _replace(node: JsonValue, lookup: dict[str, str]) -> int:
    count = 0
    if isinstance(node, dict):
        items: Iterable[tuple[Any, JsonValue]] = list(node.items())
    elif isinstance(node, list):
        items = list(enumerate(node))
    else:
        return 0

    for key, value in items:
        if isinstance(value, str):
            new_value = lookup.get(value.lower())
            if new_value is not None:
                node[key] = new_value  # type: ignore[index]
                count += 1
        elif isinstance(value, (dict, list)):
            count += _replace(value, lookup)
    return count


def iter_lines(path: Path) -> Iterable[str]:
    """Yield the non-blank lines of a newline-delimited JSON file."""
    with path.open("r", encoding="utf-8-sig") as f:
        for line in f:
            line = line.strip()
            if line:
                yield line


def write_lines(path: Path, lines: Iterable[str]) -> None:
    """Write one record per line, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        for line in lines:
            f.write(line)
            f.write("\n")
