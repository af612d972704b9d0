"""Recover an implementation plan from a free-text model reply.

The reply goes through three stages, each only tried when the previous
one failed:

1. direct parse of the JSON object found in the reply
2. mechanical repair of the JSON text, then one more parse
3. fallback synthesis (see :mod:`taskforge.pipeline.fallback`)

Every text transform here is total: it never raises and always returns a
string, so the stages compose left to right.
"""

import json
import logging
import re
from collections.abc import Iterator
from itertools import chain, islice

from pydantic import ValidationError

from taskforge.llm.schemas import ImplementationPlan
from taskforge.pipeline.fallback import build_fallback_plan
from taskforge.pipeline.models import TaskDescriptor


logger = logging.getLogger(__name__)

_FENCE_OPEN = re.compile(r"```[^\n]*\n?")
_CONTENT_KEY = re.compile(r'"content"\s*:\s*"')
# What may follow the closing quote of a "content" value: another key, or the
# end of the file object followed by the next object or the end of the list
_CONTENT_END = re.compile(
    r'\s*(?:,\s*"[A-Za-z_][\w-]*"\s*:|,?\s*\}\s*[,\]{])'
)
# Combinations of content-value ends tried before giving up on a repair
MAX_REPAIR_VARIANTS = 200
_HEX4 = re.compile(r"[0-9a-fA-F]{4}")
_COMMA_FIXES = re.compile(
    r'"(?:[^"\\]|\\.)*"|(?:,\s*)+(?=[}\]])|\}\s*(?=\{)|\]\s*(?=\[)',
    re.DOTALL,
)

_SIMPLE_ESCAPES = set('"\\/bfnrt')
_CONTROL_ESCAPES = {"\n": "\\n", "\r": "\\r", "\t": "\\t", "\b": "\\b", "\f": "\\f"}
_STRING_CLOSERS = set(",}]:")


class ResponseParseError(Exception):
    """Raised when a reply cannot be parsed into a valid plan."""

    def __init__(self, message: str, stage: str = "parse"):
        super().__init__(message)
        self.stage = stage


# ---------------------------------------------------------------------------
# Extraction
# ---------------------------------------------------------------------------


def strip_code_fence(text: str) -> str:
    """Return the interior of the fenced block wrapping the reply's object.

    Only a fence that opens before the first ``{`` and holds that brace
    counts. Fences after it belong to file contents, so the block runs to
    the last closing fence behind the final ``}``.
    """
    text = text.strip()
    opening = _FENCE_OPEN.search(text)
    brace = text.find("{")
    if not opening or brace == -1 or opening.start() > brace:
        return text

    first_close = text.find("```", opening.end())
    if first_close != -1 and first_close < brace:
        return text

    body = text[opening.end() :]
    closing = body.rfind("```")
    if closing > body.rfind("}"):
        body = body[:closing]
    return body.strip()


def trim_to_object(text: str) -> str:
    """Cut leading and trailing prose around the outermost braces."""
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end < start:
        return text
    return text[start : end + 1]


def parse_plan(text: str) -> ImplementationPlan:
    """Strictly parse and validate a plan.

    Raises:
        ResponseParseError: If the text is not JSON or not a valid plan
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ResponseParseError(f"Invalid JSON: {e}", stage="parse") from e

    if not isinstance(data, dict) or not isinstance(data.get("files"), list):
        raise ResponseParseError(
            "Invalid implementation structure: missing files array",
            stage="structure",
        )

    try:
        return ImplementationPlan.model_validate(data)
    except ValidationError as e:
        raise ResponseParseError(
            f"Invalid implementation plan: {e.error_count()} validation error(s)",
            stage="validate",
        ) from e


# ---------------------------------------------------------------------------
# Repair
# ---------------------------------------------------------------------------


def _read_escape(text: str, index: int) -> tuple[str, int]:
    """Read the backslash at ``index``; escape it if it starts no valid sequence."""
    following = text[index + 1 : index + 2]
    if following in _SIMPLE_ESCAPES:
        return text[index : index + 2], index + 2
    if following == "u" and _HEX4.fullmatch(text[index + 2 : index + 6]):
        return text[index : index + 6], index + 6
    return "\\\\", index + 1


def _escape_char(char: str) -> str:
    if char in _CONTROL_ESCAPES:
        return _CONTROL_ESCAPES[char]
    if ord(char) < 0x20:
        return f"\\u{ord(char):04x}"
    return char


def _escape_body(body: str) -> str:
    """Escape a raw string body so it is a valid JSON string interior."""
    out: list[str] = []
    i = 0
    while i < len(body):
        char = body[i]
        if char == "\\":
            escape, i = _read_escape(body, i)
            out.append(escape)
            continue
        out.append('\\"' if char == '"' else _escape_char(char))
        i += 1
    return "".join(out)


def _is_escaped(text: str, index: int) -> bool:
    backslashes = 0
    j = index - 1
    while j >= 0 and text[j] == "\\":
        backslashes += 1
        j -= 1
    return backslashes % 2 == 1


def _content_ends(text: str, start: int) -> list[int]:
    """Positions of every quote that could close a content value, in order."""
    ends = []
    i = start
    while True:
        i = text.find('"', i)
        if i == -1:
            return ends
        if not _is_escaped(text, i) and _CONTENT_END.match(text, i + 1):
            ends.append(i)
        i += 1


def _reescaped_variants(text: str, pos: int = 0) -> Iterator[str]:
    """Yield ``text[pos:]`` with content values re-escaped.

    Each choice of closing quotes gives one variant; earlier quotes are
    tried first, for the leftmost value slowest.
    """
    match = _CONTENT_KEY.search(text, pos)
    ends = _content_ends(text, match.end()) if match else []
    if not ends:
        yield text[pos:]
        return
    for end in ends:
        head = text[pos : match.end()] + _escape_body(text[match.end() : end]) + '"'
        for tail in _reescaped_variants(text, end + 1):
            yield head + tail


def reescape_content_fields(text: str) -> str:
    """Re-escape the value of every ``"content"`` key.

    Content values embed arbitrary source code, so their end is found by
    what follows the closing quote (another key or the end of the file
    object) rather than by the first unescaped quote. This takes the
    earliest such quote; :func:`repair_json` also tries the later ones.
    """
    return next(_reescaped_variants(text))


def _closes_string(text: str, index: int) -> bool:
    while index < len(text) and text[index].isspace():
        index += 1
    return index >= len(text) or text[index] in _STRING_CLOSERS


def escape_string_literals(text: str) -> str:
    """Escape control characters, bare backslashes and stray quotes in strings.

    A quote inside a string only closes it when the next non-blank character
    is a separator (``, } ] :``) or the end of the text.
    """
    out: list[str] = []
    in_string = False
    i = 0
    while i < len(text):
        char = text[i]
        if not in_string:
            out.append(char)
            in_string = char == '"'
            i += 1
            continue

        if char == "\\":
            escape, i = _read_escape(text, i)
            out.append(escape)
            continue

        if char == '"':
            if _closes_string(text, i + 1):
                in_string = False
                out.append(char)
            else:
                out.append('\\"')
        else:
            out.append(_escape_char(char))
        i += 1
    return "".join(out)


def _fix_comma(match: re.Match) -> str:
    token = match.group(0)
    if token.startswith('"'):
        return token
    if token.startswith(","):
        return ""
    return token[0] + "," + token[1:]


def fix_commas(text: str) -> str:
    """Drop trailing commas and insert missing ones between ``}{`` and ``][``."""
    return _COMMA_FIXES.sub(_fix_comma, text)


def _is_json(text: str) -> bool:
    try:
        json.loads(text)
    except json.JSONDecodeError:
        return False
    return True


def repair_json(text: str) -> str:
    """Return the first mechanically repaired variant of ``text`` that is valid JSON.

    Variants differ in where each content value is taken to end; every
    variant then gets string escaping and comma fixes. Valid JSON, and text
    no variant repairs, come back unchanged, so repairing twice equals
    repairing once.
    """
    if _is_json(text):
        return text

    variants = islice(_reescaped_variants(text), MAX_REPAIR_VARIANTS)
    for variant in chain(variants, (text,)):
        candidate = fix_commas(escape_string_literals(variant))
        if _is_json(candidate):
            return candidate

    logger.debug("No repair variant produced valid JSON")
    return text


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def interpret_response(raw: str, task: TaskDescriptor | None = None) -> ImplementationPlan:
    """Turn a model reply into a plan, repairing or synthesizing as needed.

    Args:
        raw: Model reply text
        task: Task the reply answers, used to shape fallback files

    Returns:
        ImplementationPlan whose ``source`` records the stage that produced it
    """
    text = trim_to_object(strip_code_fence(raw or ""))

    try:
        return parse_plan(text).with_source("parsed")
    except ResponseParseError as e:
        logger.warning(f"Direct parse failed ({e.stage}): {e}")

    try:
        plan = parse_plan(repair_json(text)).with_source("repaired")
        logger.info("Parsed model response after repair")
        return plan
    except ResponseParseError as e:
        logger.warning(f"Repaired parse failed ({e.stage}): {e}")
        error = e

    logger.error("Falling back to synthesized implementation plan")
    logger.debug(f"Response preview: {text[:500]}")
    return build_fallback_plan(raw or "", task, error)
