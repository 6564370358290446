"""
HTTP call extractor for endpoint_scan.

Finds fetch/axios/api-client calls whose first argument builds a URL from
string literals, template strings or concatenations.
"""

from __future__ import annotations

import logging
import re
from typing import NamedTuple

from endpoint_scan.models import CONCATENATION, LITERAL, TEMPLATE, CallSite, FileEntry
from endpoint_scan.utils import line_and_column

logger = logging.getLogger(__name__)

QUOTES = "'\"`"
OPENERS = {"(": ")", "[": "]", "{": "}"}
CLOSERS = ")]}"
STRING_PREFIX_CHARS = "fFrRbBuU"

# Arguments longer than this are treated as unterminated
MAX_ARGUMENT_LENGTH = 2000
MAX_NESTING = 64

HTTP_METHODS = ("fetch", "get", "post", "put", "delete", "patch", "request")

# Receivers whose .get()/.post() define server routes instead of calling them
ROUTE_DEFINITION_RECEIVERS = frozenset({"app", "router", "server", "fastify", "route"})

# fetch(, axios.get(, this.http.post<User>(, api?.request(
CALL_PATTERN = re.compile(
    r'(?<![\w$])'
    r'(?P<callee>(?:[A-Za-z_$][\w$]*\s*\??\.\s*)*'
    r'(?:' + "|".join(HTTP_METHODS) + r'))'
    r'\s*(?:<[^<>()\n]*>\s*)?\('
)

# axios({ method: 'get', url: '/api/x' })
AXIOS_CONFIG_PATTERN = re.compile(r'(?<![\w$])(?P<callee>axios)\s*\(\s*\{[^{}]*?\burl\s*:\s*')

INTERPOLATION_PATTERN = re.compile(r'\$\{')
FSTRING_FIELD_PATTERN = re.compile(r'(?<!\{)\{[^{}]*\}')
TEMPLATE_FIELD_PATTERN = re.compile(r'\$\{[^{}]*\}')
WHITESPACE_PATTERN = re.compile(r'\s')


class _StringOperand(NamedTuple):
    """A single string literal operand."""

    body: str
    interpolated: bool


def _skip_string(text: str, i: int, limit: int, depth: int = 0) -> int:
    """Return the index just past the string literal opening at text[i], or -1."""
    quote = text[i]
    i += 1
    while i < limit:
        ch = text[i]
        if ch == "\\":
            i += 2
            continue
        if ch == quote:
            return i + 1
        if ch == "\n" and quote != "`":
            return -1
        if quote == "`" and text.startswith("${", i):
            i = _skip_nested(text, i + 2, "}", limit, depth + 1)
            if i < 0:
                return -1
            continue
        i += 1
    return -1


def _skip_nested(text: str, i: int, closer: str, limit: int, depth: int = 0) -> int:
    """Return the index just past ``closer``, skipping nested brackets and strings."""
    if depth > MAX_NESTING:
        return -1
    while i < limit:
        ch = text[i]
        if ch in QUOTES:
            i = _skip_string(text, i, limit, depth)
            if i < 0:
                return -1
            continue
        if ch in OPENERS:
            i = _skip_nested(text, i + 1, OPENERS[ch], limit, depth + 1)
            if i < 0:
                return -1
            continue
        if ch == closer:
            return i + 1
        if ch in CLOSERS:
            return -1
        i += 1
    return -1


def cut_argument(text: str, start: int) -> str | None:
    """
    Cut the argument expression that starts at ``start``.

    The argument ends at the first top-level ``,``, ``)`` or ``}``.

    Returns:
        The stripped argument text, or None when it is empty, unterminated
        or longer than MAX_ARGUMENT_LENGTH.
    """
    limit = min(len(text), start + MAX_ARGUMENT_LENGTH)
    i = start
    while i < limit:
        ch = text[i]
        if ch in QUOTES:
            i = _skip_string(text, i, limit)
            if i < 0:
                return None
            continue
        if ch in OPENERS:
            i = _skip_nested(text, i + 1, OPENERS[ch], limit, 1)
            if i < 0:
                return None
            continue
        if ch in ",)}":
            return text[start:i].strip() or None
        if ch == "]":
            return None
        i += 1
    return None


def split_operands(arg: str) -> list[str]:
    """Split an expression on top-level ``+`` operators."""
    operands: list[str] = []
    limit = len(arg)
    last = 0
    i = 0
    while i < limit:
        ch = arg[i]
        if ch in QUOTES:
            end = _skip_string(arg, i, limit)
            if end < 0:
                return [arg]
            i = end
            continue
        if ch in OPENERS:
            end = _skip_nested(arg, i + 1, OPENERS[ch], limit, 1)
            if end < 0:
                return [arg]
            i = end
            continue
        if ch == "+":
            # ++ and += are not concatenation
            if arg[i + 1:i + 2] in ("+", "=") or arg[i - 1:i] == "+":
                i += 2
                continue
            operands.append(arg[last:i].strip())
            last = i + 1
        i += 1
    operands.append(arg[last:].strip())
    return [op for op in operands if op]


def parse_string_operand(operand: str) -> _StringOperand | None:
    """Return the body of an operand that is exactly one string literal."""
    prefix_len = 0
    while prefix_len < min(2, len(operand)) and operand[prefix_len] in STRING_PREFIX_CHARS:
        prefix_len += 1
    if prefix_len >= len(operand) or operand[prefix_len] not in QUOTES:
        return None
    if _skip_string(operand, prefix_len, len(operand)) != len(operand):
        return None

    quote = operand[prefix_len]
    body = operand[prefix_len + 1:-1]
    prefix = operand[:prefix_len].lower()
    if quote == "`":
        interpolated = bool(INTERPOLATION_PATTERN.search(body))
    elif "f" in prefix:
        interpolated = bool(FSTRING_FIELD_PATTERN.search(body))
    else:
        interpolated = False
    return _StringOperand(body, interpolated)


def _leading_static(operand: _StringOperand) -> str:
    """Literal text of a string operand before its first interpolation."""
    if not operand.interpolated:
        return operand.body
    match = INTERPOLATION_PATTERN.search(operand.body) or FSTRING_FIELD_PATTERN.search(operand.body)
    return operand.body[:match.start()] if match else operand.body


def looks_like_url(body: str) -> bool:
    """Heuristic: does this string fragment look like a URL or path?"""
    if body.startswith(("http://", "https://")):
        return True
    if "/" not in body:
        return False
    stripped = TEMPLATE_FIELD_PATTERN.sub("", body)
    stripped = FSTRING_FIELD_PATTERN.sub("", stripped)
    return not WHITESPACE_PATTERN.search(stripped)


def _string_fragments(arg: str) -> list[_StringOperand]:
    """All top-level string literals anywhere in an expression."""
    fragments: list[_StringOperand] = []
    limit = len(arg)
    i = 0
    while i < limit:
        ch = arg[i]
        if ch in QUOTES:
            end = _skip_string(arg, i, limit)
            if end < 0:
                break
            start = i
            while start > max(0, i - 2) and arg[start - 1] in STRING_PREFIX_CHARS:
                start -= 1
            parsed = parse_string_operand(arg[start:end])
            if parsed is not None:
                fragments.append(parsed)
            i = end
            continue
        i += 1
    return fragments


class HttpCallsScanner:
    """Extract candidate API call sites from source text."""

    def extract(self, entry: FileEntry) -> list[CallSite]:
        """
        Extract call sites from a file, in order of appearance.

        Args:
            entry: File path and text.

        Returns:
            Call sites whose first argument looks URL-producing. Malformed
            snippets produce no call site.
        """
        text = entry.text
        matches = list(CALL_PATTERN.finditer(text)) + list(AXIOS_CONFIG_PATTERN.finditer(text))
        matches.sort(key=lambda m: m.start())

        sites: list[CallSite] = []
        for match in matches:
            site = self._build_site(entry, match)
            if site is not None:
                sites.append(site)
        return sites

    def _build_site(self, entry: FileEntry, match: re.Match[str]) -> CallSite | None:
        """Turn a regex match into a CallSite, or None when the argument isn't a URL."""
        callee = WHITESPACE_PATTERN.sub("", match.group("callee")).replace("?.", ".")
        receivers = callee.split(".")[:-1]
        if receivers and receivers[-1] in ROUTE_DEFINITION_RECEIVERS:
            return None

        arg = cut_argument(entry.text, match.end())
        if arg is None:
            return None

        operands = split_operands(arg)
        parsed = [parse_string_operand(op) for op in operands]
        strings = [p for p in parsed if p is not None]

        if strings:
            if not any(looks_like_url(s.body) for s in strings):
                return None
            kind, url, static_prefix, all_literal = self._describe(operands, parsed)
        else:
            # Ternaries, || defaults and other shapes: fall back to fragments
            fragments = [f for f in _string_fragments(arg) if looks_like_url(f.body)]
            if not fragments:
                return None
            interpolated = any(f.interpolated for f in fragments)
            kind = TEMPLATE if interpolated else LITERAL
            url = fragments[0].body
            static_prefix = ""
            all_literal = not interpolated

        line, column = line_and_column(entry.text, match.start())
        logger.debug("%s:%d: %s(%s) [%s]", entry.path, line, callee, arg, kind)

        return CallSite(
            path=entry.path,
            line=line,
            column=column,
            callee=callee,
            text=arg,
            kind=kind,
            url=url,
            static_prefix=static_prefix,
            all_literal=all_literal,
        )

    @staticmethod
    def _describe(
        operands: list[str],
        parsed: list[_StringOperand | None],
    ) -> tuple[str, str, str, bool]:
        """Compute kind, URL, static prefix and literal-ness of an argument."""
        url_parts: list[str] = []
        for operand, string in zip(operands, parsed):
            url_parts.append(string.body if string is not None else "${" + operand + "}")
        url = "".join(url_parts)

        static_parts: list[str] = []
        for string in parsed:
            if string is None:
                break
            static_parts.append(_leading_static(string))
            if string.interpolated:
                break
        static_prefix = "".join(static_parts)

        all_literal = all(s is not None and not s.interpolated for s in parsed)

        if len(operands) > 1:
            kind = CONCATENATION
        elif parsed[0] is not None and parsed[0].interpolated:
            kind = TEMPLATE
        else:
            kind = LITERAL
        return kind, url, static_prefix, all_literal
