from __future__ import annotations

import json
import logging
import re
import tomllib
from dataclasses import dataclass
from typing import Any, Optional
import collections.abc
from html.parser import HTMLParser

import yaml
import xmltodict

logger = logging.getLogger(__name__)

_HTML_HINT = re.compile(r"<\s*(html|body)[\s>]", re.IGNORECASE)


# --------------------------
# Helpers
# --------------------------

def _norm_text(data: bytes | bytearray | str, *, encoding: Optional[str] = None) -> str:
    if isinstance(data, (bytes, bytearray)):
        return data.decode(encoding or 'utf-8', errors='replace')
    if isinstance(data, str):
        return data
    return str(data)


def _to_builtin(obj: Any) -> Any:
    # xmltodict returns dicts of nested mappings; flatten to plain containers
    if isinstance(obj, list):
        return [_to_builtin(x) for x in obj]
    if isinstance(obj, collections.abc.Mapping):
        return {k: _to_builtin(v) for k, v in obj.items()}
    return obj


def format_for_path(path: str) -> Optional[str]:
    """Returns 'json', 'yaml' or 'toml' for a config file name, else None."""
    lowered = path.lower()
    if lowered.endswith(".json"):
        return 'json'
    if lowered.endswith((".yaml", ".yml")):
        return 'yaml'
    if lowered.endswith(".toml"):
        return 'toml'
    return None


# --------------------------
# Public API
# --------------------------

@dataclass
class JSONResult:
    """Outcome of a strict JSON parse: either ``value`` or an ``error`` message."""
    value: Any = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def to_json(data: bytes | bytearray | str) -> JSONResult:
    """Parses ``data`` as strict JSON. Never raises; failures land in ``error``."""
    try:
        return JSONResult(value=json.loads(_norm_text(data)))
    except (ValueError, TypeError) as e:
        return JSONResult(error=str(e))


def deserialize(data: bytes | bytearray | str, *, fmt: str) -> Any:
    """
    Convert text to native Python structures.
    Supported fmt: 'json', 'yaml', 'toml', 'xml'. Parse errors propagate.
    """
    text = _norm_text(data)
    f = (fmt or '').lower()
    if f == 'json':
        return json.loads(text)
    if f == 'yaml':
        return yaml.safe_load(text)
    if f == 'toml':
        return tomllib.loads(text)
    if f == 'xml':
        return _to_builtin(xmltodict.parse(text))
    raise ValueError(f"Unsupported serialization format: {fmt!r}")


class _BodyLocator(HTMLParser):
    """Records where ``<body>`` opens and closes, tolerating tag soup."""

    DOCUMENT_ROOTS = ("html", "head", "body")

    def __init__(self):
        super().__init__(convert_charrefs=True)
        self.first_tag: Optional[str] = None
        self.leading_text = False
        self.body_open: Optional[tuple] = None
        self.body_close: Optional[tuple] = None
        self.html_close: Optional[tuple] = None

    def handle_starttag(self, tag, attrs):
        if self.first_tag is None:
            self.first_tag = tag
        if tag == "body" and self.body_open is None:
            self.body_open = self.getpos()

    def handle_endtag(self, tag):
        if self.body_open is None:
            return
        if tag == "body" and self.body_close is None:
            self.body_close = self.getpos()
        elif tag == "html" and self.html_close is None:
            self.html_close = self.getpos()

    def handle_data(self, data):
        if self.first_tag is None and data.strip():
            self.leading_text = True

    def is_document(self) -> bool:
        return (not self.leading_text
                and self.first_tag in self.DOCUMENT_ROOTS
                and self.body_open is not None)


def _offset(text: str, pos: tuple) -> int:
    # HTMLParser positions are (1-based line, 0-based column), counting "\n" only
    line, column = pos
    start = 0
    for _ in range(line - 1):
        start = text.index("\n", start) + 1
    return start + column


def html_body(text: str) -> Optional[str]:
    """
    Returns the ``<body>`` element of an HTML document held in ``text``.

    A document starts with ``<html>``, ``<head>`` or ``<body>`` (doctypes and
    comments may come first) and has a body. Parsing is lenient, so void
    elements, unclosed tags and entities are fine. The body markup is returned
    as written; an omitted ``</body>`` ends at ``</html>`` or the end of text.
    Anything else returns None.
    """
    if not isinstance(text, str) or not _HTML_HINT.search(text):
        return None
    locator = _BodyLocator()
    try:
        locator.feed(text)
        locator.close()
    except Exception:
        logger.debug("string looked like HTML but did not parse", exc_info=True)
        return None
    if not locator.is_document():
        return None

    start = _offset(text, locator.body_open)
    if locator.body_close is not None:
        close = text.find(">", _offset(text, locator.body_close))
        end = len(text) if close == -1 else close + 1
    elif locator.html_close is not None:
        end = _offset(text, locator.html_close)
    else:
        end = len(text)
    return text[start:end].rstrip()


__all__ = [
    "JSONResult",
    "to_json",
    "deserialize",
    "html_body",
    "format_for_path",
]
