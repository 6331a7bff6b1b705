"""
Module: sanitize
Purpose: Defensive text cleaning applied to payload values before they are journaled
Dependencies: html, re, typing

The cleaning mirrors what an admin screen expects of "safe text": markup is
stripped, a stray ``<`` becomes ``&lt;``, runs of whitespace collapse to one
space, percent-encoded octets are dropped and the result is trimmed.
Non-string scalars keep their JSON type. ``ip``/``ip_hash`` are stored
verbatim (as strings) so hashes and addresses are never altered.
"""

from __future__ import annotations

import html
import re
from typing import Any, Dict, Mapping

__all__ = ["VERBATIM_KEYS", "clean_text", "sanitize_value", "sanitize_payload"]

VERBATIM_KEYS = frozenset({"ip", "ip_hash"})

_SCRIPT_STYLE = re.compile(r"<(script|style)[^>]*?>.*?</\1>", re.IGNORECASE | re.DOTALL)
_TAG_FRAGMENT = re.compile(r"<[^>]*?((?=<)|>|$)", re.DOTALL)
_TAG = re.compile(r"<[^>]*>", re.DOTALL)
_WHITESPACE = re.compile(r"[\r\n\t ]+")
_SPACES = re.compile(r" +")
_OCTET = re.compile(r"%[a-f0-9]{2}", re.IGNORECASE)


def _escape_unclosed(match: "re.Match[str]") -> str:
    fragment = match.group(0)
    if fragment.endswith(">"):
        return fragment
    return html.escape(fragment)


def clean_text(text: str) -> str:
    """Strip markup and control whitespace from a single-line text value."""
    if "<" in text:
        text = _TAG_FRAGMENT.sub(_escape_unclosed, text)
        text = _SCRIPT_STYLE.sub("", text)
        text = _TAG.sub("", text)
    text = _WHITESPACE.sub(" ", text).strip()

    found = False
    while _OCTET.search(text):
        text = _OCTET.sub("", text)
        found = True
    if found:
        text = _SPACES.sub(" ", text).strip()
    return text


def sanitize_value(value: Any) -> Any:
    if isinstance(value, str):
        return clean_text(value)
    if isinstance(value, Mapping):
        return {k: sanitize_value(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [sanitize_value(v) for v in value]
    return value


def sanitize_payload(payload: Mapping[str, Any]) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for key, value in payload.items():
        if key in VERBATIM_KEYS:
            out[key] = "" if value is None else str(value)
        else:
            out[key] = sanitize_value(value)
    return out
