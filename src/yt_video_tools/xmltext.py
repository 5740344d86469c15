"""
xmltext.py — A minimal tag/attribute scanner for YouTube's XML payloads.

The RSS feed and the timed-text captions are small, flat documents that
are occasionally truncated or slightly malformed.  Instead of a full XML
parser (which rejects the whole document on the first error) we scan for
the few elements we need with regexes.  A broken element only costs that
element; everything around it still parses.

Building blocks:
    iter_elements()       Lazily yield (attributes, inner_xml) per element.
    extract_tag()         Inner text of the first <tag> in a fragment.
    extract_nested_tag()  Inner text of <child> inside the first <parent>.
    extract_attr()        An attribute value of the first <tag>.
    strip_tags()          Drop inline markup.
    decode_entities()     Decode the XML named entities and numeric refs.
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from functools import lru_cache

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_NAMED_ENTITIES = {
    "amp": "&",
    "lt": "<",
    "gt": ">",
    "quot": '"',
    "apos": "'",
}

# A numeric reference to a low surrogate (U+DC00..U+DFFF), decimal or hex.
_LOW_SURROGATE_REF = (
    r"&#(?:0*(5(?:6(?:3[2-9]\d|[4-9]\d\d)|7(?:[0-2]\d\d|3(?:[0-3]\d|4[0-3]))))"
    r"|[xX]0*([dD][c-fC-F][0-9a-fA-F]{2}));"
)

# One pass over the text, so "&amp;lt;" decodes to "&lt;" and not "<".  A
# reference may drag along a following low-surrogate reference so that a
# UTF-16 pair written as two references decodes to one character.
_ENTITY_PATTERN = re.compile(
    r"&(?:(amp|lt|gt|quot|apos)|#(\d+)|#[xX]([0-9a-fA-F]+));"
    rf"(?:{_LOW_SURROGATE_REF})?"
)

_TAG_PATTERN = re.compile(r"<[^>]+>")

# name="value" or name='value'; names may carry a namespace prefix.
_ATTR_PATTERN = re.compile(r"""([A-Za-z_][\w:.-]*)\s*=\s*(?:"([^"]*)"|'([^']*)')""")


# ---------------------------------------------------------------------------
# Text helpers
# ---------------------------------------------------------------------------

def _char_or_raw(codepoint: int, raw: str) -> str:
    # Lone surrogates and out-of-range references are left as written.
    if 0xD800 <= codepoint <= 0xDFFF:
        return raw
    try:
        return chr(codepoint)
    except (ValueError, OverflowError):
        return raw


def _replace_entity(match: re.Match[str]) -> str:
    name, decimal, hexadecimal, low_decimal, low_hex = match.groups()
    head, _, tail = match.group(0).partition(";")
    head += ";"

    if name:
        return _NAMED_ENTITIES[name] + tail

    codepoint = int(decimal) if decimal else int(hexadecimal, 16)
    if tail and 0xD800 <= codepoint <= 0xDBFF:
        low = int(low_decimal) if low_decimal else int(low_hex, 16)
        return chr(0x10000 + ((codepoint - 0xD800) << 10) + (low - 0xDC00))
    return _char_or_raw(codepoint, head) + tail


def decode_entities(text: str) -> str:
    """
    Decode XML entities in a text fragment.

    Handles &amp; &lt; &gt; &quot; &apos; plus decimal (&#39;) and
    hexadecimal (&#x27;) character references.  A surrogate pair written
    as two references (&#55357;&#56832;) becomes one character.  Anything
    else that looks like an entity, including a lone surrogate reference,
    is left untouched.

    Examples:
        >>> decode_entities("A &amp; B")
        'A & B'
        >>> decode_entities("it&#39;s")
        "it's"
    """
    return _ENTITY_PATTERN.sub(_replace_entity, text)


def strip_tags(fragment: str) -> str:
    """Remove every <...> tag from a fragment, keeping the text between them."""
    return _TAG_PATTERN.sub("", fragment)


def parse_attrs(raw: str) -> dict[str, str]:
    """Parse the attribute part of a start tag into a dict (values not decoded)."""
    attrs: dict[str, str] = {}
    for match in _ATTR_PATTERN.finditer(raw):
        name, double_quoted, single_quoted = match.groups()
        attrs[name] = double_quoted if double_quoted is not None else single_quoted
    return attrs


# ---------------------------------------------------------------------------
# Element scanning
# ---------------------------------------------------------------------------

@lru_cache(maxsize=64)
def _element_pattern(tag: str) -> re.Pattern[str]:
    # Group 1: raw attributes; group 2: inner XML.  The (?<!/) keeps a
    # self-closing <tag/> from swallowing everything up to the next </tag>.
    name = re.escape(tag)
    return re.compile(rf"<{name}(\s[^>]*?)?(?<!/)>(.*?)</{name}\s*>", re.DOTALL)


@lru_cache(maxsize=64)
def _start_tag_pattern(tag: str) -> re.Pattern[str]:
    return re.compile(rf"<{re.escape(tag)}(\s[^>]*?)?/?>", re.DOTALL)


def iter_elements(xml: str, tag: str) -> Iterator[tuple[dict[str, str], str]]:
    """
    Yield (attributes, inner_xml) for every <tag>...</tag> in document order.

    This is a generator: callers that stop iterating early never pay for
    scanning the rest of the document.
    """
    for match in _element_pattern(tag).finditer(xml):
        yield parse_attrs(match.group(1) or ""), match.group(2)


def extract_tag(xml: str, tag: str) -> str | None:
    """
    Return the trimmed inner XML of the first <tag> element, or None.

    The result is NOT entity-decoded; callers decide whether the field is
    text (decode it) or an identifier (use it as-is).
    """
    match = _element_pattern(tag).search(xml)
    return match.group(2).strip() if match else None


def extract_nested_tag(xml: str, parent: str, child: str) -> str | None:
    """Return the inner XML of <child> inside the first <parent>, or None."""
    outer = extract_tag(xml, parent)
    if not outer:
        return None
    return extract_tag(outer, child)


def extract_attr(xml: str, tag: str, attr: str) -> str | None:
    """
    Return the value of `attr` on the first <tag> start tag, or None.

    Works for both self-closing (<media:thumbnail url="..."/>) and paired
    elements.  Only the first <tag> is considered.
    """
    match = _start_tag_pattern(tag).search(xml)
    if not match:
        return None
    return parse_attrs(match.group(1) or "").get(attr)
