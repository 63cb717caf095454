"""
Substring scanners for multistatus XML and iCalendar text.

CalDAV servers disagree a lot on namespace prefixes, whitespace and
even well-formedness, so responses are not fed to an XML parser.
These functions look for literal tags instead, tolerating any
single-level namespace prefix (``<displayname>``, ``<D:displayname>``,
``<d1:displayname>``).

Known limits:

* nested elements with the same name are not handled, the first
  closing tag ends the value
* an opening tag with attributes is not recognized
* self-closing tags have no value
* CDATA sections are returned verbatim
"""

import re
from typing import Iterator
from typing import Optional

_PREFIX_CHARS = re.compile(r"[\w.-]")

_HTML_MARKERS = ("<!doctype html>", "<html>", "<html ")

_RESPONSE_OPEN = re.compile(r"<(?:[\w.-]+:)?response(?:\s[^>]*)?>")
_RESPONSE_CLOSE = re.compile(r"</(?:[\w.-]+:)?response\s*>")


def extract_xml_tag_value(text: str, tag: str) -> Optional[str]:
    """
    Value between the first opening tag and the following closing tag.

    >>> extract_xml_tag_value("<D:displayname>Work</D:displayname>", "displayname")
    'Work'
    """
    start = text.find(f"<{tag}>")
    if start < 0:
        start = text.find(f":{tag}>")
    if start < 0:
        return None
    start = text.index(">", start) + 1

    end = text.find(f"</{tag}>", start)
    if end < 0:
        end = _find_prefixed_close(text, tag, start)
    if end < 0:
        return None
    return text[start:end]


def _find_prefixed_close(text: str, tag: str, start: int) -> int:
    """Position of the '<' of the first </prefix:tag> at or after start"""
    needle = f":{tag}>"
    pos = text.find(needle, start)
    while pos >= 0:
        i = pos
        while i > start and _PREFIX_CHARS.match(text[i - 1]):
            i -= 1
        if i < pos and i - 2 >= start and text[i - 2 : i] == "</":
            return i - 2
        pos = text.find(needle, pos + 1)
    return -1


def extract_ical_field(text: str, field_prefix: str) -> Optional[str]:
    """
    Value of the first property starting with ``field_prefix``.

    With a prefix like "SUMMARY:" the value starts right after the
    prefix.  With a bare property name like "DTSTART", any parameters
    are skipped and the value starts after the next colon on the same
    line.  The value ends at the line break.

    >>> extract_ical_field("DTSTART;TZID=UTC:20240101T090000Z\\n", "DTSTART")
    '20240101T090000Z'
    """
    start = text.find(field_prefix)
    if start < 0:
        return None
    start += len(field_prefix)
    line_end = _find_line_end(text, start)

    if not field_prefix.endswith(":"):
        colon = text.find(":", start, line_end)
        if colon >= 0:
            start = colon + 1

    return text[start:line_end].rstrip("\r")


def _find_line_end(text: str, start: int) -> int:
    ends = [pos for pos in (text.find("\n", start), text.find("\r", start)) if pos >= 0]
    return min(ends) if ends else len(text)


def iter_response_blocks(text: str) -> Iterator[str]:
    """
    Contents of the <response> elements of a multistatus body, in
    document order.  An unterminated block at the end is dropped.
    """
    pos = 0
    while True:
        opening = _RESPONSE_OPEN.search(text, pos)
        if not opening:
            return
        closing = _RESPONSE_CLOSE.search(text, opening.end())
        if not closing:
            return
        yield text[opening.end() : closing.start()]
        pos = closing.end()


def has_element(fragment: str, name: str) -> bool:
    """
    True if the fragment contains an element ``name``, with or without a
    namespace prefix, empty or self-closing - i.e. <C:calendar/>,
    <calendar></calendar> or <cal:calendar xmlns:cal="..."/>.  Longer
    names like calendar-home-set don't count.
    """
    pattern = r"<(?:[\w.-]+:)?%s(?:\s[^>]*)?/?>" % re.escape(name)
    return re.search(pattern, fragment) is not None


def looks_like_html(text: str) -> bool:
    """
    HTML where XML was expected is a common symptom of a login portal,
    a proxy error page or a wrong server URL.
    """
    lowered = text.lower()
    return any(marker in lowered for marker in _HTML_MARKERS)
