"""
Question Locator
Finds which question a student is asking about and narrows paper or
marking-scheme text down to that question's block.

Everything here is best-effort string matching. A miss returns None and the
caller keeps the full text.
"""
import re
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

# "<digits>" optionally followed by one letter that does not start a word
REF = r"\d+(?:[a-z](?![a-z]))?"

# Tried in order; the first match wins
QUESTION_REFERENCE_PATTERNS = (
    re.compile(rf"\bquestion\s*({REF})", re.IGNORECASE),
    re.compile(rf"\bq\.?\s*({REF})", re.IGNORECASE),
    re.compile(rf"(?:^|\s)({REF})\)", re.IGNORECASE),
    re.compile(rf"^\s*({REF})[.):,;!?]", re.IGNORECASE),
)

MIN_CONTEXT_LENGTH = 100
PAPER_MIN_BLOCK = 20
SCHEME_MIN_BLOCK = 10
PAPER_MAX_LINES = 50
SCHEME_MAX_LINES = 100

# Lines that open another question. Indented working such as "2x + y = 7"
# or "3 marks" must not match.
_REFERENCE_LINE = re.compile(
    rf"^(?:[ \t]*(?:question|q)\.?[ \t]*\(?{REF}\)?(?:[.):]|[ \t]|$)"
    rf"|[ \t]*\(?{REF}\)?[.):](?!\d)"
    rf"|{REF}[ \t]+(?-i:[A-Z]))",
    re.IGNORECASE | re.MULTILINE,
)
_LOOSE_REFERENCE_LINE = re.compile(
    r"^(?:\s*(?:question|q)\.?\s*\(?(\d+)([a-z])?(?![a-z0-9])\)?(?:[.):]|\s|$)"
    r"|\s*\(?(\d+)([a-z])?\)?[.):](?!\d)"
    r"|(\d+)([a-z])?[ \t]+(?-i:[A-Z]))",
    re.IGNORECASE,
)


@dataclass(frozen=True)
class Span:
    start: int
    end: int
    text: str


def detect_question_number(question: str) -> Optional[str]:
    """Return the lower-cased question reference in a student query, e.g. "3b", or None"""
    if not question:
        return None
    for pattern in QUESTION_REFERENCE_PATTERNS:
        match = pattern.search(question)
        if match:
            return match.group(1).lower()
    return None


def _split_ref(ref: str) -> Tuple[str, Optional[str]]:
    match = re.fullmatch(r"(\d+)([a-z])?", ref.lower())
    if not match:
        return ref.lower(), None
    return match.group(1).lstrip("0") or "0", match.group(2)


def _continues(ref: str, number: str, letter: Optional[str]) -> bool:
    """True when a reference line belongs to the requested question (e.g. 5a under 5)"""
    ref_number, ref_letter = _split_ref(ref)
    if (number.lstrip("0") or "0") != ref_number:
        return False
    if ref_letter is None:
        return True
    return (letter or "").lower() == ref_letter


def _reference_parts(line: str) -> Optional[Tuple[str, Optional[str]]]:
    """(number, letter) of a line that opens a question, or None"""
    match = _LOOSE_REFERENCE_LINE.match(line)
    if not match:
        return None
    groups = match.groups()
    for index in (0, 2, 4):
        if groups[index] is not None:
            return groups[index], groups[index + 1]
    return None


def _line_limit(text: str, start: int, max_lines: int) -> int:
    """Offset just past `max_lines` lines counted from `start`"""
    position = start
    for _ in range(max_lines):
        position = text.find("\n", position)
        if position == -1:
            return len(text)
        position += 1
    return position


def _regex_scan(text: str, ref: str, max_lines: int, min_length: int) -> Optional[Span]:
    heading = re.compile(
        rf"^[ \t]*(?:(?:question|q)\.?[ \t]*)?{re.escape(ref)}(?![a-z0-9])(?:[.):]|[ \t]|$)",
        re.IGNORECASE | re.MULTILINE,
    )
    for match in heading.finditer(text):
        line_end = text.find("\n", match.end())
        if line_end == -1:
            return _span(text, match.start(), len(text))

        boundary = _REFERENCE_LINE.search(text, line_end + 1)
        end = boundary.start() if boundary else len(text)
        span = _span(text, match.start(), min(end, _line_limit(text, match.start(), max_lines)))
        if len(span.text) > min_length:
            return span
    return None


def _line_scan(text: str, ref: str, max_lines: int, min_length: int) -> Optional[Span]:
    lines = text.splitlines(keepends=True)
    offset = 0
    start = None
    start_index = 0

    for index, line in enumerate(lines):
        parts = _reference_parts(line)
        if start is None:
            if parts and _continues(ref, *parts):
                start, start_index = offset, index
        elif parts and not _continues(ref, *parts):
            return _span(text, start, offset)
        elif index - start_index >= max_lines:
            return _span(text, start, offset)
        offset += len(line)

    if start is None:
        return None
    return _span(text, start, len(text))


def _span(text: str, start: int, end: int) -> Span:
    return Span(start=start, end=end, text=text[start:end].strip())


SECTION_STRATEGIES: List[Callable[[str, str, int, int], Optional[Span]]] = [_regex_scan, _line_scan]


def locate_section(
    text: str,
    ref: str,
    min_length: int = PAPER_MIN_BLOCK,
    max_lines: int = PAPER_MAX_LINES,
) -> Optional[Span]:
    """Find the block of text for question `ref`; first strategy with a long enough block wins"""
    if not text or not ref:
        return None
    ref = ref.lower()
    for strategy in SECTION_STRATEGIES:
        span = strategy(text, ref, max_lines, min_length)
        if span is not None and len(span.text) > min_length:
            return span
    return None


def narrow_paper_context(text: Optional[str], ref: Optional[str]) -> Optional[str]:
    """Question block of the paper text with a restated label, or None to keep the full text"""
    if not ref or not text or len(text) <= MIN_CONTEXT_LENGTH:
        return None
    span = locate_section(text, ref, PAPER_MIN_BLOCK, PAPER_MAX_LINES)
    if span is None:
        return None
    return f"Question {ref}:\n{span.text}"


def narrow_marking_scheme_context(text: Optional[str], ref: Optional[str]) -> Optional[str]:
    if not ref or not text or len(text) <= MIN_CONTEXT_LENGTH:
        return None
    span = locate_section(text, ref, SCHEME_MIN_BLOCK, SCHEME_MAX_LINES)
    if span is None:
        return None
    return f"Marking scheme for Question {ref}:\n{span.text}"
