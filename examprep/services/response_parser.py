import re
from typing import List, Optional

from examprep.models.chat import AIResponse


def _section_pattern(heading: str) -> re.Pattern:
    words = r"\s+".join(re.escape(word) for word in heading.split())
    return re.compile(rf"##\s*{words}\b[ \t]*:?\s*(.*?)(?=##|\Z)", re.IGNORECASE | re.DOTALL)


EXPLANATION = _section_pattern("Explanation")
EXAMPLES = _section_pattern("Examples")
FULL_MARKS = _section_pattern("How to Get Full Marks")
SOLUTION = _section_pattern("Solution")

BULLET = re.compile(r"^[-*]\s*")


def _section(pattern: re.Pattern, text: str) -> Optional[str]:
    match = pattern.search(text)
    return match.group(1).strip() if match else None


def _as_list(block: Optional[str]) -> List[str]:
    if not block:
        return []
    items = (BULLET.sub("", line.strip()).strip() for line in block.splitlines())
    return [item for item in items if item]


def parse_ai_response(text: str) -> AIResponse:
    """
    Split a model reply into the four answer sections.

    A reply without an Explanation or Solution heading is returned whole as
    the explanation.
    """
    text = text or ""
    explanation = _section(EXPLANATION, text)
    solution = _section(SOLUTION, text)

    if not explanation and not solution:
        return AIResponse(explanation=text)

    return AIResponse(
        explanation=explanation or "",
        examples=_as_list(_section(EXAMPLES, text)),
        how_to_get_full_marks=_as_list(_section(FULL_MARKS, text)),
        solution=solution or "",
    )
