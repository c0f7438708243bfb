"""
Prompt Builder
Assembles the tutoring prompt sent to the generation model.

The four "##" headings and their order are what the response parser reads
back, so they are appended here and never come from the configurable copy.
"""
import logging
from pathlib import Path
from typing import Optional

from examprep.config import config

logger = logging.getLogger(__name__)

SECTION_HEADINGS = ("Explanation", "Examples", "How to Get Full Marks", "Solution")

DEFAULT_INTRO = (
    "You are an expert exam tutor helping students understand exam questions "
    "and how to answer them effectively."
)

NO_PAPER_CONTENT = "No paper content provided"
NO_MARKING_SCHEME = "No marking scheme provided"

PAPER_EMPHASIS = (
    "Base your answer on the exam paper context above. If it contains the specific "
    "question the student is asking about, address that question directly."
)
SCHEME_EMPHASIS = (
    "Use the marking scheme context above as the authority on what earns marks. "
    "Match the marking scheme's wording and key points exactly where possible."
)

SECTION_INSTRUCTIONS = {
    "Explanation": "Provide a clear explanation of the question and what it's asking for.",
    "Examples": "Provide 2-3 relevant examples that illustrate the concept or help understand the question better.",
    "How to Get Full Marks": (
        "Provide bullet points on exactly what the student needs to include in their answer "
        "to achieve full marks based on the marking scheme."
    ),
    "Solution": "Provide a complete solution or answer to the question.",
}


def load_prompt_template(path: Optional[str] = None) -> str:
    """Intro copy for the prompt; PROMPT_TEMPLATE_PATH overrides the default text"""
    path = path or config.PROMPT_TEMPLATE_PATH
    if not path:
        return DEFAULT_INTRO
    try:
        text = Path(path).read_text(encoding="utf-8").strip()
    except OSError as e:
        logger.warning("Could not read prompt template %s: %s", path, e)
        return DEFAULT_INTRO
    return text or DEFAULT_INTRO


def _format_sections() -> str:
    blocks = [f"## {heading}\n{SECTION_INSTRUCTIONS[heading]}" for heading in SECTION_HEADINGS]
    return "\n\n".join(blocks)


def build_prompt(
    question: str,
    paper_context: Optional[str] = None,
    marking_scheme_context: Optional[str] = None,
    intro: Optional[str] = None,
) -> str:
    """Build the full prompt: contexts, the student's question, then the answer format"""
    intro = intro or load_prompt_template()

    emphasis = []
    if paper_context:
        emphasis.append(PAPER_EMPHASIS)
    if marking_scheme_context:
        emphasis.append(SCHEME_EMPHASIS)
    emphasis_text = ("\n".join(emphasis) + "\n\n") if emphasis else ""

    return f"""{intro}

Exam Paper Context:
{paper_context or NO_PAPER_CONTENT}

Marking Scheme Context:
{marking_scheme_context or NO_MARKING_SCHEME}

Student Question: {question}

{emphasis_text}Please provide a comprehensive response in the following structured format:

{_format_sections()}

Format your response clearly with these exact headings."""
