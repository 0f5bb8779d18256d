"""Splitting generated answers into titled insight sections."""

import re

from stressy.constants import DEFAULT_INSIGHT_TITLE
from stressy.models import InsightSection

SECTION_START = re.compile(r"^(?=#{1,2}[ \t])", re.MULTILINE)
HEADING = re.compile(r"#{1,2}[ \t]+(.*)")


def parse_answer(raw_answer: str) -> list[InsightSection]:
    """Split a markdown-style answer on ``#`` / ``##`` headings.

    Each heading stays with the text that follows it. Text before the first
    heading, or a heading with no title, gets the default title.

    Args:
        raw_answer: Text returned by the generation provider

    Returns:
        list[InsightSection]: At least one section; when there are no
        headings or no section has any text, a single default-titled section
        holding ``raw_answer`` verbatim
    """
    if SECTION_START.search(raw_answer) is None:
        return [InsightSection(title=DEFAULT_INSIGHT_TITLE, content=raw_answer)]

    sections = []
    for block in SECTION_START.split(raw_answer):
        block = block.strip()
        if not block:
            continue

        first_line, _, rest = block.partition("\n")
        heading = HEADING.fullmatch(first_line.rstrip())
        if heading:
            title = heading.group(1).strip() or DEFAULT_INSIGHT_TITLE
            content = rest.strip()
        else:
            title = DEFAULT_INSIGHT_TITLE
            content = block
        sections.append(InsightSection(title=title, content=content))

    if not sections:
        return [InsightSection(title=DEFAULT_INSIGHT_TITLE, content=raw_answer)]
    return sections
