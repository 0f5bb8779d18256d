"""Prompt assembly from a user's selected research materials."""

import logging
from dataclasses import dataclass, field

from stressy.constants import (
    NOTES_TITLE,
    SNIPPET_ELLIPSIS,
    SNIPPET_LENGTH,
    WHITEBOARD_SNIPPET,
    WHITEBOARD_TITLE,
)
from stressy.errors import EmptySelection, SourceNotFound
from stressy.models import QuerySelection, SourceCitation
from stressy.service.database.storage import MaterialStore

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are Stressy Bot, an AI research assistant designed to help researchers with "
    "their work.\n"
    "You analyze research papers, notes, and whiteboard content to provide insights.\n"
    "Be concise, accurate, and helpful. Focus on identifying connections between ideas,\n"
    "suggesting research directions, and spotting potential research gaps.\n"
    "\n"
    "When citing information, clearly indicate which source it came from."
)

CLOSING_INSTRUCTION = (
    "Provide a well-structured, insightful response that directly addresses "
    "the user's question."
)


def snippet(content: str, length: int = SNIPPET_LENGTH) -> str:
    """Citation preview: the first ``length`` characters plus an ellipsis."""
    return content[:length] + SNIPPET_ELLIPSIS


def compose_prompt(query: str, context: str) -> str:
    """Wrap a query and its gathered context in the assistant instructions.

    Args:
        query: The user's question, verbatim
        context: Concatenated source blocks; omitted from the prompt when empty

    Returns:
        str: The full prompt text
    """
    prompt = f"{SYSTEM_PROMPT}\n\nUser question: {query}\n\n"
    if context:
        prompt += f"Context from user's research materials:\n{context}\n\n"
    return prompt + CLOSING_INSTRUCTION


@dataclass
class AssembledContext:
    """A composed prompt and the sources that went into it."""

    prompt: str
    citations: list[SourceCitation] = field(default_factory=list)


class ContextAssembler:
    """Gathers selected papers, notes and whiteboard into one prompt."""

    def __init__(self, store: MaterialStore) -> None:
        self.store = store

    def assemble(self, query: str, selection: QuerySelection, owner_id: str) -> AssembledContext:
        """Build the prompt for one query.

        Args:
            query: The user's question
            selection: Which sources to include
            owner_id: Owner whose materials are read

        Returns:
            AssembledContext: Prompt text and citations in the order the
            sources were added

        Raises:
            EmptySelection: If nothing is selected; raised before any storage call
            SourceNotFound: If a selected paper does not exist for this owner
            StorageError: If the store fails
        """
        if selection.is_empty:
            raise EmptySelection()

        blocks: list[str] = []
        citations: list[SourceCitation] = []

        for paper_id in selection.document_ids:
            paper = self.store.get_paper(owner_id, paper_id)
            if paper is None:
                raise SourceNotFound("document", paper_id)
            blocks.append(f'Paper "{paper.name}": {paper.content}\n\n')
            citations.append(
                SourceCitation(
                    title=paper.name, content_snippet=snippet(paper.content), type="document"
                )
            )

        if selection.include_notes:
            note = self.store.get_note(owner_id)
            if note is not None:
                blocks.append(f"User Notes: {note.content}\n\n")
                citations.append(
                    SourceCitation(
                        title=NOTES_TITLE, content_snippet=snippet(note.content), type="note"
                    )
                )
            else:
                logger.debug(f"No notes stored for owner {owner_id}, skipping")

        if selection.include_whiteboard:
            whiteboard = self.store.get_whiteboard(owner_id)
            if whiteboard is not None:
                blocks.append(f"Whiteboard Content: {whiteboard.content}\n\n")
                citations.append(
                    SourceCitation(
                        title=WHITEBOARD_TITLE,
                        content_snippet=WHITEBOARD_SNIPPET,
                        type="whiteboard",
                    )
                )
            else:
                logger.debug(f"No whiteboard stored for owner {owner_id}, skipping")

        logger.info(f"📚 Assembled context from {len(citations)} source(s)")
        return AssembledContext(prompt=compose_prompt(query, "".join(blocks)), citations=citations)
