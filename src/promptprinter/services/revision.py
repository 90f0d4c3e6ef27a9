"""Revision engine: commit and version-increment logic.

The engine is stateless. It decides what a save persists and hands the
assembled record to the storage collaborator:

- ``content``: the analysis result's optimized text when one is present,
  otherwise the draft's own content
- ``raw_context``: the draft's content as it stood before that decision
- ``version``: ``v1.0`` on create, major+1 on update (minor stays ``0``)
"""

import re
from typing import Optional

import structlog

from promptprinter.models.analysis import AnalysisResult
from promptprinter.models.prompt_record import INITIAL_VERSION, PromptRecord
from promptprinter.services.storage import PromptStore

logger = structlog.get_logger()


_MAJOR_VERSION = re.compile(r"^\s*[vV]?(\d{1,18})(?!\d)")


def parse_major_version(version: Optional[str]) -> int:
    """
    Extract the integer major component of a version tag.

    Unparseable input (None, empty, non-numeric, signed, or a major
    component longer than 18 digits) yields 0; this function never raises.

    Examples:
        >>> parse_major_version("v3.0")
        3
        >>> parse_major_version("draft")
        0
    """
    if not version:
        return 0
    match = _MAJOR_VERSION.match(version)
    if match is None:
        return 0
    return int(match.group(1))


def next_version(version: Optional[str]) -> str:
    """Return the tag that follows ``version`` (``v<k>.0`` -> ``v<k+1>.0``)."""
    return f"v{parse_major_version(version) + 1}.0"


def build_commit_record(
    draft: PromptRecord,
    analysis: Optional[AnalysisResult],
    existing_id: Optional[int],
) -> PromptRecord:
    """
    Assemble the record a save will persist.

    The caller is responsible for validating the draft beforehand.

    Args:
        draft: Current working copy
        analysis: Current analysis result, or None if the draft is saved as-is
        existing_id: Id of the stored record being updated (None to create)

    Returns:
        New PromptRecord ready for storage (draft is not modified)
    """
    raw_context = draft.content
    content = analysis.optimized_prompt if analysis is not None else draft.content
    version = next_version(draft.version) if existing_id is not None else INITIAL_VERSION

    return draft.model_copy(
        deep=True,
        update={
            "id": existing_id,
            "content": content,
            "raw_context": raw_context,
            "version": version,
        },
    )


async def commit(
    store: PromptStore,
    draft: PromptRecord,
    analysis: Optional[AnalysisResult],
    existing_id: Optional[int],
) -> PromptRecord:
    """
    Persist a draft as a new or updated version.

    Args:
        store: Storage collaborator
        draft: Current working copy
        analysis: Current analysis result, or None
        existing_id: Id of the stored record being updated (None to create)

    Returns:
        Exactly what storage returns (storage assigns id and timestamp)

    Raises:
        PersistenceFailed: If the storage operation fails
    """
    record = build_commit_record(draft, analysis, existing_id)

    logger.info(
        "commit_started",
        prompt_id=existing_id,
        from_version=draft.version,
        to_version=record.version,
        used_analysis=analysis is not None,
    )

    if existing_id is not None:
        saved = await store.update_prompt(existing_id, record)
    else:
        saved = await store.create_prompt(record)

    logger.info("commit_completed", prompt_id=saved.id, version=saved.version)
    return saved
