"""Catalog of functional prompt snippets that can be appended to a draft."""

from textwrap import dedent
from typing import Optional

from pydantic import BaseModel, Field


class Template(BaseModel):
    """A reusable prompt snippet."""

    id: str = Field(..., description="Stable template identifier")
    name: str = Field(..., description="Display name")
    content: str = Field(..., description="Markdown snippet appended to the draft")

    model_config = {"frozen": True}

    @property
    def preview(self) -> str:
        """First line of the snippet without heading markers, for list display."""
        first_line = self.content.strip().splitlines()[0] if self.content.strip() else ""
        return first_line.replace("#", "").strip()


FUNCTIONAL_TEMPLATES: list[Template] = [
    Template(
        id="upload",
        name="File upload",
        content=dedent("""
            ### File upload
            - Accepted formats: list allowed file extensions and MIME types
            - Size limit: maximum size per file and per request
            - Show upload progress and allow cancelling
            - Reject invalid files with a clear message naming the problem
        """).strip(),
    ),
    Template(
        id="export",
        name="Data export",
        content=dedent("""
            ### Data export
            - Export formats: CSV and Excel (.xlsx)
            - Export respects the current filters and sort order
            - Large exports run asynchronously and notify on completion
            - File name includes the dataset name and export timestamp
        """).strip(),
    ),
    Template(
        id="search",
        name="Search & filter",
        content=dedent("""
            ### Search and filter
            - Keyword search across the main text fields
            - Filter by status, owner and date range
            - Results are paginated; the page size is configurable
            - Empty results show a hint to broaden the search
        """).strip(),
    ),
    Template(
        id="permissions",
        name="Role permissions",
        content=dedent("""
            ### Roles and permissions
            - Roles: administrator, editor, viewer
            - Each action states which roles may perform it
            - Unauthorized actions are hidden, and rejected server-side
        """).strip(),
    ),
    Template(
        id="audit",
        name="Audit log",
        content=dedent("""
            ### Audit log
            - Record who did what and when for every create, update and delete
            - Audit entries are append-only and cannot be edited
            - Administrators can filter the log by user and date
        """).strip(),
    ),
    Template(
        id="errors",
        name="Error handling",
        content=dedent("""
            ### Error handling
            - Validate input before submission and highlight invalid fields
            - Network failures show a retry option without losing user input
            - Unexpected errors are logged with enough context to reproduce
        """).strip(),
    ),
]


def get_template(template_id: str) -> Optional[Template]:
    """Look up a template by id."""
    for template in FUNCTIONAL_TEMPLATES:
        if template.id == template_id:
            return template
    return None


def append_template(content: str, template: Template) -> str:
    """Append a template's snippet to existing draft content.

    A newline separates the snippet from non-empty existing content.
    """
    separator = "\n" if content else ""
    return content + separator + template.content
