"""Workflow, revision, storage and template services."""
