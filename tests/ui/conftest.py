"""Shared fixtures for UI tests."""

import pytest

from promptprinter.tui.app import PromptPrinterApp


@pytest.fixture
def app(controller):
    """App over the fake controller, without startup connection checks."""
    return PromptPrinterApp(controller, auto_connect=False)
