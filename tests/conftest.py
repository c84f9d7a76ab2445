"""
Pytest configuration and fixtures for bnferris tests.
"""

import sys
import random
import logging
import pytest
from pathlib import Path

# Add project root to path for all imports
project_root = str(Path(__file__).parent.parent)
if project_root not in sys.path:
    sys.path.insert(0, project_root)


@pytest.fixture
def rng():
    """Seeded random source for reproducible generation."""
    return random.Random(1234)


@pytest.fixture
def message_grammar_text():
    """Small grammar exercising every element kind."""
    return """
    ; greeting messages
    message  = greeting *3(" " word) [punct]
    greeting = "hello" / "hi"
    word     = 1*8 %x61-7A      // lowercase words
    punct    = "!" | "?"
    punct   =/ "."
    """


@pytest.fixture
def grammar_file(tmp_path, message_grammar_text):
    """Grammar written to a temporary file."""
    path = tmp_path / "message.bnf"
    path.write_text(message_grammar_text, encoding="utf-8")
    return str(path)


@pytest.fixture(autouse=True)
def reset_bnferris_logger():
    """Drop handlers installed by the CLI so tests stay independent."""
    yield
    logger = logging.getLogger("bnferris")
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)


@pytest.fixture(autouse=True)
def isolated_home(tmp_path, monkeypatch):
    """Keep ~/.bnferris lookups away from the real home directory."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    return home
