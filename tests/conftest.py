"""
conftest.py – central pytest configuration and test bootstrap ("config test").

Pytest imports this module before it collects any test files. This early import phase allows us to
prepare the test environment so that subsequent imports and test collection succeed consistently.
In particular, we:
  1) Extend `sys.path` with the project root directory so absolute-style imports like `from core ...`
     and `from shared ...` resolve without performing an editable install.
  2) Disable file logging so test runs do not create log files in the working tree.

Credentials are never needed: tests build their own provider registries and contexts from in-memory
configuration and fake environments, and API tests override the orchestrator dependency.
"""

import os
import sys
from pathlib import Path

import pytest

# Ensure project root is on sys.path for direct imports like `core`, `shared`, etc.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

# An empty path switches the rotating file handler off
os.environ.setdefault("LOG_FILE_PATH", "")


@pytest.fixture
def offline_kb():
    from services.offline_knowledge import OfflineKnowledgeBase
    return OfflineKnowledgeBase()
