"""
Pytest configuration for tests under tests/.

These tests import the package as `depgrex.*` and the shared graphs as
`tests.fixtures.graphs`. This conftest puts the repo root on sys.path so
both resolve without an editable install, regardless of invocation cwd.
"""

from __future__ import annotations

import sys
from pathlib import Path

import pytest


REPO_ROOT = Path(__file__).resolve().parents[1]

if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))


from tests.fixtures.graphs import complicated_graph, simple_graph  # noqa: E402


@pytest.fixture
def muffins_graph():
    """[ate subj:Bill dobj:[muffins nn:blueberry]]"""
    return simple_graph()


@pytest.fixture
def lettered_graph():
    """Ten-node graph A..J with reconvergent paths (see fixtures.graphs)."""
    return complicated_graph()
