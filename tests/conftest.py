from __future__ import annotations

import sys
from pathlib import Path

import pytest


# Run the suite against src/ without an installed copy of crn_structure.
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))


@pytest.fixture
def sir():
    from crn_structure.examples import sir_network

    return sir_network()
