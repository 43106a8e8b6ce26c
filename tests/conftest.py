import os
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))
if SRC.exists():
    sys.path.insert(0, str(SRC))

# Register shared Hypothesis profiles for deterministic CI runs and fast local loops.
from tests.util import hypothesis_profiles  # noqa: E402,F401  pylint: disable=unused-import

from sabhash.cli import app  # noqa: E402


@pytest.fixture(autouse=True)
def _reset_cli_state():
    handlers = list(app.logger.handlers)
    level = app.logger.level
    cfg = app.APP_CONFIG
    yield
    app.logger.handlers = handlers
    app.logger.setLevel(level)
    app.set_app_config(cfg)
    app.OUTPUT_JSON = False


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    """Strip sabhash/bench environment overrides inherited from the shell."""

    for key in list(os.environ):
        if key.startswith(("SABHASH_", "BENCH_")):
            monkeypatch.delenv(key, raising=False)
    return monkeypatch
