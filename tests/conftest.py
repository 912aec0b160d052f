import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))


def _is_e2e_test(request: pytest.FixtureRequest) -> bool:
    return "tests/e2e/" in str(request.node.fspath).replace("\\", "/")


@pytest.fixture(autouse=True)
def e2e_isolated_env(request: pytest.FixtureRequest, monkeypatch: pytest.MonkeyPatch) -> None:
    if not _is_e2e_test(request):
        return

    monkeypatch.delenv("LOWBORN_DATABASE_URL", raising=False)
    monkeypatch.delenv("LOWBORN_DEFAULT_SEED", raising=False)
    monkeypatch.setenv("LOWBORN_LOG_LEVEL", "WARNING")
    monkeypatch.setenv("LOWBORN_SIM_RUNS", "3")
