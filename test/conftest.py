import sys
from datetime import datetime
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))


class FixedClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


def build_app(tmp_path: Path, name: str = "store.db", policy=None, now: datetime | None = None, demo: bool = False):
    from smartstock.application.container import build_container

    clock = FixedClock(now or datetime(2024, 5, 15, 10, 30))
    return build_container(tmp_path / name, policy=policy, clock=clock, seed_demo_data=demo)
