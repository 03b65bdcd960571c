from pathlib import Path
import datetime
import json


class Logger:
    """Append-only JSON-lines event log (ingest runs, queries)."""

    def __init__(self, path: Path):
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def write(self, obj: dict):
        rec = {"ts": datetime.datetime.now().isoformat(timespec="seconds"), **obj}
        with open(self.path, "a", encoding="utf-8") as f:
            f.write(json.dumps(rec, ensure_ascii=False) + "\n")
