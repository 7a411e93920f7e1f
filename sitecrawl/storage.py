import json
import threading
from pathlib import Path
from typing import Iterable

from .collector import CrawlSummary
from .types import CrawlResult


class JsonlWriter:
    def __init__(self, output_path: str, append: bool = False) -> None:
        self.output_path = output_path
        self._lock = threading.Lock()
        out_path = Path(self.output_path)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        mode = "a" if append else "w"
        self._fh = out_path.open(mode, encoding="utf-8")

    def write(self, result: CrawlResult) -> None:
        line = json.dumps(result.to_dict(), ensure_ascii=False)
        with self._lock:
            self._fh.write(line + "\n")
            self._fh.flush()

    def close(self) -> None:
        with self._lock:
            if not self._fh.closed:
                self._fh.close()

    def __enter__(self) -> "JsonlWriter":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def export_json(path: str, summary: CrawlSummary, results: Iterable[CrawlResult]) -> Path:
    """Write ``{"metadata": ..., "results": [...]}`` and return the path written."""
    out_path = Path(path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    payload = {
        "metadata": summary.to_dict(),
        "results": [r.to_dict() for r in results],
    }
    with out_path.open("w", encoding="utf-8") as fh:
        json.dump(payload, fh, ensure_ascii=False, indent=2)
    return out_path
