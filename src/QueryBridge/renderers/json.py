"""JSON file output.

Every result of one command run goes into a single file,
``<base_dir>/json/<action>_<YYYYmmdd_HHMMSS>.json``, written on finalize.
"""

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path
from typing import Any

from QueryBridge.renderers.base import OutputWriter
from QueryBridge.utils.log import log


def _as_json_value(content: str) -> Any:
    """``dump`` output is JSON already; other text is kept as a list of lines."""
    try:
        return json.loads(content)
    except json.JSONDecodeError:
        return content.splitlines()


class JsonFileWriter(OutputWriter):
    def __init__(self, base_dir: str) -> None:
        self.output_dir = Path(base_dir) / "json"
        self.entries: list[dict[str, Any]] = []
        self.last_path: Path | None = None

    def write_result(self, source: str, content: str) -> None:
        self.entries.append({"source": source, "result": _as_json_value(content)})

    def finalize(self, action: str) -> None:
        self.output_dir.mkdir(parents=True, exist_ok=True)
        path = self.output_dir / f"{action}_{datetime.now():%Y%m%d_%H%M%S}.json"
        path.write_text(json.dumps(self.entries, ensure_ascii=False, indent=2), encoding="utf-8")
        self.last_path = path
        log.info("Wrote %d result(s) to %s", len(self.entries), path)
