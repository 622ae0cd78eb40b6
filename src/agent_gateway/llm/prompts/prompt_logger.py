"""Audit trail of oracle prompts and replies."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping

from loguru import logger

from agent_gateway.config import Settings, get_settings


@dataclass(slots=True)
class PromptLogEntry:
    """One oracle round-trip as stored in the audit file."""

    prompt_name: str
    prompt: Mapping[str, Any]
    response: Any
    latency_ms: float | None = None
    metadata: Mapping[str, Any] = field(default_factory=dict)
    timestamp_utc: str = field(
        default_factory=lambda: datetime.now(tz=timezone.utc).isoformat()
    )


class PromptLogger:
    """Appends entries as JSON lines to ``<log_prompt_dir>/prompts-YYYYMMDD.jsonl``.

    Disabled unless ``save_prompts`` is set; answers may contain survey
    respondents' text.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()
        self.log_dir = Path(self.settings.log_prompt_dir)
        self.enabled = self.settings.save_prompts

    def path_for(self, entry: PromptLogEntry) -> Path:
        day = entry.timestamp_utc[:10].replace("-", "")
        return self.log_dir / f"prompts-{day}.jsonl"

    def log(self, entry: PromptLogEntry) -> Path | None:
        """Append ``entry``; returns the file written, or None when disabled."""
        if not self.enabled:
            return None

        self.log_dir.mkdir(parents=True, exist_ok=True)
        file_path = self.path_for(entry)
        line = json.dumps(asdict(entry), ensure_ascii=False, default=str)
        with file_path.open("a", encoding="utf-8") as handle:
            handle.write(line + "\n")

        logger.debug("Prompt {} logged to {}", entry.prompt_name, file_path)
        return file_path
