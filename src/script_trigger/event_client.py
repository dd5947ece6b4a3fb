# Copyright 2025 Ben Mensi
# SPDX-License-Identifier: Apache-2.0

"""JSONL event log the local host uses as its build queue."""

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional


class EventClient:
    """Appends events for one or more jobs to a JSONL file."""

    def __init__(self, log_path: Path):
        self.log_path = log_path

    def log_event(
        self,
        event_type: str,
        job: str,
        correlation_id: str,
        payload: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Append an event and return it."""
        event = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "event_type": event_type,
            "job": job,
            "correlation_id": correlation_id,
        }
        if payload:
            event["payload"] = payload

        self.log_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.log_path, "a") as f:
            f.write(json.dumps(event) + "\n")
        return event

    def read_events(
        self,
        event_type: Optional[str] = None,
        job: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """Events in the order they were logged, optionally filtered."""
        if not self.log_path.exists():
            return []

        events = []
        for line in self.log_path.read_text().splitlines():
            if not line.strip():
                continue
            event = json.loads(line)
            if event_type and event.get("event_type") != event_type:
                continue
            if job and event.get("job") != job:
                continue
            events.append(event)
        return events
