"""
Event tracking sink

Events are appended as JSON lines to a local file. Tracking is best effort:
a failure to record an event is reported and never interrupts the caller.
"""

import json
import time
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Union

TrackFunction = Callable[[str, Dict[str, Any]], None]


def noop_track(name: str, props: Dict[str, Any]) -> None:
    pass


class Tracker:
    """
    Writes tracking events to a JSON lines file
    """

    def __init__(self, file_path: Optional[Union[str, Path]] = None, verbose: bool = False):
        """
        Args:
            file_path: Destination file. When None, events are dropped.
            verbose: If True, prints every event
        """
        self.file_path = Path(file_path) if file_path else None
        self.verbose = verbose

    def track(self, name: str, props: Dict[str, Any]) -> None:
        event = {"event": name, "time": time.time(), **props}

        if self.verbose:
            print(f"📊 Tracking event '{name}': {', '.join(f'{k}={v}' for k, v in props.items() if k != 'stack')}")

        if not self.file_path:
            return

        try:
            self.file_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.file_path, 'a', encoding='utf-8') as f:
                f.write(json.dumps(event, default=str) + "\n")
        except OSError as e:
            print(f"⚠️ Unable to record tracking event '{name}': {str(e)}")

