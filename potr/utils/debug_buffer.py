from __future__ import annotations
from collections import deque
from typing import Any, Dict, List

# Keep the last 50 entries
_BUF: deque = deque(maxlen=50)

def record(entry: Dict[str, Any]) -> None:
    """
    Append a compact snapshot of a provider exchange.
    Callers must not pass API keys and should truncate large texts.
    """
    _BUF.append(dict(entry))

def recent(n: int = 5) -> List[Dict[str, Any]]:
    """
    Return the most recent n snapshots, newest last.
    """
    if not _BUF:
        return []
    n = max(1, min(int(n or 5), len(_BUF)))
    return list(_BUF)[-n:]

def clear() -> None:
    _BUF.clear()
