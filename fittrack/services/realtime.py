"""
In-process change feed.

subscribe(table, filter, callback) registers a listener for row changes of a
table, optionally narrowed by an equality filter ("user_id=eq.7"), and returns
a callable that removes it. Services publish after a successful commit.
"""
import logging
import threading
from typing import Any, Callable, Dict, List, Optional, Tuple
from uuid import uuid4

logger = logging.getLogger(__name__)

ChangeCallback = Callable[[Dict[str, Any]], None]


def parse_filter(expression: Optional[str]) -> Optional[Tuple[str, str]]:
    """'user_id=eq.7' -> ('user_id', '7'). Only equality filters are supported."""
    if not expression:
        return None
    column, sep, rest = expression.partition("=")
    op, dot, value = rest.partition(".")
    if not sep or not dot or op != "eq" or not column:
        raise ValueError(f"Unsupported filter: {expression!r}")
    return column.strip(), value.strip()


class ChangeFeed:
    def __init__(self):
        self._lock = threading.Lock()
        self._subscribers: Dict[str, Dict[str, Tuple[Optional[Tuple[str, str]], ChangeCallback]]] = {}

    def subscribe(
        self,
        table: str,
        filter: Optional[str],
        callback: ChangeCallback,
    ) -> Callable[[], None]:
        parsed = parse_filter(filter)
        key = uuid4().hex
        with self._lock:
            self._subscribers.setdefault(table, {})[key] = (parsed, callback)
        logger.debug(f"[REALTIME] subscribe table={table} filter={filter} key={key}")

        def unsubscribe() -> None:
            with self._lock:
                listeners = self._subscribers.get(table)
                if listeners is not None:
                    listeners.pop(key, None)
                    if not listeners:
                        self._subscribers.pop(table, None)
            logger.debug(f"[REALTIME] unsubscribe table={table} key={key}")

        return unsubscribe

    def subscriber_count(self, table: Optional[str] = None) -> int:
        with self._lock:
            if table is not None:
                return len(self._subscribers.get(table, {}))
            return sum(len(listeners) for listeners in self._subscribers.values())

    def publish(
        self,
        table: str,
        event: str,
        new: Optional[Dict[str, Any]],
        old: Optional[Dict[str, Any]] = None,
    ) -> int:
        """Deliver a change payload; returns the number of listeners called."""
        row = new if new is not None else (old or {})
        with self._lock:
            listeners: List[Tuple[Optional[Tuple[str, str]], ChangeCallback]] = list(
                self._subscribers.get(table, {}).values()
            )

        payload = {"table": table, "event": event, "new": new, "old": old}
        delivered = 0
        for parsed, callback in listeners:
            if parsed is not None:
                column, value = parsed
                if str(row.get(column)) != value:
                    continue
            try:
                callback(payload)
                delivered += 1
            except Exception as e:
                logger.error(f"[REALTIME] Listener failed for table={table}: {e}", exc_info=True)
        return delivered


change_feed = ChangeFeed()
