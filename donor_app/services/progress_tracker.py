# donor_app/services/progress_tracker.py
"""
Progress Tracker - in-memory registry of long-running operations (imports)

Operations move initializing -> processing -> completed | error | cancelled.
Finished operations expire after a TTL; a periodic sweep removes expired
entries and operations stuck in processing. State is process-local and is
lost on restart.
"""

import logging
import threading
import time
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)

PROGRESS_EXTENSION_KEY = "progress_tracker"

STATUS_INITIALIZING = "initializing"
STATUS_PROCESSING = "processing"
STATUS_COMPLETED = "completed"
STATUS_ERROR = "error"
STATUS_CANCELLED = "cancelled"

OPERATION_STATUSES = (
    STATUS_INITIALIZING,
    STATUS_PROCESSING,
    STATUS_COMPLETED,
    STATUS_ERROR,
    STATUS_CANCELLED,
)
TERMINAL_STATUSES = frozenset({STATUS_COMPLETED, STATUS_ERROR, STATUS_CANCELLED})

CANCELLED_MESSAGE = "Operation cancelled by user"


def _utcnow():
    return datetime.now(timezone.utc)


def _iso(value):
    return value.isoformat() if value is not None else None


@dataclass
class Operation:
    """A tracked long-running job"""

    id: str
    type: str
    user_id: Any
    total_items: int
    start_time: datetime
    last_updated: datetime
    status: str = STATUS_INITIALIZING
    progress: float = 0
    message: str = "Operation initialized"
    result: Optional[Dict[str, Any]] = None
    expires_at: Optional[datetime] = None

    def snapshot(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "user_id": self.user_id,
            "status": self.status,
            "progress": self.progress,
            "message": self.message,
            "total_items": self.total_items,
            "result": self.result,
            "start_time": _iso(self.start_time),
            "last_updated": _iso(self.last_updated),
            "expires_at": _iso(self.expires_at),
        }


@dataclass
class ProgressTrackerSettings:
    completed_ttl_seconds: int = 1800
    cancelled_ttl_seconds: int = 600
    stale_after_seconds: int = 600

    @classmethod
    def from_config(cls, config) -> "ProgressTrackerSettings":
        return cls(
            completed_ttl_seconds=int(config.get("PROGRESS_COMPLETED_TTL_SECONDS", 1800)),
            cancelled_ttl_seconds=int(config.get("PROGRESS_CANCELLED_TTL_SECONDS", 600)),
            stale_after_seconds=int(config.get("PROGRESS_STALE_SECONDS", 600)),
        )


class ProgressTracker:
    """
    Thread-safe registry of operations keyed by tracking id.

    Args:
        settings: expiry and stale thresholds.
        clock: returns the current aware datetime; injectable for tests.
        use_timers: when False, cancelled operations are only removed by the
            expiry sweep instead of an additional forced-delete timer.
    """

    def __init__(
        self,
        settings: Optional[ProgressTrackerSettings] = None,
        *,
        clock: Callable[[], datetime] = _utcnow,
        use_timers: bool = True,
    ):
        self.settings = settings or ProgressTrackerSettings()
        self._clock = clock
        self._use_timers = use_timers
        self._operations: Dict[str, Operation] = {}
        self._lock = threading.RLock()
        self._timers: Dict[str, threading.Timer] = {}
        self._sweeper: Optional[threading.Timer] = None
        self._sweep_interval: Optional[float] = None

    def __len__(self):
        with self._lock:
            return len(self._operations)

    def __contains__(self, operation_id):
        with self._lock:
            return operation_id in self._operations

    def _new_tracking_id(self, operation_type):
        millis = int(time.time() * 1000)
        tracking_id = f"{operation_type}_{millis}"
        while tracking_id in self._operations:
            millis += 1
            tracking_id = f"{operation_type}_{millis}"
        return tracking_id

    def create_operation(self, operation_type, user_id, total_items=100) -> Tuple[Dict[str, Any], str]:
        """Register a new operation and return ``(snapshot, tracking_id)``"""
        now = self._clock()
        with self._lock:
            tracking_id = self._new_tracking_id(operation_type)
            operation = Operation(
                id=tracking_id,
                type=operation_type,
                user_id=user_id,
                total_items=total_items,
                start_time=now,
                last_updated=now,
            )
            self._operations[tracking_id] = operation
        logger.info("Created operation %s for user %s", tracking_id, user_id)
        return operation.snapshot(), tracking_id

    def update_progress(self, operation_id, progress, message=None, status=None, result=None) -> bool:
        """
        Record progress for an operation.

        Returns False when the operation is unknown, or when it already reached
        a terminal status and ``status`` would move it elsewhere.
        """
        if status is not None and status not in OPERATION_STATUSES:
            raise ValueError(f"Invalid operation status: {status}")

        with self._lock:
            operation = self._operations.get(operation_id)
            if operation is None:
                logger.warning("Attempting to update non-existent operation %s", operation_id)
                return False
            if operation.status in TERMINAL_STATUSES and status != operation.status:
                return False

            now = self._clock()
            operation.progress = progress
            operation.last_updated = now
            if message:
                operation.message = message
            if result is not None:
                operation.result = result
            if status:
                operation.status = status
                if status in (STATUS_COMPLETED, STATUS_ERROR):
                    operation.expires_at = now + timedelta(seconds=self.settings.completed_ttl_seconds)
                elif status == STATUS_CANCELLED and operation.expires_at is None:
                    operation.expires_at = now + timedelta(seconds=self.settings.cancelled_ttl_seconds)
            return True

    def get_progress(self, operation_id) -> Optional[Dict[str, Any]]:
        with self._lock:
            operation = self._operations.get(operation_id)
            return operation.snapshot() if operation is not None else None

    def get_user_operations(self, user_id) -> List[Dict[str, Any]]:
        with self._lock:
            return [op.snapshot() for op in self._operations.values() if op.user_id == user_id]

    def is_cancelled(self, operation_id) -> bool:
        with self._lock:
            operation = self._operations.get(operation_id)
            return operation is not None and operation.status == STATUS_CANCELLED

    def cancel_operation(self, operation_id, user_id) -> bool:
        """Mark an operation cancelled; only its owner may cancel it"""
        with self._lock:
            operation = self._operations.get(operation_id)
            if operation is None or operation.user_id != user_id:
                return False

            now = self._clock()
            operation.status = STATUS_CANCELLED
            operation.message = CANCELLED_MESSAGE
            operation.last_updated = now
            operation.expires_at = now + timedelta(seconds=self.settings.cancelled_ttl_seconds)

            if self._use_timers:
                self._schedule_forced_delete(operation_id)
        logger.info("Operation %s cancelled by user %s", operation_id, user_id)
        return True

    def _schedule_forced_delete(self, operation_id):
        previous = self._timers.pop(operation_id, None)
        if previous is not None:
            previous.cancel()
        timer = threading.Timer(self.settings.cancelled_ttl_seconds, self._discard, args=(operation_id,))
        timer.daemon = True
        self._timers[operation_id] = timer
        timer.start()

    def _discard(self, operation_id):
        with self._lock:
            self._operations.pop(operation_id, None)
            self._timers.pop(operation_id, None)

    def cleanup_operations(self) -> int:
        """Delete expired operations and ones stuck in processing; returns how many were removed"""
        now = self._clock()
        stale_cutoff = now - timedelta(seconds=self.settings.stale_after_seconds)
        removed = 0
        with self._lock:
            for operation_id, operation in list(self._operations.items()):
                if operation.status == STATUS_PROCESSING and operation.last_updated < stale_cutoff:
                    logger.info("Cleaning up stuck operation: %s", operation_id)
                elif operation.expires_at is not None and now > operation.expires_at:
                    logger.info("Cleaning up expired operation: %s", operation_id)
                else:
                    continue
                del self._operations[operation_id]
                timer = self._timers.pop(operation_id, None)
                if timer is not None:
                    timer.cancel()
                removed += 1
        return removed

    def start_sweeper(self, interval_seconds):
        """Run ``cleanup_operations`` every ``interval_seconds`` on a daemon timer"""
        if not interval_seconds or interval_seconds <= 0:
            return
        self._sweep_interval = float(interval_seconds)
        self._schedule_sweep()

    def _schedule_sweep(self):
        if self._sweep_interval is None:
            return
        timer = threading.Timer(self._sweep_interval, self._run_sweep)
        timer.daemon = True
        self._sweeper = timer
        timer.start()

    def _run_sweep(self):
        try:
            removed = self.cleanup_operations()
            if removed:
                logger.info("Progress sweep removed %s operations", removed)
        finally:
            self._schedule_sweep()

    def stop(self):
        """Cancel the sweeper and any pending forced-delete timers"""
        self._sweep_interval = None
        if self._sweeper is not None:
            self._sweeper.cancel()
            self._sweeper = None
        with self._lock:
            for timer in self._timers.values():
                timer.cancel()
            self._timers.clear()


def init_progress_tracker(app):
    """Create the app's tracker from config and store it in ``app.extensions``"""
    tracker = ProgressTracker(
        ProgressTrackerSettings.from_config(app.config),
        use_timers=not app.config.get("TESTING", False),
    )
    app.extensions[PROGRESS_EXTENSION_KEY] = tracker
    if not app.config.get("TESTING", False):
        tracker.start_sweeper(app.config.get("PROGRESS_SWEEP_INTERVAL_SECONDS", 600))
    return tracker


def get_progress_tracker(app=None) -> ProgressTracker:
    if app is None:
        from flask import current_app

        app = current_app._get_current_object()
    tracker = app.extensions.get(PROGRESS_EXTENSION_KEY)
    if tracker is None:
        tracker = init_progress_tracker(app)
    return tracker
