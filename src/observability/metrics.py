"""In-process metrics for the authenticated fetch layer."""

import threading
from dataclasses import dataclass, field
from typing import ClassVar


@dataclass
class FetchMetrics:
    """Counters for the login/fetch/logout exchange.

    Singleton; fetches on worker threads record into the same instance, so
    every mutation takes the instance lock.
    """

    logins_total: int = 0
    login_failures_total: dict[str, int] = field(default_factory=dict)
    logouts_total: int = 0
    logout_failures_total: int = 0
    http_requests_total: dict[int, int] = field(default_factory=dict)
    http_not_modified_total: int = 0
    transport_failures_total: int = 0
    http_bytes_total: int = 0
    http_duration_ms_total: float = 0.0
    http_request_count: int = 0
    _lock: threading.Lock = field(
        default_factory=threading.Lock, repr=False, compare=False
    )

    _instance: ClassVar["FetchMetrics | None"] = None
    _instance_lock: ClassVar[threading.Lock] = threading.Lock()

    @classmethod
    def get_instance(cls) -> "FetchMetrics":
        """Get singleton metrics instance."""
        with cls._instance_lock:
            if cls._instance is None:
                cls._instance = cls()
            return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Reset metrics (primarily for testing)."""
        with cls._instance_lock:
            cls._instance = None

    def record_login(self) -> None:
        """Record a successful login."""
        with self._lock:
            self.logins_total += 1

    def record_login_failure(self, kind: str) -> None:
        """Record a failed login.

        Args:
            kind: AuthErrorKind value.
        """
        with self._lock:
            self.login_failures_total[kind] = self.login_failures_total.get(kind, 0) + 1

    def record_logout(self, succeeded: bool) -> None:
        """Record a logout attempt."""
        with self._lock:
            self.logouts_total += 1
            if not succeeded:
                self.logout_failures_total += 1

    def record_request(
        self, status_code: int, bytes_received: int, duration_ms: float
    ) -> None:
        """Record a completed feed request.

        Args:
            status_code: HTTP status code.
            bytes_received: Number of body bytes written to the sink.
            duration_ms: Request duration in milliseconds.
        """
        with self._lock:
            self.http_requests_total[status_code] = (
                self.http_requests_total.get(status_code, 0) + 1
            )
            self.http_bytes_total += bytes_received
            self.http_duration_ms_total += duration_ms
            self.http_request_count += 1

    def record_not_modified(self) -> None:
        """Record a 304 Not Modified response."""
        with self._lock:
            self.http_not_modified_total += 1

    def record_transport_failure(self) -> None:
        """Record a feed request that failed below HTTP."""
        with self._lock:
            self.transport_failures_total += 1

    def to_dict(self) -> dict[str, int | float | dict[str, int] | dict[int, int]]:
        """Convert metrics to dictionary."""
        with self._lock:
            return {
                "logins_total": self.logins_total,
                "login_failures_total": dict(self.login_failures_total),
                "logouts_total": self.logouts_total,
                "logout_failures_total": self.logout_failures_total,
                "http_requests_total": dict(self.http_requests_total),
                "http_not_modified_total": self.http_not_modified_total,
                "transport_failures_total": self.transport_failures_total,
                "http_bytes_total": self.http_bytes_total,
                "http_duration_ms_total": self.http_duration_ms_total,
                "http_request_count": self.http_request_count,
            }

    @property
    def avg_duration_ms(self) -> float:
        """Calculate average feed request duration."""
        if self.http_request_count == 0:
            return 0.0
        return self.http_duration_ms_total / self.http_request_count
