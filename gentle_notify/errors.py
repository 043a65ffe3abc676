"""Errors raised when a notification request cannot be admitted."""


class NotificationError(Exception):
    """Base class for admission failures."""

    code = "notification_error"


class MaxPendingCountReached(NotificationError):
    """The pending queue is at or above the policy's ceiling. Nothing was changed."""

    code = "max_pending_count_reached"

    def __init__(self, pending_count: int, max_pending_count: int):
        super().__init__(
            f"{pending_count} notifications pending (limit {max_pending_count})"
        )
        self.pending_count = pending_count
        self.max_pending_count = max_pending_count


class DuplicateIdentifier(NotificationError):
    """A notification with the same identifier is already pending. Nothing was changed."""

    code = "duplicate_identifier"

    def __init__(self, identifier: str):
        super().__init__(f"Notification {identifier} is already pending")
        self.identifier = identifier


class ServiceFailure(NotificationError):
    """
    The notification service refused or failed to enqueue the request.

    Threads already coalesced before the failure stay retracted.
    """

    code = "service_failure"
