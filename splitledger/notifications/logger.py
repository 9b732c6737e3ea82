"""
Notifier

DESIGN DECISION: Every ledger operation reports its outcome twice:
1. A structured local log line (for diagnostics)
2. A user-facing notification handed to the presentation layer

The notifier:
- Never raises (a broken sink must not undo a completed write)
- Accepts sync or async sinks
- Works with no sink at all (log-only)
"""

import inspect
from typing import Any, Awaitable, Callable, Optional, Union

import structlog

from splitledger.models.notification import Notification, NotificationSeverity


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


NotificationSink = Callable[[Notification], Union[None, Awaitable[Any]]]


class Notifier:
    """
    Side channel from the ledger to whatever renders messages.

    Usage:
        notifier = Notifier(sink=toast_queue.append)
        await notifier.notify(NotificationBuilder.group_created(gid, name))
    """

    def __init__(self, sink: Optional[NotificationSink] = None):
        """
        Initialize notifier.

        Args:
            sink: Callable receiving each notification.
                  If None, notifications are only logged.
        """
        self._sink = sink
        self._logger = structlog.get_logger("splitledger.notifications")

    async def notify(self, notification: Notification) -> bool:
        """
        Log a notification and forward it to the sink.

        Returns True if the sink accepted it (or no sink is configured).
        """
        log_dict = notification.to_log_dict()

        if notification.severity == NotificationSeverity.ERROR:
            self._logger.error("notification", **log_dict)
        elif notification.severity == NotificationSeverity.WARNING:
            self._logger.warning("notification", **log_dict)
        else:
            self._logger.info("notification", **log_dict)

        if self._sink is None:
            return True

        try:
            result = self._sink(notification)
            if inspect.isawaitable(result):
                await result
            return True
        except Exception as e:
            # Advisory channel only: log and carry on
            self._logger.error(
                "notification_sink_failed",
                error=str(e),
                title=notification.title,
            )
            return False
