"""
In-process implementations of the collaborator interfaces.

NotificationCenter broadcasts refresh results to any number of subscribers.
ApplicationLifecycle lets a host forward its own foreground/background
signals to surveillance controllers.
"""

import asyncio
import logging

from file_drone.core.interfaces import ChangeSubscriber, IChangePublisher, ILifecycleListener, ILifecycleSource
from file_drone.models import FilesChangedNotification

logger = logging.getLogger(__name__)


class NotificationCenter(IChangePublisher):
    """Publish/subscribe hub for FilesChangedNotification broadcasts."""

    def __init__(self):
        # Ordered set of subscribers
        self._subscribers: dict[ChangeSubscriber, None] = {}

    def subscribe(self, subscriber: ChangeSubscriber) -> None:
        self._subscribers[subscriber] = None

    def unsubscribe(self, subscriber: ChangeSubscriber) -> None:
        self._subscribers.pop(subscriber, None)

    async def publish(self, notification: FilesChangedNotification) -> None:
        """
        Deliver a notification to every subscriber.

        Subscribers may be sync or async. A failing subscriber is logged and
        does not prevent delivery to the others.

        Args:
            notification: Notification to broadcast
        """
        # Copy so subscribers may unsubscribe while being notified
        for subscriber in list(self._subscribers):
            try:
                result = subscriber(notification)
                if asyncio.iscoroutine(result) or hasattr(result, '__await__'):
                    await result
            except Exception as e:
                logger.error("Subscriber %r failed for %s: %s", subscriber, notification.directory, e)

    @property
    def subscriber_count(self) -> int:
        """Number of registered subscribers."""
        return len(self._subscribers)


class ApplicationLifecycle(ILifecycleSource):
    """
    Lifecycle signal source driven by the host application.

    The host calls ``enter_background()`` and ``enter_foreground()``; every
    subscribed listener is paused or resumed accordingly.
    """

    def __init__(self):
        self._listeners: list[ILifecycleListener] = []
        self._active = True

    def subscribe(self, listener: ILifecycleListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unsubscribe(self, listener: ILifecycleListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def enter_background(self) -> None:
        """Signal that the application went to the background or became inactive."""
        self._active = False
        logger.debug("Application entered background, pausing %d listeners", len(self._listeners))
        for listener in list(self._listeners):
            try:
                listener.pause()
            except Exception as e:
                logger.error("Error pausing lifecycle listener %r: %s", listener, e)

    def enter_foreground(self) -> None:
        """Signal that the application returned to the foreground or became active."""
        self._active = True
        logger.debug("Application entered foreground, resuming %d listeners", len(self._listeners))
        for listener in list(self._listeners):
            try:
                listener.resume()
            except Exception as e:
                logger.error("Error resuming lifecycle listener %r: %s", listener, e)

    @property
    def is_active(self) -> bool:
        """Whether the application is currently in the foreground."""
        return self._active

    @property
    def listener_count(self) -> int:
        return len(self._listeners)
