"""
Abstract interfaces for the file drone's external collaborators.

These interfaces define the contracts for application lifecycle signals and
change broadcasting, enabling dependency injection for testing and for hosts
that already own such mechanisms.
"""

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from typing import Any

from file_drone.models import FilesChangedNotification

ChangeSubscriber = Callable[[FilesChangedNotification], Awaitable[Any] | Any]


class ILifecycleListener(ABC):
    """Interface for objects reacting to application lifecycle transitions."""

    @abstractmethod
    def pause(self) -> None:
        """Called when the host application enters the background or becomes inactive."""
        pass

    @abstractmethod
    def resume(self) -> None:
        """Called when the host application returns to the foreground or becomes active."""
        pass


class ILifecycleSource(ABC):
    """Interface for a source of application lifecycle signals."""

    @abstractmethod
    def subscribe(self, listener: ILifecycleListener) -> None:
        """
        Register a listener for background/foreground transitions.

        Args:
            listener: Listener to notify; registering it twice has no effect
        """
        pass

    @abstractmethod
    def unsubscribe(self, listener: ILifecycleListener) -> None:
        """
        Remove a previously registered listener.

        Args:
            listener: Listener to remove; unknown listeners are ignored
        """
        pass


class IChangePublisher(ABC):
    """Interface for broadcasting completed refreshes to passive observers."""

    @abstractmethod
    def subscribe(self, subscriber: ChangeSubscriber) -> None:
        """
        Register a subscriber.

        Args:
            subscriber: Callable receiving a FilesChangedNotification (sync or async)
        """
        pass

    @abstractmethod
    def unsubscribe(self, subscriber: ChangeSubscriber) -> None:
        """Remove a previously registered subscriber."""
        pass

    @abstractmethod
    async def publish(self, notification: FilesChangedNotification) -> None:
        """
        Deliver a notification to every subscriber.

        Args:
            notification: Notification describing the completed refresh
        """
        pass
