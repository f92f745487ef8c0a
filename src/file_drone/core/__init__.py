"""Collaborator interfaces and their in-process implementations."""

from file_drone.core.interfaces import ChangeSubscriber, IChangePublisher, ILifecycleListener, ILifecycleSource
from file_drone.core.notifications import ApplicationLifecycle, NotificationCenter

__all__ = [
    "ApplicationLifecycle",
    "NotificationCenter",
    "ChangeSubscriber",
    "IChangePublisher",
    "ILifecycleListener",
    "ILifecycleSource",
]
