"""Broker transport: connection management, reconnect policy and event delivery."""

from .client import TransportClient
from .connection import BrokerConnection, ConnectionFactory, ConnectionListener
from .dispatcher import EventDispatcher
from .scheduler import Cancellable, Scheduler, TimerScheduler

__all__ = [
    "BrokerConnection",
    "Cancellable",
    "ConnectionFactory",
    "ConnectionListener",
    "EventDispatcher",
    "Scheduler",
    "TimerScheduler",
    "TransportClient",
]
