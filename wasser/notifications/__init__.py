"""Notification module - costing events"""
from .events import EventType, Event, EventEmitter, EventHandler

__all__ = [
    "EventType",
    "Event",
    "EventEmitter",
    "EventHandler",
]
