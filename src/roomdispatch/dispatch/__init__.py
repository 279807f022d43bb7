"""Dispatch pipeline: orchestrated path, fallback workers, broadcast."""

from roomdispatch.dispatch.broadcast import BroadcastResult, broadcast
from roomdispatch.dispatch.launcher import FallbackLauncher, LaunchResult
from roomdispatch.dispatch.pipeline import DispatchMode, DispatchReceipt, Dispatcher

__all__ = [
    "BroadcastResult",
    "DispatchMode",
    "DispatchReceipt",
    "Dispatcher",
    "FallbackLauncher",
    "LaunchResult",
    "broadcast",
]
