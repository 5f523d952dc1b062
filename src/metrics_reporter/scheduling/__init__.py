"""
Scheduling Package - Timers Decoupled From What They Trigger.

Components:
    - Scheduler: One retrying schedule and one recurring schedule
    - WallClock: Real time, threading.Timer based
    - ManualClock: Virtual time for deterministic tests and simulations
"""

from metrics_reporter.scheduling.clock import ManualClock, WallClock
from metrics_reporter.scheduling.scheduler import DoneCallback, Scheduler

__all__ = ["DoneCallback", "ManualClock", "Scheduler", "WallClock"]
