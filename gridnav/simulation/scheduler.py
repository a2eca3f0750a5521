"""
Step Scheduler Module
=====================

Single-threaded timer for simulation steps, built on `sched.scheduler`.

Runs either on the wall clock or on a SimulatedClock whose sleep returns
immediately after moving virtual time forward. Callbacks never overlap:
each one runs to completion before the next is considered.
"""

import sched
import time
from typing import Callable, Optional


class SimulatedClock:
    """Virtual monotonic clock in seconds"""

    def __init__(self, start: float = 0.0):
        self._now = float(start)

    def now(self) -> float:
        return self._now

    def sleep(self, seconds: float):
        """Advance virtual time without blocking"""
        if seconds > 0:
            self._now += seconds

    def advance_to(self, when: float):
        if when > self._now:
            self._now = when


class StepScheduler:
    """
    Delayed-callback scheduler.

    Usage:
        scheduler = StepScheduler()                         # wall clock
        scheduler = StepScheduler(clock=SimulatedClock())   # virtual time

        event = scheduler.call_later(0.5, step)
        scheduler.cancel(event)
        scheduler.run()            # until nothing is pending
        scheduler.advance(2.0)     # virtual time only
    """

    def __init__(self, clock: Optional[SimulatedClock] = None):
        self.clock = clock
        self.fired = 0
        if clock is None:
            self._scheduler = sched.scheduler(time.monotonic, time.sleep)
        else:
            self._scheduler = sched.scheduler(clock.now, clock.sleep)

    @classmethod
    def simulated(cls, start: float = 0.0) -> 'StepScheduler':
        return cls(clock=SimulatedClock(start))

    def now(self) -> float:
        return self._scheduler.timefunc()

    def call_later(self, delay_s: float, action: Callable[[], None]) -> sched.Event:
        """Schedule action to run after delay_s seconds"""
        def fire():
            self.fired += 1
            action()

        return self._scheduler.enter(delay_s, 0, fire)

    def cancel(self, event: Optional[sched.Event]) -> bool:
        """
        Cancel a pending event.

        Returns:
            True if the event was pending and is now removed, False if it
            had already run or been cancelled
        """
        if event is None:
            return False
        try:
            self._scheduler.cancel(event)
        except ValueError:
            return False
        return True

    @property
    def pending(self) -> int:
        """Number of queued events"""
        return len(self._scheduler.queue)

    def empty(self) -> bool:
        return self._scheduler.empty()

    def run(self):
        """Run events until the queue is empty (sleeps on the wall clock)"""
        self._scheduler.run()

    def advance(self, seconds: float) -> int:
        """
        Move virtual time forward, firing every event due in the window.

        Events fire in time order with the clock set to their due time, so
        callbacks that schedule follow-ups see the correct "now".

        Returns:
            Number of events fired
        """
        if self.clock is None:
            raise RuntimeError("advance() requires a simulated clock")

        deadline = self.clock.now() + seconds
        fired_before = self.fired
        while True:
            queue = self._scheduler.queue
            if not queue or queue[0].time > deadline:
                break
            self.clock.advance_to(queue[0].time)
            self._scheduler.run(blocking=False)
        self.clock.advance_to(deadline)
        return self.fired - fired_before
