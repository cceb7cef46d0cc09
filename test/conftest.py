#  diy-dyndns - Dynamic DNS updater for DigitalOcean domains
#  Copyright (C) 2023 Dmitry Zeldin
#
#  This program is free software: you can redistribute it and/or modify
#  it under the terms of the GNU General Public License as published by
#  the Free Software Foundation, either version 3 of the License, or
#  (at your option) any later version.
#
#  This program is distributed in the hope that it will be useful,
#  but WITHOUT ANY WARRANTY; without even the implied warranty of
#  MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
#  GNU General Public License for more details.
#
#  You should have received a copy of the GNU General Public License
#  along with this program.  If not, see <https://www.gnu.org/licenses/>.

import threading
from typing import List

import pytest

import doubles


class VirtualTimer:
    """Stand-in for :class:`threading.Timer` driven by a virtual clock. Never
    spawns a thread: the scheduled tick runs synchronously from :meth:`start`
    or :meth:`advance` once enough virtual seconds have passed."""

    def __init__(self, interval, function, args=None, kwargs=None):
        self.interval = interval
        self.function = function
        self.args = args if args is not None else []
        self.kwargs = kwargs if kwargs is not None else {}
        self.daemon = False

        self._lock = threading.Lock()
        self._started = False
        self._done = False
        self._elapsed = 0.0

    def start(self):
        with self._lock:
            if self._started:
                raise RuntimeError("VirtualTimer started twice")
            self._started = True
            self._fire_if_due()

    def cancel(self):
        with self._lock:
            self._done = True

    def advance(self, seconds):
        """Move this timer's clock forward"""
        with self._lock:
            self._elapsed += seconds
            self._fire_if_due()

    @property
    def remaining(self):
        """Virtual seconds until the tick fires, or None once it fired or was
        cancelled"""
        with self._lock:
            if self._done:
                return None
            return max(self.interval - self._elapsed, 0)

    def _fire_if_due(self):
        if self._done or self._elapsed < self.interval:
            return
        self.function(*self.args, **self.kwargs)
        self._done = True


class Clock:
    """Owner of every :class:`VirtualTimer` a test creates"""

    def __init__(self):
        self.timers: List[VirtualTimer] = []

    def new_timer(self, *args, **kwargs):
        timer = VirtualTimer(*args, **kwargs)
        self.timers.append(timer)
        return timer

    def _pending(self):
        return [t.remaining for t in self.timers if t.remaining is not None]

    def by(self, seconds: float):
        """Move virtual time forward, stepping to each timer's deadline in
        turn so ticks scheduled along the way also get to fire"""
        while seconds > 0:
            step = min([seconds] + self._pending())
            # Timers created during this step start counting from its end
            for timer in list(self.timers):
                timer.advance(step)
            seconds -= step

    def count_running(self):
        """Number of timers that have neither fired nor been cancelled"""
        return len(self._pending())


@pytest.fixture
def advance():
    """Replace :class:`threading.Timer` with virtual timers for the duration
    of the test and return the :class:`Clock` controlling them"""
    clock = Clock()
    orig_timer = threading.Timer
    threading.Timer = clock.new_timer
    yield clock
    threading.Timer = orig_timer


@pytest.fixture
def fake_resolver():
    """Fixture creating a resolver that always returns 203.0.113.9"""
    return doubles.FakeResolver()


@pytest.fixture
def client_factory():
    """Fixture creating a factory for fake DigitalOcean clients"""
    def factory(*records, **kwargs):
        return doubles.FakeClient(records, **kwargs)
    return factory


@pytest.fixture
def configfile_factory(tmp_path):
    """Fixture creating a factory for temporary config files. Returns the
    path written."""
    def factory(contents):
        filename = tmp_path / 'domains.ini'
        with open(filename, 'w') as f:
            for line in contents.splitlines():
                print(line.strip(), file=f)
        return filename
    return factory
