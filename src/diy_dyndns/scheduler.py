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

"""Scheduler: runs reconciliation for every configured domain periodically"""

import logging
import threading
from typing import Optional, Sequence

from .configuration import Config, DomainConfig, DEFAULT_INTERVAL
from .client import DigitalOceanClient
from .exceptions import ConfigError
from .reconciler import Reconciler
from .resolver import WebIPResolver


class Scheduler:
    """Reconciles every configured domain once per tick, with ticks a fixed
    interval apart. Ticks run on background threads (the first immediately on
    :meth:`start`, the rest from :class:`threading.Timer`) and never overlap.

    :param reconciler: The :class:`~diy_dyndns.Reconciler` to run
    :param domains: The domains to reconcile each tick, in order
    :param interval: Seconds from the end of one tick to the start of the next

    :raises ConfigError: if there are no domains or the interval is not
                         positive
    """

    def __init__(self, reconciler: Reconciler,
                 domains: Sequence[DomainConfig],
                 interval: int = DEFAULT_INTERVAL):
        self.log = logging.getLogger('diy_dyndns.scheduler')

        if not domains:
            self.log.critical("No domains to reconcile")
            raise ConfigError("Scheduler requires at least one domain")
        if interval <= 0:
            self.log.critical("Interval must be > 0")
            raise ConfigError("Scheduler interval must be > 0")

        self.reconciler = reconciler
        self.domains = tuple(domains)
        self.interval = interval

        self._lock: threading.RLock = threading.RLock()

        # Must lock to access.
        self._started: bool = False
        self._timer: Optional[threading.Timer] = None
        self._seq: int = 0

        #: Number of completed ticks
        self.ticks: int = 0

        # For tests to join the thread doing the first tick
        self.first_tick: Optional[threading.Thread] = None

    @classmethod
    def from_config(cls, config: Config) -> 'Scheduler':
        """Build the resolver, client, reconciler, and scheduler described by
        a :class:`~diy_dyndns.Config`"""
        resolver = WebIPResolver(config.ip_url, config.timeout,
                                 config.ipv4_only)
        client = DigitalOceanClient(config.token, config.endpoint,
                                    config.timeout)
        reconciler = Reconciler(resolver, client, config.dry_run)
        return cls(reconciler, config.domains, config.interval)

    def start(self) -> None:
        """Begin periodic reconciliation. Returns immediately; the first tick
        runs in the background."""
        with self._lock:
            if self._started:
                self.log.warning("Not starting scheduler: Already started")
                return
            self._started = True
        self.log.info("Reconciling %d domain(s) every %d secs",
                      len(self.domains), self.interval)

        self.first_tick = threading.Thread(target=self.tick)
        self.first_tick.start()

    def stop(self) -> None:
        """Cancel any pending tick. A tick already in progress finishes
        first.

        Does not raise any exceptions, even if not yet started."""
        self.log.info("Stopping scheduler")
        with self._lock:
            if not self._started:
                self.log.warning("Not stopping scheduler: Already stopped")
                return
            self._started = False
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None

    def tick(self) -> None:
        """Reconcile every domain now, then schedule the next tick for
        :attr:`interval` seconds later, replacing any tick already pending.

        Also used for on-demand reconciliation. Does nothing if the scheduler
        is not started."""
        self.log.debug("Tick waiting for lock")
        with self._lock:
            if not self._started:
                self.log.info("Skipping tick when scheduler not running")
                return
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            self._seq += 1
            self._tick_and_schedule(self._seq)

    def _scheduled_tick(self, seq: int) -> None:
        """Do a timer-triggered tick, verifying that no other tick has
        happened meanwhile"""
        with self._lock:
            if not self._started:
                self.log.debug("(tick for seq %d aborted due to scheduler "
                               "stopping)", seq)
            elif self._seq != seq:
                self.log.debug("(tick for seq %d aborted due to newer tick)",
                               seq)
            else:
                self._tick_and_schedule(seq)

    def _tick_and_schedule(self, seq: int) -> None:
        """Reconcile all domains and schedule the next tick. Do not call
        without holding the lock."""
        self.log.debug("(tick seq: %d)", seq)
        for domain_config in self.domains:
            try:
                self.reconciler.reconcile_domain(domain_config)
            except Exception:
                # Expected errors are already handled by the reconciler
                self.log.exception("Unexpected error reconciling %s",
                                   domain_config.domain)
        self.ticks += 1

        self.log.debug("(tick seq %d complete, next in %d secs)",
                       seq, self.interval)
        self._timer = threading.Timer(self.interval, self._scheduled_tick,
                                      args=(seq,))
        self._timer.start()
