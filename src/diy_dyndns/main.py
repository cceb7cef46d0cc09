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

import logging
import logging.handlers
import signal
import sys

from . import configuration, scheduler
from .exceptions import ConfigError, DyndnsSetupError


def setup_logging(conf: configuration.Config) -> logging.Logger:
    """Attach a handler to the ``diy_dyndns`` logger as configured.

    For ``console`` logging, informational records go to stdout and warnings
    and errors go to stderr.

    :param conf: The configuration
    :returns: the ``diy_dyndns`` logger
    """
    log = logging.getLogger('diy_dyndns')

    if conf.log == 'console':
        out_handler = logging.StreamHandler(sys.stdout)
        out_handler.addFilter(lambda record: record.levelno < logging.WARNING)
        err_handler = logging.StreamHandler(sys.stderr)
        err_handler.setLevel(logging.WARNING)
        log.addHandler(out_handler)
        log.addHandler(err_handler)
    elif conf.log == 'syslog':
        log.addHandler(logging.handlers.SysLogHandler())
    else:
        file_handler = logging.FileHandler(conf.log)
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s %(levelname)s %(name)s: %(message)s'))
        log.addHandler(file_handler)

    log.setLevel(getattr(logging, conf.log_level.upper()))
    return log


def main(environ=None):
    """Main entry point when run as a standalone program. Takes no arguments;
    the config file path and API token come from the environment.

    :param environ: Mapping of environment variables. If ``None``, read
                    :data:`os.environ`.
    """
    try:
        path = configuration.config_path(environ)
        conf = configuration.read_config_from_path(path, environ)
    except ConfigError as e:
        print("Config error:", e, file=sys.stderr)
        sys.exit(1)

    try:
        log = setup_logging(conf)
    except OSError as e:
        print("Could not open log file:", e, file=sys.stderr)
        sys.exit(1)

    # Start up the actual reconciliation
    try:
        dyndns_scheduler = scheduler.Scheduler.from_config(conf)
        dyndns_scheduler.start()
    except DyndnsSetupError:
        log.critical("diy-dyndns failed to start.")
        sys.exit(1)

    # Do an immediate reconciliation on SIGUSR1
    def handle_sigusr1(sig, _):
        log.info("Received signal: %s", signal.Signals(sig).name)
        dyndns_scheduler.tick()
    signal.signal(signal.SIGUSR1, handle_sigusr1)

    # Wait for SIGINT (^C) or SIGTERM
    def handle_signals(sig, _):
        log.info("Received signal: %s", signal.Signals(sig).name)
        dyndns_scheduler.stop()
    signal.signal(signal.SIGINT, handle_signals)
    signal.signal(signal.SIGTERM, handle_signals)


if __name__ == '__main__':
    main()
