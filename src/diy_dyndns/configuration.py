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

"""diy-dyndns configuration parsing"""

import configparser
import math
import os
import pathlib
import sys
from typing import (Dict, List, Mapping, NamedTuple, Optional, TextIO,
                    Tuple, Union)

if sys.version_info < (3, 10):
    from importlib_metadata import version
else:
    from importlib.metadata import version

from .exceptions import ConfigError


USER_AGENT = f"diy-dyndns/{version('diy-dyndns')}"

#: Name of the record for the domain itself
APEX = '@'

#: Environment variable holding the DigitalOcean API token
TOKEN_ENV_VAR = 'DO_TOKEN'

#: Environment variable holding the path to the config file
CONFIG_ENV_VAR = 'DYNDNS_CONFIG'

DEFAULT_CONFIG_FILE = 'domains.ini'
DEFAULT_INTERVAL = 600
DEFAULT_IP_URL = 'http://myexternalip.com/raw'
DEFAULT_ENDPOINT = 'https://api.digitalocean.com/v2'
DEFAULT_TIMEOUT = 10.0

_TRUE = ('true', 'on', 'yes', '1')
_FALSE = ('false', 'off', 'no', '0')
_LOG_LEVELS = ('debug', 'info', 'warning', 'error', 'critical')


class DomainConfig(NamedTuple):
    """A domain (DNS zone) to keep up to date, along with the names of the
    subdomain records to manage. The apex record (``@``) is always managed and
    is not listed in :attr:`subdomains`."""

    domain: str
    subdomains: Tuple[str, ...] = ()

    @property
    def record_names(self) -> Tuple[str, ...]:
        """All record names to manage in this domain, apex first"""
        return (APEX,) + self.subdomains


class Config:
    """diy-dyndns configuration data

    :param domains: The domains to manage, in the order they were configured
    :param token: DigitalOcean API token
    :param main: Dict containing global configuration (from the ``[dyndns]``
                 section)

    :raises ConfigError: if any value is invalid
    """

    def __init__(self,
                 domains: List[DomainConfig],
                 token: Optional[str],
                 main: Optional[Dict[str, str]] = None):
        if main is None:
            main = dict()

        if not domains:
            raise ConfigError("No domains are configured. Add at least one "
                              "[domain.<name>] section.")
        #: Domains to manage
        self.domains: Tuple[DomainConfig, ...] = tuple(domains)

        if not token:
            raise ConfigError("No DigitalOcean API token is configured. Set "
                              f"the {TOKEN_ENV_VAR} environment variable.")
        #: Bearer token for the DigitalOcean API
        self.token: str = token

        #: Seconds between reconciliation passes
        self.interval: int = _get_positive(main, 'interval', int,
                                           DEFAULT_INTERVAL)

        #: Seconds to wait for any single HTTP response
        self.timeout: float = _get_positive(main, 'timeout', float,
                                            DEFAULT_TIMEOUT)

        #: URL of the what-is-my-ip service
        self.ip_url: str = main.get('ip_url', DEFAULT_IP_URL)

        #: Base URL of the DigitalOcean API. Normally not required, but can be
        #: pointed elsewhere for testing.
        self.endpoint: str = main.get('endpoint', DEFAULT_ENDPOINT).rstrip('/')

        #: Whether to look up the external IP over IPv4 only
        self.ipv4_only: bool = _get_bool(main, 'ipv4_only', True)

        #: Whether to report needed updates without actually making them
        self.dry_run: bool = _get_bool(main, 'dry_run', False)

        #: Where to log: 'console', 'syslog', or a file path
        self.log: str = main.get('log', 'console')

        self.log_level: str = main.get('log_level', 'info').lower()
        if self.log_level not in _LOG_LEVELS:
            raise ConfigError("Config option 'log_level' must be one of "
                              + ", ".join(_LOG_LEVELS))


def _get_bool(main: Mapping[str, str], key: str, default: bool) -> bool:
    """Read a boolean option from the ``[dyndns]`` section"""
    try:
        value = main[key].lower()
    except KeyError:
        return default
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ConfigError(f"Config option '{key}' must be boolean "
                      "(true/yes/on/1/false/no/off/0)")


def _get_positive(main, key, type_, default):
    """Read a number > 0 from the ``[dyndns]`` section"""
    try:
        value = type_(main.get(key, default))
    except ValueError:
        raise ConfigError(f"Config option '{key}' must be a number > 0") \
            from None
    if not math.isfinite(value) or value <= 0:
        raise ConfigError(f"Config option '{key}' must be a number > 0")
    return value


def _parse_domain(name: str, section: Mapping[str, str]) -> DomainConfig:
    """Build a :class:`DomainConfig` from a ``[domain.<name>]`` section

    :raises ConfigError: if the section is invalid
    """
    name = name.strip()
    if not name or any(c.isspace() for c in name):
        raise ConfigError(f"Invalid domain name in section [domain.{name}]")

    for key in section:
        if key != 'subdomains':
            raise ConfigError(f"Unknown option '{key}' for domain {name}")

    subdomains = section.get('subdomains', '').replace(',', ' ').split()
    seen = set()
    for subdomain in subdomains:
        if subdomain == APEX:
            raise ConfigError(f"Domain {name} should not list '{APEX}' as a "
                              "subdomain. The apex record is always managed.")
        if subdomain in seen:
            raise ConfigError(f"Domain {name} lists subdomain '{subdomain}' "
                              "more than once")
        seen.add(subdomain)

    return DomainConfig(name, tuple(subdomains))


def _process_config(config: configparser.ConfigParser,
                    environ: Mapping[str, str]) -> Config:
    """Process the given :class:`~configparser.ConfigParser` into a
    :class:`Config`

    :param config: The configuration to process
    :param environ: Environment variables to read the API token from
    :raises ConfigError: if the configuration is invalid
    :returns: the processed and validated configuration
    """
    # Note: ConfigParser already handles catching duplicate sections and
    #   duplicate keys

    main: Dict[str, str] = dict()
    domains: List[DomainConfig] = []

    for section in config.sections():
        if section == 'dyndns':
            main.update(config[section])
            continue

        kind, _, name = section.partition('.')
        if kind == 'domain':
            domains.append(_parse_domain(name, config[section]))
        else:
            raise ConfigError("Config section %s is not a dyndns or domain "
                              "section" % section)

    token = environ.get(TOKEN_ENV_VAR) or main.pop('token', None)
    return Config(domains, token, main)


def read_config(configfile: TextIO,
                environ: Optional[Mapping[str, str]] = None) -> Config:
    """Read configuration in from the given file-like object

    :param configfile: Filelike object to read the config from
    :param environ: Environment to read the API token from. If ``None``, use
                    :data:`os.environ`.
    :raises ConfigError: if the config file cannot be read or is invalid
    :return: A :class:`Config` ready to be passed to
             :class:`~diy_dyndns.Scheduler`
    """
    if environ is None:
        environ = os.environ

    # Interpolation would trip over '%' in tokens and URLs
    config = configparser.ConfigParser(interpolation=None)
    try:
        config.read_file(configfile)
    except OSError as e:
        raise ConfigError("Could not read config file: %s" % e.strerror) \
            from e
    except configparser.Error as e:
        raise ConfigError("Error in config file: %s" % e) from e

    return _process_config(config, environ)


def read_config_from_path(
    filename: Union[str, pathlib.Path],
    environ: Optional[Mapping[str, str]] = None,
) -> Config:
    """Read configuration from the named file or :class:`~pathlib.Path`

    :param filename: Filename or path to read from
    :param environ: Environment to read the API token from. If ``None``, use
                    :data:`os.environ`.
    :raises ConfigError: if the config file cannot be read or is invalid
    :return: A :class:`Config` ready to be passed to
             :class:`~diy_dyndns.Scheduler`
    """
    try:
        with open(filename, 'r') as f:
            return read_config(f, environ)
    except OSError as e:
        raise ConfigError("Could not read config file %s: %s" %
                          (filename, e.strerror)) from e


def config_path(environ: Optional[Mapping[str, str]] = None) -> str:
    """Get the path of the config file, from the ``DYNDNS_CONFIG`` environment
    variable or the default"""
    if environ is None:
        environ = os.environ
    return environ.get(CONFIG_ENV_VAR) or DEFAULT_CONFIG_FILE
