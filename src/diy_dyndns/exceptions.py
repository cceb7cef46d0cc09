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

"""All diy-dyndns exceptions"""


class DyndnsException(Exception):
    """Base class for all diy-dyndns exceptions"""


class DyndnsSetupError(DyndnsException):
    """Base class for diy-dyndns exceptions that happen during startup"""


class ConfigError(DyndnsSetupError):
    """Raised when the configuration is missing, malformed or has other
    errors"""


class NetworkError(DyndnsException):
    """Raised when the current external IP address could not be determined.
    Aborts reconciliation of the current domain until the next tick."""


class ApiError(DyndnsException):
    """Raised when a DNS provider API request fails, either in transport, with
    an HTTP error status, or with a response that cannot be parsed."""
