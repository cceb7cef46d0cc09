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

"""diy-dyndns, a dynamic DNS updater for domains hosted on DigitalOcean

Top-level module, containing the classes needed to embed the updater in another
program.
"""

from .client import DigitalOceanClient, DnsRecord, RecordListing
from .configuration import (Config, DomainConfig, read_config,
                            read_config_from_path)
from .exceptions import (DyndnsException, DyndnsSetupError, ConfigError,
                         NetworkError, ApiError)
from .reconciler import Reconciler
from .resolver import WebIPResolver
from .scheduler import Scheduler
