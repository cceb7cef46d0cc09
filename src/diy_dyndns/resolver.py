"""IP resolver that checks the external IP address using a what-is-my-ip-style
website"""

import logging
import socket

import requests

from .configuration import USER_AGENT, DEFAULT_IP_URL, DEFAULT_TIMEOUT
from .exceptions import NetworkError
from .util import RequestsFamilyRestriction


class WebIPResolver:
    """Looks up the host's current public IP address by requesting a web page
    that returns nothing but the IP address in plain text.

    :param url: URL of the what-is-my-ip service
    :param timeout: Seconds to wait for a response
    :param ipv4_only: If ``True``, only connect to the service over IPv4, so
                      the address returned is suitable for an A record
    """

    def __init__(self, url: str = DEFAULT_IP_URL,
                 timeout: float = DEFAULT_TIMEOUT,
                 ipv4_only: bool = True):
        self.log = logging.getLogger('diy_dyndns.resolver')
        self.url = url
        self.timeout = timeout
        self.family = socket.AF_INET if ipv4_only else None

    def resolve(self) -> str:
        """Get the current external IP address.

        The response body is returned with surrounding whitespace removed.
        It is not validated as an IP address.

        :raises NetworkError: if the address could not be retrieved
        :return: The external IP address
        """
        self.log.debug("Requesting external IP from %s", self.url)
        with RequestsFamilyRestriction(self.family):
            try:
                r = requests.get(self.url, timeout=self.timeout,
                                 headers={'User-Agent': USER_AGENT})
            except requests.exceptions.RequestException as e:
                self.log.error("Could not get external IP from %s: %s",
                               self.url, e)
                raise NetworkError(f"Could not get external IP from "
                                   f"{self.url}") from e

        try:
            r.raise_for_status()
        except requests.exceptions.HTTPError as e:
            self.log.error("Received HTTP %d from %s: %s",
                           r.status_code, self.url, r.text)
            raise NetworkError(f"HTTP error getting external IP from "
                               f"{self.url}") from e

        try:
            text = r.text
        except (requests.exceptions.RequestException, UnicodeError) as e:
            self.log.error("Could not read response from %s: %s",
                           self.url, e)
            raise NetworkError(f"Unreadable response from {self.url}") from e

        return text.strip()
