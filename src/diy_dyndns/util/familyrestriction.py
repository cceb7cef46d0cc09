"""Context manager restricting the address family Requests connects with"""

import socket
import threading

from urllib3.util import connection

_allowed_gai_family_orig = connection.allowed_gai_family

_allowed_family_mutex = threading.RLock()
_allowed_family = None


def _allowed_gai_family():
    with _allowed_family_mutex:
        if _allowed_family is None:
            return _allowed_gai_family_orig()
        return _allowed_family


connection.allowed_gai_family = _allowed_gai_family


class RequestsFamilyRestriction:
    """Context manager that causes Urllib3/Requests to only use the specified
    address family while active. Only one restriction can be active at a time;
    other threads entering one will block until it exits.

    :param family: The address family to use, e.g. :data:`socket.AF_INET`.
                   ``None`` applies no restriction.
    """

    def __init__(self, family=socket.AF_INET):
        self.family = family

    def __enter__(self):
        global _allowed_family
        if self.family is None:
            return self
        _allowed_family_mutex.acquire()
        _allowed_family = self.family
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        global _allowed_family
        if self.family is None:
            return
        _allowed_family = None
        _allowed_family_mutex.release()
