"""Helper classes and functions for diy-dyndns"""

from .familyrestriction import RequestsFamilyRestriction

__all__ = [
    "RequestsFamilyRestriction",
]
