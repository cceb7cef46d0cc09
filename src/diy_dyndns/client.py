"""Client for the DigitalOcean domain records API"""

import logging
from json import JSONDecodeError
from pprint import pformat
from typing import Any, List, NamedTuple, Optional

import requests

from .configuration import USER_AGENT, DEFAULT_ENDPOINT, DEFAULT_TIMEOUT
from .exceptions import ApiError


class DnsRecord(NamedTuple):
    """A single DNS record as the provider returned it. Records are snapshots:
    changing one at the provider never modifies an existing instance."""

    id: int
    type: str
    name: str
    data: str
    priority: Optional[int] = None
    port: Optional[int] = None
    weight: Optional[int] = None
    ttl: Optional[int] = None

    @classmethod
    def from_json(cls, obj: Any) -> 'DnsRecord':
        """Build a record from one entry of the ``domain_records`` list

        :raises KeyError: if a required field is missing
        :raises TypeError: if the entry is not a JSON object or a field has
                           the wrong type
        """
        record_id = obj['id']
        if not isinstance(record_id, int) or isinstance(record_id, bool):
            raise TypeError(f"Record id {record_id!r} is not an integer")
        return cls(
            id=record_id,
            type=str(obj['type']),
            name=str(obj['name']),
            data=str(obj['data']),
            priority=obj.get('priority'),
            port=obj.get('port'),
            weight=obj.get('weight'),
            ttl=obj.get('ttl'),
        )


class RecordListing(NamedTuple):
    """Parsed response to a record listing request. :attr:`links` and
    :attr:`meta` are passed through untouched."""

    records: List[DnsRecord]
    links: Any = None
    meta: Any = None


class DigitalOceanClient:
    """Lists and updates DNS records through the DigitalOcean API

    :param token: DigitalOcean API token, sent as a bearer credential
    :param endpoint: Base URL of the API. Normally not required, but can be
                     used to point at a test server.
    :param timeout: Seconds to wait for each response
    """

    def __init__(self, token: str, endpoint: str = DEFAULT_ENDPOINT,
                 timeout: float = DEFAULT_TIMEOUT):
        self.log = logging.getLogger('diy_dyndns.client')
        self.token = token
        self.endpoint = endpoint.rstrip('/')
        self.timeout = timeout

    def _api_request(self, method: str, api: str,
                     data: Optional[dict] = None) -> requests.Response:
        """Issue an API request.

        :param method: HTTP method, ``'GET'`` or ``'PUT'``
        :param api: Specific API to access, e.g. ``'/domains/x.com/records'``
        :param data: A JSON-serializable dict to become the request body

        :raises ApiError: on a transport failure or HTTP error status (which
                          will be logged)
        :return: The :class:`~requests.Response` object
        """
        headers = {'Authorization': "Bearer " + self.token,
                   'Content-Type': 'application/json',
                   'User-Agent': USER_AGENT}
        if method == 'GET':
            method_f = requests.get
        elif method == 'PUT':
            method_f = requests.put
        else:
            raise ValueError(f"Unsupported method {method}")
        url = self.endpoint + api
        try:
            if data is None:
                r = method_f(url, headers=headers, timeout=self.timeout)
            else:
                r = method_f(url, headers=headers, json=data,
                             timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            self.log.error("Could not %s %s: %s", method, url, e)
            raise ApiError(f"Could not {method} {url}") from e
        try:
            r.raise_for_status()
        except requests.exceptions.HTTPError as e:
            self.log.error("Received HTTP %d when trying to %s %s:\n%s",
                           r.status_code, method, url, r.text)
            raise ApiError(f"HTTP {r.status_code} for {method} {url}") from e
        return r

    def fetch_listing(self, domain: str) -> RecordListing:
        """Fetch the records for a domain along with the rest of the
        response envelope.

        :param domain: The domain (zone) name
        :raises ApiError: if the records could not be fetched or parsed
        :return: The parsed listing
        """
        api = f'/domains/{domain}/records'
        r = self._api_request('GET', api)

        try:
            response = r.json()
        except (JSONDecodeError, ValueError) as e:
            self.log.error("Could not parse JSON response from GET %s:\n%s",
                           api, r.text)
            raise ApiError(f"Could not parse response from {api}") from e

        try:
            records = [DnsRecord.from_json(rec)
                       for rec in response['domain_records']]
        except (KeyError, TypeError, AttributeError) as e:
            self.log.error("Unknown response structure from %s:\n%s",
                           api, pformat(response))
            raise ApiError(f"Unknown response structure from {api}") from e

        self.log.debug("Fetched %d records for %s", len(records), domain)
        return RecordListing(records, response.get('links'),
                             response.get('meta'))

    def list_records(self, domain: str) -> List[DnsRecord]:
        """Fetch all records for a domain

        :param domain: The domain (zone) name
        :raises ApiError: if the records could not be fetched or parsed
        :return: The list of records, in the order the provider sent them
        """
        return self.fetch_listing(domain).records

    def update_record(self, domain: str, record_id: int, data: str) -> None:
        """Set the data (e.g. IP address) of an existing record. The response
        body is logged as-is.

        :param domain: The domain (zone) the record belongs to
        :param record_id: The provider's ID for the record
        :param data: The new record data
        :raises ApiError: if the update could not be made
        """
        api = f'/domains/{domain}/records/{record_id}'
        r = self._api_request('PUT', api, data={'data': data})
        self.log.info("%s", r.text)
