"""Compares a domain's A records against the current external IP address and
updates the ones that have drifted"""

import logging
from typing import List

from .client import DigitalOceanClient, DnsRecord
from .configuration import DomainConfig
from .exceptions import ApiError, NetworkError
from .resolver import WebIPResolver


class Reconciler:
    """Reconciles the A records of configured domains with the host's current
    external IP address

    :param resolver: Used to look up the external IP address
    :param client: Used to list and update records
    :param dry_run: If ``True``, log needed updates without making them
    """

    def __init__(self, resolver: WebIPResolver, client: DigitalOceanClient,
                 dry_run: bool = False):
        self.log = logging.getLogger('diy_dyndns.reconciler')
        self.resolver = resolver
        self.client = client
        self.dry_run = dry_run

    def reconcile_domain(self, domain_config: DomainConfig) -> List[int]:
        """Do one reconciliation cycle for a domain: look up the external IP,
        fetch the domain's records, and update any A record for the apex or a
        configured subdomain whose data does not match.

        Errors are logged, not raised. Failing to get the IP or the record
        list ends the cycle early. A failed update does not stop the remaining
        updates.

        :param domain_config: The domain to reconcile
        :return: IDs of the records an update was attempted for
        """
        domain = domain_config.domain
        try:
            external_ip = self.resolver.resolve()
        except NetworkError as e:
            self.log.error("Skipping %s this cycle: %s", domain, e)
            return []
        self.log.info("External IP: %s", external_ip)

        try:
            records = self.client.list_records(domain)
        except ApiError as e:
            self.log.error("Skipping %s this cycle: %s", domain, e)
            return []

        updated = []
        for record in records:
            for name in domain_config.record_names:
                if self._check_record(domain, record, name, external_ip):
                    updated.append(record.id)
        return updated

    def _check_record(self, domain: str, record: DnsRecord, name: str,
                      external_ip: str) -> bool:
        """Update the record if it is an A record with the given name and its
        data differs from the external IP

        :return: ``True`` if an update was attempted
        """
        if record.type != 'A' or record.name != name:
            return False

        self.log.info("%s %s", record.name, record.data)
        if record.data == external_ip:
            return False

        if self.dry_run:
            self.log.info("Dry run: would update %s record %d in %s to %s",
                          record.name, record.id, domain, external_ip)
            return False

        self.log.debug("Updating %s record %d in %s from %s to %s",
                       record.name, record.id, domain, record.data,
                       external_ip)
        try:
            self.client.update_record(domain, record.id, external_ip)
        except ApiError as e:
            # Already logged by the client
            self.log.debug("(update of record %d failed: %s)", record.id, e)
        return True
