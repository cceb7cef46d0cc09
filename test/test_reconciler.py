import pytest

import doubles
from doubles import record
from diy_dyndns import ApiError, DomainConfig, NetworkError, Reconciler


EXAMPLE = DomainConfig('example.com', ('www',))
IP = '203.0.113.9'


def reported(caplog):
    """Record lines reported (``name data``) by the reconciler"""
    return [r.getMessage() for r in caplog.records
            if r.name == 'diy_dyndns.reconciler' and r.levelname == 'INFO'
            and not r.getMessage().startswith(('External IP', 'Dry run'))]


@pytest.fixture(autouse=True)
def info_logs(caplog):
    caplog.set_level('INFO', logger='diy_dyndns')


def test_example_scenario(fake_resolver, client_factory, caplog):
    """Test only the stale apex A record is updated: the current www A record
    and the www CNAME are left alone"""
    client = client_factory(
        record(1, '@', '203.0.113.1'),
        record(2, 'www', IP),
        record(3, 'www', 'example.com', type='CNAME'),
    )
    reconciler = Reconciler(fake_resolver, client)

    updated = reconciler.reconcile_domain(EXAMPLE)

    assert updated == [1]
    assert client.updates == [('example.com', 1, IP)]
    assert reported(caplog) == ['@ 203.0.113.1', 'www 203.0.113.9']
    assert 'External IP: 203.0.113.9' in caplog.messages


def test_one_resolution_one_listing_before_updates(fake_resolver,
                                                   client_factory):
    """Test a cycle resolves once and lists once, before any update"""
    client = client_factory(record(1, '@', '1.1.1.1'),
                            record(2, 'www', '2.2.2.2'))
    reconciler = Reconciler(fake_resolver, client)

    reconciler.reconcile_domain(EXAMPLE)

    assert fake_resolver.resolve_count == 1
    assert client.calls == [
        ('list', 'example.com'),
        ('update', 'example.com', 1, IP),
        ('update', 'example.com', 2, IP),
    ]


@pytest.mark.parametrize('error', [NetworkError("no route"), NetworkError])
def test_resolve_failure_aborts(client_factory, caplog, error):
    """Test that when the IP cannot be resolved, records are not even
    listed"""
    resolver = doubles.FakeResolver([error])
    client = client_factory(record(1, '@', '1.1.1.1'))
    reconciler = Reconciler(resolver, client)

    assert reconciler.reconcile_domain(EXAMPLE) == []
    assert client.calls == []
    assert any(r.levelname == 'ERROR' for r in caplog.records)


def test_list_failure_aborts(fake_resolver, client_factory, caplog):
    """Test that when records cannot be listed, nothing is updated"""
    client = client_factory(record(1, '@', '1.1.1.1'),
                            list_error=ApiError("HTTP 500"))
    reconciler = Reconciler(fake_resolver, client)

    assert reconciler.reconcile_domain(EXAMPLE) == []
    assert client.calls == [('list', 'example.com')]
    assert reported(caplog) == []
    assert any(r.levelname == 'ERROR' for r in caplog.records)


def test_update_failure_does_not_abort(fake_resolver, client_factory):
    """Test a failed update does not stop updates to the remaining records"""
    client = client_factory(
        record(1, '@', '1.1.1.1'),
        record(2, 'www', '2.2.2.2'),
        record(3, 'www', '3.3.3.3'),
        failing_updates=[1, 2],
    )
    reconciler = Reconciler(fake_resolver, client)

    updated = reconciler.reconcile_domain(EXAMPLE)

    assert updated == [1, 2, 3]
    assert [update[1] for update in client.updates] == [1, 2, 3]


def test_no_matches(fake_resolver, client_factory, caplog):
    """Test no matching records means no updates, no reports, and no
    errors"""
    client = client_factory(
        record(1, 'mail', '1.1.1.1'),
        record(2, '@', 'ns1.digitalocean.com', type='NS'),
        record(3, '@', '2001:db8::1', type='AAAA'),
    )
    reconciler = Reconciler(fake_resolver, client)

    assert reconciler.reconcile_domain(EXAMPLE) == []
    assert client.updates == []
    assert reported(caplog) == []
    assert not any(r.levelname == 'ERROR' for r in caplog.records)


def test_no_records(fake_resolver, client_factory):
    """Test a domain with no records at all"""
    client = client_factory()
    reconciler = Reconciler(fake_resolver, client)

    assert reconciler.reconcile_domain(EXAMPLE) == []
    assert client.calls == [('list', 'example.com')]


def test_duplicate_names_all_processed(fake_resolver, client_factory,
                                       caplog):
    """Test several A records with the same name are each reported and each
    updated if stale"""
    client = client_factory(
        record(1, '@', '1.1.1.1'),
        record(2, '@', IP),
        record(3, '@', '3.3.3.3'),
    )
    reconciler = Reconciler(fake_resolver, client)

    assert reconciler.reconcile_domain(EXAMPLE) == [1, 3]
    assert reported(caplog) == ['@ 1.1.1.1', '@ 203.0.113.9', '@ 3.3.3.3']


def test_unconfigured_subdomain_ignored(fake_resolver, client_factory):
    """Test only the apex is managed when no subdomains are configured"""
    client = client_factory(record(1, '@', '1.1.1.1'),
                            record(2, 'www', '2.2.2.2'))
    reconciler = Reconciler(fake_resolver, client)

    assert reconciler.reconcile_domain(DomainConfig('example.com')) == [1]


@pytest.mark.parametrize('record_type, name, data, expect_update', [
    ('A', '@', '1.1.1.1', True),
    ('A', 'www', '1.1.1.1', True),
    ('A', '@', IP, False),
    ('A', 'ftp', '1.1.1.1', False),
    ('a', '@', '1.1.1.1', False),
    ('AAAA', '@', '1.1.1.1', False),
    ('CNAME', 'www', '1.1.1.1', False),
    ('A', 'WWW', '1.1.1.1', False),
    ('A', 'www.example.com', '1.1.1.1', False),
])
def test_update_condition(fake_resolver, client_factory, record_type, name,
                          data, expect_update):
    """Test an update is issued if and only if the record is an A record,
    its name is a candidate, and its data differs from the external IP"""
    client = client_factory(record(7, name, data, type=record_type))
    reconciler = Reconciler(fake_resolver, client)

    reconciler.reconcile_domain(EXAMPLE)

    assert bool(client.updates) == expect_update


def test_idempotent(fake_resolver, client_factory):
    """Test a second cycle with an unchanged IP issues no updates"""
    client = client_factory(record(1, '@', '1.1.1.1'),
                            record(2, 'www', '2.2.2.2'),
                            apply_updates=True)
    reconciler = Reconciler(fake_resolver, client)

    reconciler.reconcile_domain(EXAMPLE)
    assert len(client.updates) == 2

    reconciler.reconcile_domain(EXAMPLE)
    assert len(client.updates) == 2
    assert fake_resolver.resolve_count == 2
    assert client.list_count == 2


def test_fresh_state_each_cycle(client_factory):
    """Test each cycle uses a freshly resolved IP and fresh records"""
    resolver = doubles.FakeResolver(['1.1.1.1', '2.2.2.2'])
    client = client_factory(record(1, '@', '1.1.1.1'), apply_updates=True)
    reconciler = Reconciler(resolver, client)

    assert reconciler.reconcile_domain(EXAMPLE) == []
    assert reconciler.reconcile_domain(EXAMPLE) == [1]
    assert client.updates == [('example.com', 1, '2.2.2.2')]


def test_records_not_mutated(fake_resolver, client_factory):
    """Test updating never modifies the fetched record snapshot"""
    stale = record(1, '@', '1.1.1.1')
    client = client_factory(stale)
    reconciler = Reconciler(fake_resolver, client)

    reconciler.reconcile_domain(EXAMPLE)

    assert stale.data == '1.1.1.1'
    assert client.records == [stale]


def test_dry_run(fake_resolver, client_factory, caplog):
    """Test dry run reports matches and needed updates but updates
    nothing"""
    client = client_factory(record(1, '@', '1.1.1.1'))
    reconciler = Reconciler(fake_resolver, client, dry_run=True)

    assert reconciler.reconcile_domain(EXAMPLE) == []
    assert client.updates == []
    assert reported(caplog) == ['@ 1.1.1.1']
    assert any(message.startswith('Dry run') for message in caplog.messages)
