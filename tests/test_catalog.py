import random

import pytest
import requests

import catalog
from catalog import CatalogClient, MAX_POKEMON_ID
from errors import CatalogError, NetworkUnavailable, NotFound, ValidationFailure


class FakeResp:
    def __init__(self, data=None, status=200, reason='OK'):
        self._data = data
        self.status_code = status
        self.reason = reason

    def json(self):
        return self._data


def test_fetch_by_name_normalizes_term(monkeypatch):
    calls = []

    def fake_get(url, headers=None, timeout=None):
        calls.append((url, timeout))
        return FakeResp({'id': 25, 'name': 'pikachu'})

    monkeypatch.setattr(catalog.requests, 'get', fake_get)
    client = CatalogClient(base_url='https://example.test/api/', timeout=3)
    assert client.fetch_by_name_or_id('  Pikachu ')['id'] == 25
    assert calls == [('https://example.test/api/pokemon/pikachu', 3)]


def test_not_found(monkeypatch):
    monkeypatch.setattr(catalog.requests, 'get', lambda url, headers=None, timeout=None: FakeResp(status=404, reason='Not Found'))
    with pytest.raises(NotFound) as exc:
        CatalogClient().fetch_by_name_or_id('pikachoo')
    assert exc.value.term == 'pikachoo'


def test_network_unavailable(monkeypatch):
    def boom(url, headers=None, timeout=None):
        raise requests.ConnectionError('no route')

    monkeypatch.setattr(catalog.requests, 'get', boom)
    with pytest.raises(NetworkUnavailable):
        CatalogClient().fetch_by_name_or_id('pikachu')


def test_timeout_is_network_unavailable(monkeypatch):
    def slow(url, headers=None, timeout=None):
        raise requests.Timeout('slow')

    monkeypatch.setattr(catalog.requests, 'get', slow)
    with pytest.raises(NetworkUnavailable):
        CatalogClient().fetch_species('pikachu')


def test_other_status_is_catalog_error(monkeypatch):
    monkeypatch.setattr(catalog.requests, 'get', lambda url, headers=None, timeout=None: FakeResp(status=500, reason='Server Error'))
    with pytest.raises(CatalogError) as exc:
        CatalogClient().fetch_move('thunderbolt')
    assert exc.value.status_code == 500


def test_empty_term_rejected_before_io(monkeypatch):
    def fail(*a, **k):
        raise AssertionError('no request expected')

    monkeypatch.setattr(catalog.requests, 'get', fail)
    for term in ('', '   ', None):
        with pytest.raises(ValidationFailure):
            CatalogClient().fetch_by_name_or_id(term)
    with pytest.raises(ValidationFailure):
        CatalogClient().fetch_evolution_chain('')


def test_env_configuration(monkeypatch):
    monkeypatch.setenv('POKEAPI_BASE_URL', 'http://localhost:9000/v2')
    monkeypatch.setenv('POKEAPI_TIMEOUT', '2.5')
    client = CatalogClient()
    assert client.base_url == 'http://localhost:9000/v2'
    assert client.timeout == 2.5


def test_random_id_range_and_fetch_random(monkeypatch):
    rng = random.Random(7)
    for _ in range(200):
        assert 1 <= CatalogClient.random_id(rng) <= MAX_POKEMON_ID

    seen = []
    monkeypatch.setattr(catalog.requests, 'get', lambda url, headers=None, timeout=None: seen.append(url) or FakeResp({'id': 1}))
    CatalogClient(base_url='https://x.test').fetch_random(random.Random(1))
    assert seen[0].startswith('https://x.test/pokemon/')
    assert seen[0].rsplit('/', 1)[1].isdigit()
