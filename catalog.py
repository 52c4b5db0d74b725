"""Client for the remote Pokemon catalog (PokeAPI).

Lookups raise `NotFound` for unknown names/ids and `NetworkUnavailable` when
the service cannot be reached, so the search flow can offer suggestions in
the first case and a retry in the second. Any other non-200 status becomes a
`CatalogError`. Entities are returned as the decoded JSON dicts.
"""

import logging
import os
import random

import requests

from errors import CatalogError, NetworkUnavailable, NotFound, ValidationFailure

logger = logging.getLogger('poketrainer.catalog')

DEFAULT_BASE_URL = 'https://pokeapi.co/api/v2'
# ids handed out by random catches
MAX_POKEMON_ID = 1010


class CatalogClient:
    def __init__(self, base_url=None, timeout=None):
        self.base_url = (base_url or os.environ.get('POKEAPI_BASE_URL') or DEFAULT_BASE_URL).rstrip('/')
        if timeout is None:
            try:
                timeout = float(os.environ.get('POKEAPI_TIMEOUT', '10'))
            except ValueError:
                timeout = 10.0
        self.timeout = timeout

    def _get(self, url, term=None):
        try:
            resp = requests.get(url, headers={'Content-Type': 'application/json'}, timeout=self.timeout)
        except (requests.ConnectionError, requests.Timeout) as e:
            logger.warning('Catalog request failed url=%s: %s', url, e)
            raise NetworkUnavailable() from e
        logger.debug('Catalog request performed. URL=%s Status=%s', url, getattr(resp, 'status_code', None))
        if resp.status_code == 404:
            raise NotFound(term if term is not None else url)
        if resp.status_code != 200:
            raise CatalogError(resp.status_code, getattr(resp, 'reason', '') or '')
        return resp.json()

    @staticmethod
    def _normalize_term(term):
        term = str(term if term is not None else '').strip().lower()
        if not term:
            raise ValidationFailure('Please enter a Pokemon name or ID')
        return term

    def fetch_by_name_or_id(self, term):
        term = self._normalize_term(term)
        return self._get(f'{self.base_url}/pokemon/{term}', term)

    def fetch_species(self, term):
        term = self._normalize_term(term)
        return self._get(f'{self.base_url}/pokemon-species/{term}', term)

    def fetch_move(self, term):
        term = self._normalize_term(term)
        return self._get(f'{self.base_url}/move/{term}', term)

    def fetch_evolution_chain(self, url):
        """Follow the evolution-chain URL given in a species payload."""
        if not url:
            raise ValidationFailure('Evolution chain URL is required')
        return self._get(url)

    @staticmethod
    def random_id(rng=random):
        return rng.randint(1, MAX_POKEMON_ID)

    def fetch_random(self, rng=random):
        return self.fetch_by_name_or_id(str(self.random_id(rng)))
