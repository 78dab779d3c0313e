import copy

import pytest

from ecorisk_core.config import DEFAULT_LAYER_PATH
from ecorisk_core.data_io import load_layer

# Centres of zones in the bundled example layer (lat, lon)
CENTRO_HISTORICO = (-7.160, -78.510)  # CJ-05, complete attributes
SUR_ESTE = (-7.160, -78.4965)  # CJ-06, no population density
OUTSIDE = (-7.300, -78.700)


@pytest.fixture(scope="session")
def _example_layer():
    return load_layer(DEFAULT_LAYER_PATH)


@pytest.fixture
def example_layer(_example_layer):
    return copy.deepcopy(_example_layer)


class FakeResponse:
    def __init__(self, payload=None, status_code=200, json_error=None):
        self._payload = payload
        self.status_code = status_code
        self._json_error = json_error

    def raise_for_status(self):
        if self.status_code >= 400:
            import requests

            raise requests.HTTPError(f"{self.status_code} Error")

    def json(self):
        if self._json_error is not None:
            raise self._json_error
        return self._payload
