import pytest

from pve_cluster_exporter.catalog import build_catalog
from pve_cluster_exporter.config import load_settings

from fakes import FakeProvider


@pytest.fixture
def catalog():
    return build_catalog()


@pytest.fixture
def settings():
    return load_settings({})


@pytest.fixture
def provider():
    return FakeProvider()
