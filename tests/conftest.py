"""Shared fixtures for strike notifier tests."""
import pytest

from strike_factories import make_strike


@pytest.fixture
def acme_strike():
    return make_strike('Acme Hospital')


@pytest.fixture
def globex_strike():
    return make_strike(
        'Globex Warehouse',
        **{
            'Industry': 'Transportation and Warehousing',
            'City': 'Joliet',
            'State': 'IL',
        }
    )
