"""Builders for raw strike feed records used across tests."""
from processor.models import StrikeRecord


def make_strike(employer, **overrides):
    """Build a raw feed record for an active strike."""
    raw = {
        'Employer': employer,
        'Labor Organization': 'Service Employees International Union',
        'Local': '1199',
        'Industry': 'Health Care and Social Assistance',
        'Bargaining Unit Size': 250,
        'Start Date': '2024-01-15',
        'End Date': '',
        'Strike or Protest': 'Strike',
        'Authorized': True,
        'City': 'Buffalo',
        'State': 'NY',
        'Latitude': 42.8864,
        'Longitude': -78.8784,
    }
    raw.update(overrides)
    return raw


def make_active(*raws):
    """Build an active strike set from raw records."""
    return {raw['Employer']: StrikeRecord.from_dict(raw) for raw in raws}
