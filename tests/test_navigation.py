"""Tests for dashboard navigation."""

import pytest

from database.exceptions import ValidationError
from navigation import SECTION_ROUTES, DashboardSection, resolve_section, sections_for

def test_every_section_has_a_route():
    assert set(SECTION_ROUTES) == set(DashboardSection)

def test_routes_are_unique():
    routes = [target.route for target in SECTION_ROUTES.values()]
    assert len(routes) == len(set(routes))

def test_seller_sections_live_under_seller():
    for target in SECTION_ROUTES.values():
        assert target.seller_only == target.route.startswith('/seller/')

def test_buyers_never_see_seller_sections():
    sections = {entry['section'] for entry in sections_for('buyer')}

    assert 'profile' in sections
    assert 'orders' in sections
    assert 'analytics' not in sections
    assert 'products' not in sections

@pytest.mark.parametrize("user_type", ['seller', 'both'])
def test_sellers_see_everything(user_type):
    assert len(sections_for(user_type)) == len(DashboardSection)

def test_sections_keep_display_order():
    entries = sections_for('seller')
    assert entries[0] == {'section': 'profile', 'title': 'Profile', 'route': '/profile'}
    assert [entry['section'] for entry in entries] == [section.value for section in DashboardSection]

def test_resolve_section():
    assert resolve_section('analytics') is DashboardSection.ANALYTICS
    assert resolve_section(DashboardSection.NFTS) is DashboardSection.NFTS

    with pytest.raises(ValidationError, match="Unknown dashboard section"):
        resolve_section('casino')

def test_unknown_user_type():
    with pytest.raises(ValidationError):
        sections_for('visitor')
