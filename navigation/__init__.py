"""Dashboard navigation.

Sidebar entries are a closed set of sections, each mapped to exactly one
target. Seller-only sections are hidden from buyers.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Union

from database.exceptions import ValidationError
from profiles import UserType, parse_user_type

class DashboardSection(str, Enum):
    """Sidebar entries of the profile and seller dashboards."""
    PROFILE = 'profile'
    DASHBOARD = 'dashboard'
    ANALYTICS = 'analytics'
    PRODUCTS = 'products'
    TRANSACTIONS = 'transactions'
    INVOICES = 'invoices'
    BILLING = 'billing'
    CHAT = 'chat'
    TICKETS = 'tickets'
    FAQ = 'faq'
    SETTINGS = 'settings'
    HELP = 'help'
    ORDERS = 'orders'
    CALENDAR = 'calendar'
    WISHLISTS = 'wishlists'
    NFTS = 'nfts'
    MESSAGES = 'messages'

@dataclass(frozen=True)
class SectionTarget:
    title: str
    route: str
    seller_only: bool = False

SECTION_ROUTES: Dict[DashboardSection, SectionTarget] = {
    DashboardSection.PROFILE: SectionTarget('Profile', '/profile'),
    DashboardSection.DASHBOARD: SectionTarget('Dashboard', '/seller/dashboard', seller_only=True),
    DashboardSection.ANALYTICS: SectionTarget('Analytics', '/seller/analytics', seller_only=True),
    DashboardSection.PRODUCTS: SectionTarget('Products', '/seller/products', seller_only=True),
    DashboardSection.TRANSACTIONS: SectionTarget('Transactions', '/seller/transactions', seller_only=True),
    DashboardSection.INVOICES: SectionTarget('Invoices', '/seller/invoices', seller_only=True),
    DashboardSection.BILLING: SectionTarget('Billing', '/seller/billing', seller_only=True),
    DashboardSection.CHAT: SectionTarget('Chat', '/seller/chat', seller_only=True),
    DashboardSection.TICKETS: SectionTarget('Tickets', '/seller/tickets', seller_only=True),
    DashboardSection.FAQ: SectionTarget('FAQ', '/profile/faq'),
    DashboardSection.SETTINGS: SectionTarget('Settings', '/settings'),
    DashboardSection.HELP: SectionTarget('Help', '/profile/help'),
    DashboardSection.ORDERS: SectionTarget('Orders', '/orders'),
    DashboardSection.CALENDAR: SectionTarget('Calendar', '/profile/calendar'),
    DashboardSection.WISHLISTS: SectionTarget('Wishlists', '/wishlist'),
    DashboardSection.NFTS: SectionTarget('NFTs', '/profile/nfts'),
    DashboardSection.MESSAGES: SectionTarget('Messages', '/profile/messages'),
}

_missing = [section.value for section in DashboardSection if section not in SECTION_ROUTES]
if _missing:
    raise ValueError(f"Dashboard sections without a route: {', '.join(_missing)}")

def resolve_section(name: Union[str, DashboardSection]) -> DashboardSection:
    """Convert a section name into a DashboardSection.

    Raises:
        ValidationError: If the name is not a known section
    """
    try:
        return DashboardSection(name)
    except ValueError:
        raise ValidationError(f"Unknown dashboard section: {name}", operation='resolve_section')

def sections_for(user_type: Union[str, UserType]) -> List[Dict[str, str]]:
    """Get the sidebar entries visible to a user type, in display order."""
    can_sell = parse_user_type(user_type).can_sell
    return [
        {'section': section.value, 'title': target.title, 'route': target.route}
        for section, target in SECTION_ROUTES.items()
        if can_sell or not target.seller_only
    ]

__all__ = [
    'DashboardSection',
    'SectionTarget',
    'SECTION_ROUTES',
    'resolve_section',
    'sections_for'
]
