# booking_provisioning/tenants/catalog.py
import logging
from decimal import Decimal
from typing import Dict, List, Tuple

from ..errors import Result, StoreError
from .models import ServiceCatalogEntry
from .storage_interfaces import AbstractTenantStore, TenantStoreError

logger = logging.getLogger(__name__)

OTHER_CATEGORY = "Other"

# category -> (name, duration minutes, price)
_CATEGORY_SERVICES: Dict[str, List[Tuple[str, int, str]]] = {
    "Nail Salon": [
        ("Classic Manicure", 30, "35.00"),
        ("Gel Manicure", 45, "50.00"),
        ("Classic Pedicure", 45, "45.00"),
        ("Gel Pedicure", 60, "60.00"),
        ("Nail Art", 30, "25.00"),
        ("French Manicure", 45, "45.00"),
    ],
    "Hair Salon": [
        ("Women's Haircut", 60, "65.00"),
        ("Men's Haircut", 30, "35.00"),
        ("Hair Color", 120, "120.00"),
        ("Highlights", 150, "150.00"),
        ("Blowout", 45, "45.00"),
        ("Hair Treatment", 30, "40.00"),
    ],
    "Day Spa": [
        ("Signature Facial", 60, "95.00"),
        ("Deep Cleansing Facial", 75, "110.00"),
        ("Anti-Aging Facial", 90, "120.00"),
        ("Swedish Massage", 60, "90.00"),
        ("Hot Stone Massage", 90, "130.00"),
        ("Aromatherapy Massage", 75, "105.00"),
    ],
    "Medical Spa": [
        ("Botox Treatment", 30, "350.00"),
        ("Dermal Fillers", 45, "600.00"),
        ("Chemical Peel", 45, "175.00"),
        ("Microdermabrasion", 45, "150.00"),
        ("Laser Hair Removal", 30, "250.00"),
        ("CoolSculpting", 60, "750.00"),
    ],
    "Wellness Center": [
        ("Acupuncture", 60, "85.00"),
        ("Reiki Healing", 60, "75.00"),
        ("Sound Bath", 60, "45.00"),
        ("Meditation Session", 45, "40.00"),
        ("Yoga Therapy", 60, "70.00"),
        ("Holistic Consultation", 90, "95.00"),
    ],
    "Massage Therapy": [
        ("Swedish Massage", 60, "85.00"),
        ("Deep Tissue Massage", 60, "95.00"),
        ("Sports Massage", 60, "100.00"),
        ("Prenatal Massage", 60, "90.00"),
        ("Hot Stone Massage", 90, "125.00"),
        ("Reflexology", 45, "65.00"),
    ],
    "Beauty Salon": [
        ("Classic Facial", 60, "75.00"),
        ("Eyebrow Waxing", 15, "20.00"),
        ("Lip Wax", 15, "15.00"),
        ("Lash Extensions", 120, "150.00"),
        ("Brow Tinting", 20, "25.00"),
        ("Facial Waxing", 30, "40.00"),
    ],
    "Barbershop": [
        ("Men's Haircut", 30, "30.00"),
        ("Beard Trim", 15, "15.00"),
        ("Hot Towel Shave", 30, "35.00"),
        ("Mustache Trim", 10, "10.00"),
        ("Hair Wash & Style", 30, "25.00"),
        ("Buzz Cut", 20, "20.00"),
    ],
    "Esthetics": [
        ("Classic Facial", 60, "80.00"),
        ("Hydrafacial", 60, "150.00"),
        ("Dermaplaning", 45, "85.00"),
        ("Brow Shaping", 20, "25.00"),
        ("Lash Lift", 45, "75.00"),
        ("Back Facial", 60, "90.00"),
    ],
}

_GENERIC_SERVICES: List[Tuple[str, int, str]] = [
    ("Consultation", 30, "0.00"),
    ("Basic Service", 30, "40.00"),
    ("Standard Service", 60, "75.00"),
    ("Premium Service", 90, "120.00"),
    ("Express Service", 15, "25.00"),
    ("Follow-up Appointment", 30, "35.00"),
]


def _to_entries(rows: List[Tuple[str, int, str]]) -> List[ServiceCatalogEntry]:
    return [
        ServiceCatalogEntry(name=name, duration_minutes=duration, price=Decimal(price))
        for name, duration, price in rows
    ]


def supported_categories() -> List[str]:
    return list(_CATEGORY_SERVICES) + [OTHER_CATEGORY]


def catalog_for_category(category: str) -> List[ServiceCatalogEntry]:
    """
    Default catalog for a business category.

    Total: unknown categories and the "Other" sentinel get the generic
    six-entry catalog, never an empty list.
    """
    rows = _CATEGORY_SERVICES.get(category)
    if rows is None:
        if category != OTHER_CATEGORY:
            logger.info(f"Unknown business category '{category}', using generic catalog.")
        rows = _GENERIC_SERVICES
    return _to_entries(rows)


class CatalogSeeder:
    """Persists the default catalog for a newly registered tenant."""

    def __init__(self, tenant_store: AbstractTenantStore):
        self.tenant_store = tenant_store

    async def seed_default_catalog(self, tenant_id: str, category: str) -> Result[List[ServiceCatalogEntry]]:
        """
        Insert the category's default catalog for a `pending` tenant.

        Returns:
            The tenant's stored catalog, or a StoreError
        """
        entries = catalog_for_category(category)
        try:
            stored = await self.tenant_store.add_catalog_entries(tenant_id, entries)
        except TenantStoreError as e:
            logger.warning(f"Catalog seeding failed for tenant '{tenant_id}': {e}")
            return StoreError(str(e), step="catalog")
        logger.info(f"Seeded {len(stored)} catalog entries for tenant '{tenant_id}' ({category}).")
        return stored
