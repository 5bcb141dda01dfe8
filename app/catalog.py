"""Pricing-page shaping of the Stripe catalog.

Pure functions over `(product, prices)` pairs as returned by
StripeClient.fetch_catalog(). Missing or malformed metadata never fails a
request: it falls back to empty strings, empty lists, False, 0 and order 999.
"""

import json
import logging
from enum import Enum

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

logger = logging.getLogger(__name__)

DEFAULT_ORDER = 999


class ProductsView(str, Enum):
    TIERED = "tiered"
    BILLING_PERIODS = "billing-periods"


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Metadata helpers
# ---------------------------------------------------------------------------


def _metadata(product: dict) -> dict:
    metadata = product.get("metadata")
    return metadata if isinstance(metadata, dict) else {}


def parse_order(metadata: dict) -> int:
    try:
        return int(metadata.get("order") or DEFAULT_ORDER)
    except (TypeError, ValueError):
        return DEFAULT_ORDER


def parse_features(metadata: dict) -> list:
    raw = metadata.get("features")
    if not raw:
        return []
    try:
        features = json.loads(raw)
    except (TypeError, ValueError):
        logger.warning("Malformed features metadata: %r", raw)
        return []
    return features if isinstance(features, list) else []


def _flag(metadata: dict, key: str) -> bool:
    return metadata.get(key) == "true"


def _major_units(price: dict) -> float:
    unit_amount = price.get("unit_amount")
    return unit_amount / 100 if unit_amount is not None else 0


# ---------------------------------------------------------------------------
# Tiered view: single vs holding companies, HR-only / HR+payroll per tier
# ---------------------------------------------------------------------------


class CatalogEntry(_CamelModel):
    id: str
    name: str
    price_id: str | None
    amount: float
    currency: str
    plan_tier: str
    includes_payroll: bool
    employee_range: str
    entity_range: str
    is_holding_company: bool
    order: int


class TierPrice(_CamelModel):
    price_id: str | None
    amount: float


class Tier(_CamelModel):
    tier: str
    employee_range: str
    entity_range: str
    hr_only: TierPrice | None = None
    hr_payroll: TierPrice | None = None
    order: int


def build_entry(product: dict, prices: list[dict], default_currency: str) -> CatalogEntry:
    metadata = _metadata(product)
    price = prices[0] if prices else None
    return CatalogEntry(
        id=product.get("id", ""),
        name=product.get("name") or "",
        price_id=price.get("id") if price else None,
        amount=_major_units(price) if price else 0,
        currency=(price.get("currency") if price else None) or default_currency,
        plan_tier=metadata.get("plan_tier") or "",
        includes_payroll=_flag(metadata, "includes_payroll"),
        employee_range=metadata.get("employee_range") or "",
        entity_range=metadata.get("entity_range") or "",
        is_holding_company=_flag(metadata, "is_holding_company"),
        order=parse_order(metadata),
    )


def group_by_tier(entries: list[CatalogEntry]) -> list[Tier]:
    """Group entries by plan tier; a tier takes the order of its first entry."""
    tiers: dict[str, Tier] = {}
    for entry in sorted(entries, key=lambda e: e.order):
        tier = tiers.get(entry.plan_tier)
        if tier is None:
            tier = Tier(
                tier=entry.plan_tier,
                employee_range=entry.employee_range,
                entity_range=entry.entity_range,
                order=entry.order,
            )
            tiers[entry.plan_tier] = tier
        price = TierPrice(price_id=entry.price_id, amount=entry.amount)
        if entry.includes_payroll:
            tier.hr_payroll = price
        else:
            tier.hr_only = price
    return sorted(tiers.values(), key=lambda t: t.order)


def shape_tiered(catalog: list[tuple[dict, list[dict]]], default_currency: str) -> dict:
    entries = [build_entry(product, prices, default_currency) for product, prices in catalog]
    single = [e for e in entries if not e.is_holding_company]
    holding = [e for e in entries if e.is_holding_company]
    return {
        "singleCompanies": [t.model_dump(by_alias=True) for t in group_by_tier(single)],
        "holdingCompanies": [t.model_dump(by_alias=True) for t in group_by_tier(holding)],
    }


# ---------------------------------------------------------------------------
# Billing-period view: monthly / annual price per product
# ---------------------------------------------------------------------------


class PeriodPrice(BaseModel):
    id: str | None
    amount: float
    currency: str


class ProductPrices(BaseModel):
    monthly: PeriodPrice | None = None
    annual: PeriodPrice | None = None


class CatalogProduct(BaseModel):
    id: str
    name: str
    description: str | None
    features: list
    highlighted: bool
    order: int
    prices: ProductPrices


_INTERVAL_FIELDS = {"month": "monthly", "year": "annual"}


def build_prices(prices: list[dict], default_currency: str) -> ProductPrices:
    result = ProductPrices()
    for price in prices:
        recurring = price.get("recurring") or {}
        field = _INTERVAL_FIELDS.get(recurring.get("interval"))
        if field is None:
            continue
        setattr(
            result,
            field,
            PeriodPrice(
                id=price.get("id"),
                amount=_major_units(price),
                currency=price.get("currency") or default_currency,
            ),
        )
    return result


def build_product(product: dict, prices: list[dict], default_currency: str) -> CatalogProduct:
    metadata = _metadata(product)
    return CatalogProduct(
        id=product.get("id", ""),
        name=product.get("name") or "",
        description=product.get("description"),
        features=parse_features(metadata),
        highlighted=_flag(metadata, "highlighted"),
        order=parse_order(metadata),
        prices=build_prices(prices, default_currency),
    )


def shape_billing_periods(catalog: list[tuple[dict, list[dict]]], default_currency: str) -> list[dict]:
    products = [build_product(product, prices, default_currency) for product, prices in catalog]
    products.sort(key=lambda p: p.order)
    return [p.model_dump() for p in products]
