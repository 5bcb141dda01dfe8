"""Pricing-page products endpoint - Stripe catalog, reshaped for display."""

import logging

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse, Response

from app.catalog import ProductsView, shape_billing_periods, shape_tiered
from app.errors import ApiError
from app.integrations import Integrations, get_integrations
from app.providers import ProviderError

router = APIRouter()
logger = logging.getLogger(__name__)

PREFLIGHT_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
    "Access-Control-Max-Age": "86400",
}


def _resolve_view(view: str | None, default: str) -> ProductsView:
    try:
        return ProductsView(view or default)
    except ValueError:
        raise ApiError(400, "Unknown products view")


@router.get("/products")
async def get_products(
    view: str | None = Query(default=None, description="'tiered' or 'billing-periods'"),
    integrations: Integrations = Depends(get_integrations),
):
    """Active Stripe products with prices, shaped for the pricing page."""
    settings = integrations.settings
    products_view = _resolve_view(view, settings.products_view)

    if integrations.stripe is None:
        raise ApiError(500, "Stripe API key not configured")

    try:
        catalog = await integrations.stripe.fetch_catalog()
        if products_view is ProductsView.TIERED:
            body = {"success": True, "pricing": shape_tiered(catalog, settings.default_currency)}
        else:
            body = {
                "success": True,
                "products": shape_billing_periods(catalog, settings.default_currency),
            }
    except ProviderError as exc:
        logger.error("Stripe products fetch error: %s", exc)
        raise ApiError(500, "Failed to fetch products from Stripe")
    except Exception:
        logger.exception("Unexpected error shaping Stripe products")
        raise ApiError(500, "Failed to fetch products from Stripe")

    return JSONResponse(
        body,
        headers={
            "Access-Control-Allow-Origin": "*",
            "Cache-Control": f"public, max-age={settings.catalog_cache_seconds}",
        },
    )


@router.options("/products")
async def products_preflight():
    return Response(status_code=200, headers=PREFLIGHT_HEADERS)
