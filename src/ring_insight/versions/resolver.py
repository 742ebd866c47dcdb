"""Resolve raw release strings to version descriptors."""

from __future__ import annotations

from dataclasses import replace
from functools import lru_cache

from ..logging_config import get_logger
from .descriptor import Product, VersionDescriptor
from .table import NEWEST, PREFIXES

logger = get_logger(__name__)


def _ordered_prefixes(product: Product) -> list[tuple[str, VersionDescriptor]]:
    # Most specific first: "3.11" must win over "3."
    return sorted(PREFIXES[product], key=lambda entry: len(entry[0]), reverse=True)


_ORDERED = {product: _ordered_prefixes(product) for product in Product}


@lru_cache(maxsize=256)
def resolve(release: str, managed: bool = False) -> VersionDescriptor:
    """Map a release string to the descriptor of its release line.

    The longest matching prefix of the product's table wins. A string that
    matches nothing resolves to the newest known line of the product with
    ``recognized=False``; this never fails and never returns None.

    Args:
        release: Raw release string, e.g. "3.11.14" or "6.8.40"
        managed: True for the managed distribution, False for community

    Returns:
        Fully populated, immutable VersionDescriptor
    """
    product = Product.MANAGED if managed else Product.COMMUNITY
    release = (release or "").strip()

    for prefix, template in _ORDERED[product]:
        if release.startswith(prefix):
            return replace(template, release=release)

    fallback = NEWEST[product]
    logger.info(
        f"Unrecognized {product.value} release '{release}', assuming newest line {fallback.line}"
    )
    return replace(fallback, release=release, recognized=False)


def newest_line(managed: bool = False) -> VersionDescriptor:
    """Template of the newest known release line for a product."""
    return NEWEST[Product.MANAGED if managed else Product.COMMUNITY]
