"""Deterministic product generator.

Produces synthetic catalogs from a seeded random source so local
environments and tests can be filled reproducibly.
"""

import random
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterator

from productcatalog.domain.models import Product, to_price


# ============================================================================
# Constants
# ============================================================================

# Synthetic brand names (fictional companies)
BRANDS = [
    "Acme",
    "Contoso",
    "Northwind",
    "Fabrikam",
    "Tailwind",
    "Globex",
    "Initech",
    "Umbrella",
]

# Price ranges by category (in cents)
PRICE_RANGES: dict[str, tuple[int, int]] = {
    "Electronics": (2999, 199999),
    "Audio": (1999, 49999),
    "Furniture": (9999, 299999),
    "Clothing": (1999, 19999),
    "Toys": (999, 9999),
    "Books": (999, 4999),
    "Food": (299, 4999),
    "Garden": (1999, 29999),
}

PRODUCT_NOUNS: dict[str, list[str]] = {
    "Electronics": ["Monitor", "Keyboard", "Router", "Webcam"],
    "Audio": ["Headphones", "Speaker", "Soundbar", "Earbuds"],
    "Furniture": ["Desk", "Chair", "Bookshelf", "Lamp"],
    "Clothing": ["Jacket", "Shirt", "Hoodie", "Scarf"],
    "Toys": ["Puzzle", "Robot", "Blocks", "Kite"],
    "Books": ["Cookbook", "Atlas", "Novel", "Guide"],
    "Food": ["Coffee", "Tea", "Granola", "Honey"],
    "Garden": ["Hose", "Planter", "Trowel", "Sprinkler"],
}

ADJECTIVES = ["Classic", "Pro", "Compact", "Deluxe", "Eco", "Ultra"]


@dataclass
class GeneratorConfig:
    """Configuration for product generation.

    Attributes:
        seed: Random seed for reproducibility.
        products_per_category: Products generated per category.
        max_stock: Upper bound for generated stock.
    """

    seed: int = 42
    products_per_category: int = 5
    max_stock: int = 500

    @classmethod
    def small(cls) -> "GeneratorConfig":
        """Small catalog (~40 products)."""
        return cls(products_per_category=5)

    @classmethod
    def full(cls) -> "GeneratorConfig":
        """Larger catalog (~400 products)."""
        return cls(products_per_category=50)


class ProductGenerator:
    """Generates products deterministically from a seed."""

    def __init__(self, config: GeneratorConfig | None = None) -> None:
        self.config = config or GeneratorConfig()
        self._rng = random.Random(self.config.seed)

    def _price(self, category: str) -> Decimal:
        low, high = PRICE_RANGES.get(category, (999, 9999))
        cents = self._rng.randint(low, high)
        # Prices end in .99 or .49 like real listings
        cents = (cents // 100) * 100 + self._rng.choice([49, 99])
        return to_price(Decimal(cents) / 100)

    def generate(self) -> Iterator[Product]:
        """Yield products category by category."""
        counter = 0
        for category, nouns in PRODUCT_NOUNS.items():
            for _ in range(self.config.products_per_category):
                counter += 1
                brand = self._rng.choice(BRANDS)
                name = f"{brand} {self._rng.choice(ADJECTIVES)} {self._rng.choice(nouns)}"
                yield Product(
                    sku=f"{category[:3].upper()}-{counter:05d}",
                    product_name=name,
                    category=category,
                    brand=brand,
                    price=self._price(category),
                    stock=self._rng.randint(0, self.config.max_stock),
                    description=f"{name} in the {category.lower()} range",
                )

    def generate_list(self) -> list[Product]:
        """Generate all products as a list."""
        return list(self.generate())
