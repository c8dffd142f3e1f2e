#!/usr/bin/env python3
"""Seed product catalog script.

Creates the products table (DynamoDB backend) and fills it with
deterministically generated products.

Usage:
    python scripts/seed_catalog.py --mode small
    python scripts/seed_catalog.py --mode full --seed 7
    python scripts/seed_catalog.py --create-table
"""

import argparse
import asyncio

from productcatalog.application.product_service import ProductService
from productcatalog.domain.exceptions import AlreadyExistsError
from productcatalog.generator import GeneratorConfig, ProductGenerator
from productcatalog.infrastructure import DynamoDBStorageClient, get_storage_client
from productcatalog.infrastructure.config import settings
from productcatalog.infrastructure.logging_config import configure_logging


async def seed(mode: str, seed_value: int, create_table: bool) -> dict[str, int]:
    """Generate and store products.

    Args:
        mode: Catalog size (small/full).
        seed_value: Random seed.
        create_table: Whether to create the table first.

    Returns:
        Counts of created and skipped products.
    """
    storage = get_storage_client()
    if create_table and isinstance(storage, DynamoDBStorageClient):
        await storage.create_table()

    config = GeneratorConfig.full() if mode == "full" else GeneratorConfig.small()
    config.seed = seed_value

    service = ProductService(storage)
    created = 0
    skipped = 0
    for product in ProductGenerator(config).generate():
        try:
            await service.create_product(product)
            created += 1
        except AlreadyExistsError:
            skipped += 1

    return {"created": created, "skipped": skipped}


async def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Seed the product catalog",
    )
    parser.add_argument(
        "--mode",
        choices=["small", "full"],
        default="small",
        help="Catalog size: small (~40 products) or full (~400 products)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=42,
        help="Random seed (default: 42)",
    )
    parser.add_argument(
        "--create-table",
        action="store_true",
        help="Create the DynamoDB table and indexes before seeding",
    )

    args = parser.parse_args()
    configure_logging(settings.log_level, json_output=False)

    print("=" * 60)
    print("Product Catalog Seeder")
    print("=" * 60)
    print(f"Backend: {settings.storage_backend}")
    print(f"Table: {settings.table_name}")
    print(f"Mode: {args.mode}")
    print()

    result = await seed(args.mode, args.seed, args.create_table)

    print(f"  Created: {result['created']} products")
    print(f"  Skipped (already present): {result['skipped']}")
    print("=" * 60)


if __name__ == "__main__":
    asyncio.run(main())
