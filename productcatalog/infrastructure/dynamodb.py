"""DynamoDB storage client.

boto3 is synchronous, so every call runs in a worker thread through
``asyncio.to_thread`` and concurrent engine queries share one resource
without serializing on the event loop.
"""

import asyncio
from typing import Any

import boto3
import structlog
from boto3.dynamodb.conditions import Key
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from productcatalog.domain.exceptions import (
    AlreadyExistsError,
    ConflictError,
    HydrationError,
    IndexQueryError,
    NotFoundError,
)
from productcatalog.domain.keys import (
    BRAND_PRICE_INDEX,
    BRAND_PRICE_KEY,
    CATEGORY_BRAND_PRICE_INDEX,
    CATEGORY_BRAND_PRICE_KEY,
    CATEGORY_PRICE_INDEX,
    CATEGORY_PRICE_PARTITION_ATTR,
    CATEGORY_PRICE_SORT_ATTR,
    PRODUCT_NAME_INDEX,
    PRODUCT_NAME_KEY,
)
from productcatalog.domain.models import Product
from productcatalog.infrastructure.config import Settings, settings
from productcatalog.infrastructure.storage import (
    PRIMARY_KEY_ATTR,
    changes_to_attributes,
    item_to_product,
    product_to_item,
)
from productcatalog.query.conditions import KeyCondition, KeyOperator

logger = structlog.get_logger()

CONDITIONAL_CHECK_FAILED = "ConditionalCheckFailedException"
MAX_BATCH_GET_KEYS = 100
MAX_UNPROCESSED_ROUNDS = 5
UNPROCESSED_BACKOFF_SECONDS = 0.05


def build_key_condition(key_condition: KeyCondition) -> Any:
    """Translate a ``KeyCondition`` into a boto3 condition expression.

    Args:
        key_condition: Store-agnostic key condition.

    Returns:
        boto3 ``ConditionBase`` for ``KeyConditionExpression``.
    """
    expression = Key(key_condition.partition_attr).eq(key_condition.partition_value)

    sort = key_condition.sort
    if sort is None:
        return expression

    sort_key = Key(sort.attribute)
    if sort.operator is KeyOperator.EQ:
        return expression & sort_key.eq(sort.values[0])
    if sort.operator is KeyOperator.BETWEEN:
        return expression & sort_key.between(sort.values[0], sort.values[1])
    if sort.operator is KeyOperator.GTE:
        return expression & sort_key.gte(sort.values[0])
    return expression & sort_key.lte(sort.values[0])


def _error_code(error: ClientError) -> str:
    return error.response.get("Error", {}).get("Code", "")


def _index(name: str, partition: str, sort: str | None = None) -> dict[str, Any]:
    schema = [{"AttributeName": partition, "KeyType": "HASH"}]
    if sort:
        schema.append({"AttributeName": sort, "KeyType": "RANGE"})
    return {
        "IndexName": name,
        "KeySchema": schema,
        "Projection": {"ProjectionType": "KEYS_ONLY"},
    }


def table_definition(table_name: str) -> dict[str, Any]:
    """``create_table`` parameters for the products table.

    Every index projects keys only; full records come from batch reads.
    """
    return {
        "TableName": table_name,
        "KeySchema": [{"AttributeName": PRIMARY_KEY_ATTR, "KeyType": "HASH"}],
        "AttributeDefinitions": [
            {"AttributeName": PRIMARY_KEY_ATTR, "AttributeType": "S"},
            {"AttributeName": PRODUCT_NAME_KEY.partition_attr, "AttributeType": "S"},
            {"AttributeName": BRAND_PRICE_KEY.partition_attr, "AttributeType": "S"},
            {"AttributeName": BRAND_PRICE_KEY.sort_attr, "AttributeType": "S"},
            {"AttributeName": CATEGORY_BRAND_PRICE_KEY.partition_attr, "AttributeType": "S"},
            {"AttributeName": CATEGORY_BRAND_PRICE_KEY.sort_attr, "AttributeType": "S"},
            {"AttributeName": CATEGORY_PRICE_PARTITION_ATTR, "AttributeType": "S"},
            {"AttributeName": CATEGORY_PRICE_SORT_ATTR, "AttributeType": "N"},
        ],
        "GlobalSecondaryIndexes": [
            _index(PRODUCT_NAME_INDEX, PRODUCT_NAME_KEY.partition_attr),
            _index(
                BRAND_PRICE_INDEX,
                BRAND_PRICE_KEY.partition_attr,
                BRAND_PRICE_KEY.sort_attr,
            ),
            _index(
                CATEGORY_BRAND_PRICE_INDEX,
                CATEGORY_BRAND_PRICE_KEY.partition_attr,
                CATEGORY_BRAND_PRICE_KEY.sort_attr,
            ),
            _index(
                CATEGORY_PRICE_INDEX,
                CATEGORY_PRICE_PARTITION_ATTR,
                CATEGORY_PRICE_SORT_ATTR,
            ),
        ],
        "BillingMode": "PAY_PER_REQUEST",
    }


class DynamoDBStorageClient:
    """Product table access backed by DynamoDB.

    Example usage:
        client = DynamoDBStorageClient.from_settings(settings)
        skus = await client.query("brandPriceIndex", condition)
        products = await client.batch_get(skus)
    """

    def __init__(self, dynamodb: Any, table_name: str) -> None:
        """Initialize client with a boto3 DynamoDB resource.

        Args:
            dynamodb: boto3 ``dynamodb`` service resource.
            table_name: Products table name.
        """
        self.dynamodb = dynamodb
        self.table_name = table_name
        self.table = dynamodb.Table(table_name)

    @classmethod
    def from_settings(cls, config: Settings = settings) -> "DynamoDBStorageClient":
        """Create a client from application settings.

        Retry count and region are configured once here; callers never
        retry on their own.
        """
        kwargs: dict[str, Any] = {
            "region_name": config.aws_region,
            "config": Config(
                retries={
                    "max_attempts": config.dynamodb_max_attempts,
                    "mode": "standard",
                }
            ),
        }
        if config.dynamodb_endpoint_url:
            kwargs["endpoint_url"] = config.dynamodb_endpoint_url

        logger.info(
            "Connecting to DynamoDB",
            table=config.table_name,
            region=config.aws_region,
            endpoint=config.dynamodb_endpoint_url,
        )
        return cls(boto3.resource("dynamodb", **kwargs), config.table_name)

    async def create_table(self) -> bool:
        """Create the products table and its indexes if missing.

        Returns:
            True if the table was created, False if it already existed.
        """
        try:
            table = await asyncio.to_thread(
                self.dynamodb.create_table, **table_definition(self.table_name)
            )
        except ClientError as e:
            if _error_code(e) == "ResourceInUseException":
                logger.info("Table already exists", table=self.table_name)
                return False
            raise

        await asyncio.to_thread(table.wait_until_exists)
        logger.info("Table created", table=self.table_name)
        return True

    # ------------------------------------------------------------------
    # Index reads
    # ------------------------------------------------------------------

    async def query(
        self,
        index_name: str,
        key_condition: KeyCondition,
        projection: str = "identifier",
    ) -> list[str]:
        """Query one secondary index and return matching skus.

        Follows ``LastEvaluatedKey`` until the index is exhausted.

        Raises:
            IndexQueryError: On transport or condition errors.
        """
        params: dict[str, Any] = {
            "IndexName": index_name,
            "KeyConditionExpression": build_key_condition(key_condition),
        }
        if projection == "identifier":
            params["ProjectionExpression"] = PRIMARY_KEY_ATTR

        logger.debug(
            "Querying index",
            index=index_name,
            condition=key_condition.describe(),
        )

        skus: list[str] = []
        try:
            while True:
                response = await asyncio.to_thread(self.table.query, **params)
                skus.extend(item[PRIMARY_KEY_ATTR] for item in response.get("Items", []))

                last_key = response.get("LastEvaluatedKey")
                if not last_key:
                    break
                params["ExclusiveStartKey"] = last_key
        except (ClientError, BotoCoreError) as e:
            raise IndexQueryError(index_name, str(e)) from e

        return skus

    async def batch_get(self, skus: list[str]) -> list[Product]:
        """Fetch up to 100 products by sku.

        Unprocessed keys returned by DynamoDB are requested again within
        this call, waiting longer before each round.

        Raises:
            HydrationError: On transport errors or keys left unprocessed.
        """
        if not skus:
            return []
        if len(skus) > MAX_BATCH_GET_KEYS:
            raise ValueError(
                f"batch_get accepts at most {MAX_BATCH_GET_KEYS} keys, got {len(skus)}"
            )

        request: dict[str, Any] = {
            self.table_name: {"Keys": [{PRIMARY_KEY_ATTR: sku} for sku in skus]}
        }
        products: list[Product] = []

        try:
            for attempt in range(MAX_UNPROCESSED_ROUNDS):
                if attempt:
                    # Unprocessed keys mean throttling; back off exponentially.
                    await asyncio.sleep(UNPROCESSED_BACKOFF_SECONDS * 2 ** (attempt - 1))
                response = await asyncio.to_thread(
                    self.dynamodb.batch_get_item, RequestItems=request
                )
                items = response.get("Responses", {}).get(self.table_name, [])
                products.extend(item_to_product(item) for item in items)

                request = response.get("UnprocessedKeys") or {}
                if not request:
                    return products
        except (ClientError, BotoCoreError) as e:
            raise HydrationError(str(e), batch_size=len(skus)) from e

        pending = len(request.get(self.table_name, {}).get("Keys", []))
        raise HydrationError(
            f"{pending} keys left unprocessed",
            batch_size=len(skus),
        )

    # ------------------------------------------------------------------
    # Single-record access
    # ------------------------------------------------------------------

    async def get(self, sku: str) -> Product | None:
        """Get product by sku."""
        logger.debug("Getting product by sku", sku=sku)
        response = await asyncio.to_thread(
            self.table.get_item, Key={PRIMARY_KEY_ATTR: sku}
        )
        item = response.get("Item")
        return item_to_product(item) if item else None

    async def put(self, product: Product, unique_create: bool = True) -> None:
        """Save a product with every composite key attribute.

        Raises:
            AlreadyExistsError: If ``unique_create`` and the sku exists.
        """
        params: dict[str, Any] = {"Item": product_to_item(product)}
        if unique_create:
            params["ConditionExpression"] = f"attribute_not_exists({PRIMARY_KEY_ATTR})"

        logger.debug("Saving product", sku=product.sku, unique_create=unique_create)

        try:
            await asyncio.to_thread(self.table.put_item, **params)
        except ClientError as e:
            if _error_code(e) == CONDITIONAL_CHECK_FAILED:
                raise AlreadyExistsError(product.sku) from e
            raise

    async def update(
        self,
        sku: str,
        changes: dict[str, Any],
        expected: dict[str, Any] | None = None,
    ) -> None:
        """Patch stored attributes; ``None`` values are removed.

        ``expected`` values are added to the condition expression, so the
        update is rejected if the item changed since it was read.

        Raises:
            NotFoundError: If the sku does not exist.
            ConflictError: If an ``expected`` value no longer matches.
        """
        attributes = changes_to_attributes(changes)
        attributes.pop(PRIMARY_KEY_ATTR, None)
        attributes.pop("sku", None)

        if not attributes:
            logger.info("No attributes to update", sku=sku)
            return

        names: dict[str, str] = {}
        values: dict[str, Any] = {}
        set_clauses: list[str] = []
        remove_clauses: list[str] = []
        for i, (attr, value) in enumerate(sorted(attributes.items())):
            names[f"#a{i}"] = attr
            if value is None:
                remove_clauses.append(f"#a{i}")
            else:
                values[f":v{i}"] = value
                set_clauses.append(f"#a{i} = :v{i}")

        expression = ""
        if set_clauses:
            expression += "SET " + ", ".join(set_clauses)
        if remove_clauses:
            expression += (" " if expression else "") + "REMOVE " + ", ".join(remove_clauses)

        conditions = [f"attribute_exists({PRIMARY_KEY_ATTR})"]
        for i, (attr, value) in enumerate(sorted(changes_to_attributes(expected or {}).items())):
            names[f"#e{i}"] = attr
            values[f":e{i}"] = value
            conditions.append(f"#e{i} = :e{i}")

        params: dict[str, Any] = {
            "Key": {PRIMARY_KEY_ATTR: sku},
            "UpdateExpression": expression,
            "ConditionExpression": " AND ".join(conditions),
            "ExpressionAttributeNames": names,
        }
        if values:
            params["ExpressionAttributeValues"] = values
        if expected:
            params["ReturnValuesOnConditionCheckFailure"] = "ALL_OLD"

        logger.debug(
            "Updating product",
            sku=sku,
            attributes=sorted(attributes),
            expected=sorted(expected or {}),
        )

        try:
            await asyncio.to_thread(self.table.update_item, **params)
        except ClientError as e:
            if _error_code(e) == CONDITIONAL_CHECK_FAILED:
                # The old item is only returned when the sku exists.
                if expected and e.response.get("Item"):
                    raise ConflictError(sku) from e
                raise NotFoundError(sku) from e
            raise

    async def delete(self, sku: str) -> None:
        """Delete a product.

        Raises:
            NotFoundError: If the sku does not exist.
        """
        logger.debug("Deleting product", sku=sku)
        try:
            await asyncio.to_thread(
                self.table.delete_item,
                Key={PRIMARY_KEY_ATTR: sku},
                ConditionExpression=f"attribute_exists({PRIMARY_KEY_ATTR})",
            )
        except ClientError as e:
            if _error_code(e) == CONDITIONAL_CHECK_FAILED:
                raise NotFoundError(sku) from e
            raise
