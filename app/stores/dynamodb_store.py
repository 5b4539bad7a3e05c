"""DynamoDB implementation of the RecordStore (single-table design).

Every record lives under PK=<PREFIX>#<id>, SK=DETAIL. Lookups by an indexed
attribute (bookings by user or event, events by category) go through a GSI;
everything else is a scan filtered on the entity type. Conditional updates map
straight onto DynamoDB's ConditionExpression, so the check and the write are a
single atomic request.
"""

import uuid
from decimal import Decimal
from typing import Any, Callable, Dict, List, Optional

from boto3.dynamodb.conditions import Attr, Key
from botocore.exceptions import (
    ClientError,
    ConnectTimeoutError,
    EndpointConnectionError,
    ReadTimeoutError,
)
from loguru import logger

from app.stores.interfaces import (
    BOOKINGS,
    EVENTS,
    Condition,
    ConditionFailedError,
    DuplicateRecordError,
    Mutation,
    Predicate,
    Record,
    RecordStore,
    StoreError,
    StoreUnavailableError,
)

DETAIL_SK = "DETAIL"

COLLECTION_PREFIXES = {
    EVENTS: "EVENT",
    BOOKINGS: "BOOKING",
}

# collection -> source attribute -> (index name, partition key prefix)
INDEXES = {
    EVENTS: {
        "category": ("GSI_EventsByCategory", "CATEGORY"),
    },
    BOOKINGS: {
        "user": ("GSI_BookingsByUser", "USER"),
        "event": ("GSI_BookingsByEvent", "EVENT"),
    },
}

TRANSIENT_ERROR_CODES = {
    "ProvisionedThroughputExceededException",
    "ThrottlingException",
    "RequestLimitExceeded",
    "InternalServerError",
    "ServiceUnavailable",
}

INTERNAL_ATTRIBUTES = {"PK", "SK", "entityType"}


def _to_dynamo(value: Any) -> Any:
    if isinstance(value, float):
        return Decimal(str(value))
    if isinstance(value, dict):
        return {k: _to_dynamo(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_to_dynamo(v) for v in value]
    return value


def _from_dynamo(value: Any) -> Any:
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else value
    if isinstance(value, dict):
        return {k: _from_dynamo(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_from_dynamo(v) for v in value]
    return value


class DynamoDBRecordStore(RecordStore):
    """DynamoDB-backed record store."""

    def __init__(self, dynamodb_resource, table_name="EventBooking"):
        self.dynamodb = dynamodb_resource
        self.table = dynamodb_resource.Table(table_name)

    def _key(self, collection: str, record_id: str) -> Dict[str, str]:
        return {"PK": f"{COLLECTION_PREFIXES[collection]}#{record_id}", "SK": DETAIL_SK}

    def _index_attributes(self, collection: str, record: Record) -> Dict[str, str]:
        """GSI key attributes derived from a record's indexed fields"""
        attributes = {}
        for source, (index_name, prefix) in INDEXES.get(collection, {}).items():
            if source not in record:
                continue
            attributes[f"{index_name}_PK"] = f"{prefix}#{record[source]}"
            if "id" in record:
                attributes[f"{index_name}_SK"] = (
                    f"CREATED#{record.get('createdAt', '')}#{record['id']}"
                )
        return attributes

    def _strip(self, item: Dict[str, Any]) -> Record:
        return {
            k: _from_dynamo(v)
            for k, v in item.items()
            if k not in INTERNAL_ATTRIBUTES and not k.startswith("GSI_")
        }

    def _translate(self, e: Exception, action: str) -> StoreError:
        if isinstance(e, ClientError):
            code = e.response["Error"]["Code"]
            if code in TRANSIENT_ERROR_CODES:
                logger.error(f"DynamoDB unavailable during {action}: {code}")
                return StoreUnavailableError(f"Failed to {action}: {code}")
            logger.error(f"DynamoDB error during {action}: {e}")
            return StoreError(f"Failed to {action}: {e}")
        logger.error(f"DynamoDB unreachable during {action}: {e}")
        return StoreUnavailableError(f"Failed to {action}: {e}")

    def find_by_id(self, collection: str, record_id: str) -> Optional[Record]:
        try:
            response = self.table.get_item(
                Key=self._key(collection, record_id), ConsistentRead=True
            )
        except (ClientError, EndpointConnectionError, ConnectTimeoutError, ReadTimeoutError) as e:
            raise self._translate(e, f"get {collection}/{record_id}")

        item = response.get("Item")
        return self._strip(item) if item else None

    def find_many(
        self,
        collection: str,
        where: Optional[Dict[str, Any]] = None,
        predicate: Optional[Predicate] = None,
        sort_by: Optional[Callable[[Record], Any]] = None,
        descending: bool = False,
    ) -> List[Record]:
        where = dict(where or {})
        indexes = INDEXES.get(collection, {})
        indexed = next((name for name in where if name in indexes), None)

        try:
            if indexed is not None:
                index_name, prefix = indexes[indexed]
                params = {
                    "IndexName": index_name,
                    "KeyConditionExpression": Key(f"{index_name}_PK").eq(
                        f"{prefix}#{where.pop(indexed)}"
                    ),
                }
                filter_expression = None
                operation = self.table.query
            else:
                params = {}
                filter_expression = Attr("entityType").eq(COLLECTION_PREFIXES[collection])
                operation = self.table.scan

            for name, value in where.items():
                clause = Attr(name).eq(_to_dynamo(value))
                filter_expression = (
                    clause if filter_expression is None else filter_expression & clause
                )
            if filter_expression is not None:
                params["FilterExpression"] = filter_expression

            items = []
            while True:
                response = operation(**params)
                items.extend(response.get("Items", []))
                last_key = response.get("LastEvaluatedKey")
                if not last_key:
                    break
                params["ExclusiveStartKey"] = last_key
        except (ClientError, EndpointConnectionError, ConnectTimeoutError, ReadTimeoutError) as e:
            raise self._translate(e, f"query {collection}")

        # Filter results in memory
        records = [self._strip(item) for item in items]
        if predicate is not None:
            records = [r for r in records if predicate(r)]
        if sort_by is not None:
            records.sort(key=sort_by, reverse=descending)
        return records

    def insert(self, collection: str, record: Record) -> Record:
        record = dict(record)
        record.setdefault("id", str(uuid.uuid4()))

        item = {
            **self._key(collection, record["id"]),
            "entityType": COLLECTION_PREFIXES[collection],
            **_to_dynamo(record),
            **self._index_attributes(collection, record),
        }

        try:
            self.table.put_item(
                Item=item, ConditionExpression=Attr("PK").not_exists()
            )
        except ClientError as e:
            if e.response["Error"]["Code"] == "ConditionalCheckFailedException":
                raise DuplicateRecordError(collection, record["id"])
            raise self._translate(e, f"insert into {collection}")
        except (EndpointConnectionError, ConnectTimeoutError, ReadTimeoutError) as e:
            raise self._translate(e, f"insert into {collection}")

        return record

    def atomic_conditional_update(
        self,
        collection: str,
        record_id: str,
        condition: Condition,
        mutation: Mutation,
    ) -> Record:
        # Placeholders use their own prefix; boto3 generates #n*/:v* for
        # the condition expression and merges them into the same maps.
        names: Dict[str, str] = {}
        values: Dict[str, Any] = {}
        assignments = []

        sets = dict(mutation.sets)
        sets.update(self._index_attributes(collection, sets))

        for i, (name, value) in enumerate(sets.items()):
            names[f"#s{i}"] = name
            values[f":s{i}"] = _to_dynamo(value)
            assignments.append(f"#s{i} = :s{i}")
        for i, (name, amount) in enumerate(mutation.increments.items()):
            names[f"#i{i}"] = name
            values[f":i{i}"] = amount
            assignments.append(f"#i{i} = #i{i} + :i{i}")

        condition_expression = Attr("PK").exists()
        for clause in condition.clauses:
            attr = Attr(clause.field)
            value = _to_dynamo(clause.value)
            if clause.op == "gte":
                condition_expression &= attr.gte(value)
            elif clause.op == "eq":
                condition_expression &= attr.eq(value)
            elif clause.op == "ne":
                condition_expression &= attr.ne(value)
            else:
                raise ValueError(f"Unknown condition operator: {clause.op}")

        params = {
            "Key": self._key(collection, record_id),
            "ConditionExpression": condition_expression,
            "ReturnValues": "ALL_NEW",
        }
        if assignments:
            params["UpdateExpression"] = "SET " + ", ".join(assignments)
            params["ExpressionAttributeNames"] = names
            params["ExpressionAttributeValues"] = values

        try:
            response = self.table.update_item(**params)
        except ClientError as e:
            if e.response["Error"]["Code"] == "ConditionalCheckFailedException":
                raise ConditionFailedError(collection, record_id)
            raise self._translate(e, f"update {collection}/{record_id}")
        except (EndpointConnectionError, ConnectTimeoutError, ReadTimeoutError) as e:
            raise self._translate(e, f"update {collection}/{record_id}")

        return self._strip(response["Attributes"])

    def delete_by_id(self, collection: str, record_id: str) -> bool:
        try:
            response = self.table.delete_item(
                Key=self._key(collection, record_id), ReturnValues="ALL_OLD"
            )
        except (ClientError, EndpointConnectionError, ConnectTimeoutError, ReadTimeoutError) as e:
            raise self._translate(e, f"delete {collection}/{record_id}")

        return "Attributes" in response
