import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional

import boto3
from boto3.dynamodb.conditions import Attr, Key
from botocore.exceptions import ClientError

from app.core.config import settings

logger = logging.getLogger(__name__)

# Initialize DynamoDB resource
dynamodb = boto3.resource("dynamodb", region_name=settings.DYNAMO_REGION)

# Get table references. Every record table is keyed by user_id plus a sort key.
users_table = dynamodb.Table(settings.DYNAMO_USERS_TABLE)
fuel_expenses_table = dynamodb.Table(settings.DYNAMO_FUEL_EXPENSES_TABLE)
service_records_table = dynamodb.Table(settings.DYNAMO_SERVICE_RECORDS_TABLE)
vehicles_table = dynamodb.Table(settings.DYNAMO_VEHICLES_TABLE)
payments_table = dynamodb.Table(settings.DYNAMO_PAYMENTS_TABLE)


# --- Users ---

def get_user_by_email(email: str):
    """Query the Users table by email (assumes a GSI exists on email)."""
    try:
        response = users_table.query(
            IndexName="email-index",  # You must create this GSI manually
            KeyConditionExpression=Key("email").eq(email)
        )
        return _from_dynamo(response["Items"][0]) if response["Items"] else None
    except ClientError as e:
        logger.error(f"get_user_by_email failed: {e.response['Error']['Message']}")
        return None


def get_user_by_id(user_id: str):
    """Get user by user_id from the Users table."""
    return _get(users_table, {"user_id": user_id})


def put_user(user_item: dict):
    """Insert a new user into the Users table."""
    return _put(users_table, user_item)


def update_user(user_id: str, updates: dict):
    """Update profile fields of an existing user. Returns the updated item or None."""
    return _update(users_table, {"user_id": user_id}, updates)



# --- Fuel expenses ---

def put_fuel_expense(expense_item: dict):
    return _put(fuel_expenses_table, expense_item)


def get_fuel_expenses_for_user(user_id: str, month_prefix: Optional[str] = None):
    """
    Query fuel expenses for a user, oldest first.
    month_prefix: '2024-11' matches all items with SK like '2024-11-01T...'
    """
    return _query_user(fuel_expenses_table, user_id, "expense_id", month_prefix)


def get_fuel_expense(user_id: str, expense_id: str):
    return _get(fuel_expenses_table, {"user_id": user_id, "expense_id": expense_id})


def update_fuel_expense(user_id: str, expense_id: str, updates: dict):
    return _update(fuel_expenses_table, {"user_id": user_id, "expense_id": expense_id}, updates)


def delete_fuel_expense(user_id: str, expense_id: str):
    return _delete(fuel_expenses_table, {"user_id": user_id, "expense_id": expense_id})


# --- Service records ---

def put_service_record(record_item: dict):
    return _put(service_records_table, record_item)


def get_service_records_for_user(user_id: str, vehicle_id: Optional[str] = None):
    """Query service records for a user, oldest first, optionally for one vehicle."""
    return _query_user(
        service_records_table,
        user_id,
        filter_expression=Attr("vehicle_id").eq(vehicle_id) if vehicle_id else None,
    )


def delete_service_record(user_id: str, record_id: str):
    return _delete(service_records_table, {"user_id": user_id, "record_id": record_id})


# --- Vehicles ---

def put_vehicle(vehicle_item: dict):
    return _put(vehicles_table, vehicle_item)


def get_vehicles_for_user(user_id: str):
    """All vehicles of a user, ordered by make."""
    vehicles = _query_user(vehicles_table, user_id)
    return sorted(vehicles, key=lambda v: (v.get("make") or "").lower())


def get_vehicle(user_id: str, vehicle_id: str):
    return _get(vehicles_table, {"user_id": user_id, "vehicle_id": vehicle_id})


def update_vehicle(user_id: str, vehicle_id: str, updates: dict):
    return _update(vehicles_table, {"user_id": user_id, "vehicle_id": vehicle_id}, updates)


def delete_vehicle(user_id: str, vehicle_id: str):
    return _delete(vehicles_table, {"user_id": user_id, "vehicle_id": vehicle_id})


# --- Payments ---

def put_payment(payment_item: dict):
    return _put(payments_table, payment_item)


def get_payments_for_user(user_id: str):
    return _query_user(payments_table, user_id)


def delete_payment(user_id: str, payment_id: str):
    return _delete(payments_table, {"user_id": user_id, "payment_id": payment_id})


# --- Table helpers ---

def _put(table, item: dict) -> bool:
    try:
        table.put_item(Item=_convert_for_dynamo(item))
        return True
    except ClientError as e:
        logger.error(f"put_item on {table.name} failed: {e.response['Error']['Message']}")
        return False


def _get(table, key: dict):
    try:
        response = table.get_item(Key=key)
        item = response.get("Item")
        return _from_dynamo(item) if item else None
    except ClientError as e:
        logger.error(f"get_item on {table.name} failed: {e.response['Error']['Message']}")
        return None


def _delete(table, key: dict) -> bool:
    try:
        response = table.delete_item(Key=key, ReturnValues="ALL_OLD")
        return "Attributes" in response
    except ClientError as e:
        logger.error(f"delete_item on {table.name} failed: {e.response['Error']['Message']}")
        return False


def _query_user(
    table,
    user_id: str,
    sort_key: Optional[str] = None,
    prefix: Optional[str] = None,
    filter_expression=None,
) -> List[Dict[str, Any]]:
    """Query every item of a user, following pagination. Returns [] on failure."""
    condition = Key("user_id").eq(user_id)
    if sort_key and prefix:
        condition = condition & Key(sort_key).begins_with(prefix)

    kwargs: Dict[str, Any] = {"KeyConditionExpression": condition}
    if filter_expression is not None:
        kwargs["FilterExpression"] = filter_expression

    items: List[Dict[str, Any]] = []
    try:
        while True:
            response = table.query(**kwargs)
            items.extend(response.get("Items", []))
            last_key = response.get("LastEvaluatedKey")
            if not last_key:
                break
            kwargs["ExclusiveStartKey"] = last_key
    except ClientError as e:
        logger.error(f"query on {table.name} failed: {e.response['Error']['Message']}")
        return []
    return [_from_dynamo(item) for item in items]


def _update(table, key: dict, updates: dict):
    """
    Apply partial updates to an item. Returns the updated item or None.
    """
    if not updates:
        return None

    update_expression_parts = []
    expression_attribute_values = {}
    expression_attribute_names = {}

    for idx, (name, value) in enumerate(updates.items()):
        placeholder = f"#f{idx}"
        value_placeholder = f":v{idx}"
        update_expression_parts.append(f"{placeholder} = {value_placeholder}")
        expression_attribute_names[placeholder] = name
        expression_attribute_values[value_placeholder] = value

    update_expression = "SET " + ", ".join(update_expression_parts)

    try:
        response = table.update_item(
            Key=key,
            UpdateExpression=update_expression,
            ConditionExpression="attribute_exists(user_id)",
            ExpressionAttributeNames=expression_attribute_names,
            ExpressionAttributeValues=_convert_for_dynamo(expression_attribute_values),
            ReturnValues="ALL_NEW",
        )
        attributes = response.get("Attributes")
        return _from_dynamo(attributes) if attributes else None
    except ClientError as e:
        if e.response["Error"]["Code"] != "ConditionalCheckFailedException":
            logger.error(f"update_item on {table.name} failed: {e.response['Error']['Message']}")
        return None


def _convert_for_dynamo(obj: Any):
    """
    Recursively convert floats to Decimal for DynamoDB compatibility.
    """
    if isinstance(obj, float):
        return Decimal(str(obj))
    if isinstance(obj, dict):
        return {k: _convert_for_dynamo(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_convert_for_dynamo(v) for v in obj]
    return obj


def _from_dynamo(obj: Any):
    """
    Recursively convert Decimal instances back to native Python numeric types.
    """
    if isinstance(obj, list):
        return [_from_dynamo(item) for item in obj]
    if isinstance(obj, dict):
        return {k: _from_dynamo(v) for k, v in obj.items()}
    if isinstance(obj, Decimal):
        if obj % 1 == 0:
            return int(obj)
        return float(obj)
    return obj
