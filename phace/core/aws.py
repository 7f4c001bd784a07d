"""
AWS client factories

Each call builds a fresh boto3 client or resource; nothing is pooled or
shared between requests.

Also converts between plain JSON values and the Decimal numbers that the
DynamoDB resource API requires.
"""
from decimal import Decimal
from typing import Any, List

import boto3
from botocore.exceptions import ClientError

from phace.core.config import settings


def get_cognito_client():
    """Cognito Identity Provider client"""
    return boto3.client("cognito-idp", region_name=settings.AWS_REGION)


def get_dynamodb_table(table_name: str):
    """DynamoDB Table resource for the given table name"""
    dynamodb = boto3.resource("dynamodb", region_name=settings.AWS_REGION)
    return dynamodb.Table(table_name)


def get_s3_client():
    """S3 client"""
    return boto3.client("s3", region_name=settings.AWS_REGION)


def get_ses_client():
    """SES client"""
    return boto3.client("ses", region_name=settings.AWS_REGION)


def is_conditional_check_failure(error: ClientError) -> bool:
    return error.response.get("Error", {}).get("Code") == "ConditionalCheckFailedException"


def scan_all(table, **kwargs) -> List[dict]:
    """Scan every page of a table (optionally filtered)"""
    items: List[dict] = []
    while True:
        response = table.scan(**kwargs)
        items.extend(response.get("Items", []))
        last_key = response.get("LastEvaluatedKey")
        if not last_key:
            return items
        kwargs["ExclusiveStartKey"] = last_key


def query_all(table, **kwargs) -> List[dict]:
    """Query every page of a key condition"""
    items: List[dict] = []
    while True:
        response = table.query(**kwargs)
        items.extend(response.get("Items", []))
        last_key = response.get("LastEvaluatedKey")
        if not last_key:
            return items
        kwargs["ExclusiveStartKey"] = last_key


def to_dynamo(value: Any) -> Any:
    """
    Prepare a value for a DynamoDB put/update

    floats become Decimal (boto3 rejects float), None values are dropped from
    dicts because DynamoDB stores absence, not nulls.
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    if isinstance(value, dict):
        return {k: to_dynamo(v) for k, v in value.items() if v is not None}
    if isinstance(value, (list, tuple)):
        return [to_dynamo(v) for v in value]
    return value


def from_dynamo(value: Any) -> Any:
    """Convert Decimal numbers read from DynamoDB back to int/float"""
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    if isinstance(value, dict):
        return {k: from_dynamo(v) for k, v in value.items()}
    if isinstance(value, list):
        return [from_dynamo(v) for v in value]
    return value
