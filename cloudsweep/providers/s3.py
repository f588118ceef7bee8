"""S3-compatible object storage provider.

Objects are deleted before buckets since a bucket must be empty before it can
be removed. Resource ids are base64 encoded so that bucket names and object
keys containing ":" survive the composite "bucket:key" id.
"""

from __future__ import annotations

import base64
import binascii
import logging
from typing import Any, List, Sequence, Tuple

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from ..errors import AuthError, ReadError
from .base import Provider
from .registry import register_provider

logger = logging.getLogger(__name__)

TYPE_OBJECT = "object"
TYPE_BUCKET = "bucket"


def encode_bucket(bucket_name: str) -> str:
    return base64.b64encode(bucket_name.encode()).decode()


def decode_bucket(encoded: str) -> str:
    return base64.b64decode(encoded.encode(), validate=True).decode()


def encode_bucket_object(bucket_name: str, key: str) -> str:
    return f"{encode_bucket(bucket_name)}:{encode_bucket(key)}"


def decode_bucket_object(encoded: str) -> Tuple[str, str]:
    """Split an object id into bucket name and key.

    Raises:
        ValueError: If the id is not a valid encoded object id
    """
    parts = encoded.split(":")
    if len(parts) != 2:
        raise ValueError(f"cannot decode bucket object {encoded}")
    try:
        return decode_bucket(parts[0]), decode_bucket(parts[1])
    except (binascii.Error, UnicodeDecodeError) as e:
        raise ValueError(f"cannot decode bucket object {encoded}: {e}") from e


@register_provider
class S3Provider(Provider):
    """Provider for buckets and objects of an S3-compatible endpoint."""

    NAME = "s3"
    RESOURCE_TYPES = (TYPE_OBJECT, TYPE_BUCKET)
    REQUIRED_SETTINGS = {
        "endpoint": "endpoint",
        "region": "region's name",
        "ak": "access key",
        "sk": "secret key",
    }

    def __init__(self, settings, debug: bool = False) -> None:
        super().__init__(settings, debug=debug)
        if debug:
            boto3.set_stream_logger("botocore", logging.DEBUG)
        self._client = None

    @property
    def client(self) -> Any:
        if self._client is None:
            self._client = boto3.client(
                "s3",
                endpoint_url=self.settings["endpoint"],
                region_name=self.settings["region"],
                aws_access_key_id=self.settings["ak"],
                aws_secret_access_key=self.settings["sk"],
            )
        return self._client

    def authenticate(self) -> None:
        try:
            self.client.list_buckets()
        except (ClientError, BotoCoreError) as e:
            raise AuthError(f"unable to list buckets: {e}") from e

    def read_objects(self, resource_type: str) -> List[str]:
        if resource_type == TYPE_OBJECT:
            return self._read_bucket_objects()
        if resource_type == TYPE_BUCKET:
            return [encode_bucket(name) for name in self._list_bucket_names(resource_type)]
        return []

    def delete_objects(self, resource_type: str, ids: Sequence[str]) -> None:
        if resource_type == TYPE_OBJECT:
            self._delete_bucket_objects(ids)
        elif resource_type == TYPE_BUCKET:
            self._delete_buckets(ids)

    def describe(self, resource_id: str, resource_type: str) -> str:
        try:
            if resource_type == TYPE_OBJECT:
                bucket_name, key = decode_bucket_object(resource_id)
                return f"{bucket_name}:{key}"
            if resource_type == TYPE_BUCKET:
                return decode_bucket(resource_id)
        except ValueError:
            logger.debug(f"Cannot decode {resource_type} id {resource_id}")
        return resource_id

    def _list_bucket_names(self, resource_type: str) -> List[str]:
        try:
            response = self.client.list_buckets()
        except (ClientError, BotoCoreError) as e:
            raise ReadError(resource_type, "unable to list buckets", e) from e
        return [bucket["Name"] for bucket in response.get("Buckets", [])]

    def _read_bucket_objects(self) -> List[str]:
        objects = []
        for bucket_name in self._list_bucket_names(TYPE_OBJECT):
            paginator = self.client.get_paginator("list_objects_v2")
            try:
                for page in paginator.paginate(Bucket=bucket_name):
                    for item in page.get("Contents", []):
                        objects.append(encode_bucket_object(bucket_name, item["Key"]))
            except ClientError as e:
                error_code = e.response.get("Error", {}).get("Code", "Unknown")
                if error_code == "NoSuchBucket":
                    # Bucket removed between the two listings
                    logger.debug(f"Bucket {bucket_name} disappeared while listing objects")
                    continue
                raise ReadError(TYPE_OBJECT, f"unable to list objects of bucket {bucket_name}", e) from e
            except BotoCoreError as e:
                raise ReadError(TYPE_OBJECT, f"unable to list objects of bucket {bucket_name}", e) from e
        return objects

    def _delete_bucket_objects(self, encoded_objects: Sequence[str]) -> None:
        for encoded in encoded_objects:
            try:
                bucket_name, key = decode_bucket_object(encoded)
            except ValueError as e:
                logger.error(f"Error while reading object details: {e}")
                continue
            try:
                self.client.delete_object(Bucket=bucket_name, Key=key)
            except (ClientError, BotoCoreError) as e:
                logger.error(f"Error while deleting object {bucket_name}:{key}: {e}")
            else:
                logger.info(f"Deleted object {bucket_name}:{key}")

    def _delete_buckets(self, encoded_buckets: Sequence[str]) -> None:
        for encoded in encoded_buckets:
            try:
                bucket_name = decode_bucket(encoded)
            except ValueError as e:
                logger.error(f"Error while reading bucket name {encoded}: {e}")
                continue
            try:
                self.client.delete_bucket(Bucket=bucket_name)
            except ClientError as e:
                error_code = e.response.get("Error", {}).get("Code", "Unknown")
                if error_code == "BucketNotEmpty":
                    logger.debug(f"Bucket {bucket_name} not empty yet, will retry")
                else:
                    logger.error(f"Error while deleting bucket {bucket_name}: {e}")
            except BotoCoreError as e:
                logger.error(f"Error while deleting bucket {bucket_name}: {e}")
            else:
                logger.info(f"Deleted bucket {bucket_name}")
