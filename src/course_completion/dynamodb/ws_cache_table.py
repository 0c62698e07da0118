import json
import logging
import threading
import time
import typing

import boto3
from botocore.exceptions import ClientError
from pydantic import ValidationError

from course_completion.models.ws_cache_models import WsCacheEntryModel
from course_completion.utils.aws_env_vars import get_aws_region
from course_completion.utils.base_types import CacheKey, WsFunctionName

_LOGGER = logging.getLogger(__name__)
_LOGGER.setLevel(logging.INFO)


class WsCacheTable:
    """
    Data Abstraction Layer for the persisted web-service response cache.

    Table Schema:
      - PK: cacheKey (String - e.g., "mmaCourseCompletion:view:5:42")
      - Attributes:
          - operation (String) - remote operation that produced the response
          - data (String) - JSON-encoded response body
          - expirationTime (Number) - unix seconds; 0 once invalidated

    Invalidated entries are kept rather than deleted so that emergency reads
    can still serve them when the service is unreachable.

    Calls come from asyncio.to_thread workers and boto3 resources are not
    thread-safe, so each thread gets its own resource.
    """

    def __init__(self, table_name: str) -> None:
        self.table_name = table_name
        self.region = get_aws_region()
        self._local = threading.local()

    @property
    def table(self) -> typing.Any:
        table = getattr(self._local, "table", None)
        if table is None:
            table = boto3.resource("dynamodb", region_name=self.region).Table(self.table_name)
            self._local.table = table
        return table

    def get_entry(self, cache_key: CacheKey) -> typing.Optional[WsCacheEntryModel]:
        """
        Retrieves a cached response, expired or not.

        :param cache_key: Key the response was stored under.
        :return: WsCacheEntryModel instance if found and well-formed, else None.
        """
        _LOGGER.debug(f"Fetching cache entry: {cache_key}")
        try:
            response = self.table.get_item(Key={"cacheKey": cache_key})
            item = response.get("Item")
            if item:
                return WsCacheEntryModel.model_validate(item)
            _LOGGER.debug(f"No cache entry found for: {cache_key}")
            return None
        except ClientError as e:
            _LOGGER.error(f"Failed to get cache entry {cache_key}: {e.response['Error']['Message']}")
            raise
        except ValidationError as ve:
            _LOGGER.error(f"Failed to validate cache entry {cache_key}: {ve}", exc_info=True)
            return None

    def save_entry(
        self,
        cache_key: CacheKey,
        operation: WsFunctionName,
        data: dict[str, typing.Any],
        ttl_seconds: int,
    ) -> bool:
        """
        Stores a response, replacing any previous entry for the key.

        :return: True if successful, False otherwise.
        """
        expiration_time = int(time.time()) + ttl_seconds
        try:
            self.table.put_item(
                Item={
                    "cacheKey": cache_key,
                    "operation": operation,
                    "data": json.dumps(data),
                    "expirationTime": expiration_time,
                }
            )
            _LOGGER.debug(f"Saved cache entry {cache_key} expiring at {expiration_time}.")
            return True
        except ClientError as e:
            _LOGGER.error(f"Error saving cache entry {cache_key}: {e.response['Error']['Message']}", exc_info=True)
            return False

    def invalidate_entry(self, cache_key: CacheKey) -> bool:
        """
        Marks an entry as expired. A missing entry is left missing.

        :return: True if successful (including when there was nothing to invalidate), False otherwise.
        """
        _LOGGER.info(f"Invalidating cache entry: {cache_key}")
        try:
            self.table.update_item(
                Key={"cacheKey": cache_key},
                UpdateExpression="SET #expirationTime = :zero",
                ConditionExpression="attribute_exists(cacheKey)",
                ExpressionAttributeNames={"#expirationTime": "expirationTime"},
                ExpressionAttributeValues={":zero": 0},
            )
            return True
        except ClientError as e:
            if e.response["Error"]["Code"] == "ConditionalCheckFailedException":
                _LOGGER.debug(f"Nothing to invalidate for: {cache_key}")
                return True
            _LOGGER.error(
                f"Error invalidating cache entry {cache_key}: {e.response['Error']['Message']}", exc_info=True
            )
            return False
