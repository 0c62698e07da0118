import asyncio
import json
import logging
import time
import typing

from botocore.exceptions import ClientError

from course_completion.dynamodb.ws_cache_table import WsCacheTable
from course_completion.models.ws_cache_models import ReadPresets, WsCacheEntryModel
from course_completion.utils.aws_env_vars import get_ws_cache_table_name, get_ws_cache_ttl_seconds
from course_completion.utils.base_types import CacheKey, WsFunctionName

_LOGGER = logging.getLogger(__name__)
_LOGGER.setLevel(logging.INFO)

WsResponse = dict[str, typing.Any]


class WsRequestCache:
    """
    Read-through cache for web-service reads, backed by WsCacheTable.

    Site implementations route their reads through `read` so that the presets
    attached by callers (cacheKey, getFromCache, saveToCache, emergencyCache,
    omitExpires) are honoured the same way everywhere.
    """

    def __init__(self, table: WsCacheTable, ttl_seconds: typing.Optional[int] = None) -> None:
        self.table = table
        self.ttl_seconds = ttl_seconds if ttl_seconds is not None else get_ws_cache_ttl_seconds()

    @classmethod
    def from_env(cls) -> "WsRequestCache":
        return cls(WsCacheTable(get_ws_cache_table_name()), get_ws_cache_ttl_seconds())

    async def _get_entry(self, cache_key: CacheKey) -> typing.Optional[WsCacheEntryModel]:
        # An unreachable cache is a miss; reads still go to the web service.
        try:
            return await asyncio.to_thread(self.table.get_entry, cache_key)
        except ClientError as e:
            _LOGGER.error(f"Cache lookup failed for {cache_key}, treating as a miss: {e}")
            return None

    async def read(
        self,
        operation: WsFunctionName,
        presets: ReadPresets,
        fetch: typing.Callable[[], typing.Awaitable[WsResponse]],
    ) -> WsResponse:
        cache_key = presets.cacheKey
        if not cache_key:
            return await fetch()

        entry: typing.Optional[WsCacheEntryModel] = None
        if presets.getFromCache or presets.emergencyCache:
            entry = await self._get_entry(cache_key)

        if presets.getFromCache and entry is not None:
            if presets.omitExpires or not entry.is_expired(int(time.time())):
                _LOGGER.debug(f"Returning cached response for {cache_key}")
                return json.loads(entry.data)

        try:
            response = await fetch()
        except Exception as e:
            if presets.emergencyCache and entry is not None:
                _LOGGER.warning(f"{operation} failed ({e}); returning cached response for {cache_key}")
                return json.loads(entry.data)
            raise

        if presets.saveToCache:
            await asyncio.to_thread(self.table.save_entry, cache_key, operation, response, self.ttl_seconds)
        return response

    async def invalidate(self, cache_key: CacheKey) -> bool:
        return await asyncio.to_thread(self.table.invalidate_entry, cache_key)
