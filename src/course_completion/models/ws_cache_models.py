import typing

import pydantic

from course_completion.utils.base_types import CacheKey, WsFunctionName


class ReadPresets(pydantic.BaseModel):
    """
    Options attached to a web-service read, interpreted by the site's request cache.
    """

    cacheKey: typing.Optional[CacheKey] = pydantic.Field(
        default=None, description="Key the response is stored under and invalidated by"
    )
    getFromCache: bool = pydantic.Field(default=True, description="Serve a fresh cached response without calling")
    saveToCache: bool = pydantic.Field(default=True, description="Store a successful response")
    emergencyCache: bool = pydantic.Field(
        default=True, description="Fall back to any cached response, even expired, when the call fails"
    )
    omitExpires: bool = pydantic.Field(default=False, description="Treat expired cached responses as fresh")


class WsCacheEntryModel(pydantic.BaseModel):
    """
    Pydantic model representing a cached web-service response stored in DynamoDB.
    """

    cacheKey: CacheKey = pydantic.Field(description="Partition Key - e.g. mmaCourseCompletion:view:5:42")
    operation: WsFunctionName = pydantic.Field(description="Remote operation that produced the response")
    data: str = pydantic.Field(description="JSON-encoded response body")
    expirationTime: int = pydantic.Field(description="Unix seconds after which the entry is stale; 0 if invalidated")

    def is_expired(self, now: int) -> bool:
        return self.expirationTime <= now
