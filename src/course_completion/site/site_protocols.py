"""
Structural interfaces of the collaborators the completion service is wired with.

The enclosing application owns sites, sessions, transport and the course list;
anything matching these shapes can be injected.
"""

import typing

from course_completion.models.ws_cache_models import ReadPresets
from course_completion.utils.base_types import CacheKey, CourseId, SiteId, UserId


class Site(typing.Protocol):
    id: SiteId

    def get_user_id(self) -> UserId: ...

    def is_logged_in(self) -> bool: ...

    def ws_available(self, ws_function: str) -> bool: ...

    async def read(
        self, ws_function: str, data: dict[str, typing.Any], presets: ReadPresets
    ) -> dict[str, typing.Any]: ...

    async def write(self, ws_function: str, data: dict[str, typing.Any]) -> dict[str, typing.Any]: ...

    async def invalidate_ws_cache_for_key(self, cache_key: CacheKey) -> None: ...


class SiteRegistry(typing.Protocol):
    async def get_site(self, site_id: typing.Optional[SiteId] = None) -> Site:
        """Resolves a site by ID, or the current site when no ID is given."""
        ...

    def get_current_site(self) -> typing.Optional[Site]: ...


class CourseDirectory(typing.Protocol):
    async def get_user_course(
        self, course_id: CourseId, prefer_cache: bool = True
    ) -> typing.Optional[dict[str, typing.Any]]: ...


# Returns True when the error is a confirmed, well-formed server-side rejection.
ErrorClassifier = typing.Callable[[BaseException], bool]
