import logging
import typing

from course_completion.models.completion_models import (
    SELF_COMPLETION_CRITERIA_TYPE,
    STATUS_COMPLETED,
    STATUS_IN_PROGRESS,
    STATUS_NOT_YET_STARTED,
    CompletionStatusCode,
    CompletionStatusResponseModel,
    CourseCompletionModel,
    SelfCompletionResponseModel,
    UserCourseModel,
)
from course_completion.models.ws_cache_models import ReadPresets
from course_completion.site.site_protocols import CourseDirectory, ErrorClassifier, Site, SiteRegistry
from course_completion.utils.base_types import CacheKey, CourseId, SiteId, UserId
from course_completion.utils.ws_errors import (
    CompletionStatusNotFoundError,
    MissingCourseIdError,
    SelfCompletionRejectedError,
    is_web_service_error,
)

_LOGGER = logging.getLogger(__name__)
_LOGGER.setLevel(logging.INFO)

GET_COMPLETION_STATUS_WS = "core_completion_get_course_completion_status"
MARK_SELF_COMPLETED_WS = "core_completion_mark_course_self_completed"

CACHE_KEY_NAMESPACE = "mmaCourseCompletion"


def get_completion_cache_key(course_id: CourseId, user_id: UserId) -> CacheKey:
    return CacheKey(f"{CACHE_KEY_NAMESPACE}:view:{course_id}:{user_id}")


def can_mark_self_completed(
    current_user_id: UserId,
    user_id: UserId,
    completion: CourseCompletionModel,
) -> bool:
    """
    A user can mark a course as self completed when the course has a self completion
    criterion that is not complete yet, and only for themselves.
    """
    if current_user_id != user_id:
        return False

    self_completion_active = False
    already_marked = False
    # Should be at most one; the last one wins if the server sends more.
    for criterion in completion.completions:
        if criterion.type == SELF_COMPLETION_CRITERIA_TYPE:
            self_completion_active = True
            already_marked = criterion.complete

    return self_completion_active and not already_marked


def get_completed_status(completion: CourseCompletionModel) -> CompletionStatusCode:
    """Returns an untranslated status code; rendering it is up to the caller."""
    if completion.completed:
        return STATUS_COMPLETED

    has_started = any(criterion.timecompleted or criterion.complete for criterion in completion.completions)
    if has_started:
        return STATUS_IN_PROGRESS
    return STATUS_NOT_YET_STARTED


class CourseCompletionService:
    def __init__(
        self,
        site_registry: SiteRegistry,
        course_directory: CourseDirectory,
        error_classifier: ErrorClassifier = is_web_service_error,
    ) -> None:
        self.site_registry = site_registry
        self.course_directory = course_directory
        self.error_classifier = error_classifier

    def _site_or_current(self, site: typing.Optional[Site]) -> typing.Optional[Site]:
        return site if site is not None else self.site_registry.get_current_site()

    def can_mark_self_completed(
        self,
        user_id: UserId,
        completion: CourseCompletionModel,
        site: typing.Optional[Site] = None,
    ) -> bool:
        site = self._site_or_current(site)
        if site is None:
            return False
        return can_mark_self_completed(site.get_user_id(), user_id, completion)

    async def get_completion(
        self,
        course_id: CourseId,
        user_id: typing.Optional[UserId] = None,
        presets: typing.Optional[ReadPresets] = None,
        site_id: typing.Optional[SiteId] = None,
    ) -> CourseCompletionModel:
        """
        Get course completion status for a course and user.

        :param course_id: Course ID.
        :param user_id: User ID. Defaults to the site's current user.
        :param presets: Read options for the site's request cache. Not modified.
        :param site_id: Site ID. Defaults to the current site.
        :raises CompletionStatusNotFoundError: If the response carries no completion status.
        """
        site = await self.site_registry.get_site(site_id)
        user_id = user_id or site.get_user_id()
        _LOGGER.debug(f"Get completion for course {course_id} and user {user_id}")

        presets = (presets or ReadPresets()).model_copy(
            update={"cacheKey": get_completion_cache_key(course_id, user_id)}
        )
        data = {"courseid": course_id, "userid": user_id}

        raw_response = await site.read(GET_COMPLETION_STATUS_WS, data, presets)
        response = CompletionStatusResponseModel.model_validate(raw_response)
        if response.completionstatus is not None:
            return response.completionstatus

        _LOGGER.info(f"No completion status returned for course {course_id} and user {user_id}")
        raise CompletionStatusNotFoundError()

    async def invalidate_course_completion(
        self,
        course_id: CourseId,
        user_id: typing.Optional[UserId] = None,
        site_id: typing.Optional[SiteId] = None,
    ) -> None:
        site = await self.site_registry.get_site(site_id)
        user_id = user_id or site.get_user_id()
        await site.invalidate_ws_cache_for_key(get_completion_cache_key(course_id, user_id))

    def is_plugin_view_enabled(self, site: typing.Optional[Site] = None) -> bool:
        """
        Whether viewing course completion is enabled for the site.

        Called often (UI visibility checks), so it only looks at local site state
        and never calls the web service.
        """
        site = self._site_or_current(site)
        if site is None or not site.is_logged_in():
            return False
        if not site.ws_available(GET_COMPLETION_STATUS_WS):
            return False
        return True

    async def is_plugin_view_enabled_for_course(
        self,
        course_id: typing.Optional[CourseId],
        prefer_cache: bool = True,
    ) -> bool:
        if not course_id:
            raise MissingCourseIdError()

        course = await self.course_directory.get_user_course(course_id, prefer_cache)
        if course is None:
            return True

        course_model = UserCourseModel.model_validate(course)
        if course_model.enablecompletion is not None and course_model.enablecompletion == 0:
            return False
        return True

    async def is_plugin_view_enabled_for_user(
        self,
        course_id: CourseId,
        user_id: typing.Optional[UserId] = None,
        site_id: typing.Optional[SiteId] = None,
    ) -> bool:
        """
        Probes the web service to find out whether the user can view completion for the course.

        The emergency cache is disabled so a disabled feature shows up as a server rejection.
        Any other failure (offline, timeout...) is not proof of anything, so the cached
        response is accepted regardless of its age.
        """
        presets = ReadPresets(emergencyCache=False)
        try:
            await self.get_completion(course_id, user_id, presets, site_id)
            return True
        except Exception as e:
            if self.error_classifier(e):
                _LOGGER.info(f"Completion is not enabled for course {course_id} and user {user_id}: {e}")
                return False
            _LOGGER.warning(f"Completion probe failed for course {course_id} and user {user_id}, checking cache: {e}")

        try:
            await self.get_completion(course_id, user_id, presets.model_copy(update={"omitExpires": True}), site_id)
            return True
        except Exception as e:
            _LOGGER.info(f"No cached completion for course {course_id} and user {user_id}: {e}")
            return False

    def is_self_completion_available(self, site: typing.Optional[Site] = None) -> bool:
        site = self._site_or_current(site)
        if site is None:
            return False
        return site.ws_available(MARK_SELF_COMPLETED_WS)

    async def mark_course_as_self_completed(
        self,
        course_id: CourseId,
        site_id: typing.Optional[SiteId] = None,
    ) -> None:
        """
        Marks a course as self completed for the site's current user.

        The cached completion is left untouched; call invalidate_course_completion
        afterwards to see the change on the next read.

        :raises SelfCompletionRejectedError: If the server does not acknowledge the request.
        """
        site = await self.site_registry.get_site(site_id)
        _LOGGER.info(f"Marking course {course_id} as self completed")

        raw_response = await site.write(MARK_SELF_COMPLETED_WS, {"courseid": course_id})
        response = SelfCompletionResponseModel.model_validate(raw_response)
        if not response.status:
            _LOGGER.warning(f"Self completion for course {course_id} was not acknowledged: {response.warnings}")
            raise SelfCompletionRejectedError()
