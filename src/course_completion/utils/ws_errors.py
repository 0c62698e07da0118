import typing


class CourseCompletionError(Exception):
    pass


class CompletionStatusNotFoundError(CourseCompletionError):
    """The server answered but reported no completion status for the course/user pair."""

    def __init__(self, msg: str = "No completion status available.") -> None:
        super().__init__(msg)


class MissingCourseIdError(CourseCompletionError, ValueError):
    def __init__(self, msg: str = "A course ID is required.") -> None:
        super().__init__(msg)


class SelfCompletionRejectedError(CourseCompletionError):
    """The server did not acknowledge the self completion request. Carries no server detail."""

    def __init__(self, msg: str = "Self completion was not acknowledged.") -> None:
        super().__init__(msg)


class WebServiceError(Exception):
    """
    A well-formed rejection returned by the remote web service: the operation ran
    and explicitly declined (disabled function, missing capability, invalid parameter...).
    """

    def __init__(self, msg: str, errorcode: typing.Optional[str] = None) -> None:
        super().__init__(msg)
        self.errorcode = errorcode


class WsTransportError(Exception):
    """The request never produced a server verdict (offline, timeout, unparseable response)."""

    def __init__(self, msg: str, status_code: typing.Optional[int] = None) -> None:
        super().__init__(msg)
        self.status_code = status_code


def is_web_service_error(error: BaseException) -> bool:
    return isinstance(error, WebServiceError)
