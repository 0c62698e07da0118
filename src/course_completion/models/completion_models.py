import typing

from pydantic import BaseModel, ConfigDict, Field

from course_completion.utils.base_types import CourseId

# Criterion type the user satisfies by explicitly marking the course as complete.
SELF_COMPLETION_CRITERIA_TYPE = 1

CompletionStatusCode = typing.Literal[
    "coursecompletion.completed",
    "coursecompletion.inprogress",
    "coursecompletion.notyetstarted",
]

STATUS_COMPLETED: CompletionStatusCode = "coursecompletion.completed"
STATUS_IN_PROGRESS: CompletionStatusCode = "coursecompletion.inprogress"
STATUS_NOT_YET_STARTED: CompletionStatusCode = "coursecompletion.notyetstarted"


class CompletionCriterionDetailsModel(BaseModel):
    model_config = ConfigDict(extra="allow")

    type: typing.Optional[str] = None
    criteria: typing.Optional[str] = None
    requirement: typing.Optional[str] = None
    status: typing.Optional[str] = None


class CompletionCriterionModel(BaseModel):
    """One completion rule attached to a course, as reported for a single user."""

    model_config = ConfigDict(extra="allow")

    type: typing.Optional[int] = None
    complete: bool = False
    timecompleted: typing.Optional[int] = None
    title: typing.Optional[str] = None
    status: typing.Optional[str] = None
    details: typing.Optional[CompletionCriterionDetailsModel] = None


class CourseCompletionModel(BaseModel):
    model_config = ConfigDict(extra="allow")

    completed: bool = False
    aggregation: typing.Optional[int] = None
    # Server order, not semantically significant
    completions: list[CompletionCriterionModel] = Field(default_factory=list)


class CompletionStatusResponseModel(BaseModel):
    completionstatus: typing.Optional[CourseCompletionModel] = None
    warnings: list[dict[str, typing.Any]] = Field(default_factory=list)


class SelfCompletionResponseModel(BaseModel):
    status: typing.Optional[bool] = None
    warnings: list[dict[str, typing.Any]] = Field(default_factory=list)


class UserCourseModel(BaseModel):
    """Course record as returned by the course directory. Only enablecompletion is consulted."""

    model_config = ConfigDict(extra="allow")

    id: typing.Optional[CourseId] = None
    enablecompletion: typing.Optional[int] = None
