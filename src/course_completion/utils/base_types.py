import typing

CourseId = typing.NewType("CourseId", int)
UserId = typing.NewType("UserId", int)
SiteId = typing.NewType("SiteId", str)

CacheKey = typing.NewType("CacheKey", str)
WsFunctionName = typing.NewType("WsFunctionName", str)
