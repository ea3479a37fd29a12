"""Shapes shared by several routers."""

from pydantic import BaseModel


class Pagination(BaseModel):
    total: int
    limit: int
    offset: int
    hasMore: bool


def paginate(total: int, limit: int, offset: int) -> Pagination:
    return Pagination(total=total, limit=limit, offset=offset, hasMore=offset + limit < total)


class MessageResponse(BaseModel):
    message: str
