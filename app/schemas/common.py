from typing import Generic, TypeVar

from pydantic import Field, model_serializer

from app.schemas.base import MAX_INT, APIModel, RequestModel

T = TypeVar("T")


class PageQuery(RequestModel):
    page: int = Field(1, ge=1, le=MAX_INT)
    limit: int = Field(10, ge=1, le=100)


class Pagination(APIModel):
    page: int
    limit: int
    total: int
    total_pages: int


class MessageEnvelope(APIModel):
    """``message`` is optional on the wire: left out entirely when there is none."""

    message: str | None = None

    @model_serializer(mode="wrap")
    def drop_empty_message(self, handler):
        body = handler(self)
        if body.get("message") is None:
            body.pop("message", None)
        return body


class Page(MessageEnvelope, Generic[T]):
    data: list[T]
    pagination: Pagination


class Envelope(MessageEnvelope, Generic[T]):
    data: T


class MessageOut(APIModel):
    message: str
