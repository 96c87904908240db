"""Shared response schemas."""
from typing import Any, Literal

from pydantic import BaseModel


class PaginationMeta(BaseModel):
    total: int
    page: int
    per_page: int
    pages: int
    has_next: bool

    @classmethod
    def build(cls, total: int, page: int, per_page: int) -> "PaginationMeta":
        return cls(
            total=total,
            page=page,
            per_page=per_page,
            pages=(total + per_page - 1) // per_page if total else 0,
            has_next=page * per_page < total,
        )


class APIResponse(BaseModel):
    status: Literal["success", "error"]
    data: Any = None
    message: str | None = None
    pagination: PaginationMeta | None = None
