"""Shared response pieces."""

import math
from pydantic import BaseModel

# Letters and spaces, used for person and role names
NAME_PATTERN = r"^[A-Za-z ]+$"


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "Pagination":
        return cls(page=page, limit=limit, total=total, total_pages=math.ceil(total / limit) if total else 0)


class MessageResponse(BaseModel):
    message: str


class EnterpriseRef(BaseModel):
    id: str
    name: str

    class Config:
        from_attributes = True


class RoleRef(BaseModel):
    id: str
    name: str

    class Config:
        from_attributes = True

