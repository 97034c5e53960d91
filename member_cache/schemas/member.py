"""
Member transfer schemas.

MemberDTO is the flat projection used at every boundary: HTTP bodies,
cache values and service return values.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


class MemberDTO(BaseModel):
    """Member transfer object."""

    model_config = ConfigDict(from_attributes=True)

    id: Optional[int] = Field(None, description="Member id (absent on create)")
    username: str = Field(..., min_length=1, max_length=255)
    telephone: str = Field(..., min_length=1, max_length=50)
    age: int = Field(..., ge=0, le=200)
    gender: str = Field(..., min_length=1, max_length=20)


class MemberDeleted(BaseModel):
    """Response body for a deleted member."""

    id: int


MemberDTOList = TypeAdapter(List[MemberDTO])
