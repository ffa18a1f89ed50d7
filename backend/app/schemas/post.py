"""
Postboard Backend: Post Request Schemas
=========================================

What:  Validation rules for creating and updating posts.
"""

from typing import Literal, Optional

from pydantic import BaseModel, Field

PostStatus = Literal["draft", "published", "archived"]


class PostCreate(BaseModel):
    title: str = Field(min_length=3, max_length=255)
    content: str = Field(min_length=10)
    user_id: Optional[int] = Field(
        default=None,
        gt=0,
        description="Author id; defaults to the authenticated user",
    )
    status: PostStatus = "draft"


class PostUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=3, max_length=255)
    content: Optional[str] = Field(default=None, min_length=10)
    user_id: Optional[int] = Field(default=None, gt=0)
    status: Optional[PostStatus] = None

    def to_attributes(self) -> dict:
        return self.model_dump(exclude_unset=True, exclude_none=True)
