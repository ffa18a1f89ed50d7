"""
Postboard Backend: Response Resources
=======================================

What:  Public shape of users and posts as returned by the API.
How:   `from_record()` validates `Record.to_serializable()` through the
       resource model and dumps JSON-ready dicts. Relation fields (`posts`
       on a user, `user` on a post) are only emitted when the relation was
       loaded on the record, so a list of posts never grows a `"user": null`.

Never exposed: the password hash (hidden on the users schema and absent
from UserResource).
"""

from datetime import datetime
from typing import Any, ClassVar, Dict, Iterable, List, Optional, Tuple

from pydantic import BaseModel, Field

from app.orm import Record


class _Resource(BaseModel):
    relation_fields: ClassVar[Tuple[str, ...]] = ()
    # fields of a loaded relation that the nested resource must not emit
    nested_exclude: ClassVar[Dict[str, Any]] = {}

    @classmethod
    def from_record(cls, record: Optional[Record]) -> Optional[Dict[str, Any]]:
        if record is None:
            return None
        resource = cls.model_validate(record.to_serializable())
        exclude: Dict[str, Any] = {}
        for name in cls.relation_fields:
            if not record.relation_loaded(name):
                exclude[name] = True
            elif name in cls.nested_exclude:
                exclude[name] = cls.nested_exclude[name]
        return resource.model_dump(mode="json", exclude=exclude or None)

    @classmethod
    def collection(cls, records: Iterable[Record]) -> List[Dict[str, Any]]:
        return [cls.from_record(record) for record in records]


class UserResource(_Resource):
    relation_fields: ClassVar[Tuple[str, ...]] = ("posts",)
    nested_exclude: ClassVar[Dict[str, Any]] = {"posts": {"__all__": {"user"}}}

    id: int
    name: str
    email: str
    status: Optional[str] = Field(default=None)
    email_verified_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    posts: Optional[List["PostResource"]] = None


class PostResource(_Resource):
    relation_fields: ClassVar[Tuple[str, ...]] = ("user",)
    nested_exclude: ClassVar[Dict[str, Any]] = {"user": {"posts"}}

    id: int
    title: str
    content: Optional[str] = None
    status: Optional[str] = None
    user_id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    user: Optional[UserResource] = None


UserResource.model_rebuild()
