from datetime import datetime

from bson import ObjectId
from pydantic import BaseModel, Field, ConfigDict
from pydantic.alias_generators import to_camel

from app.utils.dates import utcnow


class CamelModel(BaseModel):
    """API payloads: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True
    )


class MongoDocument(BaseModel):
    """Stored document with an ObjectId primary key."""

    id: ObjectId = Field(alias="_id")
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    model_config = ConfigDict(
        populate_by_name=True,
        from_attributes=True,
        arbitrary_types_allowed=True
    )
