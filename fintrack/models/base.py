from datetime import datetime, timezone

from bson import ObjectId
from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel


def stored_now() -> datetime:
    return as_stored(datetime.now(timezone.utc))


def as_stored(moment: datetime) -> datetime:
    """
    Aware local time at BSON precision.

    Naive input is taken as local time. Mongo keeps milliseconds and hands
    back UTC, so a value normalised here survives a save/load unchanged.
    """
    moment = moment.astimezone()
    return moment.replace(microsecond=moment.microsecond // 1000 * 1000)


def new_id() -> str:
    """Fresh record identifier, unique within an owner's collection."""
    return str(ObjectId())


class CamelModel(BaseModel):
    """Base for every shape exchanged with clients: camelCase on the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=True,
        validate_default=True,
        from_attributes=True
    )

    @field_validator("*")
    @classmethod
    def normalise_datetimes(cls, value):
        if isinstance(value, datetime):
            return as_stored(value)
        return value
