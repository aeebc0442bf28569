from datetime import datetime, timedelta, timezone
from typing import Optional

from sqlalchemy import BigInteger, Float, ForeignKey, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from penguin_nurse.core.db import UTCDateTime, utcnow


# sqlite only autoincrements a plain INTEGER primary key
ID_TYPE = BigInteger().with_variant(Integer, "sqlite")


def sql_enum_values(enum_cls) -> list[str]:
    return [member.value for member in enum_cls]


class TimestampMixin:
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow, onupdate=utcnow, nullable=False)


class EntryMixin(TimestampMixin):
    """Columns shared by everything a user logs against a point in time."""

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True)
    user_id: Mapped[int] = mapped_column(
        ID_TYPE,
        ForeignKey("users.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    time: Mapped[datetime] = mapped_column(UTCDateTime, index=True, nullable=False)
    utc_offset: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    comments: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    @property
    def local_time(self) -> datetime:
        """``time`` in the offset it was recorded with."""
        return self.time.astimezone(timezone(timedelta(seconds=self.utc_offset or 0)))


class ColourMixin:
    colour_hue: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    colour_saturation: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    colour_value: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)

    @property
    def colour(self) -> dict[str, float]:
        return {
            "hue": self.colour_hue,
            "saturation": self.colour_saturation,
            "value": self.colour_value,
        }
