"""ORM model for geotagged cat records."""

import uuid
from datetime import UTC, datetime

from sqlalchemy import Column, DateTime, Float, ForeignKey, String, Uuid, func
from sqlalchemy.orm import relationship

from geocats.models.base import Base


class Cat(Base):
    """
    A cat record. Always has exactly one owner; location defaults to (0, 0).

    Coordinates are stored as two plain columns so bounding-box pre-filters are simple
    range comparisons; exact containment is done by geocats.services.geo.
    """

    __tablename__ = "cats"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    cat_name = Column(String(255), nullable=False)
    weight = Column(Float, nullable=False)
    filename = Column(String(1024), nullable=False)
    birthdate = Column(DateTime(timezone=True), nullable=False)
    longitude = Column(Float, nullable=False, default=0.0, index=True)
    latitude = Column(Float, nullable=False, default=0.0, index=True)
    owner_id = Column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(UTC),
        server_default=func.now(),
    )

    owner = relationship("User", back_populates="cats")

    @property
    def location(self) -> tuple[float, float]:
        """(longitude, latitude); unset coordinates read as 0."""
        return (
            self.longitude if self.longitude is not None else 0.0,
            self.latitude if self.latitude is not None else 0.0,
        )
