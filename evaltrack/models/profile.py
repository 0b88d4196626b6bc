import uuid

from sqlalchemy import String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from evaltrack.db.base_class import Base
from evaltrack.models.mixins import TimestampMixin


class Profile(TimestampMixin, Base):
    """Read-only mirror of the profile collaborator's public fields."""

    __tablename__ = 'profiles'

    user_id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True)
    display_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    avatar_ref: Mapped[str | None] = mapped_column(String(2000), nullable=True)
