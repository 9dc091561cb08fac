from datetime import datetime, timezone
from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, UniqueConstraint
from .database import Base


class Favorite(Base):
    """A user's bookmark on a cocktail.

    user_id is the opaque identifier handed over by the auth layer; it is
    compared, never joined against the users table.
    """
    __tablename__ = "user_favorites"
    __table_args__ = (
        UniqueConstraint("user_id", "cocktail_id", name="uq_user_favorites_user_cocktail"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(255), nullable=False, index=True)
    cocktail_id = Column(Integer, ForeignKey("cocktail_recipes.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False)
