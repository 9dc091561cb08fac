from datetime import datetime, timezone
from sqlalchemy import Column, DateTime, Integer, String, Text
from .database import Base


def _utcnow():
    return datetime.now(timezone.utc)


class CocktailRecipe(Base):
    """CocktailRecipe model - name and descriptive fields; steps live in recipe_steps"""
    __tablename__ = "cocktail_recipes"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(150), nullable=False, index=True)
    description = Column(Text, nullable=True)
    preparation_time_minutes = Column(Integer, nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
