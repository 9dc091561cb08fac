from sqlalchemy import Column, Integer, String
from .database import Base


class Ingredient(Base):
    """Ingredient model - shared across recipes, name stored trimmed and lowercased"""
    __tablename__ = "ingredients"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(150), nullable=False, unique=True)  # Unique normalized names

    # Property to convert model to schema dictionary
    @property
    def to_schema(self):
        """Convert Ingredient model to schema dictionary format"""
        return {
            "id": self.id,
            "name": self.name
        }
