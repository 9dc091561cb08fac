from sqlalchemy import Column, ForeignKey, Integer, Numeric, String, Text, UniqueConstraint
from .database import Base


class RecipeStep(Base):
    """One ingredient line of a cocktail, ordered by step_order (1..N per cocktail)"""
    __tablename__ = "recipe_steps"
    __table_args__ = (
        UniqueConstraint("cocktail_id", "step_order", name="uq_recipe_steps_cocktail_order"),
    )

    id = Column(Integer, primary_key=True, index=True)
    cocktail_id = Column(Integer, ForeignKey("cocktail_recipes.id", ondelete="CASCADE"), nullable=False, index=True)
    ingredient_id = Column(Integer, ForeignKey("ingredients.id", ondelete="RESTRICT"), nullable=False, index=True)

    quantity = Column(Numeric(8, 2), nullable=True)
    unit = Column(String(30), nullable=True)  # 'ml', 'oz', etc.
    step_order = Column(Integer, nullable=False)
    instruction = Column(Text, nullable=True)
