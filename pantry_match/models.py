from sqlalchemy import Column, Integer, String, Text, UniqueConstraint
# relationship not used; models are simple
from .db import Base


class Recipe(Base):
    __tablename__ = "recipes"
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), unique=True, index=True, nullable=False)
    ingredients = Column(Text, nullable=True)  # JSON-encoded list
    steps = Column(Text, nullable=True)  # JSON-encoded list


class GroceryItem(Base):
    __tablename__ = "grocery_items"
    __table_args__ = (UniqueConstraint("category", "name"),)
    id = Column(Integer, primary_key=True, index=True)
    category = Column(String(100), index=True, nullable=False)
    name = Column(String(200), nullable=False)


class GlobalIngredient(Base):
    __tablename__ = "global_ingredients"
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), nullable=False)
    normalized_name = Column(String(200), unique=True, index=True, nullable=False)
    category = Column(String(100), nullable=False)
    usage_count = Column(Integer, nullable=False, default=1)
