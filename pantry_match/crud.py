import json
from typing import Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from . import models, schemas
from .normalize import normalize
from .suggest import suggest_category


# ----------------------------
# Recipes
# ----------------------------

def _loads(raw: Optional[str]) -> List[str]:
    try:
        value = json.loads(raw or "[]")
    except (TypeError, ValueError):
        return []
    return [str(v) for v in value] if isinstance(value, list) else []


def recipe_to_schema(db_recipe: models.Recipe) -> schemas.Recipe:
    return schemas.Recipe(
        id=db_recipe.id,
        name=db_recipe.name,
        ingredients=_loads(db_recipe.ingredients),
        steps=_loads(db_recipe.steps),
    )


def recipe_lines(db_recipe: models.Recipe) -> List[str]:
    return _loads(db_recipe.ingredients)


def get_recipe(db: Session, recipe_id: int):
    return db.query(models.Recipe).filter(models.Recipe.id == recipe_id).first()


def get_recipe_by_name(db: Session, name: str):
    return db.query(models.Recipe).filter(models.Recipe.name == name).first()


def get_recipes(db: Session, skip: int = 0, limit: int = 100):
    return db.query(models.Recipe).order_by(models.Recipe.id).offset(skip).limit(limit).all()


def search_recipes(db: Session, q: Optional[str] = None, skip: int = 0, limit: int = 100) -> Tuple[List[models.Recipe], int]:
    query = db.query(models.Recipe)
    if q:
        query = query.filter(models.Recipe.name.ilike(f"%{q}%"))
    total = query.count()
    items = query.order_by(models.Recipe.id).offset(skip).limit(limit).all()
    return items, total


def create_recipe(db: Session, recipe: schemas.RecipeCreate):
    db_recipe = models.Recipe(
        name=recipe.name,
        ingredients=json.dumps(recipe.ingredients or []),
        steps=json.dumps(recipe.steps or []),
    )
    db.add(db_recipe)
    db.commit()
    db.refresh(db_recipe)
    return db_recipe


def update_recipe(db: Session, recipe_id: int, recipe: schemas.RecipeCreate):
    db_recipe = get_recipe(db, recipe_id)
    if not db_recipe:
        return None
    db_recipe.name = recipe.name
    db_recipe.ingredients = json.dumps(recipe.ingredients or [])
    db_recipe.steps = json.dumps(recipe.steps or [])
    db.add(db_recipe)
    db.commit()
    db.refresh(db_recipe)
    return db_recipe


def delete_recipe(db: Session, recipe_id: int):
    db_recipe = get_recipe(db, recipe_id)
    if not db_recipe:
        return False
    db.delete(db_recipe)
    db.commit()
    return True


# ----------------------------
# Personal inventory
# ----------------------------

def get_grocery_items(db: Session):
    return db.query(models.GroceryItem).order_by(models.GroceryItem.id).all()


def get_inventory(db: Session) -> Dict[str, List[str]]:
    """Inventory as {category: [names]} in insertion order."""
    inventory: Dict[str, List[str]] = {}
    for item in get_grocery_items(db):
        inventory.setdefault(item.category, []).append(item.name)
    return inventory


def add_grocery_item(db: Session, item: schemas.GroceryItemCreate):
    """Add one pantry item. Returns None when a field is only whitespace."""
    category, name = item.category.strip(), item.name.strip()
    if not category or not name:
        return None
    existing = (
        db.query(models.GroceryItem)
        .filter(models.GroceryItem.category == category, models.GroceryItem.name == name)
        .first()
    )
    if existing:
        return existing
    db_item = models.GroceryItem(category=category, name=name)
    db.add(db_item)
    db.commit()
    db.refresh(db_item)
    return db_item


def replace_inventory(db: Session, inventory: Dict[str, List[str]]) -> Dict[str, List[str]]:
    db.query(models.GroceryItem).delete()
    seen = set()
    for category, names in inventory.items():
        category = category.strip()
        for name in names:
            name = (name or "").strip()
            if not category or not name or (category, name) in seen:
                continue
            seen.add((category, name))
            db.add(models.GroceryItem(category=category, name=name))
    db.commit()
    return get_inventory(db)


def delete_grocery_item(db: Session, item_id: int):
    db_item = db.query(models.GroceryItem).filter(models.GroceryItem.id == item_id).first()
    if not db_item:
        return False
    db.delete(db_item)
    db.commit()
    return True


# ----------------------------
# Global ingredient catalog
# ----------------------------

def get_global_ingredients(db: Session, q: Optional[str] = None):
    query = db.query(models.GlobalIngredient)
    if q:
        needle = normalize(q) or q.strip().lower()
        query = query.filter(
            models.GlobalIngredient.normalized_name.contains(needle)
            | models.GlobalIngredient.name.ilike(f"%{q.strip()}%")
        )
    return query.order_by(models.GlobalIngredient.usage_count.desc(), models.GlobalIngredient.id).all()


def get_catalog(db: Session) -> Dict[str, List[str]]:
    catalog: Dict[str, List[str]] = {}
    rows = db.query(models.GlobalIngredient).order_by(models.GlobalIngredient.id).all()
    for row in rows:
        catalog.setdefault(row.category, []).append(row.name)
    return catalog


def save_global_ingredient(db: Session, item: schemas.GlobalIngredientCreate):
    """Insert a catalog ingredient, or bump usage of its normalized duplicate."""
    name = item.name.strip()
    normalized = normalize(name)
    if not normalized:
        return None
    existing = (
        db.query(models.GlobalIngredient)
        .filter(models.GlobalIngredient.normalized_name == normalized)
        .first()
    )
    if existing:
        existing.usage_count = (existing.usage_count or 0) + 1
        db.add(existing)
        db.commit()
        db.refresh(existing)
        return existing
    db_item = models.GlobalIngredient(
        name=name,
        normalized_name=normalized,
        category=(item.category or "").strip() or suggest_category(name),
        usage_count=1,
    )
    db.add(db_item)
    db.commit()
    db.refresh(db_item)
    return db_item
