import json
from pathlib import Path

from pantry_match import crud, schemas
from pantry_match.db import SessionLocal, init_db


DATA_DIR = Path(__file__).resolve().parents[1] / 'data'


def _load(name):
    p = DATA_DIR / name
    if not p.exists():
        print(f'data/{name} not found, skipping')
        return None
    return json.loads(p.read_text(encoding='utf-8'))


def import_recipes(db, data):
    added = 0
    for r in data:
        name = r.get('name')
        if not name or crud.get_recipe_by_name(db, name):
            continue
        crud.create_recipe(db, schemas.RecipeCreate(
            name=name,
            ingredients=r.get('ingredients', []),
            steps=r.get('steps', []),
        ))
        added += 1
    return added


def import_catalog(db, data):
    """Returns (new ingredients, existing ones whose usage count went up)."""
    added = bumped = 0
    for category, names in data.items():
        for name in names:
            item = schemas.GlobalIngredientCreate(name=name, category=category)
            saved = crud.save_global_ingredient(db, item)
            if saved is None:
                continue
            if saved.usage_count == 1:
                added += 1
            else:
                bumped += 1
    return added, bumped


def main():
    init_db()
    db = SessionLocal()
    try:
        recipes = _load('recipes.json')
        if recipes is not None:
            print(f'Imported {import_recipes(db, recipes)} recipes')
        groceries = _load('groceries.json')
        if groceries is not None:
            inventory = crud.replace_inventory(db, groceries)
            print(f'Pantry now holds {sum(len(v) for v in inventory.values())} items')
        catalog = _load('global_ingredients.json')
        if catalog is not None:
            added, bumped = import_catalog(db, catalog)
            print(f'Saved {added} new catalog ingredients, {bumped} already known')
    finally:
        db.close()


if __name__ == '__main__':
    main()
