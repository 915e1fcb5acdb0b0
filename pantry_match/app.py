import logging
from contextlib import asynccontextmanager
from typing import Dict, List, Optional, Tuple

from fastapi import Depends, FastAPI, HTTPException, Query, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from sqlalchemy.orm import Session

from . import crud, schemas
from .cache import CompatibilityCache, IndexCache
from .catalog import GlobalCatalogIndex, InventoryIndex
from .compatibility import analyze_recipes, assess_recipe, export_shopping_list
from .db import SessionLocal, init_db
from .matcher import match
from .parser import parse_lines
from .settings import get_settings
from .suggest import unknown_ingredients

logger = logging.getLogger(__name__)

settings = get_settings()
index_cache = IndexCache()
report_cache = CompatibilityCache(maxsize=settings.cache_size)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    # Initialize DB once at startup
    init_db()
    logger.info("Database ready at %s", settings.database_url)
    yield


app = FastAPI(title="pantry-match", lifespan=lifespan)

# Allow CORS for API clients (adjust origins for production)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_indices(db: Session = Depends(get_db)) -> Tuple[InventoryIndex, GlobalCatalogIndex]:
    return (
        index_cache.inventory(crud.get_inventory(db)),
        index_cache.catalog(crud.get_catalog(db)),
    )


def _get_recipe_or_404(db: Session, recipe_id: int):
    r = crud.get_recipe(db, recipe_id)
    if not r:
        raise HTTPException(status_code=404, detail="Recipe not found")
    return r


def _link_header(request: Request, page: int, page_size: int, total: int) -> str:
    links = []
    last_page = max(1, -(-total // page_size))
    if page > 1:
        url = request.url.include_query_params(page=page - 1, page_size=page_size)
        links.append(f'<{url}>; rel="prev"')
    if page < last_page:
        url = request.url.include_query_params(page=page + 1, page_size=page_size)
        links.append(f'<{url}>; rel="next"')
    return ", ".join(links)


# ----------------------------
# Recipes
# ----------------------------

@app.get("/api/recipes", response_model=schemas.RecipePage)
def list_recipes(
    request: Request,
    response: Response,
    q: Optional[str] = None,
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
):
    items, total = crud.search_recipes(db, q=q, skip=(page - 1) * page_size, limit=page_size)
    response.headers["Link"] = _link_header(request, page, page_size, total)
    return schemas.RecipePage(
        items=[crud.recipe_to_schema(r) for r in items],
        total=total,
        page=page,
        page_size=page_size,
    )


@app.post("/api/recipes", response_model=schemas.Recipe)
def create_recipe(recipe: schemas.RecipeCreate, db: Session = Depends(get_db)):
    if crud.get_recipe_by_name(db, recipe.name):
        raise HTTPException(status_code=400, detail="Recipe with this name already exists")
    return crud.recipe_to_schema(crud.create_recipe(db, recipe))


@app.get("/api/recipes/{recipe_id}", response_model=schemas.Recipe)
def read_recipe(recipe_id: int, db: Session = Depends(get_db)):
    return crud.recipe_to_schema(_get_recipe_or_404(db, recipe_id))


@app.put("/api/recipes/{recipe_id}", response_model=schemas.Recipe)
def update_recipe(recipe_id: int, recipe: schemas.RecipeCreate, db: Session = Depends(get_db)):
    other = crud.get_recipe_by_name(db, recipe.name)
    if other and other.id != recipe_id:
        raise HTTPException(status_code=400, detail="Recipe with this name already exists")
    r = crud.update_recipe(db, recipe_id, recipe)
    if not r:
        raise HTTPException(status_code=404, detail="Recipe not found")
    report_cache.invalidate_recipe(recipe_id)
    return crud.recipe_to_schema(r)


@app.delete("/api/recipes/{recipe_id}")
def delete_recipe(recipe_id: int, db: Session = Depends(get_db)):
    if not crud.delete_recipe(db, recipe_id):
        raise HTTPException(status_code=404, detail="Recipe not found")
    report_cache.invalidate_recipe(recipe_id)
    return {"deleted": True, "id": recipe_id}


# ----------------------------
# Pantry and global catalog
# ----------------------------

@app.get("/api/groceries", response_model=Dict[str, List[str]])
def read_groceries(db: Session = Depends(get_db)):
    return crud.get_inventory(db)


@app.put("/api/groceries", response_model=Dict[str, List[str]])
def replace_groceries(inventory: Dict[str, List[str]], db: Session = Depends(get_db)):
    return crud.replace_inventory(db, inventory)


@app.post("/api/groceries", response_model=schemas.GroceryItem)
def add_grocery(item: schemas.GroceryItemCreate, db: Session = Depends(get_db)):
    saved = crud.add_grocery_item(db, item)
    if saved is None:
        raise HTTPException(status_code=400, detail="Category and name must not be blank")
    return saved


@app.delete("/api/groceries/{item_id}")
def delete_grocery(item_id: int, db: Session = Depends(get_db)):
    if not crud.delete_grocery_item(db, item_id):
        raise HTTPException(status_code=404, detail="Grocery item not found")
    return {"deleted": True, "id": item_id}


@app.get("/api/global-ingredients", response_model=List[schemas.GlobalIngredient])
def list_global_ingredients(q: Optional[str] = None, db: Session = Depends(get_db)):
    return crud.get_global_ingredients(db, q=q)


@app.post("/api/global-ingredients", response_model=schemas.GlobalIngredient)
def save_global_ingredient(item: schemas.GlobalIngredientCreate, db: Session = Depends(get_db)):
    saved = crud.save_global_ingredient(db, item)
    if saved is None:
        raise HTTPException(status_code=400, detail="Ingredient name has no recognisable words")
    return saved


# ----------------------------
# Matching
# ----------------------------

@app.post("/api/ingredients/parse", response_model=schemas.ParsedLines)
def parse_ingredients(payload: schemas.IngredientLines):
    return schemas.ParsedLines(parsed=parse_lines(payload.lines))


@app.post("/api/match", response_model=schemas.MatchResponse)
def match_ingredients(
    payload: schemas.IngredientLines,
    indices: Tuple[InventoryIndex, GlobalCatalogIndex] = Depends(get_indices),
):
    inventory, catalog = indices
    policy = settings.match_policy()
    results = [
        match(parsed, inventory, catalog, policy)
        for parsed in parse_lines(payload.lines)
        if parsed.name and not parsed.is_header
    ]
    return schemas.MatchResponse(
        inventory_version=inventory.fingerprint,
        catalog_version=catalog.fingerprint,
        results=results,
    )


def _report_for(recipe, inventory: InventoryIndex, catalog: GlobalCatalogIndex) -> schemas.CompatibilityReport:
    key = CompatibilityCache.key(inventory, catalog, recipe.id)
    return report_cache.get_or_compute(
        key,
        lambda: assess_recipe(recipe.id, crud.recipe_lines(recipe), inventory, catalog, settings.match_policy()),
    )


@app.get("/api/recipes/{recipe_id}/compatibility", response_model=schemas.CompatibilityReport)
def recipe_compatibility(
    recipe_id: int,
    db: Session = Depends(get_db),
    indices: Tuple[InventoryIndex, GlobalCatalogIndex] = Depends(get_indices),
):
    recipe = _get_recipe_or_404(db, recipe_id)
    return _report_for(recipe, *indices)


@app.get("/api/recipes/{recipe_id}/shopping-list", response_class=PlainTextResponse)
def recipe_shopping_list(
    recipe_id: int,
    db: Session = Depends(get_db),
    indices: Tuple[InventoryIndex, GlobalCatalogIndex] = Depends(get_indices),
):
    recipe = _get_recipe_or_404(db, recipe_id)
    return PlainTextResponse(export_shopping_list(_report_for(recipe, *indices)))


@app.get("/api/recipes/{recipe_id}/unknown-ingredients", response_model=List[schemas.IngredientSuggestion])
def recipe_unknown_ingredients(
    recipe_id: int,
    db: Session = Depends(get_db),
    indices: Tuple[InventoryIndex, GlobalCatalogIndex] = Depends(get_indices),
):
    recipe = _get_recipe_or_404(db, recipe_id)
    return unknown_ingredients(crud.recipe_lines(recipe), *indices, settings.match_policy())


@app.get("/api/compatibility", response_model=List[schemas.CompatibilityReport])
def all_compatibility(
    limit: int = Query(50, ge=1, le=500),
    db: Session = Depends(get_db),
    indices: Tuple[InventoryIndex, GlobalCatalogIndex] = Depends(get_indices),
):
    inventory, catalog = indices
    recipes = crud.get_recipes(db, skip=0, limit=limit)
    return analyze_recipes(
        ((r.id, crud.recipe_lines(r)) for r in recipes),
        inventory,
        catalog,
        settings.match_policy(),
    )
