import logging
import os
from http import HTTPStatus
from typing import Any, List, Optional, Tuple

from flask import Flask, Response, jsonify, request
from werkzeug.exceptions import HTTPException

from .errors import PatchApplicationError, RecipeError, RecipeNotFoundError, ValidationError
from .models import Recipe
from .normalize import normalize_ingredients
from .patch import apply_patch
from .predicates import build_predicate
from .service import RecipeService
from .storage import InMemoryRecipeStorage, RecipeRepository

try:
    from .gcp_storage import FirestoreRecipeStorage
except ImportError:  # pragma: no cover - allows running tests without optional deps
    FirestoreRecipeStorage = None  # type: ignore[assignment,misc]

logger = logging.getLogger(__name__)

TRUE_VALUES = {"true", "1", "yes", "on"}
FALSE_VALUES = {"false", "0", "no", "off"}


def create_app(storage: Optional[RecipeRepository] = None) -> Flask:
    """Create and configure the Flask application.

    Parameters
    ----------
    storage:
        Optional recipe repository. When ``None`` the backend is chosen by the
        ``RECIPE_STORAGE`` environment variable: ``memory`` for a process-local
        store, anything else for :class:`FirestoreRecipeStorage` configured
        through environment variables.
    """

    app = Flask(__name__)

    if storage is None:
        storage = _storage_from_env()
    app.config["RECIPE_STORAGE"] = storage
    app.config["RECIPE_SERVICE"] = RecipeService(storage)

    @app.get("/health")
    def health() -> Response:
        return jsonify({"status": "ok"})

    @app.post("/recipes")
    def create_recipe() -> Tuple[Response, int, dict]:
        service: RecipeService = app.config["RECIPE_SERVICE"]

        recipe = _recipe_from_payload(request.get_json(silent=True))
        saved = service.create(recipe)
        return jsonify(saved.to_dict()), HTTPStatus.CREATED, {"Location": f"/recipes/{saved.id}"}

    @app.get("/recipes/<recipe_id>")
    def get_recipe(recipe_id: str) -> Response:
        service: RecipeService = app.config["RECIPE_SERVICE"]

        recipe = service.find_by_id(recipe_id)
        if recipe is None:
            raise RecipeNotFoundError(recipe_id)
        return jsonify(recipe.to_dict())

    @app.put("/recipes/<recipe_id>")
    def update_recipe(recipe_id: str) -> Response:
        service: RecipeService = app.config["RECIPE_SERVICE"]

        recipe = _recipe_from_payload(request.get_json(silent=True))
        return jsonify(service.update(recipe_id, recipe).to_dict())

    @app.patch("/recipes/<recipe_id>")
    def patch_recipe(recipe_id: str) -> Response:
        service: RecipeService = app.config["RECIPE_SERVICE"]

        payload = request.get_json(silent=True)
        if not isinstance(payload, dict):
            raise ValidationError("Request body must be a JSON object.")
        return jsonify(service.partial_update(recipe_id, payload).to_dict())

    @app.delete("/recipes/<recipe_id>")
    def delete_recipe(recipe_id: str) -> Tuple[str, int]:
        service: RecipeService = app.config["RECIPE_SERVICE"]

        service.delete(recipe_id)
        return "", HTTPStatus.NO_CONTENT

    @app.get("/recipes")
    def search_recipes() -> Response:
        service: RecipeService = app.config["RECIPE_SERVICE"]

        predicate = build_predicate(
            vegetarian=_bool_arg("vegetarian"),
            servings=_int_arg("servings"),
            include_ingredients=_ingredients_arg("include"),
            exclude_ingredients=_ingredients_arg("exclude"),
            text=request.args.get("text"),
            preparation_time=_int_arg("preparationTime"),
        )
        return jsonify([recipe.to_dict() for recipe in service.find_all(predicate)])

    @app.errorhandler(RecipeError)
    def handle_recipe_error(exc: RecipeError) -> Tuple[Response, int]:
        if isinstance(exc, RecipeNotFoundError):
            status = HTTPStatus.NOT_FOUND
        else:
            status = HTTPStatus.BAD_REQUEST
        return _error_response(status, str(exc))

    @app.errorhandler(HTTPException)
    def handle_http_error(exc: HTTPException) -> Tuple[Response, int]:
        response, status = _error_response(HTTPStatus(exc.code or 500), exc.description or "")
        # Keep headers such as Allow on 405 responses.
        for header, value in exc.get_headers():
            if header.lower() != "content-type":
                response.headers[header] = value
        return response, status

    return app


def configure_logging(level_name: Optional[str] = None) -> int:
    """Configure root logging from ``level_name`` or ``LOG_LEVEL``, defaulting to INFO."""

    level_name = (level_name or os.environ.get("LOG_LEVEL") or "INFO").strip().upper()
    level = logging.getLevelName(level_name)
    known = isinstance(level, int)
    if not known:
        level = logging.INFO
    logging.basicConfig(level=level, format="[%(asctime)s] %(levelname)s %(name)s: %(message)s")
    if not known:
        logger.warning("Unknown LOG_LEVEL %r, using INFO", level_name)
    return level


def _storage_from_env() -> RecipeRepository:
    backend = os.environ.get("RECIPE_STORAGE", "firestore").strip().lower()
    if backend == "memory":
        logger.info("Using in-memory recipe storage")
        return InMemoryRecipeStorage()

    if FirestoreRecipeStorage is None:
        raise RuntimeError(
            "google-cloud-firestore is not installed. Install it, set RECIPE_STORAGE=memory "
            "or pass an explicit storage backend to create_app."
        )
    logger.info("Using Firestore recipe storage")
    return FirestoreRecipeStorage.from_env()


def _error_response(status: HTTPStatus, message: str) -> Tuple[Response, int]:
    return jsonify({"error": status.phrase, "message": message}), status


def _recipe_from_payload(payload: Any) -> Recipe:
    """Build a recipe from a create/replace body, filling unset fields with defaults."""

    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object.")

    name = payload.get("name")
    if not isinstance(name, str) or not name.strip():
        raise ValidationError("Please provide a recipe name.")

    try:
        return apply_patch(Recipe(), payload)
    except PatchApplicationError as exc:
        raise ValidationError(str(exc)) from exc


def _bool_arg(name: str) -> Optional[bool]:
    raw = request.args.get(name, "").strip().lower()
    if not raw:
        return None
    if raw in TRUE_VALUES:
        return True
    if raw in FALSE_VALUES:
        return False
    raise ValidationError(f"Query parameter '{name}' must be a boolean.")


def _int_arg(name: str) -> Optional[int]:
    raw = request.args.get(name, "").strip()
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        raise ValidationError(f"Query parameter '{name}' must be an integer.") from None


def _ingredients_arg(name: str) -> Optional[List[str]]:
    # Accepts both ?include=a&include=b and ?include=a,b
    values = request.args.getlist(name)
    if not values:
        return None
    return normalize_ingredients(part for value in values for part in value.split(","))


__all__ = ["configure_logging", "create_app", "Recipe", "RecipeService"]
