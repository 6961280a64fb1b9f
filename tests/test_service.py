import pytest

from recipe_manager.errors import PatchApplicationError, RecipeNotFoundError
from recipe_manager.models import Recipe
from recipe_manager.predicates import NO_FILTER, build_predicate
from recipe_manager.service import RecipeService
from recipe_manager.storage import InMemoryRecipeStorage


def create_service():
    storage = InMemoryRecipeStorage()
    return RecipeService(storage), storage


def aloo() -> Recipe:
    return Recipe(
        name="Aloo",
        vegetarian=True,
        servings=2,
        ingredients=[" Potato "],
        instructions="cook",
        preparation_time=15,
    )


def test_create_assigns_id_and_normalizes_ingredients():
    service, storage = create_service()

    saved = service.create(aloo())

    assert saved.id
    assert saved.ingredients == ["potato"]
    assert storage.get_recipe(saved.id).ingredients == ["potato"]


def test_create_ignores_caller_supplied_id():
    service, storage = create_service()
    recipe = aloo()
    recipe.id = "chosen-by-client"

    saved = service.create(recipe)

    assert saved.id != "chosen-by-client"
    assert not storage.recipe_exists("chosen-by-client")


def test_update_replaces_all_mutable_fields():
    service, _ = create_service()
    saved = service.create(Recipe(name="Old", vegetarian=True, servings=1, ingredients=["x"], instructions="old", preparation_time=5))

    updated = service.update(
        saved.id,
        Recipe(id="ignored", name="NewName", vegetarian=False, servings=4, ingredients=[" Rice"], instructions="new", preparation_time=9),
    )

    assert updated == Recipe(
        id=saved.id,
        name="NewName",
        vegetarian=False,
        servings=4,
        ingredients=["rice"],
        instructions="new",
        preparation_time=9,
    )
    assert service.find_by_id(saved.id) == updated


def test_update_missing_recipe_fails():
    service, storage = create_service()

    with pytest.raises(RecipeNotFoundError):
        service.update("missing", aloo())

    assert list(storage.list_recipes()) == []


def test_partial_update_merges_and_normalizes():
    service, _ = create_service()
    saved = service.create(Recipe(name="Patch", vegetarian=True, servings=1, ingredients=["x"], instructions="old", preparation_time=5))

    patched = service.partial_update(saved.id, {"ingredients": [" Potato ", "Salt"]})

    assert patched.ingredients == ["potato", "salt"]
    assert patched.name == "Patch"
    assert patched.servings == 1
    assert patched.instructions == "old"
    assert patched.preparation_time == 5
    assert service.find_by_id(saved.id) == patched


def test_partial_update_keeps_identity():
    service, _ = create_service()
    saved = service.create(aloo())

    patched = service.partial_update(saved.id, {"id": "999", "name": "Renamed"})

    assert patched.id == saved.id
    assert service.find_by_id("999") is None


def test_rejected_patch_leaves_recipe_unchanged():
    service, _ = create_service()
    saved = service.create(aloo())

    with pytest.raises(PatchApplicationError):
        service.partial_update(saved.id, {"name": "Renamed", "vegetarian": "nope"})

    assert service.find_by_id(saved.id) == saved


def test_partial_update_missing_recipe_fails():
    service, _ = create_service()

    with pytest.raises(RecipeNotFoundError):
        service.partial_update("missing", {"name": "x"})


def test_delete_removes_recipe():
    service, _ = create_service()
    saved = service.create(aloo())

    service.delete(saved.id)

    assert service.find_by_id(saved.id) is None


def test_delete_missing_fails_but_lookup_returns_none():
    service, _ = create_service()

    with pytest.raises(RecipeNotFoundError) as exc_info:
        service.delete("missing")

    assert str(exc_info.value) == "Recipe not found with id: missing"
    assert service.find_by_id("missing") is None


def test_find_all_without_filter_returns_everything():
    service, _ = create_service()
    first = service.create(aloo())
    second = service.create(Recipe(name="Soup", ingredients=["water"]))

    assert service.find_all() == [first, second]
    assert service.find_all(NO_FILTER) == [first, second]


def test_find_all_with_predicate():
    service, _ = create_service()
    service.create(Recipe(name="VegPotato", vegetarian=True, servings=2, ingredients=["potato", "salt"], instructions="bake in oven", preparation_time=30))
    service.create(Recipe(name="NonVeg", vegetarian=False, servings=4, ingredients=["chicken", "salt"], instructions="grill", preparation_time=40))
    service.create(Recipe(name="VegCarrot", vegetarian=True, servings=2, ingredients=["carrot"], instructions="boil", preparation_time=10))

    found = service.find_all(build_predicate(vegetarian=True, include_ingredients=["potato"]))

    assert [recipe.name for recipe in found] == ["VegPotato"]
    assert service.find_all(build_predicate(include_ingredients=["potato"], exclude_ingredients=["potato"])) == []
