"""Tests for services/recipes.py and services/catalog.py."""
import pytest

from tandoor_mcp.models.recipes import CreateRecipeRequest, CreateStepRequest, NameRef
from tandoor_mcp.services.catalog import CatalogService
from tandoor_mcp.services.recipes import RecipeService
from tandoor_mcp.utils.errors import RemoteCallError, RemoteFailure


# ── RecipeService.search ─────────────────────────────────────────────

def test_search_passes_params(mock_client):
    mock_client.get.return_value = {"count": 1, "results": [{"id": 1, "name": "Soup"}]}
    page = RecipeService(mock_client).search("soup", limit=5)

    assert page.count == 1
    assert page.results[0].name == "Soup"
    mock_client.get.assert_called_once_with(
        "/recipe/", params={"query": "soup", "page_size": 5, "page": None}
    )


def test_search_empty_query_lists(mock_client):
    mock_client.get.return_value = {"count": 0, "results": []}
    RecipeService(mock_client).search("")

    assert mock_client.get.call_args[1]["params"]["query"] is None


# ── RecipeService.get ────────────────────────────────────────────────

def test_get_uses_not_found_message(mock_client):
    mock_client.get.return_value = {"id": 999999, "name": "x"}
    RecipeService(mock_client).get(999999)

    args, kwargs = mock_client.get.call_args
    assert args[0] == "/recipe/999999/"
    assert kwargs["not_found"] == "Recipe with ID 999999 not found"


def test_get_malformed(mock_client):
    mock_client.get.return_value = {"name": "no id"}
    with pytest.raises(RemoteCallError) as exc:
        RecipeService(mock_client).get(1)
    assert exc.value.kind is RemoteFailure.MALFORMED_RESPONSE


# ── RecipeService.create ─────────────────────────────────────────────

def test_create_posts_body(mock_client):
    mock_client.post.return_value = {"id": 3, "name": "Soup"}
    request = CreateRecipeRequest(
        name="Soup",
        keywords=[NameRef(name="quick")],
        steps=[CreateStepRequest(instruction="Boil")],
    )
    recipe = RecipeService(mock_client).create(request)

    assert recipe.id == 3
    body = mock_client.post.call_args[1]["body"]
    assert body["name"] == "Soup"
    assert body["steps"][0]["instruction"] == "Boil"
    assert "description" not in body


def test_update_keywords_patches(mock_client):
    mock_client.patch.return_value = {"id": 3, "name": "Soup", "keywords": [{"id": 1, "name": "quick"}]}
    recipe = RecipeService(mock_client).update_keywords(3, ["quick"])

    assert recipe.keyword_names == ["quick"]
    assert mock_client.patch.call_args[1]["body"] == {"keywords": [{"name": "quick"}]}


# ── RecipeService.import_from_url ────────────────────────────────────

def test_import_from_url(mock_client):
    mock_client.post.return_value = {"id": 8, "name": "Imported"}
    recipe = RecipeService(mock_client).import_from_url("https://example.com/r")

    assert recipe.name == "Imported"
    args, kwargs = mock_client.post.call_args
    assert args[0] == "/recipe-from-source/"
    assert kwargs["body"] == {"url": "https://example.com/r"}


def test_import_validation_error_is_reworded(mock_client):
    mock_client.post.side_effect = RemoteCallError(RemoteFailure.VALIDATION, "Request rejected: {}", 400)

    with pytest.raises(RemoteCallError, match="unsupported recipe site") as exc:
        RecipeService(mock_client).import_from_url("https://example.com/r")
    assert exc.value.status_code == 400


def test_import_other_errors_propagate(mock_client):
    mock_client.post.side_effect = RemoteCallError(RemoteFailure.SERVER_ERROR, "boom", 500)

    with pytest.raises(RemoteCallError, match="boom"):
        RecipeService(mock_client).import_from_url("https://example.com/r")


# ── CatalogService ───────────────────────────────────────────────────

def test_keywords_accepts_bare_array(mock_client):
    mock_client.get.return_value = [{"id": 1, "label": "vegan"}]
    page = CatalogService(mock_client).keywords()

    assert page.count == 1
    assert page.results[0].name == "vegan"


def test_units(mock_client):
    mock_client.get.return_value = {"count": 1, "results": [{"id": 1, "name": "g", "base_unit": "gram"}]}
    page = CatalogService(mock_client).units()

    assert page.results[0].base_unit == "gram"
    assert mock_client.get.call_args[0][0] == "/unit/"
