"""
Unit tests for model discovery and categorization.
"""

import pytest

from imagechat.core.errors import ApiError, ConnectivityError
from imagechat.core.model_catalog import (
    MODEL_CATEGORIES,
    OTHER_CATEGORY_ID,
    ModelCatalog,
    categorize_models,
    display_name,
    format_size,
    get_category,
)

from conftest import make_models


class TestCategorizeModels:
    """Tests for keyword-based, overlapping categorization."""

    def test_category_order(self):
        assert [c.id for c in MODEL_CATEGORIES] == [
            "text-generation", "code-generation", "image-generation", "multimodal", "creative",
        ]

    def test_every_category_present(self):
        result = categorize_models(make_models("mistral"))
        for category in MODEL_CATEGORIES:
            assert category.id in result

    def test_model_in_every_matching_category(self):
        models = make_models("llava-llama3", "codellama:13b", "stable-diffusion-xl")
        result = categorize_models(models)

        text = [m.name for m in result["text-generation"]]
        assert text == ["llava-llama3", "codellama:13b"]
        assert [m.name for m in result["code-generation"]] == ["codellama:13b"]
        assert [m.name for m in result["multimodal"]] == ["llava-llama3"]
        assert [m.name for m in result["image-generation"]] == ["stable-diffusion-xl"]

    def test_case_insensitive_match(self):
        result = categorize_models(make_models("SDXL-Turbo", "Mistral:7B"))
        assert [m.name for m in result["image-generation"]] == ["SDXL-Turbo"]
        assert [m.name for m in result["text-generation"]] == ["Mistral:7B"]

    def test_unmatched_models_go_to_other(self):
        result = categorize_models(make_models("mistral", "nomic-embed-text", "all-minilm"))
        assert [m.name for m in result[OTHER_CATEGORY_ID]] == ["nomic-embed-text", "all-minilm"]

    def test_no_other_bucket_when_everything_matches(self):
        result = categorize_models(make_models("mistral", "sdxl"))
        assert OTHER_CATEGORY_ID not in result

    def test_membership_matches_keywords(self):
        models = make_models("llava", "deepseek-coder", "story-writer", "bge-m3", "phi3")
        result = categorize_models(models)
        for category in MODEL_CATEGORIES:
            for model in models:
                expected = any(k.lower() in model.name.lower() for k in category.keywords)
                assert (model in result[category.id]) == expected

    def test_get_category(self):
        assert get_category("multimodal").name == "Multimodal"
        assert get_category("nope") is None


class TestModelCatalog:
    """Tests for discovery through the gateway."""

    @pytest.mark.asyncio
    async def test_discover_caches_models(self, gateway):
        gateway.list_models.return_value = make_models("llava", "mistral")
        catalog = ModelCatalog(gateway)

        models = await catalog.discover()

        assert [m.name for m in models] == ["llava", "mistral"]
        assert catalog.model_names == ["llava", "mistral"]
        assert catalog.find("mistral").name == "mistral"
        assert catalog.find("sdxl") is None

    @pytest.mark.asyncio
    async def test_discover_swallows_connectivity_failure(self, gateway):
        gateway.list_models.side_effect = ConnectivityError("http://localhost:11434")
        catalog = ModelCatalog(gateway)
        assert await catalog.discover() == []

    @pytest.mark.asyncio
    async def test_discover_swallows_api_error(self, gateway):
        gateway.list_models.side_effect = ApiError(500, "boom")
        catalog = ModelCatalog(gateway)
        assert await catalog.discover() == []

    @pytest.mark.asyncio
    async def test_failed_discover_empties_catalog(self, gateway):
        catalog = ModelCatalog(gateway)
        gateway.list_models.return_value = make_models("llava")
        await catalog.discover()

        gateway.list_models.side_effect = ConnectivityError("http://localhost:11434")
        await catalog.discover()

        assert catalog.model_names == []

    @pytest.mark.asyncio
    async def test_categorize_uses_current_catalog(self, gateway):
        gateway.list_models.return_value = make_models("sdxl", "all-minilm")
        catalog = ModelCatalog(gateway)
        await catalog.discover()

        result = catalog.categorize()

        assert [m.name for m in result["image-generation"]] == ["sdxl"]
        assert [m.name for m in result[OTHER_CATEGORY_ID]] == ["all-minilm"]


class TestDisplayHelpers:

    def test_display_name_strips_latest(self):
        assert display_name("llava:latest") == "llava"
        assert display_name("llava:13b") == "llava:13b"

    def test_format_size(self):
        assert format_size(4 * 1024 * 1024 * 1024) == "4.0 GB"
        assert format_size(512 * 1024 * 1024) == "512.0 MB"
        assert format_size(2048) == "2.0 KB"
