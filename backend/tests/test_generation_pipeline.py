"""
Unit tests for the generation pipeline.
"""

import pytest
from urllib.parse import parse_qs, urlparse

from imagechat.core.errors import (
    ApiError,
    ApiReportedError,
    ConnectivityError,
    NoModelError,
)
from imagechat.core.generation_pipeline import DESCRIPTION_PROMPT, IMAGE_COUNT, GenerationPipeline
from imagechat.core.model_catalog import ModelCatalog
from imagechat.core.model_selector import ModelSelector
from imagechat.models.ollama import SelectedModel
from imagechat.ollama.base import GenerateResult

from conftest import make_models


@pytest.fixture
def pipeline(gateway, ollama_config):
    catalog = ModelCatalog(gateway)
    return GenerationPipeline(gateway, catalog, ModelSelector(catalog), ollama_config)


class TestDispatch:
    """Tests for the image-model and text-fallback branches."""

    @pytest.mark.asyncio
    async def test_text_fallback_branch(self, pipeline, gateway):
        gateway.list_models.return_value = make_models("llava")
        gateway.generate.return_value = GenerateResult(response="A vivid fox in a snowy field")

        images = await pipeline.generate("a red fox")

        model, prompt, options = gateway.generate.call_args.args
        assert model == "llava"
        assert prompt == DESCRIPTION_PROMPT.format(prompt="a red fox")
        assert '"a red fox"' in prompt
        assert options.temperature == 0.7
        assert len(images) == 2
        assert all(image.prompt == "A vivid fox in a snowy field" for image in images)

    @pytest.mark.asyncio
    async def test_image_model_branch_sends_prompt_verbatim(self, pipeline, gateway):
        gateway.list_models.return_value = make_models("llava", "sdxl-base")
        gateway.generate.return_value = GenerateResult(response="rendered fox")

        images = await pipeline.generate("a red fox")

        gateway.generate.assert_called_once()
        model, prompt, _ = gateway.generate.call_args.args
        assert model == "sdxl-base"
        assert prompt == "a red fox"
        assert [image.prompt for image in images] == ["rendered fox", "rendered fox"]

    @pytest.mark.asyncio
    async def test_caption_falls_back_to_prompt(self, pipeline, gateway):
        gateway.list_models.return_value = make_models("mistral")
        gateway.generate.return_value = GenerateResult(response=None)

        images = await pipeline.generate("a red fox")

        assert [image.prompt for image in images] == ["a red fox", "a red fox"]

    @pytest.mark.asyncio
    async def test_override_is_used(self, gateway, ollama_config):
        gateway.list_models.return_value = make_models("sdxl-base", "mistral")
        catalog = ModelCatalog(gateway)
        selector = ModelSelector(catalog)
        selector.select(SelectedModel(name="mistral", category="text-generation", purpose="Text Generation"))
        pipeline = GenerationPipeline(gateway, catalog, selector, ollama_config)

        await pipeline.generate("a red fox")

        model, prompt, _ = gateway.generate.call_args.args
        assert model == "mistral"
        assert prompt != "a red fox"


class TestProducedImages:

    @pytest.mark.asyncio
    async def test_two_distinct_placeholder_images(self, pipeline, gateway):
        gateway.list_models.return_value = make_models("sdxl")
        gateway.generate.return_value = GenerateResult(response="caption")

        images = await pipeline.generate("a red fox & friends")

        assert len(images) == IMAGE_COUNT == 2
        assert images[0].id != images[1].id
        assert images[0].url != images[1].url
        for image in images:
            parsed = urlparse(image.url)
            query = parse_qs(parsed.query)
            assert f"{parsed.scheme}://{parsed.netloc}{parsed.path}" == "https://picsum.photos/512/512"
            assert query["prompt"] == ["a red fox & friends"]
            assert query["random"][0].isdigit()
            assert image.timestamp.tzinfo is not None

    def test_placeholder_url_encodes_prompt(self, pipeline):
        url = pipeline.placeholder_url(42, "fox/cat?")
        assert url == "https://picsum.photos/512/512?random=42&prompt=fox%2Fcat%3F"


class TestFailures:
    """Tests for failure propagation."""

    @pytest.mark.asyncio
    async def test_no_models_is_connectivity_error(self, pipeline, gateway):
        gateway.list_models.return_value = []

        with pytest.raises(ConnectivityError) as exc_info:
            await pipeline.generate("a red fox")

        assert str(exc_info.value).startswith("Ollama is not running")
        assert "http://localhost:11434" in str(exc_info.value)
        assert isinstance(exc_info.value, NoModelError)
        gateway.generate.assert_not_called()

    @pytest.mark.asyncio
    async def test_unreachable_catalog_is_connectivity_error(self, pipeline, gateway):
        gateway.list_models.side_effect = ConnectivityError("http://localhost:11434", "refused")

        with pytest.raises(ConnectivityError):
            await pipeline.generate("a red fox")

    @pytest.mark.asyncio
    async def test_empty_model_name_is_no_model_error(self, pipeline, gateway):
        gateway.list_models.return_value = make_models("")

        with pytest.raises(NoModelError) as exc_info:
            await pipeline.generate("a red fox")

        assert not isinstance(exc_info.value, ConnectivityError)
        assert str(exc_info.value) == "No suitable model found"

    @pytest.mark.asyncio
    async def test_api_error_propagates(self, pipeline, gateway):
        gateway.list_models.return_value = make_models("sdxl")
        gateway.generate.side_effect = ApiError(500, "boom")

        with pytest.raises(ApiError, match="Ollama API error: 500 - boom"):
            await pipeline.generate("a red fox")

    @pytest.mark.asyncio
    async def test_reported_error_propagates(self, pipeline, gateway):
        gateway.list_models.return_value = make_models("llava")
        gateway.generate.side_effect = ApiReportedError("model requires more memory")

        with pytest.raises(ApiReportedError, match="model requires more memory"):
            await pipeline.generate("a red fox")
