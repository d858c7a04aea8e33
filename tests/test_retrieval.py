"""Tests for embedding and course-material lookups."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from vta.configs.system import EmbeddingConfig, RagConfig
from vta.core.embedding import EmbeddingClient
from vta.core.retrieval import CourseMaterialIndex, VectorIndexUnavailable
from vta.infra.id_utils import new_interaction_id, new_session_id
from vta.infra.tokens import estimate_tokens, truncate_to_tokens


def _pinecone(matches) -> MagicMock:
    index = MagicMock()
    index.query.return_value = SimpleNamespace(matches=matches)
    client = MagicMock()
    client.Index.return_value = index
    return client


class TestCourseMaterialIndex:
    @pytest.mark.asyncio
    async def test_open_index_by_configured_name(self):
        client = _pinecone([])
        course_index = CourseMaterialIndex(client, RagConfig(index_name="vta-test"))

        handle = await course_index.open_index()

        client.Index.assert_called_once_with("vta-test")
        assert handle is client.Index.return_value

    @pytest.mark.asyncio
    async def test_query_returns_metadata_in_rank_order(self):
        client = _pinecone(
            [
                SimpleNamespace(id="a", score=0.9, metadata={"text": "first"}),
                SimpleNamespace(id="b", score=0.8, metadata=None),
                SimpleNamespace(id="c", score=0.7, metadata={"text": "third"}),
            ]
        )
        course_index = CourseMaterialIndex(client, RagConfig(top_k=3, namespace="MCY660"))
        handle = await course_index.open_index()

        matches = await course_index.query(handle, [0.1, 0.2])

        assert matches == [{"text": "first"}, {}, {"text": "third"}]
        handle.query.assert_called_once_with(
            vector=[0.1, 0.2], top_k=3, include_metadata=True, namespace="MCY660"
        )

    @pytest.mark.asyncio
    async def test_no_matches(self):
        client = _pinecone(None)
        course_index = CourseMaterialIndex(client, RagConfig())

        assert await course_index.query(await course_index.open_index(), [0.0]) == []

    @pytest.mark.asyncio
    async def test_missing_client(self):
        course_index = CourseMaterialIndex(None, RagConfig())

        with pytest.raises(VectorIndexUnavailable):
            await course_index.open_index()


class TestEmbeddingClient:
    @pytest.mark.asyncio
    async def test_embed_returns_vector(self):
        openai_client = MagicMock()
        openai_client.embeddings.create = AsyncMock(
            return_value=SimpleNamespace(
                data=[SimpleNamespace(embedding=(0.5, -0.25, 1.0))]
            )
        )
        client = EmbeddingClient(EmbeddingConfig(), client=openai_client)

        vector = await client.embed("what is risk")

        assert vector == [0.5, -0.25, 1.0]
        openai_client.embeddings.create.assert_awaited_once_with(
            input="what is risk", model="text-embedding-3-small"
        )

    @pytest.mark.asyncio
    async def test_long_input_is_truncated(self):
        openai_client = MagicMock()
        openai_client.embeddings.create = AsyncMock(
            return_value=SimpleNamespace(data=[SimpleNamespace(embedding=[0.0])])
        )
        client = EmbeddingClient(
            EmbeddingConfig(max_input_tokens=10), client=openai_client
        )

        await client.embed("x" * 1000)

        sent = openai_client.embeddings.create.await_args.kwargs["input"]
        assert sent == truncate_to_tokens("x" * 1000, 10)
        assert len(sent) < 1000

    @pytest.mark.asyncio
    async def test_api_error_propagates(self):
        openai_client = MagicMock()
        openai_client.embeddings.create = AsyncMock(side_effect=RuntimeError("quota"))
        client = EmbeddingClient(EmbeddingConfig(), client=openai_client)

        with pytest.raises(RuntimeError, match="quota"):
            await client.embed("q")

    def test_sdk_client_does_not_retry(self):
        with patch("vta.core.embedding.client.openai.AsyncOpenAI") as async_openai:
            EmbeddingClient(EmbeddingConfig(api_key="sk-test"))

        assert async_openai.call_args.kwargs["max_retries"] == 0
        assert async_openai.call_args.kwargs["api_key"] == "sk-test"


class TestTokens:
    def test_short_text_untouched(self):
        assert truncate_to_tokens("hello", 100) == "hello"

    def test_estimate_is_at_least_one(self):
        assert estimate_tokens("") == 1

    def test_truncated_text_fits(self):
        assert estimate_tokens(truncate_to_tokens("y" * 500, 20)) <= 20


class TestIds:
    def test_interaction_ids_are_prefixed_and_unique(self):
        ids = {new_interaction_id() for _ in range(50)}

        assert len(ids) == 50
        assert all(i.startswith("turn_") and len(i) == len("turn_") + 12 for i in ids)

    def test_session_id_is_utc_timestamp(self):
        session_id = new_session_id()

        assert session_id.endswith("Z")
        assert session_id[10] == "T"
        assert len(session_id) == len("2024-03-01T12:00:00.000Z")
