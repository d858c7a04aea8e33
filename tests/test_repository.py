"""Tests for the interaction store."""

import pytest
from langchain_core.messages import AIMessage, HumanMessage
from sqlalchemy.exc import IntegrityError

from vta.infra.db import (
    RATE_ALREADY_RATED,
    RATE_NOT_FOUND,
    RATE_RATED,
    ROLE_ASSISTANT,
    ROLE_USER,
    ChatInteraction,
    stored_to_messages,
)


class TestAppend:
    @pytest.mark.asyncio
    async def test_append_returns_unique_ids(self, repository):
        first = await repository.append("s1", "What is risk?", "Risk is...")
        second = await repository.append("s1", "And threats?", "Threats are...")

        assert first.startswith("turn_")
        assert first != second

    @pytest.mark.asyncio
    async def test_append_embeds_user_and_assistant_messages(self, repository):
        await repository.append("s1", "What is risk?", "Risk is...")

        [interaction] = await repository.recent(10)
        assert interaction.role == ROLE_ASSISTANT
        assert interaction.content == "Risk is..."
        assert [m["role"] for m in interaction.messages] == [ROLE_USER, ROLE_ASSISTANT]
        assert [m["content"] for m in interaction.messages] == [
            "What is risk?",
            "Risk is...",
        ]
        assert interaction.rating is None


class TestRecent:
    @pytest.mark.asyncio
    async def test_recent_is_chronological_and_limited(self, repository):
        for i in range(5):
            await repository.append("s1", f"q{i}", f"a{i}")

        rows = await repository.recent(3)

        assert [r.content for r in rows] == ["a2", "a3", "a4"]

    @pytest.mark.asyncio
    async def test_recent_without_session_spans_all_sessions(self, repository):
        await repository.append("s1", "q1", "a1")
        await repository.append("s2", "q2", "a2")

        assert [r.session_id for r in await repository.recent(10)] == ["s1", "s2"]

    @pytest.mark.asyncio
    async def test_recent_scoped_to_session(self, repository):
        await repository.append("s1", "q1", "a1")
        await repository.append("s2", "q2", "a2")

        rows = await repository.recent(10, session_id="s2")

        assert [r.content for r in rows] == ["a2"]

    @pytest.mark.asyncio
    async def test_recent_on_empty_store(self, repository):
        assert await repository.recent(20) == []


class TestSessionMessages:
    @pytest.mark.asyncio
    async def test_only_the_sessions_last_turns(self, repository):
        await repository.append("s1", "q1", "a1")
        await repository.append("other", "qx", "ax")
        await repository.append("s1", "q2", "a2")
        await repository.append("s1", "q3", "a3")

        messages = await repository.session_messages("s1", max_turns=2)

        assert [m["content"] for m in messages] == ["q2", "a2", "q3", "a3"]

    @pytest.mark.asyncio
    async def test_converts_to_chat_messages(self, repository):
        await repository.append("s1", "q1", "a1")

        converted = stored_to_messages(await repository.session_messages("s1", 10))

        assert isinstance(converted[0], HumanMessage)
        assert isinstance(converted[1], AIMessage)

    @pytest.mark.asyncio
    async def test_unknown_session_has_no_messages(self, repository):
        assert await repository.session_messages("nobody", 10) == []


class TestRate:
    @pytest.mark.asyncio
    async def test_rate_once(self, repository):
        interaction_id = await repository.append("s1", "q", "a")

        assert await repository.rate(interaction_id, "helpful") == RATE_RATED

        [row] = await repository.recent(1)
        assert row.rating == "helpful"
        assert row.rated_at is not None

    @pytest.mark.asyncio
    async def test_second_rating_is_rejected(self, repository):
        interaction_id = await repository.append("s1", "q", "a")
        await repository.rate(interaction_id, "helpful")

        assert await repository.rate(interaction_id, "unhelpful") == RATE_ALREADY_RATED

        [row] = await repository.recent(1)
        assert row.rating == "helpful"

    @pytest.mark.asyncio
    async def test_unknown_interaction(self, repository):
        assert await repository.rate("turn_missing", "helpful") == RATE_NOT_FOUND


class TestFlatten:
    def test_embedded_messages_win(self):
        interaction = ChatInteraction(
            role=ROLE_ASSISTANT,
            content="a",
            messages=[
                {"role": "user", "content": "q", "timestamp": "t"},
                {"role": "assistant", "content": "a", "timestamp": "t"},
            ],
        )

        assert [m["content"] for m in interaction.flatten()] == ["q", "a"]

    def test_headline_message_when_nothing_embedded(self):
        interaction = ChatInteraction(role=ROLE_USER, content="hello", messages=[])

        [message] = interaction.flatten()
        assert message["role"] == ROLE_USER
        assert message["content"] == "hello"


class TestSchema:
    @pytest.mark.asyncio
    async def test_rating_outside_the_domain_is_rejected(self, session_factory):
        async with session_factory() as session:
            session.add(
                ChatInteraction(
                    interaction_id="turn_bad",
                    session_id="s1",
                    role=ROLE_ASSISTANT,
                    content="a",
                    messages=[],
                    rating="meh",
                )
            )
            with pytest.raises(IntegrityError):
                await session.commit()
