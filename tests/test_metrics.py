"""Tests for the chat request metrics decorator."""

import pytest
from prometheus_client import REGISTRY

from vta.core.service.metrics import observe_reply


def _sample(name: str, **labels) -> float:
    return REGISTRY.get_sample_value(name, labels) or 0.0


class TestObserveReply:
    @pytest.mark.asyncio
    async def test_counts_successes(self):
        @observe_reply("metrics-ok")
        async def reply() -> str:
            return "fine"

        before = _sample("vta_chat_requests_total", service="metrics-ok", status="ok")

        assert await reply() == "fine"

        after = _sample("vta_chat_requests_total", service="metrics-ok", status="ok")
        assert after == before + 1
        assert _sample("vta_chat_requests_active", service="metrics-ok") == 0

    @pytest.mark.asyncio
    async def test_counts_failures_and_reraises(self):
        @observe_reply("metrics-err")
        async def reply() -> str:
            raise RuntimeError("down")

        with pytest.raises(RuntimeError):
            await reply()

        assert (
            _sample("vta_chat_requests_total", service="metrics-err", status="error")
            == 1
        )
        assert _sample("vta_chat_requests_active", service="metrics-err") == 0
