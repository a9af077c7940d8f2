"""Tests for bulk-send batching and count validation."""

from unittest.mock import AsyncMock, patch

import pytest

from discord_toolbox.application.services.batching import send_in_batches, validate_count
from discord_toolbox.domain.shared.exceptions import ValidationError


class TestValidateCount:
    def test_in_range(self):
        assert validate_count(5, 10, "messages") == 5

    def test_bounds_inclusive(self):
        assert validate_count(1, 10, "messages") == 1
        assert validate_count(10, 10, "messages") == 10

    @pytest.mark.parametrize("count", [0, -3, 11])
    def test_out_of_range(self, count):
        with pytest.raises(ValidationError) as exc_info:
            validate_count(count, 10, "channels")
        assert "channels" in exc_info.value.message
        assert "1-10" in exc_info.value.message


class TestSendInBatches:
    async def test_sends_every_index_in_order(self):
        send = AsyncMock()

        with patch("discord_toolbox.application.services.batching.asyncio.sleep", new=AsyncMock()):
            sent = await send_in_batches(send, 7, batch_size=3, delay=1.0)

        assert sent == 7
        assert [c.args for c in send.await_args_list] == [(i, 7) for i in range(1, 8)]

    async def test_sleeps_between_batches_only(self):
        sleep = AsyncMock()

        with patch("discord_toolbox.application.services.batching.asyncio.sleep", new=sleep):
            await send_in_batches(AsyncMock(), 7, batch_size=3, delay=0.5)

        # Batches 1-3, 4-6, 7: two gaps.
        assert sleep.await_count == 2
        sleep.assert_awaited_with(0.5)

    async def test_exact_multiple_has_no_trailing_sleep(self):
        sleep = AsyncMock()

        with patch("discord_toolbox.application.services.batching.asyncio.sleep", new=sleep):
            await send_in_batches(AsyncMock(), 6, batch_size=3, delay=0.5)

        assert sleep.await_count == 1

    async def test_zero_count_sends_nothing(self):
        send = AsyncMock()
        assert await send_in_batches(send, 0, batch_size=5, delay=1.0) == 0
        send.assert_not_awaited()

    async def test_invalid_batch_size(self):
        with pytest.raises(ValueError):
            await send_in_batches(AsyncMock(), 3, batch_size=0, delay=1.0)

    async def test_send_error_propagates(self):
        send = AsyncMock(side_effect=RuntimeError("rate limited"))

        with pytest.raises(RuntimeError):
            await send_in_batches(send, 3, batch_size=3, delay=0.0)
