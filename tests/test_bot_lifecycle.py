"""
Unit Tests for Bot Lifecycle

Tests for src/discord_toolbox/infrastructure/discord/bot.py:

1. TestBotInitialization - intents, prefix, help disabled, container wiring
2. TestSetupHook - container init, cog loading, interaction error routing, startup sync
3. TestSyncCommands - test guild and global sync, HTTP failures tolerated
4. TestCommandRouting - invocations recorded once, errors forwarded to the router
5. TestBotClose - container shutdown and voice disconnects, errors tolerated
6. TestCreateBot - factory
"""

from unittest.mock import AsyncMock, MagicMock, PropertyMock, patch

import discord
import pytest
from discord import app_commands
from discord.ext import commands

from discord_toolbox.infrastructure.discord.bot import COGS, ToolboxBot, create_bot


@pytest.fixture
def mock_settings():
    settings = MagicMock()
    settings.discord.command_prefix = "!"
    settings.discord.application_id = None
    settings.discord.sync_on_startup = False
    settings.discord.test_guild_ids = ()
    return settings


@pytest.fixture
def mock_container():
    container = MagicMock()
    container.initialize = AsyncMock()
    container.shutdown = AsyncMock()
    container.command_router.on_text_error = AsyncMock()
    container.command_router.on_interaction_error = AsyncMock()
    return container


@pytest.fixture
def bot(mock_container, mock_settings):
    return ToolboxBot(container=mock_container, settings=mock_settings)


def _http_error() -> discord.HTTPException:
    response = MagicMock()
    response.status = 500
    response.reason = "Server Error"
    return discord.HTTPException(response, "sync failed")


# =============================================================================
# Bot Initialization Tests
# =============================================================================


class TestBotInitialization:
    def test_intents(self, bot):
        assert bot.intents.message_content is True
        assert bot.intents.voice_states is True
        assert bot.intents.guilds is True
        assert bot.intents.members is True

    def test_prefix_and_help(self, mock_container, mock_settings):
        mock_settings.discord.command_prefix = "?"
        bot = ToolboxBot(container=mock_container, settings=mock_settings)

        assert bot.command_prefix == "?"
        assert bot.help_command is None

    def test_container_wiring(self, bot, mock_container, mock_settings):
        assert bot.container is mock_container
        assert bot.settings is mock_settings
        mock_container.set_bot.assert_called_once_with(bot)


# =============================================================================
# Setup Hook Tests
# =============================================================================


class TestSetupHook:
    async def test_initializes_and_loads_cogs(self, bot, mock_container):
        with patch.object(bot, "load_extension", new_callable=AsyncMock) as load:
            await bot.setup_hook()

        mock_container.initialize.assert_awaited_once()
        assert [c.args[0] for c in load.await_args_list] == list(COGS)
        assert bot.tree.on_error is mock_container.command_router.on_interaction_error

    async def test_container_failure_propagates(self, bot, mock_container):
        mock_container.initialize.side_effect = OSError("read-only filesystem")

        with pytest.raises(OSError):
            await bot.setup_hook()

    async def test_cog_failure_does_not_stop_others(self, bot):
        load = AsyncMock(side_effect=[commands.ExtensionFailed("x", RuntimeError("boom"))] + [None] * (len(COGS) - 1))
        with patch.object(bot, "load_extension", new=load):
            await bot.setup_hook()

        assert load.await_count == len(COGS)

    async def test_sync_on_startup(self, bot, mock_settings):
        mock_settings.discord.sync_on_startup = True
        with (
            patch.object(bot, "load_extension", new_callable=AsyncMock),
            patch.object(bot, "_sync_commands", new_callable=AsyncMock) as sync,
        ):
            await bot.setup_hook()

        sync.assert_awaited_once()

    async def test_sync_failure_tolerated(self, bot, mock_settings):
        mock_settings.discord.sync_on_startup = True
        with (
            patch.object(bot, "load_extension", new_callable=AsyncMock),
            patch.object(bot, "_sync_commands", new=AsyncMock(side_effect=RuntimeError("no app id"))),
        ):
            await bot.setup_hook()


# =============================================================================
# Sync Tests
# =============================================================================


class TestSyncCommands:
    async def test_syncs_test_guilds_then_global(self, bot, mock_settings):
        mock_settings.discord.test_guild_ids = (111, 222)
        with (
            patch.object(bot.tree, "copy_global_to") as copy,
            patch.object(bot.tree, "sync", new=AsyncMock(return_value=[])) as sync,
        ):
            await bot._sync_commands()

        assert copy.call_count == 2
        assert [c.kwargs.get("guild").id for c in sync.await_args_list[:2]] == [111, 222]
        assert sync.await_args_list[-1].kwargs == {}

    async def test_guild_failure_still_syncs_global(self, bot, mock_settings):
        mock_settings.discord.test_guild_ids = (111,)
        sync = AsyncMock(side_effect=[_http_error(), []])
        with patch.object(bot.tree, "copy_global_to"), patch.object(bot.tree, "sync", new=sync):
            await bot._sync_commands()

        assert sync.await_count == 2

    async def test_global_failure_tolerated(self, bot):
        with patch.object(bot.tree, "sync", new=AsyncMock(side_effect=_http_error())):
            await bot._sync_commands()


# =============================================================================
# Command Routing Tests
# =============================================================================


class TestCommandRouting:
    async def test_on_command_records(self, bot, mock_container):
        ctx = MagicMock()
        with patch("discord_toolbox.infrastructure.discord.bot.CommandInvocation") as invocation:
            await bot.on_command(ctx)

        invocation.from_context.assert_called_once_with(ctx)
        mock_container.command_router.record.assert_called_once_with(invocation.from_context.return_value)

    async def test_slash_command_recorded(self, bot, mock_container):
        interaction = MagicMock()
        interaction.type = discord.InteractionType.application_command
        interaction.command = MagicMock(spec=app_commands.Command)
        with patch("discord_toolbox.infrastructure.discord.bot.CommandInvocation") as invocation:
            await bot.on_interaction(interaction)

        invocation.from_interaction.assert_called_once_with(interaction)
        mock_container.command_router.record.assert_called_once()

    async def test_hybrid_slash_not_recorded_twice(self, bot, mock_container):
        interaction = MagicMock()
        interaction.type = discord.InteractionType.application_command
        interaction.command = MagicMock(spec=commands.hybrid.HybridAppCommand)

        await bot.on_interaction(interaction)

        mock_container.command_router.record.assert_not_called()

    async def test_component_interactions_ignored(self, bot, mock_container):
        interaction = MagicMock()
        interaction.type = discord.InteractionType.component

        await bot.on_interaction(interaction)

        mock_container.command_router.record.assert_not_called()

    async def test_command_error_forwarded(self, bot, mock_container):
        ctx = MagicMock()
        error = commands.CommandError("bad")

        await bot.on_command_error(ctx, error)

        mock_container.command_router.on_text_error.assert_awaited_once_with(ctx, error)


# =============================================================================
# Close Tests
# =============================================================================


class TestBotClose:
    async def test_shuts_down_container_and_voice(self, bot, mock_container):
        vc1, vc2 = AsyncMock(), AsyncMock()

        with patch.object(type(bot), "voice_clients", PropertyMock(return_value=[vc1, vc2])):
            await bot.close()

        mock_container.shutdown.assert_awaited_once()
        vc1.disconnect.assert_awaited_once_with(force=True)
        vc2.disconnect.assert_awaited_once_with(force=True)

    async def test_container_error_tolerated(self, bot, mock_container):
        mock_container.shutdown.side_effect = RuntimeError("shutdown failed")

        with patch.object(type(bot), "voice_clients", PropertyMock(return_value=[])):
            await bot.close()

    async def test_voice_disconnect_error_tolerated(self, bot):
        vc = AsyncMock()
        vc.disconnect.side_effect = discord.ClientException("not connected")

        with patch.object(type(bot), "voice_clients", PropertyMock(return_value=[vc])):
            await bot.close()


# =============================================================================
# Factory Tests
# =============================================================================


class TestCreateBot:
    def test_returns_toolbox_bot(self, mock_container, mock_settings):
        bot = create_bot(mock_container, mock_settings)

        assert isinstance(bot, ToolboxBot)
        assert bot.container is mock_container
