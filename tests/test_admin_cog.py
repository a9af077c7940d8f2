"""
Unit Tests for AdminCog

Tests for the owner-only prefix commands:
- !update - pull, dependency install and plugin reload, stopping on failures
- !sync - guild and global slash command sync
- !status, !shutdown - system info and lifecycle
"""

from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import discord
import pytest
from discord.ext import commands

from discord_toolbox.domain.plugins.entities import PluginAction, PluginOutcome, PluginStatus
from discord_toolbox.domain.shared.messages import DiscordUIMessages
from discord_toolbox.infrastructure.discord.cogs.admin_cog import AdminCog
from discord_toolbox.infrastructure.system.shell import CommandResult

RUN_COMMAND = "discord_toolbox.infrastructure.discord.cogs.admin_cog.run_command"

# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def mock_bot():
    bot = MagicMock(spec=commands.Bot)
    bot.tree = MagicMock()
    bot.tree.sync = AsyncMock(return_value=[MagicMock(), MagicMock()])
    bot.guilds = [MagicMock(), MagicMock(), MagicMock()]
    bot.latency = 0.042
    bot.cogs = {"AdminCog": MagicMock()}
    bot.close = AsyncMock()
    return bot


@pytest.fixture
def mock_container():
    container = MagicMock()
    container.settings.limits.subprocess_timeout = 60.0
    container.settings.limits.message_chunk_size = 1900
    container.settings.update.workdir = Path("/srv/bot")
    container.settings.update.pull_command = ["git", "pull"]
    container.settings.update.install_command = ["pip", "install", "-e", "."]
    container.settings.update.up_to_date_marker = "Already up to date."
    container.settings.environment = "production"
    container.plugin_registry.reload_all = AsyncMock(return_value=[])
    container.plugin_registry.loaded_names.return_value = ["greeter"]
    container.voice_session_manager.active_guild_ids = [1]
    return container


@pytest.fixture
def admin_cog(mock_bot, mock_container):
    return AdminCog(mock_bot, mock_container)


@pytest.fixture
def mock_ctx():
    ctx = MagicMock(spec=commands.Context)
    ctx.guild = MagicMock()
    ctx.guild.id = 100
    ctx.author = MagicMock()
    ctx.author.id = 1
    ctx.channel = MagicMock()
    ctx.send = AsyncMock()
    return ctx


def _result(argv, returncode=0, output=""):
    return CommandResult(argv=tuple(argv), returncode=returncode, output=output)


def _sent(ctx) -> list[str]:
    return [c.args[0] for c in ctx.send.await_args_list if c.args]


# =============================================================================
# Update Command Tests
# =============================================================================


class TestUpdate:
    async def test_no_changes_skips_install(self, admin_cog, mock_ctx, mock_container):
        run = AsyncMock(return_value=_result(["git", "pull"], output="Already up to date."))
        with patch(RUN_COMMAND, new=run):
            await admin_cog.update.callback(admin_cog, mock_ctx)

        run.assert_awaited_once_with(["git", "pull"], cwd=Path("/srv/bot"), timeout=60.0)
        sent = _sent(mock_ctx)
        assert DiscordUIMessages.UPDATE_NO_CHANGES in sent
        assert DiscordUIMessages.UPDATE_INSTALLING not in sent
        assert DiscordUIMessages.PLUGIN_RELOAD_NOTHING in sent
        assert sent[-1] == DiscordUIMessages.UPDATE_COMPLETE

    async def test_changes_run_install_and_reload(self, admin_cog, mock_ctx, mock_container):
        run = AsyncMock(
            side_effect=[
                _result(["git", "pull"], output="Fast-forward\n 2 files changed"),
                _result(["pip", "install"], output="Successfully installed"),
            ]
        )
        mock_container.plugin_registry.reload_all.return_value = [
            PluginStatus("greeter", PluginAction.UNLOAD, PluginOutcome.UNLOADED),
            PluginStatus("greeter", PluginAction.LOAD, PluginOutcome.LOADED),
        ]
        with patch(RUN_COMMAND, new=run):
            await admin_cog.update.callback(admin_cog, mock_ctx)

        assert run.await_count == 2
        sent = _sent(mock_ctx)
        assert "```\nSuccessfully installed\n```" in sent
        reload_report = next(s for s in sent if s.startswith(DiscordUIMessages.PLUGIN_RELOAD_HEADER))
        assert "✅ Plugin `greeter` loaded." in reload_report

    async def test_pull_failure_stops(self, admin_cog, mock_ctx, mock_container):
        run = AsyncMock(return_value=_result(["git", "pull"], returncode=1, output="fatal: not a git repository"))
        with patch(RUN_COMMAND, new=run):
            await admin_cog.update.callback(admin_cog, mock_ctx)

        assert _sent(mock_ctx)[-1] == DiscordUIMessages.UPDATE_PULL_FAILED.format(code=1)
        mock_container.plugin_registry.reload_all.assert_not_awaited()

    async def test_install_failure_stops(self, admin_cog, mock_ctx, mock_container):
        run = AsyncMock(
            side_effect=[
                _result(["git", "pull"], output="Updating abc..def"),
                _result(["pip", "install"], returncode=2, output="error: resolution failed"),
            ]
        )
        with patch(RUN_COMMAND, new=run):
            await admin_cog.update.callback(admin_cog, mock_ctx)

        assert _sent(mock_ctx)[-1] == DiscordUIMessages.UPDATE_INSTALL_FAILED.format(code=2)
        mock_container.plugin_registry.reload_all.assert_not_awaited()


# =============================================================================
# Sync Command Tests
# =============================================================================


class TestSync:
    async def test_guild_sync(self, admin_cog, mock_ctx, mock_bot):
        await admin_cog.sync.callback(admin_cog, mock_ctx)

        mock_bot.tree.copy_global_to.assert_called_once_with(guild=mock_ctx.guild)
        mock_bot.tree.sync.assert_awaited_once_with(guild=mock_ctx.guild)
        mock_ctx.send.assert_awaited_once_with(DiscordUIMessages.SUCCESS_SYNCED_GUILD.format(count=2))

    async def test_global_sync(self, admin_cog, mock_ctx, mock_bot):
        await admin_cog.sync.callback(admin_cog, mock_ctx, " Global ")

        mock_bot.tree.sync.assert_awaited_once_with()
        mock_ctx.send.assert_awaited_once_with(DiscordUIMessages.SUCCESS_SYNCED_GLOBAL.format(count=2))

    async def test_direct_message_syncs_globally(self, admin_cog, mock_ctx, mock_bot):
        mock_ctx.guild = None

        await admin_cog.sync.callback(admin_cog, mock_ctx)

        mock_bot.tree.copy_global_to.assert_not_called()


# =============================================================================
# Status and Shutdown Tests
# =============================================================================


class TestStatusAndShutdown:
    async def test_status_embed(self, admin_cog, mock_ctx):
        await admin_cog.status.callback(admin_cog, mock_ctx)

        embed = mock_ctx.send.await_args.kwargs["embed"]
        assert isinstance(embed, discord.Embed)
        fields = {field.name: field.value for field in embed.fields}
        assert fields["Guilds"] == "3"
        assert fields["Latency"] == "42ms"
        assert fields["Voice Sessions"] == "1"
        assert fields["Plugins"] == "1"
        assert fields["Environment"] == "production"

    async def test_shutdown_closes_bot(self, admin_cog, mock_ctx, mock_bot):
        await admin_cog.shutdown.callback(admin_cog, mock_ctx)

        mock_ctx.send.assert_awaited_once_with(DiscordUIMessages.SHUTDOWN_STARTING)
        mock_bot.close.assert_awaited_once()
