"""
Unit Tests for CommandRouter

Tests for:
- CommandInvocation normalization from prefix contexts and interactions
- Unwrapping discord.py invoke/hybrid wrappers
- Mapping every failure class to one user-visible reply
- Text and interaction error entry points
"""

from unittest.mock import AsyncMock, MagicMock

import discord
import pytest
from discord import app_commands
from discord.ext import commands

from discord_toolbox.domain.shared.exceptions import (
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from discord_toolbox.domain.shared.messages import DiscordUIMessages
from discord_toolbox.infrastructure.discord.router import (
    CommandInvocation,
    CommandRouter,
    unwrap,
)

# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def router():
    return CommandRouter()


@pytest.fixture
def mock_ctx():
    ctx = MagicMock(spec=commands.Context)
    ctx.send = AsyncMock()
    ctx.author = MagicMock()
    ctx.author.id = 42
    ctx.guild = MagicMock()
    ctx.guild.id = 100
    ctx.channel = MagicMock()
    ctx.channel.id = 200
    ctx.command = MagicMock()
    ctx.command.qualified_name = "create"
    ctx.command.signature = "<count>"
    ctx.clean_prefix = "!"
    ctx.invoked_with = "create"
    ctx.args = []
    ctx.kwargs = {}
    return ctx


@pytest.fixture
def mock_interaction():
    interaction = MagicMock(spec=discord.Interaction)
    interaction.user = MagicMock()
    interaction.user.id = 42
    interaction.guild_id = 100
    interaction.channel_id = 200
    interaction.command = MagicMock()
    interaction.command.qualified_name = "say"
    interaction.data = {"name": "say", "options": [{"name": "message", "value": "hi"}]}
    interaction.response = MagicMock()
    interaction.response.is_done = MagicMock(return_value=False)
    interaction.response.send_message = AsyncMock()
    interaction.followup = MagicMock()
    interaction.followup.send = AsyncMock()
    return interaction


def _forbidden() -> discord.Forbidden:
    response = MagicMock()
    response.status = 403
    response.reason = "Forbidden"
    return discord.Forbidden(response, "Missing Permissions")


# =============================================================================
# CommandInvocation
# =============================================================================


class TestCommandInvocation:
    def test_from_context_strips_cog_and_context(self, mock_ctx):
        cog = MagicMock(spec=commands.Cog)
        mock_ctx.args = [cog, mock_ctx, 5]
        mock_ctx.kwargs = {"text": "hello"}

        invocation = CommandInvocation.from_context(mock_ctx)

        assert invocation.command_name == "create"
        assert invocation.args == (5,)
        assert invocation.options == {"text": "hello"}
        assert invocation.invoker_id == 42
        assert invocation.guild_id == 100
        assert invocation.channel_id == 200

    def test_from_context_in_dm(self, mock_ctx):
        mock_ctx.guild = None
        assert CommandInvocation.from_context(mock_ctx).guild_id is None

    def test_from_interaction(self, mock_interaction):
        invocation = CommandInvocation.from_interaction(mock_interaction)

        assert invocation.command_name == "say"
        assert invocation.options == {"message": "hi"}
        assert invocation.invoker_id == 42

    def test_from_interaction_unknown_command_uses_payload_name(self, mock_interaction):
        mock_interaction.command = None
        mock_interaction.data = {"name": "ghost"}

        invocation = CommandInvocation.from_interaction(mock_interaction)

        assert invocation.command_name == "ghost"
        assert invocation.options == {}


# =============================================================================
# describe_failure
# =============================================================================


class TestDescribeFailure:
    def test_unwrap_nested(self):
        inner = ValidationError("bad")
        wrapped = commands.HybridCommandError(app_commands.CommandInvokeError(MagicMock(), inner))
        assert unwrap(wrapped) is inner

    def test_domain_error_message(self, router):
        error = commands.CommandInvokeError(NotFoundError("file", "x", message="`x` was not found"))
        assert router.describe_failure(error) == DiscordUIMessages.ERROR_DOMAIN.format(
            message="`x` was not found"
        )

    def test_permission_denied_is_domain_error(self, router):
        text = router.describe_failure(PermissionDeniedError("administrator"))
        assert "administrator" in text

    def test_missing_permissions_humanized(self, router):
        text = router.describe_failure(commands.MissingPermissions(["manage_guild"]))
        assert "**Manage Server**" in text

    def test_app_missing_permissions(self, router):
        text = router.describe_failure(app_commands.MissingPermissions(["manage_messages"]))
        assert "**Manage Messages**" in text

    def test_bot_missing_permissions(self, router):
        text = router.describe_failure(commands.BotMissingPermissions(["ban_members"]))
        assert text.startswith("❌ I need")

    def test_no_private_message(self, router):
        assert router.describe_failure(commands.NoPrivateMessage()) == DiscordUIMessages.STATE_SERVER_ONLY

    def test_generic_check_failure(self, router):
        assert router.describe_failure(commands.NotOwner()) == DiscordUIMessages.ERROR_NOT_ALLOWED

    def test_missing_argument_with_usage(self, router):
        param = MagicMock()
        param.name = "count"
        text = router.describe_failure(commands.MissingRequiredArgument(param), usage="!create <count>")

        assert "`count`" in text
        assert "Usage: `!create <count>`" in text

    def test_bad_argument(self, router):
        assert router.describe_failure(commands.BadArgument("nope")) == DiscordUIMessages.ERROR_INVALID_ARGUMENT

    def test_forbidden(self, router):
        assert router.describe_failure(_forbidden()) == DiscordUIMessages.ERROR_FORBIDDEN

    def test_unexpected_error(self, router):
        assert router.describe_failure(RuntimeError()) == DiscordUIMessages.ERROR_COMMAND_FAILED.format(
            message="RuntimeError"
        )


# =============================================================================
# Entry points
# =============================================================================


class TestTextErrors:
    async def test_unknown_command_ignored(self, router, mock_ctx):
        await router.on_text_error(mock_ctx, commands.CommandNotFound("nope"))
        mock_ctx.send.assert_not_awaited()

    async def test_replies_once(self, router, mock_ctx):
        await router.on_text_error(mock_ctx, commands.CommandInvokeError(ValidationError("too many")))

        mock_ctx.send.assert_awaited_once_with("❌ too many", ephemeral=True)

    async def test_usage_appended_for_input_errors(self, router, mock_ctx):
        await router.on_text_error(mock_ctx, commands.BadArgument("x"))

        text = mock_ctx.send.await_args.args[0]
        assert "Usage: `!create <count>`" in text

    async def test_reply_failure_swallowed(self, router, mock_ctx):
        mock_ctx.send.side_effect = _forbidden()

        await router.on_text_error(mock_ctx, RuntimeError("boom"))

        mock_ctx.send.assert_awaited_once()


class TestInteractionErrors:
    async def test_unknown_interaction_answered(self, router, mock_interaction):
        await router.on_interaction_error(mock_interaction, app_commands.CommandNotFound("ghost", []))

        mock_interaction.response.send_message.assert_awaited_once_with(
            DiscordUIMessages.UNKNOWN_COMMAND, ephemeral=True
        )

    async def test_uses_followup_after_defer(self, router, mock_interaction):
        mock_interaction.response.is_done.return_value = True
        error = app_commands.CommandInvokeError(MagicMock(), ValidationError("nope"))

        await router.on_interaction_error(mock_interaction, error)

        mock_interaction.followup.send.assert_awaited_once_with("❌ nope", ephemeral=True)
        mock_interaction.response.send_message.assert_not_awaited()

    async def test_check_failure(self, router, mock_interaction):
        await router.on_interaction_error(mock_interaction, app_commands.CheckFailure())

        mock_interaction.response.send_message.assert_awaited_once_with(
            DiscordUIMessages.ERROR_NOT_ALLOWED, ephemeral=True
        )


class TestRecord:
    def test_record_logs_invocation(self, router, caplog):
        with caplog.at_level("INFO"):
            router.record(CommandInvocation(command_name="ping", invoker_id=1, guild_id=2, channel_id=3))

        assert "ping" in caplog.text
