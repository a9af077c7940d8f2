"""Centralized message constants for error messages, log templates, and user feedback."""

from __future__ import annotations


class ErrorMessages:
    """Error messages for exceptions and validation failures."""

    # Discord ID Validation Errors
    INVALID_SNOWFLAKE = "Discord snowflake ID must be positive"
    SNOWFLAKE_TOO_LARGE = "Discord snowflake ID exceeds maximum value (2^64)"

    # Settings
    INVALID_LOG_LEVEL = "Invalid log level: {level}. Must be one of {valid_levels}"
    BOT_NOT_INITIALIZED = "Bot not initialized. Call set_bot() first."
    CONTAINER_NOT_FOUND = "Container not found on bot instance"

    # Dice
    DICE_INVALID_FORMAT = "Invalid dice roll format. Use XdY (e.g. `2d6`)."
    DICE_NOT_POSITIVE = "Number of dice and sides must be positive integers."
    DICE_TOO_MANY = "You can roll at most {max_dice} dice at once."
    DICE_TOO_MANY_SIDES = "Dice can have at most {max_sides} sides."

    # Counts and durations
    COUNT_OUT_OF_RANGE = "Please provide a valid number of {what} (1-{maximum})."
    DURATION_INVALID = "Invalid duration `{value}`. Use a number followed by s, m, h or d (e.g. 10m)."
    DURATION_OUT_OF_RANGE = "Timeouts must be longer than 0 seconds and at most 28 days."

    # Voice
    NOT_IN_VOICE = "I am not in a voice channel. Join one and try again, or use `call` first."
    USER_NOT_IN_VOICE = "You need to be in a voice channel to use this command!"
    MEMBER_NOT_IN_VOICE = "{member} is not in a voice channel."
    UNSUPPORTED_RESOURCE = "Unsupported audio resource"
    VOICE_CONNECT_TIMEOUT = "Timed out connecting to the voice channel"
    VOICE_NO_PERMISSION = "I don't have permission to join that voice channel"
    FILE_NOT_FOUND = "`{name}` was not found in `{directory}`."

    # Members and roles
    BOT_CANNOT_MODERATE = "I cannot {action} this member. They might have a higher role or I lack permissions."
    ROLE_NOT_FOUND = 'Role "{name}" not found.'
    ROLE_TOO_HIGH = "I cannot manage this role as it is higher than or equal to my highest role."
    CANNOT_CALL_BOT = "You cannot call a bot."
    CANNOT_CALL_SELF = "You cannot call yourself."

    # Messaging
    RECIPIENT_NOT_FOUND = (
        "Could not find a user with that exact display name, username, or ID. "
        "Please mention the user or provide their exact name/ID."
    )
    RECIPIENT_AMBIGUOUS = (
        'Multiple users found with the exact name "{name}". '
        "Please be more specific, mention the user, or provide their ID."
    )
    WEBHOOK_CHANNEL_REQUIRED = "Messages can only be relayed in a server text channel."
    CHANNEL_NOT_RECREATABLE = "I cannot recreate this kind of channel."

    # Presence
    INVALID_STREAM_URL = "For streaming activity, provide a valid Twitch/YouTube URL as the last argument."
    AVATAR_SOURCE_REQUIRED = "Provide an image URL or a user whose avatar to copy."

    # npm
    NPM_INVALID_NAME = "`{name}` is not a valid npm package name."
    NPM_NO_TARBALL = "the registry document has no tarball for the latest version"


class LogTemplates:
    """Log message templates for structured logging.

    Use these with logger.info(), logger.error(), etc. and pass values as parameters
    for proper log formatting and structured logging support.
    """

    # Bot Lifecycle
    BOT_SETUP = "Setting up bot..."
    BOT_CONTAINER_INITIALIZED = "Container initialized"
    BOT_CONTAINER_INIT_FAILED = "Failed to initialize container: %s"
    BOT_COG_LOADED = "Loaded cog: %s"
    BOT_COG_LOAD_FAILED = "Failed to load cog %s: %s"
    BOT_COGS_LOADED_SUMMARY = "Cogs loaded: %d succeeded, %d failed"
    BOT_SETUP_COMPLETE = "Bot setup complete"
    BOT_SYNC_ON_STARTUP_FAILED = "Failed to sync commands on startup: %s"
    BOT_SYNCED_GUILD = "Synced %d commands to guild %s"
    BOT_SYNC_GUILD_FAILED = "Failed to sync to guild %s: %s"
    BOT_SYNCED_GLOBAL = "Synced %d commands globally"
    BOT_SYNC_GLOBAL_FAILED = "Failed to sync commands globally: %s"
    BOT_READY = "Bot ready: %s (ID: %s)"
    BOT_CONNECTED_GUILDS = "Connected to %d guilds"
    BOT_SHUTTING_DOWN = "Shutting down bot..."
    BOT_CONTAINER_SHUTDOWN = "Container shutdown complete"
    BOT_CONTAINER_SHUTDOWN_ERROR = "Error during container shutdown: %s"
    BOT_SHUTDOWN_COMPLETE = "Bot shutdown complete"
    BOT_SHUTDOWN_TIMEOUT = "Graceful shutdown timed out after %.0fs"
    BOT_VOICE_DISCONNECT_ERROR = "Error disconnecting voice client in guild %s: %s"
    BOT_STARTING = "Starting discord-toolbox (environment: %s)"
    BOT_STOPPED = "Bot stopped"
    BOT_KEYBOARD_INTERRUPT = "Interrupted; bot stopped"
    BOT_FATAL_ERROR = "Fatal error: %s"

    # Startup checks
    STARTUP_MISSING_TOKEN = "DISCORD__TOKEN is not set; cannot start"
    STARTUP_MISSING_APPLICATION_ID = "DISCORD__APPLICATION_ID is not set; cannot start"
    STARTUP_MISSING_EXECUTABLE = "%s executable not found at %r; cannot start"
    STARTUP_EXECUTABLE_FOUND = "Using %s at %s"
    LOGGING_CONFIG_FALLBACK = "Could not load %s (%s); using basic logging"

    # Container
    CONTAINER_DIRECTORY_READY = "Directory ready: %s"
    CONTAINER_NPM_CLOSE_FAILED = "Failed to close npm client: %s"
    CONTAINER_PLUGIN_UNLOAD_ON_SHUTDOWN = "Unloaded %d plugin(s) on shutdown"

    # Command Router
    COMMAND_INVOKED = "Command %s invoked by %s in guild %s channel %s with %r"
    COMMAND_CHECK_FAILED = "Command %s refused for %s: %s"
    COMMAND_USER_ERROR = "Command %s rejected input from %s: %s"
    COMMAND_DOMAIN_ERROR = "Command %s failed for %s: %s"
    COMMAND_UNHANDLED_ERROR = "Unhandled error in command %s"
    COMMAND_UNKNOWN_INTERACTION = "Unknown application command %r from %s"
    COMMAND_ERROR_REPLY_FAILED = "Failed to send error reply for command %s: %s"

    # Voice Session Manager
    VOICE_SESSION_JOINED = "Joined voice channel %s in guild %s"
    VOICE_ITEM_ENQUEUED = "Enqueued %s at position %d in guild %s"
    VOICE_SESSION_NOT_FOUND = "No voice session for guild %s"
    VOICE_SESSION_STOPPED = "Stopped voice session in guild %s"
    VOICE_SESSION_FORGOTTEN = "Dropped voice session for guild %s after external disconnect"
    VOICE_PLAYBACK_STARTED = "Playing %s (%s) in guild %s"
    VOICE_PLAYBACK_FINISHED = "Finished %s in guild %s"
    VOICE_PLAYBACK_FAILED = "Playback failed in guild %s: %s"
    VOICE_RESOURCE_CLOSE_FAILED = "Failed to close audio resource in guild %s"
    VOICE_STALE_CALLBACK = "Ignoring callback from a replaced playback in guild %s"
    VOICE_REPORT_FAILED = "Failed to report playback failure in guild %s"
    VOICE_DESTROY_FAILED = "Failed to destroy voice connection in guild %s"

    # Voice Adapter
    VOICE_CONNECTED = "Connected to voice channel %s in %s"
    VOICE_DISCONNECTED = "Disconnected from voice in guild %s"
    VOICE_CONNECTION_TIMEOUT = "Timed out connecting to voice channel %s"
    VOICE_NO_PERMISSION = "No permission to join voice channel %s"
    VOICE_CLIENT_ERROR = "Discord client error while connecting to voice: %s"
    VOICE_STALE_CLEANUP = "Cleaning up stale voice client in guild %s"
    CHANNEL_NOT_VOICE = "Channel %s is not a voice channel"

    # FFmpeg and stream processes
    FFMPEG_SOURCE_CLEANUP_ERROR = "Error cleaning up FFmpeg source: %s"
    FFMPEG_PROCESS_CLEANUP_ERROR = "Error cleaning up stream process: %s"
    FFMPEG_DISCORD_CLIENT_ERROR = "Discord client error creating FFmpeg source: %s"
    STREAM_PROCESS_STARTED = "Stream process %s started for %s"
    STREAM_PROCESS_SPAWN_FAILED = "Failed to start %s: %s"
    STREAM_PROCESS_EXITED = "%s exited with code %s while streaming %s"

    # Subprocesses and downloads
    SUBPROCESS_RUNNING = "Running: %s"
    SUBPROCESS_SPAWN_FAILED = "Failed to start %s: %s"
    SUBPROCESS_TIMED_OUT = "%s timed out after %.0fs"
    SUBPROCESS_FAILED = "%s exited with code %s:\n%s"
    YTDLP_PROBE_FAILED = "yt-dlp could not extract %s: %s"
    DOWNLOAD_STARTED = "Starting %s download of %s"
    DOWNLOAD_FINISHED = "Downloaded %s to %s"
    DOWNLOAD_ATTACH_FAILED = "Could not attach %s: %s"
    PROGRESS_EDIT_FAILED = "Failed to edit progress message: %s"

    # npm
    NPM_REQUEST_FAILED = "npm registry request for %s failed: %s"
    NPM_BAD_DOCUMENT = "npm registry returned an unusable document for %s: %s"
    NPM_RESOLVED = "Resolved npm package %s@%s"
    NPM_DOWNLOADED = "Downloaded npm tarball %s to %s"

    # Plugins
    PLUGIN_NOT_FOUND = "Plugin %s not found in %s"
    PLUGIN_LOADED = "Loaded plugin %s"
    PLUGIN_LOAD_FAILED = "Failed to load plugin %s"
    PLUGIN_UNLOADED = "Unloaded plugin %s"
    PLUGIN_UNLOAD_FAILED = "Plugin %s raised while unloading"
    PLUGIN_RELOAD_ALL = "Reloading %d plugin(s)"

    # Batching
    BATCH_SENT = "Sent items %d-%d of %d"

    # Cogs
    MODERATION_ACTION = "%s %s in guild %s by %s: %s"
    CHANNEL_RECREATED = "Recreated channel #%s in guild %s"
    MESSAGE_DELETE_FAILED = "Could not delete message %s: %s"
    DM_FALLBACK = "DM to %s failed; posting in channel %s instead"
    RECIPIENT_ID_UNKNOWN = "No user with id %s; falling back to a name search"
    WEBHOOK_CREATED = "Created relay webhook in channel %s"
    PRESENCE_CHANGED = "Presence changed: status=%s activity=%r"
    AVATAR_CHANGED = "Bot avatar changed by %s"
    UPDATE_STEP = "Update step %s finished with code %s"
    ADMIN_SHUTDOWN_REQUESTED = "Shutdown requested by %s"


class DiscordUIMessages:
    """User-facing Discord messages."""

    # ─────────────────────────────────────────────────────────────────
    # Errors and refusals
    # ─────────────────────────────────────────────────────────────────

    UNKNOWN_COMMAND = "Unknown command!"
    ERROR_MISSING_PERMISSIONS = "❌ You need the {permissions} permission to use this command."
    ERROR_BOT_MISSING_PERMISSIONS = "❌ I need the {permissions} permission to do that."
    ERROR_NOT_ALLOWED = "❌ You do not have permission to use this command."
    ERROR_MISSING_ARGUMENT = "❌ Missing required argument: `{param_name}`."
    ERROR_INVALID_ARGUMENT = "❌ Invalid argument."
    ERROR_USAGE = "Usage: `{usage}`"
    ERROR_DOMAIN = "❌ {message}"
    ERROR_FORBIDDEN = "❌ Discord refused that action: I lack the permissions for it."
    ERROR_COMMAND_FAILED = "❌ Command failed: {message}"
    STATE_SERVER_ONLY = "This command can only be used in a server."

    # ─────────────────────────────────────────────────────────────────
    # Voice
    # ─────────────────────────────────────────────────────────────────

    VOICE_JOINED = "Joined voice channel: **{channel}**"
    VOICE_STOPPED = "Stopped audio and left the voice channel."
    VOICE_NOT_CONNECTED = "I am not in a voice channel."
    PLAYBACK_FAILED = "❌ Failed to play {name}: {reason}"
    NOW_PLAYING_SOUND = "🔊 Now playing soundboard clip: `{name}`"
    NOW_PLAYING_VIDEO_AUDIO = "🎞️ Now playing audio from local video: `{name}`"
    NOW_PLAYING_VIDEO_AUDIO_IN = "🎞️ Now playing audio from local video in **{channel}**: `{name}`"
    NOW_PLAYING_YOUTUBE = "▶️ Now playing YouTube audio from `{url}`"
    NOW_PLAYING_LIVE = "📻 Now playing live stream from `{url}`"
    NOW_PLAYING_ITEM = "▶️ Now playing **{title}**"
    QUEUED_ITEM = "➕ Queued **{title}** at position {position}."
    SKIPPED_TO = "⏭️ Skipped. Now playing **{title}**"
    SKIPPED_QUEUE_EMPTY = "⏭️ Skipped. The queue is empty."
    NOTHING_PLAYING = "Nothing is playing."
    QUEUE_HEADER = "**Now playing:** {current}"
    QUEUE_EMPTY = "The queue is empty."
    QUEUE_ENTRY = "`{position}.` {title}"
    SOUNDS_LIST = "Available soundboard clips:\n{files}"
    SOUNDS_EMPTY = "No soundboard clips found in `{directory}`."
    VIDEOS_LIST = "Available videos:\n{files}"
    VIDEOS_EMPTY = "No video files found in `{directory}`."
    SHARESCREEN_INFO = (
        "I've joined your voice channel. Please note that as a bot, I cannot directly share "
        "my screen or view yours. Screen sharing is a user-to-user feature on Discord."
    )
    SPEAKERPHONE_INFO = (
        "I've joined your voice channel{mention}. As a bot, I don't have a \"speakerphone\" "
        "feature in the traditional sense. I can play audio, but I cannot act as an "
        "intermediary for voice communication between users like a speakerphone would."
    )

    # ─────────────────────────────────────────────────────────────────
    # Phone
    # ─────────────────────────────────────────────────────────────────

    PHONE_USAGE = "Please specify a subcommand: `call` or `hangup`"
    PHONE_INCOMING_TITLE = "📞 Incoming Call"
    PHONE_INCOMING_DESCRIPTION = "**{caller}** is calling you!"
    PHONE_INCOMING_FIELD = "To Answer"
    PHONE_INCOMING_VALUE = "Click here to join the call: {url}"
    PHONE_INCOMING_FOOTER = "Call from {caller} • Click the link to join"
    PHONE_OUTGOING_TITLE = "📞 Outgoing Call"
    PHONE_OUTGOING_DESCRIPTION = "Calling **{callee}**..."
    PHONE_OUTGOING_VALUE = "I've joined **{channel}** and sent them an invite."
    PHONE_OUTGOING_FOOTER = "Calling {callee} • Waiting for answer"
    PHONE_DM_FAILED = (
        "Failed to send DM to {callee}. They might have DMs disabled. "
        "Posting invite in this channel instead."
    )
    PHONE_CALLING_IN_CHANNEL = "📞 {callee}, {caller} is calling you!"
    PHONE_ENDED_TITLE = "📞 Call Ended"
    PHONE_ENDED_DESCRIPTION = "The call has been ended."
    PHONE_NOT_IN_CALL = "I am not currently in a call."

    # ─────────────────────────────────────────────────────────────────
    # Moderation
    # ─────────────────────────────────────────────────────────────────

    NO_REASON = "No reason provided."
    MEMBER_KICKED = "{member} has been kicked. Reason: {reason}"
    MEMBER_BANNED = "{member} has been banned. Reason: {reason}"
    MEMBER_TIMED_OUT = "{member} has been timed out for {duration}. Reason: {reason}"
    MEMBER_TIMEOUT_REMOVED = "{member}'s timeout has been removed. Reason: {reason}"
    MEMBER_VOICE_MUTED = "{member} has been voice muted. Reason: {reason}"
    MEMBER_VOICE_UNMUTED = "{member} has been voice unmuted. Reason: {reason}"
    ROLE_ADDED = "Added role **{role}** to {member}."
    ROLE_REMOVED = "Removed role **{role}** from {member}."
    RANK_HEADER = "**Role assignment for {member}:**"
    RANK_ADDED = "✅ Added: {roles}"
    RANK_FAILED = "❌ Failed: {roles}"
    RANK_NOTHING = "No roles were assigned or found."
    RANK_REASON_NOT_FOUND = "not found"
    RANK_REASON_TOO_HIGH = "bot cannot manage"
    RANK_REASON_ALREADY = "already has"
    RANK_REASON_FAILED = "failed to add"

    # ─────────────────────────────────────────────────────────────────
    # Channels
    # ─────────────────────────────────────────────────────────────────

    BATCH_MESSAGE = "Message {index}/{total}"
    BATCH_MESSAGE_NOTIFY = "@everyone Message {index}/{total}"
    MESSAGES_CREATED = "Created {count} messages."
    CHANNELS_CREATED = "Created {count} new text channels."
    CHANNEL_NUKED = "🌋 Channel nuked by {author}!"
    CHANNEL_FLOOD_STARTING = "Channel nuked by {author}! Starting flood..."
    CHANNEL_FLOOD_COMPLETE = "✅ Nuke flood complete!"
    CHANNEL_CLEANED = "🧹 Channel cleaned by {author}!"
    BOT_MESSAGES_DELETED = "Deleted {count} bot messages."
    BOT_MESSAGES_NONE = "No bot messages found in the last {limit} messages."
    SAY_SENT = "Message sent!"
    ALERT = "🚨 **ALERT from {author}:** {message}"
    ALERT_SENT = "Alert sent to {channel}."

    # ─────────────────────────────────────────────────────────────────
    # Messaging
    # ─────────────────────────────────────────────────────────────────

    DM_SENT = "Direct message sent to {user}."
    DM_FALLBACK_NOTICE = (
        "Failed to send a direct message to {user}. They might have DMs disabled. "
        "Sending message in this channel instead as a fallback."
    )
    DM_FALLBACK_MESSAGE = "{user}, you have a message from {author}: {message}"
    RELAY_SENT = "Successfully sent a message as {user}."
    RELAY_WEBHOOK_NAME = "Toolbox Relay"

    # ─────────────────────────────────────────────────────────────────
    # Plugins
    # ─────────────────────────────────────────────────────────────────

    PLUGIN_LIST_HEADER = "**Plugins:**"
    PLUGIN_LIST_EMPTY = "No plugins found in `{directory}`."
    PLUGIN_RELOAD_HEADER = "**Plugin Reload Results:**"
    PLUGIN_RELOAD_NOTHING = "No plugins are loaded."

    # ─────────────────────────────────────────────────────────────────
    # Presence
    # ─────────────────────────────────────────────────────────────────

    PRESENCE_OVERVIEW = (
        "**Bot Presence Control:**\n"
        "Current Status: `{status}`\n"
        "Current Activity: {activity}\n\n"
        "**Usage:**\n"
        "`{prefix}control status <online|idle|dnd|invisible>`\n"
        "`{prefix}control activity <playing|streaming|listening|watching|competing> <name> [url]`\n"
        "`{prefix}control clear` - Clears custom activity."
    )
    PRESENCE_NO_ACTIVITY = "No custom activity set."
    PRESENCE_ACTIVITY = "Type: `{kind}`, Name: `{name}`"
    PRESENCE_STATUS_SET = "✅ Bot status set to `{status}`."
    PRESENCE_ACTIVITY_SET = "✅ Bot activity set to `{kind}` `{name}`{url}."
    PRESENCE_CLEARED = "✅ Bot custom activity cleared."
    AVATAR_UPDATED = "✅ Avatar updated."
    AVATAR_TITLE = "{user}'s avatar"

    # ─────────────────────────────────────────────────────────────────
    # Downloads
    # ─────────────────────────────────────────────────────────────────

    DOWNLOAD_STARTING = "Starting download from `{url}`..."
    DOWNLOAD_PROGRESS = "Downloading: `{line}`"
    DOWNLOAD_DONE = "✅ Downloaded `{name}` to `{directory}`."
    DOWNLOAD_DONE_NO_FILE = "✅ Download finished in `{directory}`."
    DOWNLOAD_TOO_LARGE = "The file is too large to upload here; it is stored at `{path}`."
    DOWNLOAD_FAILED = "❌ Download failed: {reason}"
    DOWNLOAD_INTERRUPTED = "❌ Download stopped unexpectedly."
    NPM_STARTING = "Starting download for `{name}@{version}` from npm..."
    NPM_DONE = "✅ Package `{name}@{version}` downloaded to `{directory}`."

    # ─────────────────────────────────────────────────────────────────
    # Admin
    # ─────────────────────────────────────────────────────────────────

    UPDATE_STARTING = "**Starting update process...**\n1. Pulling latest changes..."
    UPDATE_PULL_OUTPUT = "Pull output:"
    UPDATE_PULL_FAILED = "❌ Pull failed with exit code {code}."
    UPDATE_NO_CHANGES = "No new code changes. Skipping dependency update. Reloading plugins..."
    UPDATE_INSTALLING = "2. Updating dependencies..."
    UPDATE_INSTALL_OUTPUT = "Install output:"
    UPDATE_INSTALL_FAILED = "❌ Dependency update failed with exit code {code}."
    UPDATE_RELOADING = "3. Reloading all loaded plugins..."
    UPDATE_COMPLETE = (
        "✅ **Update complete!** For core bot changes to take effect, a manual restart might be required."
    )
    SUCCESS_SYNCED_GLOBAL = "✅ Synced {count} commands globally."
    SUCCESS_SYNCED_GUILD = "✅ Synced {count} commands to this server."
    STATUS_TITLE = "Bot Status"
    SHUTDOWN_STARTING = "👋 Shutting down..."

    # ─────────────────────────────────────────────────────────────────
    # Info
    # ─────────────────────────────────────────────────────────────────

    HELP_HEADER = "**Available Commands (Prefix: `{prefix}`):**"
    HELP_ENTRY = "`{prefix}{name}`{aliases} - {description}"
    HELP_NO_DESCRIPTION = "No description."
    TEST_SUCCESS = "Test successful!"
    DICE_RESULT = "🎲 Rolling {count}d{sides}: [{values}] Total: **{total}**"
    PONG = "🏓 Pong! {latency_ms} ms"
