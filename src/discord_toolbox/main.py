#!/usr/bin/env python3
"""Main entry point for discord-toolbox."""

from __future__ import annotations

import json
import logging
import logging.config
import sys
from pathlib import Path

from discord_toolbox.domain.shared.messages import LogTemplates

_LOGGING_CONFIG_PATH = Path(__file__).resolve().parents[2] / "logging_config.json"


def setup_logging(log_level: str = "INFO") -> None:
    resolved_level = getattr(logging, log_level.upper(), logging.INFO)

    try:
        with open(_LOGGING_CONFIG_PATH) as f:
            config = json.load(f)
        logging.config.dictConfig(config)
    except (FileNotFoundError, json.JSONDecodeError, ValueError) as e:
        logging.basicConfig(
            level=resolved_level,
            format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        logging.getLogger(__name__).warning(LogTemplates.LOGGING_CONFIG_FALLBACK, _LOGGING_CONFIG_PATH, e)

    logging.getLogger().setLevel(resolved_level)


def check_executables(logger: logging.Logger, executables: dict[str, str]) -> bool:
    """Resolve each required tool; log and return False on the first one missing."""
    from discord_toolbox.infrastructure.media.ytdlp_tool import resolve_executable

    for name, configured in executables.items():
        resolved = resolve_executable(configured)
        if resolved is None:
            logger.error(LogTemplates.STARTUP_MISSING_EXECUTABLE, name, configured)
            return False
        logger.info(LogTemplates.STARTUP_EXECUTABLE_FOUND, name, resolved)
    return True


def main() -> int:
    from discord_toolbox.config.settings import get_settings

    settings = get_settings()
    setup_logging(settings.log_level)

    logger = logging.getLogger(__name__)

    token_value = settings.discord.token.get_secret_value()
    if not token_value:
        logger.error(LogTemplates.STARTUP_MISSING_TOKEN)
        return 1
    if settings.discord.application_id is None:
        logger.error(LogTemplates.STARTUP_MISSING_APPLICATION_ID)
        return 1
    if not check_executables(
        logger, {"yt-dlp": settings.audio.ytdlp_path, "ffmpeg": settings.audio.ffmpeg_path}
    ):
        return 1

    logger.info(LogTemplates.BOT_STARTING, settings.environment)

    from discord_toolbox.config.container import create_container
    from discord_toolbox.infrastructure.discord.bot import create_bot

    container = create_container(settings)
    bot = create_bot(container, settings)

    try:
        bot.run_with_graceful_shutdown(token_value)
        logger.info(LogTemplates.BOT_STOPPED)
        return 0
    except KeyboardInterrupt:
        logger.info(LogTemplates.BOT_KEYBOARD_INTERRUPT)
        return 0
    except Exception as e:
        logger.exception(LogTemplates.BOT_FATAL_ERROR, e)
        return 1


def cli() -> None:
    """Console script entry point (used by pyproject.toml [project.scripts])."""
    sys.exit(main())


if __name__ == "__main__":
    cli()  # pragma: no cover
