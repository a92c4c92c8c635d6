"""
Bot Instance Singleton

Provides a single shared aiogram Bot used for operator alerts.
The bot is optional: without TOKEN and ADMIN_ID_LIST no instance is created.

Usage:
    from bot_instance import get_bot, is_bot_configured
    if is_bot_configured():
        await get_bot().send_message(chat_id, text)
"""

from aiogram import Bot
from aiogram.client.default import DefaultBotProperties
from aiogram.enums import ParseMode

import config

_bot_instance = None


def is_bot_configured() -> bool:
    return bool(config.TOKEN) and bool(config.ADMIN_ID_LIST)


def get_bot() -> Bot:
    """
    Get the singleton Bot instance.

    Returns:
        Bot: The shared Bot instance
    """
    global _bot_instance
    if _bot_instance is None:
        _bot_instance = Bot(
            token=config.TOKEN,
            default=DefaultBotProperties(parse_mode=ParseMode.HTML)
        )
    return _bot_instance


async def close_bot():
    """
    Close the Bot instance session.

    Called from the application lifespan on shutdown.
    """
    global _bot_instance
    if _bot_instance is not None:
        await _bot_instance.session.close()
        _bot_instance = None
