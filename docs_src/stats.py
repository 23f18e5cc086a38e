# -*- coding: utf-8 -*-
# DanBot Examples - A collection of examples for DanBot.
# Written in 2023 by Faster Speeding Lucina@lmbyrne.dev
#
# To the extent possible under law, the author(s) have dedicated all copyright
# and related and neighboring rights to this software to the public domain worldwide.
# This software is distributed without any warranty.
#
# You should have received a copy of the CC0 Public Domain Dedication along with this software.
# If not, see <https://creativecommons.org/publicdomain/zero/1.0/>.

# pyright: reportUnusedExpression=none
# pyright: reportUnusedVariable=none
import datetime

import hikari

import danbot


async def hikari_bot(bot: hikari.GatewayBot):
    client = danbot.DanBotClient("API_KEY", danbot.from_hikari_bot(bot, "BOT_TOKEN"))
    await client.post()


async def token_only():
    source = danbot.TokenSource("BOT_TOKEN", user_count="RANDOM")
    client = danbot.DanBotClient("API_KEY", source)
    await client.post()


async def user_defined():
    source = danbot.UserDefinedSource(
        id="123456789",
        client_info=danbot.ClientInfo(id="123456789", username="Meow", avatar=None),
        guild_count=42,
        user_count=(100, 200),
    )
    options = danbot.ExtraOptions(
        guild_increment=danbot.IncrementOptions(by=30, timeout=datetime.timedelta(minutes=5)),
        user_increment=danbot.IncrementOptions(by=2, timeout=datetime.timedelta(hours=1)),
    )
    client = danbot.DanBotClient("API_KEY", source, options=options)
    await client.post()


async def autopost(bot: hikari.GatewayBot):
    options = danbot.ExtraOptions(autopost_timeout=datetime.timedelta(minutes=30))

    async with danbot.DanBotClient("API_KEY", danbot.from_hikari_bot(bot, "BOT_TOKEN"), options=options):
        await bot.join()


async def handling_errors(client: danbot.DanBotClient):
    try:
        await client.post()

    except danbot.RateLimitError:
        ...  # Try again later.

    except danbot.DanBotError as exc:
        exc.code  # type: danbot.ErrorCode
        exc.status  # type: int | None
