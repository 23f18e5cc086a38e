# -*- coding: utf-8 -*-
# BSD 3-Clause License
#
# Copyright (c) 2020-2023, Faster Speeding
# All rights reserved.
#
# Redistribution and use in source and binary forms, with or without
# modification, are permitted provided that the following conditions are met:
#
# * Redistributions of source code must retain the above copyright notice, this
#   list of conditions and the following disclaimer.
#
# * Redistributions in binary form must reproduce the above copyright notice,
#   this list of conditions and the following disclaimer in the documentation
#   and/or other materials provided with the distribution.
#
# * Neither the name of the copyright holder nor the names of its
#   contributors may be used to endorse or promote products derived from
#   this software without specific prior written permission.
#
# THIS SOFTWARE IS PROVIDED BY THE COPYRIGHT HOLDERS AND CONTRIBUTORS "AS IS"
# AND ANY EXPRESS OR IMPLIED WARRANTIES, INCLUDING, BUT NOT LIMITED TO, THE
# IMPLIED WARRANTIES OF MERCHANTABILITY AND FITNESS FOR A PARTICULAR PURPOSE ARE
# DISCLAIMED. IN NO EVENT SHALL THE COPYRIGHT HOLDER OR CONTRIBUTORS BE LIABLE
# FOR ANY DIRECT, INDIRECT, INCIDENTAL, SPECIAL, EXEMPLARY, OR CONSEQUENTIAL
# DAMAGES (INCLUDING, BUT NOT LIMITED TO, PROCUREMENT OF SUBSTITUTE GOODS OR
# SERVICES; LOSS OF USE, DATA, OR PROFITS; OR BUSINESS INTERRUPTION) HOWEVER
# CAUSED AND ON ANY THEORY OF LIABILITY, WHETHER IN CONTRACT, STRICT LIABILITY,
# OR TORT (INCLUDING NEGLIGENCE OR OTHERWISE) ARISING IN ANY WAY OUT OF THE USE
# OF THIS SOFTWARE, EVEN IF ADVISED OF THE POSSIBILITY OF SUCH DAMAGE.
"""Internal functions, types and constants used in DanBot."""
from __future__ import annotations

__all__: list[str] = []

import datetime
import typing

import hikari

BASE_URL = "https://danbot.host/api"
"""Base URL of the DanBot Hosting API."""

BOT_STATS_PATH = "/bot/{}/stats"
"""Path of a bot's stats endpoint relative to `BASE_URL`."""

NODE_STATUS_URL = "https://status.danbot.host/json/stats.json"
"""URL of the DanBot Hosting node status document."""

DISCORD_URL = "https://discord.com/api/v9"
"""Base URL of the Discord REST API."""

UNAUTHORIZED_DISCORD_ERROR = "401: Unauthorized"
"""Message Discord returns when a token is rejected."""

GUILD_PAGE_LIMIT = 200
"""Maximum amount of guilds Discord returns per "list my guilds" page."""

USER_AGENT = "DanBot.py (https://danbot.host)"

LOGGER_NAME = "danbot"


class CacheBotProto(hikari.CacheAware, hikari.ShardAware, typing.Protocol):
    """Protocol of a cache-enabled Hikari Gateway bot."""


def to_seconds(value: typing.Union[datetime.timedelta, int, float], /, *, name: str) -> float:
    """Normalise an interval to seconds.

    Raises
    ------
    ValueError
        If the interval is less than 1 second.
    """
    if isinstance(value, datetime.timedelta):
        seconds = value.total_seconds()

    else:
        seconds = float(value)

    if seconds < 1:
        raise ValueError(f"{name} cannot be under 1 second")

    return seconds
