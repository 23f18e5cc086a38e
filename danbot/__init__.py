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
"""A client for reporting a Discord bot's stats to DanBot Hosting."""

from __future__ import annotations

__all__: list[str] = [
    "BadRequestError",
    "Client",
    "ClientInfo",
    "ClientNotReadyError",
    "ClientSource",
    "CloudflareRestrictedError",
    "DanBotClient",
    "DanBotError",
    "ErrorCode",
    "ExtraOptions",
    "IncrementOptions",
    "InternalServerError",
    "InvalidDiscordTokenError",
    "InvalidUserCountError",
    "LeanClientSource",
    "RateLimitError",
    "ReadyState",
    "RichClientSource",
    "TokenSource",
    "UnknownError",
    "UserCount",
    "UserDefinedSource",
    "clients",
    "discord",
    "errors",
    "from_hikari_bot",
    "normalize",
    "resolve_user_count",
    "source_from_options",
    "stats",
    "user_count",
]

from . import clients
from . import discord
from . import errors
from . import stats
from . import user_count
from .clients import Client
from .clients import ClientSource
from .clients import LeanClientSource
from .clients import RichClientSource
from .clients import TokenSource
from .clients import UserDefinedSource
from .clients import from_hikari_bot
from .clients import normalize
from .clients import source_from_options
from .discord import ClientInfo
from .errors import BadRequestError
from .errors import ClientNotReadyError
from .errors import CloudflareRestrictedError
from .errors import DanBotError
from .errors import ErrorCode
from .errors import InternalServerError
from .errors import InvalidDiscordTokenError
from .errors import InvalidUserCountError
from .errors import RateLimitError
from .errors import UnknownError
from .stats import DanBotClient
from .stats import ExtraOptions
from .stats import IncrementOptions
from .stats import ReadyState
from .user_count import UserCount
from .user_count import resolve_user_count
