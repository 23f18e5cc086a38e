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
"""Lookups made against Discord's REST API on behalf of a bot token."""
from __future__ import annotations

__all__: list[str] = ["ClientInfo", "fetch_guild_count", "fetch_user_info"]

import logging
import typing
from collections import abc as collections

import aiohttp

from . import _internal
from . import errors

if typing.TYPE_CHECKING:
    import hikari


_LOGGER = logging.getLogger(_internal.LOGGER_NAME + ".discord")


class ClientInfo(typing.NamedTuple):
    """Display identity of a bot account."""

    id: str
    """ID of the bot's user."""

    username: str
    """The bot's username."""

    avatar: typing.Optional[str]
    """Hash of the bot's avatar, if set."""

    @classmethod
    def from_payload(cls, payload: collections.Mapping[str, typing.Any], /) -> ClientInfo:
        """Build a client info from a raw user payload.

        Parameters
        ----------
        payload
            The raw user payload with `"id"`, `"username"` and `"avatar"` keys.

        Returns
        -------
        ClientInfo
            The built client info.
        """
        return cls(id=str(payload["id"]), username=payload["username"], avatar=payload.get("avatar"))

    @classmethod
    def from_user(cls, user: hikari.User, /) -> ClientInfo:
        """Build a client info from a Hikari user object."""
        return cls(id=str(user.id), username=user.username, avatar=user.avatar_hash)

    def to_payload(self) -> dict[str, typing.Optional[str]]:
        """Serialise this as the stats service's `clientInfo` field."""
        return {"id": self.id, "username": self.username, "avatar": self.avatar}


def _headers(token: str, /) -> dict[str, str]:
    return {
        "Authorization": f"Bot {token}",
        "Content-Type": "application/json",
        "User-Agent": _internal.USER_AGENT,
    }


def _is_unauthorized(status: int, payload: typing.Any, /) -> bool:
    if status == 401:
        return True

    return isinstance(payload, collections.Mapping) and payload.get("message") == _internal.UNAUTHORIZED_DISCORD_ERROR


async def _read_json(response: aiohttp.ClientResponse, url: str, /) -> typing.Any:
    try:
        return await response.json(content_type=None)

    except ValueError as exc:
        if response.status == 401:
            return None

        if response.status >= 300:
            raise errors.classify(
                errors.ErrorCode.UNKNOWN, f"Discord returned an unexpected response to {url}", response.status
            ) from exc

        raise errors.classify(
            errors.ErrorCode.CLOUDFLARE_RESTRICTED, f"Discord returned a non-JSON response to {url}", response.status
        ) from exc


async def _get_json(
    session: aiohttp.ClientSession,
    url: str,
    token: str,
    /,
    *,
    params: typing.Optional[dict[str, str]] = None,
) -> typing.Any:
    try:
        async with session.get(url, headers=_headers(token), params=params) as response:
            status = response.status
            payload = await _read_json(response, url)

    except aiohttp.ClientError as exc:
        raise errors.classify(
            errors.ErrorCode.CLOUDFLARE_RESTRICTED, f"The request to {url} was blocked before it reached Discord"
        ) from exc

    if _is_unauthorized(status, payload):
        raise errors.classify(
            errors.ErrorCode.INVALID_DISCORD_TOKEN, "The Discord token provided was rejected by Discord", status
        )

    if status >= 300:
        raise errors.classify(errors.ErrorCode.UNKNOWN, f"Discord returned an unexpected response to {url}", status)

    return payload


async def fetch_user_info(
    session: aiohttp.ClientSession, token: str, /, *, base_url: str = _internal.DISCORD_URL
) -> ClientInfo:
    """Fetch the identity of the bot a token belongs to.

    Parameters
    ----------
    session
        The session to make the request with.
    token
        The bot's token.
    base_url
        Base URL of the Discord REST API.

    Returns
    -------
    ClientInfo
        The bot's identity.

    Raises
    ------
    danbot.errors.InvalidDiscordTokenError
        If Discord rejected the token.
    danbot.errors.UnknownError
        If Discord returned any other error response.
    danbot.errors.CloudflareRestrictedError
        If the request was blocked before it reached Discord.
    """
    _LOGGER.debug("Fetching the current bot user")
    payload = await _get_json(session, f"{base_url}/users/@me", token)
    return ClientInfo.from_payload(payload)


async def fetch_guild_count(
    session: aiohttp.ClientSession, token: str, /, *, base_url: str = _internal.DISCORD_URL
) -> int:
    """Count the guilds a bot is in.

    This pages through the "list current user guilds" endpoint, one request
    at a time, until a page with less than 200 guilds is returned.

    Parameters
    ----------
    session
        The session to make the requests with.
    token
        The bot's token.
    base_url
        Base URL of the Discord REST API.

    Returns
    -------
    int
        How many guilds the bot is in.

    Raises
    ------
    danbot.errors.InvalidDiscordTokenError
        If Discord rejected the token.
    danbot.errors.UnknownError
        If Discord returned any other error response.
    danbot.errors.CloudflareRestrictedError
        If the request was blocked before it reached Discord.
    """
    url = f"{base_url}/users/@me/guilds"
    params = {"limit": str(_internal.GUILD_PAGE_LIMIT)}
    total = 0
    pages = 0

    while True:
        page: list[dict[str, typing.Any]] = await _get_json(session, url, token, params=params.copy())
        pages += 1
        total += len(page)

        if len(page) < _internal.GUILD_PAGE_LIMIT:
            break

        # Discord pages by guild ID so the next page starts after this page's last guild.
        params["after"] = str(page[-1]["id"])

    _LOGGER.debug("Counted %s guilds over %s page(s)", total, pages)
    return total
