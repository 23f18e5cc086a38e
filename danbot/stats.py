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
"""Client used for reporting a bot's stats to DanBot Hosting."""
from __future__ import annotations

__all__: list[str] = ["DanBotClient", "ExtraOptions", "IncrementOptions", "ReadyState"]

import asyncio
import datetime
import enum
import logging
import math
import typing
from collections import abc as collections

import aiohttp

from . import _internal
from . import clients
from . import discord
from . import errors

if typing.TYPE_CHECKING:
    import types

    from typing_extensions import Self


_LOGGER = logging.getLogger(_internal.LOGGER_NAME + ".stats")
_BAD_REQUEST_STATUS = 400
_OK_STATUS = 200
_RATE_LIMITED_STATUS = 429

_IntervalT = typing.Union[datetime.timedelta, int, float]


class IncrementOptions(typing.NamedTuple):
    """Configuration of a periodic count increment."""

    by: int
    """How much the count should be incremented by each time."""

    timeout: _IntervalT
    """How often the count should be incremented in seconds."""


class ExtraOptions:
    """Extra configuration for a [DanBotClient][danbot.stats.DanBotClient]."""

    __slots__ = (
        "_autopost_timeout",
        "_fetch_guilds_every_post",
        "_fetch_guilds_first_time",
        "_guild_increment",
        "_user_increment",
    )

    def __init__(
        self,
        *,
        fetch_guilds_first_time: bool = False,
        fetch_guilds_every_post: bool = False,
        guild_increment: typing.Optional[IncrementOptions] = None,
        user_increment: typing.Optional[IncrementOptions] = None,
        autopost_timeout: typing.Optional[_IntervalT] = None,
    ) -> None:
        """Initialise extra options.

        Parameters
        ----------
        fetch_guilds_first_time
            Whether the guild count should be re-fetched from Discord once
            before the first post.

            This only applies to clients built from a token.
        fetch_guilds_every_post
            Whether the guild count should be re-fetched from Discord before
            every post.

            This only applies to clients built from a token.
        guild_increment
            Periodically increment the guild count of a static client.
        user_increment
            Periodically increment the user count of a static client.
        autopost_timeout
            How often stats should be automatically posted once the client's
            been opened, in seconds.

        Raises
        ------
        ValueError
            If any of the intervals are less than 1 second.
        """
        self._autopost_timeout = (
            None if autopost_timeout is None else _internal.to_seconds(autopost_timeout, name="autopost_timeout")
        )
        self._fetch_guilds_every_post = fetch_guilds_every_post
        self._fetch_guilds_first_time = fetch_guilds_first_time
        self._guild_increment = _validate_increment(guild_increment, name="guild_increment")
        self._user_increment = _validate_increment(user_increment, name="user_increment")

    def __repr__(self) -> str:
        return (
            f"ExtraOptions(fetch_guilds_first_time={self._fetch_guilds_first_time!r}, "
            f"fetch_guilds_every_post={self._fetch_guilds_every_post!r}, guild_increment={self._guild_increment!r}, "
            f"user_increment={self._user_increment!r}, autopost_timeout={self._autopost_timeout!r})"
        )

    @property
    def autopost_timeout(self) -> typing.Optional[float]:
        """How often stats should be automatically posted in seconds."""
        return self._autopost_timeout

    @property
    def fetch_guilds_every_post(self) -> bool:
        """Whether the guild count is re-fetched before every post."""
        return self._fetch_guilds_every_post

    @property
    def fetch_guilds_first_time(self) -> bool:
        """Whether the guild count is re-fetched before the first post."""
        return self._fetch_guilds_first_time

    @property
    def guild_increment(self) -> typing.Optional[IncrementOptions]:
        """Periodic guild count increment, with its timeout in seconds."""
        return self._guild_increment

    @property
    def user_increment(self) -> typing.Optional[IncrementOptions]:
        """Periodic user count increment, with its timeout in seconds."""
        return self._user_increment


def _validate_increment(
    increment: typing.Optional[IncrementOptions], /, *, name: str
) -> typing.Optional[IncrementOptions]:
    if increment is None:
        return None

    return IncrementOptions(increment.by, _internal.to_seconds(increment.timeout, name=f"{name}.timeout"))


class ReadyState(enum.Enum):
    """State of a client's normalisation."""

    PENDING = enum.auto()
    """The client is still being normalised."""

    READY = enum.auto()
    """The client's been normalised."""

    FAILED = enum.auto()
    """Normalising the client failed."""


def _error_message(body: typing.Any, /) -> typing.Optional[str]:
    if not isinstance(body, collections.Mapping):
        return None

    message = body.get("message") or body.get("error")
    return str(message) if message else None


def _handle_response(status: int, body: typing.Any, /) -> typing.Any:
    if status == _OK_STATUS:
        _LOGGER.info("Posted bot's stats to DanBot Hosting")
        return body

    if status >= 500:
        raise errors.classify(
            errors.ErrorCode.INTERNAL_SERVER_ERROR, "An internal DanBot Hosting server error occurred", status
        )

    message = _error_message(body)
    if status == _BAD_REQUEST_STATUS and message:
        raise errors.classify(errors.ErrorCode.BAD_REQUEST, message, status)

    if status == _RATE_LIMITED_STATUS and message:
        raise errors.classify(errors.ErrorCode.RATE_LIMIT, message, status)

    if status in (_BAD_REQUEST_STATUS, _RATE_LIMITED_STATUS):
        _LOGGER.warning("DanBot Hosting returned a %s with no error message: %r", status, body)
        return body

    raise errors.classify(errors.ErrorCode.UNKNOWN, "An unknown error occurred", status)


async def _read_json(response: aiohttp.ClientResponse, /) -> typing.Any:
    try:
        return await response.json(content_type=None)

    except ValueError as exc:
        # A 400 or 429 with no readable error message is handled as non-fatal.
        if response.status in (_BAD_REQUEST_STATUS, _RATE_LIMITED_STATUS):
            return None

        raise errors.classify(
            errors.ErrorCode.CLOUDFLARE_RESTRICTED, "DanBot Hosting returned a non-JSON response", response.status
        ) from exc


def _serialise_count(count: typing.Union[int, float], /) -> typing.Optional[int]:
    # An unbounded count is sent as null.
    if isinstance(count, float) and math.isinf(count):
        return None

    return int(count)


class DanBotClient:
    """Client used for reporting a bot's stats to DanBot Hosting.

    The bot's [Client][danbot.clients.Client] view is normalised in the
    background as soon as this is initialised; calls which need it wait for
    this to finish.

    Examples
    --------
    ```py
    async def on_ready(bot: LeanRuntime) -> None:
        client = danbot.DanBotClient("API_KEY", danbot.LeanClientSource(bot))
        await client.post()
    ```
    """

    __slots__ = (
        "_api_key",
        "_autopost_task",
        "_base_url",
        "_client",
        "_discord_url",
        "_increment_tasks",
        "_is_first_post",
        "_normalise_task",
        "_options",
        "_owns_session",
        "_ready",
        "_rng",
        "_session",
        "_state",
        "_status_url",
        "_user_agent",
    )

    def __init__(
        self,
        api_key: str,
        source: clients.ClientSource,
        /,
        *,
        options: typing.Optional[ExtraOptions] = None,
        session: typing.Optional[aiohttp.ClientSession] = None,
        base_url: str = _internal.BASE_URL,
        discord_url: str = _internal.DISCORD_URL,
        status_url: str = _internal.NODE_STATUS_URL,
        rng: typing.Optional[typing.Any] = None,
        user_agent: typing.Optional[str] = None,
    ) -> None:
        """Initialise a DanBot client.

        Parameters
        ----------
        api_key
            The DanBot Hosting API key used to post stats.
        source
            The declared source the bot's client view should be built from.
        options
            Extra configuration for this client.
        session
            The aiohttp session to make requests with.

            If left as [None][] then this client will create and own a session.
        base_url
            Base URL of the DanBot Hosting API.
        discord_url
            Base URL of the Discord REST API.
        status_url
            URL of the DanBot Hosting node status document.
        rng
            Source of randomness used to resolve random user count policies.
        user_agent
            Override the standard user agent used during requests.

        Raises
        ------
        RuntimeError
            If this is called in an environment with no running event loop.
        """
        loop = asyncio.get_running_loop()
        self._api_key = clients.Secret(api_key)
        self._autopost_task: typing.Optional[asyncio.Task[None]] = None
        self._base_url = base_url
        self._client: typing.Optional[clients.Client] = None
        self._discord_url = discord_url
        self._increment_tasks: list[asyncio.Task[None]] = []
        self._is_first_post = True
        self._options = options or ExtraOptions()
        self._owns_session = session is None
        self._ready: asyncio.Future[clients.Client] = loop.create_future()
        self._rng = rng
        self._session = session
        self._state = ReadyState.PENDING
        self._status_url = status_url
        self._user_agent = user_agent or _internal.USER_AGENT
        self._normalise_task = asyncio.create_task(self._normalise(source))

    async def __aenter__(self) -> Self:
        await self.open()
        return self

    async def __aexit__(
        self,
        exc_type: typing.Optional[type[BaseException]],
        exc_val: typing.Optional[BaseException],
        exc_tb: typing.Optional[types.TracebackType],
    ) -> None:
        await self.close()

    @property
    def client(self) -> clients.Client:
        """The bot's normalised client view.

        Raises
        ------
        RuntimeError
            If the client hasn't been normalised successfully yet.
        """
        if self._client is None:
            raise RuntimeError("Client isn't ready yet")

        return self._client

    @property
    def is_autoposting(self) -> bool:
        """Whether this client is automatically posting stats."""
        return self._autopost_task is not None

    @property
    def options(self) -> ExtraOptions:
        """Extra configuration for this client."""
        return self._options

    @property
    def state(self) -> ReadyState:
        """State of the bot's client view normalisation."""
        return self._state

    @property
    def user_agent(self) -> str:
        """User agent used for requests."""
        return self._user_agent

    def get_session(self) -> aiohttp.ClientSession:
        """Get the aiohttp session requests should be made with.

        Raises
        ------
        RuntimeError
            * If this is called in an environment with no running event loop.
            * If a session passed to this client has been closed.
        """
        # Asserts that this is only called within a running event loop.
        asyncio.get_running_loop()
        if self._session is None or self._session.closed:
            if not self._owns_session:
                raise RuntimeError("The provided session has been closed")

            self._session = aiohttp.ClientSession()

        return self._session

    async def _normalise(self, source: clients.ClientSource, /) -> None:
        session = self.get_session() if isinstance(source, clients.TokenSource) else None

        try:
            client = await clients.normalize(source, session=session, discord_url=self._discord_url, rng=self._rng)

        except Exception as exc:
            _LOGGER.error("Failed to normalise the bot's client view: %s", exc)
            self._state = ReadyState.FAILED
            self._ready.set_exception(exc)
            # Marks the error as retrieved as it has been logged; waiters still get it raised.
            self._ready.exception()
            return

        self._client = client
        self._state = ReadyState.READY
        self._ready.set_result(client)
        self._start_increments(client)

    async def wait_until_ready(self) -> clients.Client:
        """Wait for the bot's client view to be normalised.

        Returns
        -------
        danbot.clients.Client
            The bot's normalised client view.

        Raises
        ------
        danbot.errors.DanBotError
            If normalising the client view failed; this will be the error
            normalisation failed with.
        """
        return await asyncio.shield(self._ready)

    def _start_increments(self, client: clients.Client, /) -> None:
        increments = (("guild_count", self._options.guild_increment), ("user_count", self._options.user_increment))
        for attribute, increment in increments:
            if increment is None:
                continue

            if client.is_live:
                _LOGGER.debug("Ignoring %s increment for a live client", attribute)
                continue

            self._increment_tasks.append(asyncio.create_task(self._increment_loop(client, attribute, increment)))

    async def _increment_loop(self, client: clients.Client, attribute: str, increment: IncrementOptions, /) -> None:
        timeout = typing.cast("float", increment.timeout)
        while True:
            await asyncio.sleep(timeout)
            setattr(client, attribute, getattr(client, attribute) + increment.by)
            _LOGGER.debug("Incremented %s by %s", attribute, increment.by)

    async def _refresh_guild_count(self, client: clients.Client, /) -> None:
        is_first_refresh = self._is_first_post and self._options.fetch_guilds_first_time
        if not self._options.fetch_guilds_every_post and not is_first_refresh:
            self._is_first_post = False
            return

        if client.is_live or client.token is None:
            _LOGGER.debug("Skipping guild count refresh for a client with no token or live counts")
            self._is_first_post = False
            return

        client.guild_count = await discord.fetch_guild_count(
            self.get_session(), client.token.reveal(), base_url=self._discord_url
        )
        # Cleared only after a successful refresh.
        self._is_first_post = False

    def _build_payload(
        self, client: clients.Client, guild_count: typing.Optional[int], user_count: typing.Optional[int], /
    ) -> dict[str, typing.Any]:
        return {
            "servers": _serialise_count(client.guild_count if guild_count is None else guild_count),
            "users": _serialise_count(client.user_count if user_count is None else user_count),
            "id": client.id,
            "key": self._api_key.reveal(),
            "clientInfo": client.client_info.to_payload(),
        }

    async def post(
        self, *, guild_count: typing.Optional[int] = None, user_count: typing.Optional[int] = None
    ) -> typing.Any:
        """Post the bot's stats to DanBot Hosting.

        This waits for the bot's client view to be normalised first.

        Parameters
        ----------
        guild_count
            Override the guild count which is posted.
        user_count
            Override the user count which is posted.

        Returns
        -------
        typing.Any
            The response body.

        Raises
        ------
        danbot.errors.InternalServerError
            If DanBot Hosting returned a 5xx response.
        danbot.errors.BadRequestError
            If DanBot Hosting returned a 400 with an error message.
        danbot.errors.RateLimitError
            If DanBot Hosting returned a 429 with an error message.
        danbot.errors.UnknownError
            If DanBot Hosting returned any other unexpected status.
        danbot.errors.CloudflareRestrictedError
            If the request was blocked before it reached DanBot Hosting.
        danbot.errors.DanBotError
            If normalising the client view failed.
        """
        client = await self.wait_until_ready()
        await self._refresh_guild_count(client)
        payload = self._build_payload(client, guild_count, user_count)
        headers = {"Content-Type": "application/json", "User-Agent": self._user_agent}
        url = self._base_url + _internal.BOT_STATS_PATH.format(client.id)

        _LOGGER.debug("Posting stats for %s: %s servers and %s users", client.id, payload["servers"], payload["users"])
        try:
            async with self.get_session().post(url, json=payload, headers=headers) as response:
                status = response.status
                body = await _read_json(response) if status < 500 else None

        except aiohttp.ClientError as exc:
            raise errors.classify(
                errors.ErrorCode.CLOUDFLARE_RESTRICTED, "The request was blocked before it reached DanBot Hosting"
            ) from exc

        return _handle_response(status, body)

    async def fetch_node_statuses(self) -> typing.Any:
        """Fetch the status of DanBot Hosting's nodes.

        Returns
        -------
        typing.Any
            The node status document.

        Raises
        ------
        danbot.errors.InternalServerError
            If the status page returned a 5xx response.
        danbot.errors.UnknownError
            If the status page returned any other error response.
        danbot.errors.CloudflareRestrictedError
            If the request was blocked before it reached the status page.
        """
        try:
            async with self.get_session().get(self._status_url, headers={"User-Agent": self._user_agent}) as response:
                if response.status >= 500:
                    raise errors.classify(
                        errors.ErrorCode.INTERNAL_SERVER_ERROR, "Failed to fetch the node statuses", response.status
                    )

                if response.status >= 300:
                    raise errors.classify(
                        errors.ErrorCode.UNKNOWN, "Failed to fetch the node statuses", response.status
                    )

                return await response.json(content_type=None)

        except aiohttp.ClientError as exc:
            raise errors.classify(
                errors.ErrorCode.CLOUDFLARE_RESTRICTED, "The request was blocked before it reached the status page"
            ) from exc

    async def _autopost_loop(self, timeout: float, /) -> None:
        try:
            await self.wait_until_ready()

        except errors.DanBotError:
            _LOGGER.warning("Stopping autopost as the client view couldn't be normalised")
            return

        while True:
            try:
                await self.post()

            except errors.DanBotError as exc:
                _LOGGER.warning("Failed to autopost the bot's stats: %s", exc)

            except Exception as exc:
                _LOGGER.exception("Autoposting the bot's stats raised an unexpected exception", exc_info=exc)

            await asyncio.sleep(timeout)

    async def open(self) -> None:
        """Start this client's autopost loop, if configured."""
        timeout = self._options.autopost_timeout
        if timeout is None or self._autopost_task:
            return

        self._autopost_task = asyncio.create_task(self._autopost_loop(timeout))

    async def close(self) -> None:
        """Close this client.

        This stops the increment timers and autopost loop and closes the
        client's session if it owns it.
        """
        if not self._normalise_task.done():
            self._normalise_task.cancel()

        if not self._ready.done():
            self._state = ReadyState.FAILED
            self._ready.cancel()

        if self._autopost_task:
            self._autopost_task.cancel()
            self._autopost_task = None

        for task in self._increment_tasks:
            task.cancel()

        self._increment_tasks.clear()

        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()
            self._session = None
