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
"""Normalisation of bot runtimes and credentials into a uniform client view."""
from __future__ import annotations

__all__: list[str] = [
    "AbstractCount",
    "Client",
    "ClientInfo",
    "ClientSource",
    "LeanClientSource",
    "LeanRuntime",
    "LiveCount",
    "RichClientSource",
    "RichRuntime",
    "RuntimeUser",
    "Secret",
    "StaticCount",
    "TokenSource",
    "UserDefinedSource",
    "from_hikari_bot",
    "normalize",
    "source_from_options",
]

import abc
import datetime
import logging
import typing
from collections import abc as collections

import typing_extensions

from . import _internal
from . import discord
from . import errors
from . import user_count as user_count_
from .discord import ClientInfo

if typing.TYPE_CHECKING:
    import aiohttp
    import hikari

    from .user_count import UserCount


_LOGGER = logging.getLogger(_internal.LOGGER_NAME + ".clients")
_NOT_READY_MESSAGE = "The client is not ready. Please run this code in a ready event"


class RuntimeUser(typing.Protocol):
    """Protocol of a bot runtime's own user."""

    @property
    def id(self) -> typing.Any:
        raise NotImplementedError

    @property
    def username(self) -> str:
        raise NotImplementedError

    @property
    def avatar(self) -> typing.Optional[str]:
        raise NotImplementedError


class _CachedCollection(typing.Protocol):
    @property
    def cache(self) -> collections.Sized:
        raise NotImplementedError


class RichRuntime(typing.Protocol):
    """Protocol of a bot runtime which keeps its collections in nested caches.

    This is ready once `ready_at` is set.
    """

    @property
    def user(self) -> RuntimeUser:
        raise NotImplementedError

    @property
    def guilds(self) -> _CachedCollection:
        raise NotImplementedError

    @property
    def users(self) -> _CachedCollection:
        raise NotImplementedError

    @property
    def token(self) -> str:
        raise NotImplementedError

    @property
    def ready_at(self) -> typing.Optional[typing.Any]:
        raise NotImplementedError


class LeanRuntime(typing.Protocol):
    """Protocol of a bot runtime which exposes its collections directly.

    This is ready once `ready` is [True][].
    """

    @property
    def user(self) -> RuntimeUser:
        raise NotImplementedError

    @property
    def guilds(self) -> collections.Sized:
        raise NotImplementedError

    @property
    def users(self) -> collections.Sized:
        raise NotImplementedError

    @property
    def token(self) -> str:
        raise NotImplementedError

    @property
    def ready(self) -> bool:
        raise NotImplementedError


class Secret:
    """Holder of a credential which keeps it out of reprs and payloads."""

    __slots__ = ("_value",)

    def __init__(self, value: str, /) -> None:
        """Initialise a secret.

        Parameters
        ----------
        value
            The credential to hold.
        """
        self._value = value

    def __repr__(self) -> str:
        return "Secret(<hidden>)"

    __str__ = __repr__

    def reveal(self) -> str:
        """Get the held credential."""
        return self._value


class AbstractCount(abc.ABC):
    """Source of one of a client's counts."""

    __slots__ = ()

    @property
    @abc.abstractmethod
    def is_live(self) -> bool:
        """Whether this count is recomputed from a live collection on every read."""

    @abc.abstractmethod
    def get(self) -> typing.Union[int, float]:
        """Get the current count."""

    @abc.abstractmethod
    def set(self, value: typing.Union[int, float], /) -> None:
        """Overwrite the current count.

        Raises
        ------
        TypeError
            If this count is live.
        """


class LiveCount(AbstractCount):
    """Count recomputed from the size of a collection on every read."""

    __slots__ = ("_getter",)

    def __init__(self, getter: collections.Callable[[], collections.Sized], /) -> None:
        """Initialise a live count.

        Parameters
        ----------
        getter
            Callback used to get the collection to count.

            This is called on every read so the collection may be replaced
            by its owner.
        """
        self._getter = getter

    @property
    def is_live(self) -> bool:
        return True

    def get(self) -> int:
        return len(self._getter())

    def set(self, value: typing.Union[int, float], /) -> None:
        raise TypeError("Cannot overwrite a live count")


class StaticCount(AbstractCount):
    """Count stored as a plain number."""

    __slots__ = ("_value",)

    def __init__(self, value: typing.Union[int, float], /) -> None:
        """Initialise a static count.

        Parameters
        ----------
        value
            The initial count.
        """
        self._value = value

    @property
    def is_live(self) -> bool:
        return False

    def get(self) -> typing.Union[int, float]:
        return self._value

    def set(self, value: typing.Union[int, float], /) -> None:
        self._value = value


class Client:
    """Uniform view of a bot used for reporting its stats.

    A client is either live, where it's bound to a bot runtime and both counts
    are read off the runtime's collections, or static, where both counts are
    plain numbers which may be overwritten.
    """

    __slots__ = ("_client_info", "_guild_count", "_id", "_raw_client", "_token", "_user_count")

    def __init__(
        self,
        *,
        id: str,  # noqa: A002
        client_info: ClientInfo,
        guild_count: AbstractCount,
        user_count: AbstractCount,
        raw_client: typing.Optional[typing.Any] = None,
        token: typing.Optional[Secret] = None,
    ) -> None:
        """Initialise a client.

        Parameters
        ----------
        id
            ID of the bot's account.
        client_info
            The bot's display identity.
        guild_count
            Source of the bot's guild count.
        user_count
            Source of the bot's user count.
        raw_client
            The bot runtime this client's live counts are read from.
        token
            The bot's token.

        Raises
        ------
        ValueError
            If the counts' liveness doesn't match whether `raw_client` was passed.
        """
        is_live = raw_client is not None
        if guild_count.is_live is not is_live or user_count.is_live is not is_live:
            raise ValueError("A client's counts must both be live with a raw client or both be static without one")

        self._client_info = client_info
        self._guild_count = guild_count
        self._id = id
        self._raw_client = raw_client
        self._token = token
        self._user_count = user_count

    def __repr__(self) -> str:
        return (
            f"Client(id={self._id!r}, client_info={self._client_info!r}, guild_count={self.guild_count!r}, "
            f"user_count={self.user_count!r}, is_live={self.is_live!r})"
        )

    @property
    def id(self) -> str:
        """ID of the bot's account."""
        return self._id

    @property
    def client_info(self) -> ClientInfo:
        """The bot's display identity."""
        return self._client_info

    @property
    def is_live(self) -> bool:
        """Whether this client's counts are read off a bot runtime."""
        return self._raw_client is not None

    @property
    def raw_client(self) -> typing.Optional[typing.Any]:
        """The bot runtime this client is bound to, if any."""
        return self._raw_client

    @property
    def token(self) -> typing.Optional[Secret]:
        """The bot's token, if known."""
        return self._token

    @property
    def guild_count(self) -> int:
        """How many guilds the bot is in."""
        return typing.cast("int", self._guild_count.get())

    @guild_count.setter
    def guild_count(self, value: int, /) -> None:
        self._guild_count.set(value)

    @property
    def user_count(self) -> typing.Union[int, float]:
        """How many users the bot can see.

        This will be [math.inf][] for an unbounded count.
        """
        return self._user_count.get()

    @user_count.setter
    def user_count(self, value: typing.Union[int, float], /) -> None:
        self._user_count.set(value)

    def to_dict(self) -> dict[str, typing.Any]:
        """Serialise this client.

        The token is never included.
        """
        return {
            "id": self._id,
            "clientInfo": self._client_info.to_payload(),
            "guildCount": self.guild_count,
            "userCount": self.user_count,
        }


class RichClientSource(typing.NamedTuple):
    """Declares a client should be built from a rich bot runtime."""

    client: RichRuntime
    """The bot runtime."""


class LeanClientSource(typing.NamedTuple):
    """Declares a client should be built from a lean bot runtime."""

    client: LeanRuntime
    """The bot runtime."""


class UserDefinedSource(typing.NamedTuple):
    """Declares a client should be built from caller provided stats."""

    id: str
    """ID of the bot's account."""

    client_info: typing.Union[ClientInfo, collections.Mapping[str, typing.Any]]
    """The bot's display identity.

    This may be a raw user mapping with `"id"`, `"username"` and `"avatar"` keys.
    """

    guild_count: int
    """How many guilds the bot is in."""

    user_count: UserCount
    """The user count policy."""


class TokenSource(typing.NamedTuple):
    """Declares a client should be built by looking the bot up with its token."""

    token: str
    """The bot's token."""

    user_count: UserCount
    """The user count policy."""

    guild_count: typing.Optional[int] = None
    """How many guilds the bot is in.

    If left as [None][] then this will be fetched from Discord.
    """

    def __repr__(self) -> str:
        return f"TokenSource(token=<hidden>, user_count={self.user_count!r}, guild_count={self.guild_count!r})"


ClientSource = typing.Union[RichClientSource, LeanClientSource, UserDefinedSource, TokenSource]
"""Union of the declared sources a client can be built from."""


def _info_from_runtime(user: RuntimeUser, /) -> ClientInfo:
    return ClientInfo(id=str(user.id), username=user.username, avatar=user.avatar)


def _from_rich(runtime: RichRuntime, /) -> Client:
    if not runtime.ready_at:
        raise errors.classify(errors.ErrorCode.CLIENT_NOT_READY, _NOT_READY_MESSAGE)

    info = _info_from_runtime(runtime.user)
    return Client(
        id=info.id,
        client_info=info,
        guild_count=LiveCount(lambda: runtime.guilds.cache),
        user_count=LiveCount(lambda: runtime.users.cache),
        raw_client=runtime,
        token=Secret(runtime.token),
    )


def _from_lean(runtime: LeanRuntime, /) -> Client:
    if not runtime.ready:
        raise errors.classify(errors.ErrorCode.CLIENT_NOT_READY, _NOT_READY_MESSAGE)

    info = _info_from_runtime(runtime.user)
    return Client(
        id=info.id,
        client_info=info,
        guild_count=LiveCount(lambda: runtime.guilds),
        user_count=LiveCount(lambda: runtime.users),
        raw_client=runtime,
        token=Secret(runtime.token),
    )


def _from_user_defined(source: UserDefinedSource, /, *, rng: typing.Any) -> Client:
    info = source.client_info
    if not isinstance(info, ClientInfo):
        info = ClientInfo.from_payload(info)

    return Client(
        id=str(source.id),
        client_info=info,
        guild_count=StaticCount(source.guild_count),
        user_count=StaticCount(user_count_.resolve_user_count(source.user_count, rng=rng)),
    )


async def _from_token(
    source: TokenSource, /, *, session: aiohttp.ClientSession, discord_url: str, rng: typing.Any
) -> Client:
    # Resolve the policy first so a malformed one fails before any requests are made.
    user_count = user_count_.resolve_user_count(source.user_count, rng=rng)
    info = await discord.fetch_user_info(session, source.token, base_url=discord_url)

    if source.guild_count is None:
        guild_count = await discord.fetch_guild_count(session, source.token, base_url=discord_url)

    else:
        guild_count = source.guild_count

    return Client(
        id=info.id,
        client_info=info,
        guild_count=StaticCount(guild_count),
        user_count=StaticCount(user_count),
        token=Secret(source.token),
    )


async def normalize(
    source: ClientSource,
    /,
    *,
    session: typing.Optional[aiohttp.ClientSession] = None,
    discord_url: str = _internal.DISCORD_URL,
    rng: typing.Optional[typing.Any] = None,
) -> Client:
    """Build a client from a declared source.

    Parameters
    ----------
    source
        The declared source to build the client from.
    session
        The session to use for Discord lookups.

        This is only required for [TokenSource][danbot.clients.TokenSource].
    discord_url
        Base URL of the Discord REST API.
    rng
        Source of randomness used to resolve random user count policies.

    Returns
    -------
    Client
        The built client.

    Raises
    ------
    danbot.errors.ClientNotReadyError
        If a bot runtime source isn't ready yet.
    danbot.errors.InvalidUserCountError
        If the source's user count policy is malformed.
    danbot.errors.InvalidDiscordTokenError
        If Discord rejected a token source's token.
    ValueError
        If `session` wasn't passed for a token source.
    """
    if isinstance(source, RichClientSource):
        client = _from_rich(source.client)

    elif isinstance(source, LeanClientSource):
        client = _from_lean(source.client)

    elif isinstance(source, UserDefinedSource):
        client = _from_user_defined(source, rng=rng)

    elif isinstance(source, TokenSource):
        if session is None:
            raise ValueError("A session must be passed to normalise a token source")

        client = await _from_token(source, session=session, discord_url=discord_url, rng=rng)

    else:
        typing_extensions.assert_never(source)

    _LOGGER.debug("Normalised %s into %r", type(source).__name__, client)
    return client


def source_from_options(options: collections.Mapping[str, typing.Any], /) -> ClientSource:
    """Build a declared source from a credentials mapping.

    Parameters
    ----------
    options
        The credentials mapping.

        This must either contain `"id"`, `"clientInfo"`, `"guildCount"` and
        `"userCount"` or `"token"`, `"userCount"` and optionally `"guildCount"`.

    Returns
    -------
    ClientSource
        The declared source.

    Raises
    ------
    TypeError
        If the mapping contains a bot runtime under `"client"`.

        The runtime's shape must be declared with
        [RichClientSource][danbot.clients.RichClientSource] or
        [LeanClientSource][danbot.clients.LeanClientSource].
    KeyError
        If the mapping is missing required keys.
    """
    if "client" in options:
        raise TypeError("Bot runtimes must be declared with RichClientSource or LeanClientSource")

    if "clientInfo" in options:
        return UserDefinedSource(
            id=options["id"],
            client_info=options["clientInfo"],
            guild_count=options["guildCount"],
            user_count=options["userCount"],
        )

    return TokenSource(token=options["token"], user_count=options["userCount"], guild_count=options.get("guildCount"))


class _HikariCollection:
    __slots__ = ("_getter",)

    def __init__(self, getter: collections.Callable[[], collections.Sized], /) -> None:
        self._getter = getter

    @property
    def cache(self) -> collections.Sized:
        return self._getter()


class _HikariRuntime:
    """Rich runtime view of a cache-enabled Hikari Gateway bot."""

    __slots__ = ("_bot", "_ready_at", "_token", "guilds", "users")

    def __init__(self, bot: _internal.CacheBotProto, token: str, /) -> None:
        self._bot = bot
        self._ready_at: typing.Optional[datetime.datetime] = None
        self._token = token
        self.guilds = _HikariCollection(bot.cache.get_guilds_view)
        self.users = _HikariCollection(bot.cache.get_users_view)

    @property
    def user(self) -> ClientInfo:
        me = self._get_me()
        if me is None:
            raise errors.classify(errors.ErrorCode.CLIENT_NOT_READY, _NOT_READY_MESSAGE)

        return ClientInfo.from_user(me)

    @property
    def token(self) -> str:
        return self._token

    @property
    def ready_at(self) -> typing.Optional[datetime.datetime]:
        # The own user is only cached once READY has been received.
        if self._ready_at is None and self._get_me() is not None:
            self._ready_at = datetime.datetime.now(tz=datetime.timezone.utc)

        return self._ready_at

    def _get_me(self) -> typing.Optional[hikari.OwnUser]:
        return self._bot.cache.get_me()


def from_hikari_bot(bot: _internal.CacheBotProto, token: str, /) -> RichClientSource:
    """Declare a cache-enabled Hikari bot as a client source.

    !!! warning
        This will only give accurate counts if the GUILDS cache component and
        intent are enabled.

    Parameters
    ----------
    bot : hikari.traits.CacheAware & hikari.traits.ShardAware
        The Hikari bot.
    token
        The bot's token.

    Returns
    -------
    RichClientSource
        The declared source.
    """
    return RichClientSource(_HikariRuntime(bot, token))
