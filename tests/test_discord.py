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

# pyright: reportUnknownMemberType=none
# This leads to too many false-positives around mocks.

import json
import typing
from unittest import mock

import aiohttp
import hikari
import pytest

from danbot import discord
from danbot import errors

_HEADERS = {
    "Authorization": "Bot meow.token",
    "Content-Type": "application/json",
    "User-Agent": "DanBot.py (https://danbot.host)",
}


def _mock_response(status: int, body: typing.Any = None, *, json_error: typing.Optional[Exception] = None) -> mock.Mock:
    response = mock.Mock(status=status, json=mock.AsyncMock(return_value=body, side_effect=json_error))
    return mock.Mock(__aenter__=mock.AsyncMock(return_value=response), __aexit__=mock.AsyncMock(return_value=False))


def _page(size: int, *, start: int = 0) -> list[dict[str, typing.Any]]:
    return [{"id": str(index), "name": f"guild {index}"} for index in range(start, start + size)]


class TestClientInfo:
    def test_from_payload(self):
        result = discord.ClientInfo.from_payload({"id": 1234, "username": "nyaa", "avatar": "abc", "bot": True})

        assert result == discord.ClientInfo(id="1234", username="nyaa", avatar="abc")

    def test_from_payload_when_no_avatar(self):
        result = discord.ClientInfo.from_payload({"id": "1234", "username": "nyaa", "avatar": None})

        assert result.avatar is None

    def test_from_user(self):
        user = mock.Mock(id=hikari.Snowflake(65234123), username="echo", avatar_hash="a_123")

        assert discord.ClientInfo.from_user(user) == discord.ClientInfo(id="65234123", username="echo", avatar="a_123")

    def test_to_payload(self):
        info = discord.ClientInfo(id="123", username="meow", avatar="hash")

        assert info.to_payload() == {"id": "123", "username": "meow", "avatar": "hash"}


@pytest.mark.asyncio()
class TestFetchUserInfo:
    async def test(self):
        mock_session = mock.Mock()
        mock_session.get.return_value = _mock_response(200, {"id": "4321", "username": "bot", "avatar": None})

        result = await discord.fetch_user_info(mock_session, "meow.token")

        assert result == discord.ClientInfo(id="4321", username="bot", avatar=None)
        mock_session.get.assert_called_once_with(
            "https://discord.com/api/v9/users/@me", headers=_HEADERS, params=None
        )

    async def test_with_base_url(self):
        mock_session = mock.Mock()
        mock_session.get.return_value = _mock_response(200, {"id": "4321", "username": "bot", "avatar": None})

        await discord.fetch_user_info(mock_session, "meow.token", base_url="https://example.com/api")

        mock_session.get.assert_called_once_with("https://example.com/api/users/@me", headers=_HEADERS, params=None)

    async def test_when_unauthorized(self):
        mock_session = mock.Mock()
        mock_session.get.return_value = _mock_response(401, {"message": "401: Unauthorized", "code": 0})

        with pytest.raises(errors.InvalidDiscordTokenError) as exc_info:
            await discord.fetch_user_info(mock_session, "meow.token")

        assert exc_info.value.status == 401

    async def test_when_unauthorized_message_with_ok_status(self):
        mock_session = mock.Mock()
        mock_session.get.return_value = _mock_response(200, {"message": "401: Unauthorized", "code": 0})

        with pytest.raises(errors.InvalidDiscordTokenError):
            await discord.fetch_user_info(mock_session, "meow.token")

    async def test_when_other_error(self):
        mock_session = mock.Mock()
        mock_session.get.return_value = _mock_response(502, None)

        with pytest.raises(errors.UnknownError) as exc_info:
            await discord.fetch_user_info(mock_session, "meow.token")

        assert exc_info.value.status == 502

    async def test_when_unauthorized_without_json_body(self):
        mock_session = mock.Mock()
        mock_session.get.return_value = _mock_response(401, json_error=json.JSONDecodeError("Expecting value", "", 0))

        with pytest.raises(errors.InvalidDiscordTokenError):
            await discord.fetch_user_info(mock_session, "meow.token")

    async def test_when_ok_response_isnt_json(self):
        mock_session = mock.Mock()
        mock_session.get.return_value = _mock_response(
            200, json_error=json.JSONDecodeError("Expecting value", "<html>", 0)
        )

        with pytest.raises(errors.CloudflareRestrictedError) as exc_info:
            await discord.fetch_user_info(mock_session, "meow.token")

        assert exc_info.value.status == 200

    async def test_when_transport_fails(self):
        mock_session = mock.Mock()
        mock_session.get.side_effect = aiohttp.ClientConnectionError("blocked")

        with pytest.raises(errors.CloudflareRestrictedError) as exc_info:
            await discord.fetch_user_info(mock_session, "meow.token")

        assert isinstance(exc_info.value.__cause__, aiohttp.ClientConnectionError)


@pytest.mark.asyncio()
class TestFetchGuildCount:
    async def test_with_single_page(self):
        mock_session = mock.Mock()
        mock_session.get.return_value = _mock_response(200, _page(50))

        result = await discord.fetch_guild_count(mock_session, "meow.token")

        assert result == 50
        mock_session.get.assert_called_once_with(
            "https://discord.com/api/v9/users/@me/guilds", headers=_HEADERS, params={"limit": "200"}
        )

    async def test_with_multiple_pages(self):
        mock_session = mock.Mock()
        mock_session.get.side_effect = [
            _mock_response(200, _page(200)),
            _mock_response(200, _page(200, start=200)),
            _mock_response(200, _page(137, start=400)),
        ]

        result = await discord.fetch_guild_count(mock_session, "meow.token")

        assert result == 537
        assert mock_session.get.call_args_list == [
            mock.call("https://discord.com/api/v9/users/@me/guilds", headers=_HEADERS, params={"limit": "200"}),
            mock.call(
                "https://discord.com/api/v9/users/@me/guilds", headers=_HEADERS, params={"limit": "200", "after": "199"}
            ),
            mock.call(
                "https://discord.com/api/v9/users/@me/guilds", headers=_HEADERS, params={"limit": "200", "after": "399"}
            ),
        ]

    async def test_when_last_page_is_empty(self):
        mock_session = mock.Mock()
        mock_session.get.side_effect = [_mock_response(200, _page(200)), _mock_response(200, [])]

        result = await discord.fetch_guild_count(mock_session, "meow.token")

        assert result == 200
        assert mock_session.get.call_count == 2

    async def test_when_no_guilds(self):
        mock_session = mock.Mock()
        mock_session.get.return_value = _mock_response(200, [])

        assert await discord.fetch_guild_count(mock_session, "meow.token") == 0

    async def test_when_unauthorized_on_later_page(self):
        mock_session = mock.Mock()
        mock_session.get.side_effect = [
            _mock_response(200, _page(200)),
            _mock_response(401, {"message": "401: Unauthorized", "code": 0}),
        ]

        with pytest.raises(errors.InvalidDiscordTokenError):
            await discord.fetch_guild_count(mock_session, "meow.token")

        assert mock_session.get.call_count == 2

    async def test_when_error_page_isnt_json(self):
        mock_session = mock.Mock()
        mock_session.get.side_effect = [
            _mock_response(200, _page(200)),
            _mock_response(502, json_error=json.JSONDecodeError("Expecting value", "<html>", 0)),
        ]

        with pytest.raises(errors.UnknownError) as exc_info:
            await discord.fetch_guild_count(mock_session, "meow.token")

        assert exc_info.value.status == 502

    async def test_when_transport_fails(self):
        mock_session = mock.Mock()
        mock_session.get.side_effect = aiohttp.ClientConnectionError("blocked")

        with pytest.raises(errors.CloudflareRestrictedError):
            await discord.fetch_guild_count(mock_session, "meow.token")
