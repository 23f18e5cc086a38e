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

import pytest

from danbot import errors


@pytest.mark.parametrize(
    ("code", "error_type"),
    [
        (errors.ErrorCode.CLIENT_NOT_READY, errors.ClientNotReadyError),
        (errors.ErrorCode.INVALID_USER_COUNT, errors.InvalidUserCountError),
        (errors.ErrorCode.INVALID_DISCORD_TOKEN, errors.InvalidDiscordTokenError),
        (errors.ErrorCode.INTERNAL_SERVER_ERROR, errors.InternalServerError),
        (errors.ErrorCode.BAD_REQUEST, errors.BadRequestError),
        (errors.ErrorCode.RATE_LIMIT, errors.RateLimitError),
        (errors.ErrorCode.UNKNOWN, errors.UnknownError),
        (errors.ErrorCode.CLOUDFLARE_RESTRICTED, errors.CloudflareRestrictedError),
    ],
)
def test_classify(code: errors.ErrorCode, error_type: type[errors.DanBotError]):
    result = errors.classify(code, "meow meow", 418)

    assert type(result) is error_type
    assert result.code is code
    assert result.message == "meow meow"
    assert result.status == 418


def test_classify_with_string_code():
    result = errors.classify("RATE_LIMIT", "slow down")

    assert isinstance(result, errors.RateLimitError)
    assert result.code is errors.ErrorCode.RATE_LIMIT
    assert result.status is None


def test_classify_with_unknown_code():
    with pytest.raises(ValueError):  # noqa: PT011
        errors.classify("NYAA", "meow")


def test_str():
    error = errors.classify(errors.ErrorCode.INTERNAL_SERVER_ERROR, "It broke", 503)

    assert str(error) == "[INTERNAL_SERVER_ERROR] It broke. Status: 503"


def test_str_without_status():
    error = errors.classify(errors.ErrorCode.BAD_REQUEST, "Missing key")

    assert str(error) == "[BAD_REQUEST] Missing key."


def test_invalid_user_count_is_value_error():
    assert isinstance(errors.classify(errors.ErrorCode.INVALID_USER_COUNT, "bad"), ValueError)
