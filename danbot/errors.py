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
"""Errors raised while normalising clients and reporting stats to DanBot Hosting."""
from __future__ import annotations

__all__: list[str] = [
    "BadRequestError",
    "ClientNotReadyError",
    "CloudflareRestrictedError",
    "DanBotError",
    "ErrorCode",
    "InternalServerError",
    "InvalidDiscordTokenError",
    "InvalidUserCountError",
    "RateLimitError",
    "UnknownError",
    "classify",
]

import enum
import typing


class ErrorCode(str, enum.Enum):
    """Code of a failure kind."""

    CLIENT_NOT_READY = "CLIENT_NOT_READY"
    """The provided bot runtime hasn't finished starting up."""

    INVALID_USER_COUNT = "INVALID_USER_COUNT"
    """The provided user count policy was malformed."""

    INVALID_DISCORD_TOKEN = "INVALID_DISCORD_TOKEN"
    """Discord rejected the provided bot token."""

    INTERNAL_SERVER_ERROR = "INTERNAL_SERVER_ERROR"
    """The stats service returned a 5xx response."""

    BAD_REQUEST = "BAD_REQUEST"
    """The stats service rejected the request as malformed."""

    RATE_LIMIT = "RATE_LIMIT"
    """The stats service rate-limited the request."""

    UNKNOWN = "UNKNOWN"
    """An unexpected response was returned."""

    CLOUDFLARE_RESTRICTED = "CLOUDFLARE_RESTRICTED"
    """The request was blocked before it reached the stats service."""


class DanBotError(Exception):
    """Base class for all the errors raised by this library."""

    code: ErrorCode
    """Code of this error's failure kind."""

    message: str
    """Human readable description of this error."""

    status: typing.Optional[int]
    """HTTP status code relevant to this error, if applicable."""

    def __init__(self, code: ErrorCode, message: str, /, status: typing.Optional[int] = None) -> None:
        """Initialise a DanBot error.

        Parameters
        ----------
        code
            Code of the failure kind.
        message
            Human readable description of the failure.
        status
            HTTP status code relevant to the failure.
        """
        super().__init__(code, message, status)
        self.code = code
        self.message = message
        self.status = status

    def __str__(self) -> str:
        result = f"[{self.code.value}] {self.message}."
        if self.status is not None:
            result += f" Status: {self.status}"

        return result

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.code.value!r}, {self.message!r}, status={self.status!r})"


class ClientNotReadyError(DanBotError):
    """Error raised when a bot runtime is used before it's ready."""


class InvalidUserCountError(DanBotError, ValueError):
    """Error raised when a user count policy is invalid."""


class InvalidDiscordTokenError(DanBotError):
    """Error raised when Discord rejects the bot's token."""


class InternalServerError(DanBotError):
    """Error raised when the stats service fails with a 5xx status."""


class BadRequestError(DanBotError):
    """Error raised when the stats service returns a 400 with an error message."""


class RateLimitError(DanBotError):
    """Error raised when the stats service returns a 429 with an error message."""


class UnknownError(DanBotError):
    """Error raised for an unexpected response status."""


class CloudflareRestrictedError(DanBotError):
    """Error raised when a request is blocked before reaching the service.

    This covers transport level failures and non-JSON block pages.
    """


_ERROR_TYPES: dict[ErrorCode, type[DanBotError]] = {
    ErrorCode.CLIENT_NOT_READY: ClientNotReadyError,
    ErrorCode.INVALID_USER_COUNT: InvalidUserCountError,
    ErrorCode.INVALID_DISCORD_TOKEN: InvalidDiscordTokenError,
    ErrorCode.INTERNAL_SERVER_ERROR: InternalServerError,
    ErrorCode.BAD_REQUEST: BadRequestError,
    ErrorCode.RATE_LIMIT: RateLimitError,
    ErrorCode.UNKNOWN: UnknownError,
    ErrorCode.CLOUDFLARE_RESTRICTED: CloudflareRestrictedError,
}


def classify(code: typing.Union[ErrorCode, str], message: str, /, status: typing.Optional[int] = None) -> DanBotError:
    """Build the error for a failure kind.

    Parameters
    ----------
    code
        The failure kind's code.

        This may also be the code's string value (e.g. `"RATE_LIMIT"`).
    message
        Human readable description of the failure.
    status
        HTTP status code relevant to the failure.

    Returns
    -------
    DanBotError
        The error, an instance of the kind's specific error type.

    Raises
    ------
    ValueError
        If `code` isn't a known error code.
    """
    code = ErrorCode(code)
    return _ERROR_TYPES[code](code, message, status)
