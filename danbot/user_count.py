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
"""Resolution of user count policies into concrete counts."""
from __future__ import annotations

__all__: list[str] = ["ALL", "RANDOM", "UserCount", "resolve_user_count"]

import math
import random
import typing
from collections import abc as collections

from . import errors

ALL: typing.Final[str] = "ALL"
"""Policy which marks the user count as unbounded."""

RANDOM: typing.Final[str] = "RANDOM"
"""Policy which picks a random user count between 1 and 150 (inclusive)."""

_RANDOM_MIN = 1
_RANDOM_MAX = 150

UserCount = typing.Union[typing.Literal["ALL", "RANDOM"], int, tuple[int, int], list[int]]
"""A user count policy.

This may be:

* `"ALL"` for an unbounded count.
* `"RANDOM"` for a random count between 1 and 150 (inclusive).
* An integer to use as-is.
* A `(min, max)` pair for a random count within that range (inclusive).
"""


class _RandomSource(typing.Protocol):
    def randint(self, a: int, b: int, /) -> int:
        raise NotImplementedError


def _is_int(value: typing.Any, /) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def resolve_user_count(
    policy: UserCount, /, *, rng: typing.Optional[_RandomSource] = None
) -> typing.Union[int, float]:
    """Turn a user count policy into a count.

    Parameters
    ----------
    policy
        The user count policy to resolve.
    rng
        Source of randomness to use for the random policies.

        Defaults to the [random][] module.

    Returns
    -------
    int | float
        The resolved count.

        This will be [math.inf][] for the `"ALL"` policy, which compares as
        larger than any finite count.

    Raises
    ------
    danbot.errors.InvalidUserCountError
        If the policy is malformed or a range's minimum is larger than its
        maximum.
    """
    rng = rng or random

    if policy == ALL:
        return math.inf

    if policy == RANDOM:
        return rng.randint(_RANDOM_MIN, _RANDOM_MAX)

    if _is_int(policy):
        return typing.cast("int", policy)

    if isinstance(policy, collections.Sequence) and not isinstance(policy, str) and len(policy) == 2:
        minimum, maximum = policy
        if _is_int(minimum) and _is_int(maximum):
            if minimum > maximum:
                raise errors.classify(
                    errors.ErrorCode.INVALID_USER_COUNT,
                    f"The user count range's minimum ({minimum}) is larger than its maximum ({maximum})",
                )

            return rng.randint(minimum, maximum)

    raise errors.classify(errors.ErrorCode.INVALID_USER_COUNT, "The user count provided was invalid")
