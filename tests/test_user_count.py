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

import math
import random
import typing
from unittest import mock

import pytest

from danbot import errors
from danbot import user_count


@pytest.mark.parametrize("value", [0, 1, 42, 150, 151, 9_999_999, -5])
def test_resolve_user_count_with_int(value: int):
    assert user_count.resolve_user_count(value) == value


def test_resolve_user_count_with_all():
    result = user_count.resolve_user_count("ALL")

    assert result == math.inf
    assert result > 10**100


def test_resolve_user_count_with_random():
    rng = random.Random(5435)

    for _ in range(1000):
        assert 1 <= user_count.resolve_user_count("RANDOM", rng=rng) <= 150


def test_resolve_user_count_with_random_uses_rng():
    rng = mock.Mock()
    rng.randint.return_value = 69

    assert user_count.resolve_user_count("RANDOM", rng=rng) == 69

    rng.randint.assert_called_once_with(1, 150)


@pytest.mark.parametrize("policy", [(3, 7), [3, 7]])
def test_resolve_user_count_with_range(policy: typing.Any):
    rng = random.Random(123)

    results = {user_count.resolve_user_count(policy, rng=rng) for _ in range(500)}

    assert results == {3, 4, 5, 6, 7}


def test_resolve_user_count_with_single_value_range():
    assert user_count.resolve_user_count((20, 20)) == 20


def test_resolve_user_count_with_inverted_range():
    with pytest.raises(errors.InvalidUserCountError, match="minimum"):
        user_count.resolve_user_count((10, 2))


@pytest.mark.parametrize("policy", ["NYAA", "all", None, 1.5, True, (1, 2, 3), (1,), ("1", "2"), {"min": 1}])
def test_resolve_user_count_with_invalid_policy(policy: typing.Any):
    with pytest.raises(errors.InvalidUserCountError):
        user_count.resolve_user_count(policy)
