from datetime import date, datetime
from typing import Annotated, Any, List, Literal, Optional, Union

import pytest

from propmap import MapFrom
from propmap.compat import effective_type, is_assignable, unwrap_optional


class TestEffectiveType:
    @pytest.mark.parametrize(
        "declared,expected",
        [
            (int, int),
            (Optional[int], int),
            (Annotated[Optional[int], MapFrom("x")], int),
            (Optional[Annotated[int, MapFrom("x")]], int),
            (Optional[Union[int, str]], Union[int, str]),
            (Union[int, str], Union[int, str]),
        ],
    )
    def test_one_nullable_layer_is_removed(self, declared, expected):
        assert effective_type(declared) == expected

    def test_unwrapping_can_be_disabled(self):
        assert effective_type(Optional[int], strip_optional=False) == Optional[int]

    def test_plain_types_are_left_alone(self):
        assert unwrap_optional(List[int]) == List[int]


class TestIsAssignable:
    @pytest.mark.parametrize(
        "source,target,expected",
        [
            (int, int, True),
            (bool, int, True),
            (datetime, date, True),
            (str, object, True),
            (int, Any, True),
            (Any, date, True),
            (type(None), Optional[int], True),
            (Union[int, str], Union[int, str, bytes], True),
            (List[int], list, True),
            (List[int], List[int], True),
            (Literal["a", "b"], str, True),
            (int, float, False),
            (int, date, False),
            (date, int, False),
            (date, datetime, False),
            (Union[int, str], int, False),
            (List[int], List[str], False),
            (Literal[1], str, False),
            (str, Literal["a"], False),
        ],
    )
    def test_assignability(self, source, target, expected):
        assert is_assignable(source, target) is expected
