from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Annotated, ClassVar, List, Optional

import pytest
from pydantic import BaseModel, ConfigDict, Field

from propmap import MapFrom
from propmap.adapters import (
    DataclassAdapter,
    PopoAdapter,
    PydanticModelAdapter,
    get_adapter,
    zero_value,
)


@pytest.fixture
def plain_classes():
    class Base:
        id: int

    class Child(Base):
        name: Annotated[Optional[str], MapFrom("full_name")]
        total: ClassVar[int] = 0
        _secret: int

        @property
        def label(self) -> str:
            return self.name

        @property
        def code(self) -> Annotated[str, MapFrom("sku")]:
            return self._code

        @code.setter
        def code(self, value: str) -> None:
            self._code = value

    return Base, Child


class TestZeroValue:
    @pytest.mark.parametrize(
        "tp,expected",
        [
            (int, 0),
            (str, ""),
            (bool, False),
            (Decimal, Decimal()),
            (Optional[int], None),
            (List[int], []),
            (date, None),
            (Annotated[float, MapFrom("x")], 0.0),
        ],
    )
    def test_zero_values(self, tp, expected):
        assert zero_value(tp) == expected


class TestGetAdapter:
    def test_adapter_selection(self):
        @dataclass
        class Record:
            id: int = 0

        class Model(BaseModel):
            id: int = 0

        class Plain:
            id: int = 0

        assert type(get_adapter(Record)) is DataclassAdapter
        assert type(get_adapter(Model)) is PydanticModelAdapter
        assert type(get_adapter(Plain)) is PopoAdapter

    def test_instances_are_rejected(self):
        with pytest.raises(TypeError, match="Expected a class, got int"):
            get_adapter(1)


class TestPopoAdapter:
    def test_fields_follow_declaration_order(self, plain_classes):
        _, Child = plain_classes

        descriptor = PopoAdapter().describe(Child)

        assert [f.name for f in descriptor.fields] == ["id", "name", "label", "code"]

    def test_property_access_flags(self, plain_classes):
        _, Child = plain_classes

        descriptor = PopoAdapter().describe(Child)

        assert descriptor.field("label").readable
        assert not descriptor.field("label").writable
        assert descriptor.field("code").accessible
        assert descriptor.field("code").type is str

    def test_markers_become_correspondences(self, plain_classes):
        _, Child = plain_classes

        table = PopoAdapter().correspondences(Child)

        assert dict(table) == {"name": "full_name", "code": "sku"}

    def test_instances_get_zero_values(self, plain_classes):
        _, Child = plain_classes

        instance = PopoAdapter().describe(Child).new_instance()

        assert instance.id == 0
        assert instance.name is None

    def test_required_init_params_are_bypassed(self):
        class Account:
            owner: str
            balance: int = 100

            def __init__(self, owner: str):
                self.owner = owner

        instance = PopoAdapter().create_instance(Account)

        assert instance.owner == ""
        assert instance.balance == 100

    def test_subclass_property_replaces_inherited_attribute(self):
        class Base:
            id: int = 0
            name: str = ""

        class Child(Base):
            @property
            def id(self) -> int:
                return 1

        descriptor = PopoAdapter().describe(Child)

        assert [f.name for f in descriptor.fields] == ["id", "name"]
        assert descriptor.field("id").readable
        assert not descriptor.field("id").writable
        assert descriptor.field("name").accessible

    def test_markers_inside_optional_are_found(self):
        class View:
            my_id: Optional[Annotated[int, MapFrom("id")]] = None

            @property
            def note(self) -> Optional[Annotated[str, MapFrom("text")]]:
                return None

        assert dict(PopoAdapter().correspondences(View)) == {"my_id": "id", "note": "text"}

    def test_unresolvable_property_annotations_raise_type_error(self):
        class Broken:
            @property
            def ref(self) -> "Missing":  # noqa: F821
                return None

        with pytest.raises(TypeError, match="Cannot resolve annotations"):
            PopoAdapter().describe(Broken)

    def test_unresolvable_annotations_raise_type_error(self):
        class Broken:
            ref: "Missing"  # noqa: F821

        with pytest.raises(TypeError, match="Cannot resolve annotations"):
            PopoAdapter().describe(Broken)


class TestDataclassAdapter:
    def test_frozen_fields_are_read_only(self):
        @dataclass(frozen=True)
        class Record:
            id: int = 0

        descriptor = DataclassAdapter().describe(Record)

        assert descriptor.field("id").readable
        assert not descriptor.field("id").writable

    def test_defaults_and_factories_are_used(self):
        @dataclass
        class Record:
            id: int
            tags: List[str] = field(default_factory=lambda: ["new"])
            status: str = "draft"

        instance = DataclassAdapter().create_instance(Record)

        assert (instance.id, instance.tags, instance.status) == (0, ["new"], "draft")


class TestPydanticModelAdapter:
    def test_markers_are_read_from_field_metadata(self):
        class View(BaseModel):
            user_id: Annotated[int, MapFrom("id")]
            note: str = ""

        adapter = PydanticModelAdapter()

        assert dict(adapter.correspondences(View)) == {"user_id": "id"}
        assert adapter.describe(View).field("user_id").type is int

    def test_frozen_models_and_fields_are_read_only(self):
        class Frozen(BaseModel):
            model_config = ConfigDict(frozen=True)

            id: int = 0

        class PartlyFrozen(BaseModel):
            id: int = Field(default=0, frozen=True)
            name: str = ""

        adapter = PydanticModelAdapter()

        assert not adapter.describe(Frozen).field("id").writable
        assert not adapter.describe(PartlyFrozen).field("id").writable
        assert adapter.describe(PartlyFrozen).field("name").writable

    def test_required_fields_are_zero_filled(self):
        class Model(BaseModel):
            id: int
            name: Optional[str]
            kind: str = "user"

        instance = PydanticModelAdapter().create_instance(Model)

        assert (instance.id, instance.name, instance.kind) == (0, None, "user")

    def test_base_model_members_are_not_fields(self):
        class Model(BaseModel):
            id: int = 0

        names = [f.name for f in PydanticModelAdapter().describe(Model).fields]

        assert names == ["id"]
