"""Tests for the pydantic model adapters."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Annotated, Literal, Protocol, get_args, runtime_checkable

import pydantic
import pytest

from retag.descriptors import InterfaceType, PointerType, ScalarType, StructType, TypeRef
from retag.exceptions import CyclicTypeError
from retag.introspection import (
    build_model,
    describe_model,
    describe_type,
    get_struct_tag,
    get_tagged_fields,
    is_embedded,
)
from retag.markers import Embedded, StructTag
from retag.mutate import add_option, mutate_type
from retag.skippers import capability_name, skip_implementor, skip_never, skip_not


@runtime_checkable
class Undefinedable(Protocol):
    def is_undefined(self) -> bool: ...


@dataclass(frozen=True)
class Und:
    value: str | None = None
    defined: bool = False

    def is_undefined(self) -> bool:
        return not self.defined


class Nested(pydantic.BaseModel):
    nah: Annotated[Und, StructTag('json:"nah"')] = Und()
    yay: Annotated[int, StructTag('json:"yay"')] = 0


class Some(pydantic.BaseModel):
    foo: Annotated[Und, StructTag('json:"foo"')] = Und()
    bar: Annotated[str, StructTag('json:"bar"'), pydantic.Field(max_length=8, description='Bar text')] = ''
    baz: Annotated[Nested, StructTag('json:"baz"')] = pydantic.Field(default_factory=Nested)
    maybe: Annotated[Nested | None, StructTag('json:"maybe"')] = None
    base: Annotated[Nested, Embedded()] = pydantic.Field(default_factory=Nested)


class Node(pydantic.BaseModel):
    value: Annotated[int, StructTag('json:"value"')] = 0
    next: Annotated[Node | None, StructTag('json:"next"')] = None


class WithInterface(pydantic.BaseModel):
    model_config = pydantic.ConfigDict(arbitrary_types_allowed=True)

    handler: Annotated[Undefinedable, StructTag('json:"handler"')]


class Cat(pydantic.BaseModel):
    kind: Literal['cat'] = 'cat'


class Dog(pydantic.BaseModel):
    kind: Literal['dog'] = 'dog'


class Pet(pydantic.BaseModel):
    name: Annotated[str, StructTag('json:"name"')] = pydantic.Field('', serialization_alias='Name')
    animal: Annotated[Cat | Dog, StructTag('json:"animal"')] = pydantic.Field(discriminator='kind', default_factory=Cat)


type JsonName = Annotated[str, StructTag('json:"name"')]


class Aliased(pydantic.BaseModel):
    name: JsonName = ''


OMIT_ZERO_ON_UNDEFINEDABLE = add_option('json', ',omitzero', skip_not(skip_implementor(Undefinedable)), strict=True)


def test_get_struct_tag() -> None:
    assert get_struct_tag(Some.model_fields['foo']) == 'json:"foo"'
    assert get_struct_tag(Some.model_fields['base']) == ''


def test_get_struct_tag_from_type_alias() -> None:
    assert get_struct_tag(Aliased.model_fields['name']) == 'json:"name"'


def test_is_embedded() -> None:
    assert is_embedded(Some.model_fields['base'])
    assert not is_embedded(Some.model_fields['baz'])


def test_get_tagged_fields() -> None:
    assert get_tagged_fields(Some, 'json') == {'foo': 'foo', 'bar': 'bar', 'baz': 'baz', 'maybe': 'maybe'}
    assert get_tagged_fields(Some, 'yaml') == {}


def test_describe_model() -> None:
    struct = describe_model(Some, capabilities=(Undefinedable,))

    assert struct.name is not None and struct.name.endswith('Some')
    assert struct.py_type is Some
    assert struct.field_names() == ('foo', 'bar', 'baz', 'maybe', 'base')

    foo = struct.field('foo')
    assert foo.tag == 'json:"foo"'
    assert isinstance(foo.type, ScalarType)
    assert foo.type.capabilities == frozenset({capability_name(Undefinedable)})

    bar = struct.field('bar').type
    assert isinstance(bar, ScalarType)
    assert bar.py_type is str
    assert bar.capabilities == frozenset()

    assert isinstance(struct.field('baz').type, StructType)

    maybe = struct.field('maybe').type
    assert isinstance(maybe, PointerType)
    assert isinstance(maybe.elem, StructType)
    assert maybe.elem.py_type is Nested

    base = struct.field('base')
    assert base.anonymous
    assert base.tag == ''


def test_describe_type() -> None:
    assert describe_type(Und | None, capabilities=(Undefinedable,)) == PointerType(
        elem=ScalarType(name='Und', capabilities=frozenset({capability_name(Undefinedable)}), py_type=Und)
    )
    assert isinstance(describe_type(int | str), ScalarType)
    assert isinstance(describe_type(Annotated[Nested, StructTag('x:"y"')]), StructType)


def test_describe_interface_field() -> None:
    struct = describe_model(WithInterface, capabilities=(Undefinedable,))
    assert isinstance(struct.field('handler').type, InterfaceType)


def test_describe_self_referential_model() -> None:
    struct = describe_model(Node)

    next_type = struct.field('next').type
    assert isinstance(next_type, PointerType)
    assert isinstance(next_type.elem, TypeRef)
    assert next_type.elem.py_type is Node
    assert next_type.elem.name == struct.name


def test_self_referential_model_cycle_policy() -> None:
    struct = describe_model(Node)

    with pytest.raises(CyclicTypeError):
        mutate_type(struct, skip_never(), OMIT_ZERO_ON_UNDEFINEDABLE, on_cycle='error')

    kept = build_model(mutate_type(struct, skip_never(), add_option('json', 'omitempty', skip_never()), on_cycle='keep'))
    assert get_tagged_fields(kept, 'json') == {'value': 'value,omitempty', 'next': 'next,omitempty'}
    assert get_args(kept.model_fields['next'].annotation)[0] is Node


def test_build_model_round_trip() -> None:
    struct = describe_model(Some, capabilities=(Undefinedable,))
    retagged = build_model(mutate_type(struct, skip_never(), OMIT_ZERO_ON_UNDEFINEDABLE))

    assert retagged is not Some
    assert retagged.__name__ == 'Some'
    assert list(retagged.model_fields) == list(Some.model_fields)
    assert get_tagged_fields(retagged, 'json') == {
        'foo': 'foo,omitzero',
        'bar': 'bar',
        'baz': 'baz',
        'maybe': 'maybe',
    }

    baz_model = retagged.model_fields['baz'].annotation
    assert baz_model is not Nested
    assert baz_model.__name__ == 'Nested'
    assert get_tagged_fields(baz_model, 'json') == {'nah': 'nah,omitzero', 'yay': 'yay'}

    maybe_model = get_args(retagged.model_fields['maybe'].annotation)[0]
    assert get_tagged_fields(maybe_model, 'json') == {'nah': 'nah,omitzero', 'yay': 'yay'}


def test_build_model_keeps_field_settings() -> None:
    retagged = build_model(mutate_type(describe_model(Some), skip_never(), OMIT_ZERO_ON_UNDEFINEDABLE))

    bar = retagged.model_fields['bar']
    assert bar.default == ''
    assert bar.description == 'Bar text'
    with pytest.raises(pydantic.ValidationError):
        retagged(bar='much too long')

    assert retagged.model_fields['baz'].default_factory is Nested
    assert is_embedded(retagged.model_fields['base'])


def test_build_model_leaves_source_untouched() -> None:
    build_model(mutate_type(describe_model(Some, (Undefinedable,)), skip_never(), OMIT_ZERO_ON_UNDEFINEDABLE))
    assert get_tagged_fields(Some, 'json')['foo'] == 'foo'
    assert get_tagged_fields(Nested, 'json')['nah'] == 'nah'


def test_build_model_validates_values() -> None:
    retagged = build_model(describe_model(Nested))
    instance = retagged(nah=Und('x', defined=True), yay=3)
    assert instance.yay == 3
    assert instance.nah == Und('x', defined=True)


def test_build_model_from_plain_descriptor() -> None:
    struct = StructType(
        name='pkg.Plain',
        fields=(
            describe_model(Nested).field('yay').model_copy(update={'tag': 'json:"yay,omitempty"'}),
        ),
    )
    model = build_model(struct)
    assert model.__name__ == 'Plain'
    assert get_tagged_fields(model, 'json') == {'yay': 'yay,omitempty'}
    assert model.model_fields['yay'].is_required()


def test_build_model_keeps_aliases_and_discriminators() -> None:
    mutate = add_option('json', 'omitempty', skip_never(), strict=True)
    retagged = build_model(mutate_type(describe_model(Pet), skip_never(), mutate))

    assert get_tagged_fields(retagged, 'json') == {'name': 'name,omitempty', 'animal': 'animal,omitempty'}

    name = retagged.model_fields['name']
    assert name.serialization_alias == 'Name'
    assert retagged(name='Rex').model_dump(by_alias=True) == {'Name': 'Rex', 'animal': {'kind': 'cat'}}

    assert retagged.model_fields['animal'].discriminator == 'kind'
    assert isinstance(retagged.model_validate({'animal': {'kind': 'dog'}}).animal, Dog)
    with pytest.raises(pydantic.ValidationError, match='union_tag_invalid'):
        retagged.model_validate({'animal': {'kind': 'fish'}})


def test_build_model_excludes_unexported_fields() -> None:
    struct = describe_model(Pet)
    hidden = struct.field('name').model_copy(update={'exported': False})
    retagged = build_model(struct.model_copy(update={'fields': (hidden, struct.field('animal'))}))

    assert retagged.model_fields['name'].exclude is True
    assert retagged.model_fields['name'].serialization_alias == 'Name'
    assert retagged(name='Rex').model_dump() == {'animal': {'kind': 'cat'}}


def test_capabilities_are_distinguished_by_module() -> None:
    class first:
        @runtime_checkable
        class Marshaler(Protocol):
            def marshal(self) -> bytes: ...

    class second:
        @runtime_checkable
        class Marshaler(Protocol):
            def encode(self) -> bytes: ...

    class Encoded:
        def encode(self) -> bytes:
            return b''

    described = describe_type(Encoded, capabilities=(first.Marshaler, second.Marshaler))

    assert described.capabilities == frozenset({capability_name(second.Marshaler)})
    assert skip_implementor(second.Marshaler)(described)
    assert not skip_implementor(first.Marshaler)(described)


def test_describe_model_rejects_non_struct_result(monkeypatch: pytest.MonkeyPatch) -> None:
    import retag.introspection

    monkeypatch.setattr(
        retag.introspection,
        '_describe_model',
        lambda model, capabilities, path: TypeRef(name='Node', py_type=model),
    )
    with pytest.raises(TypeError, match='Expected a StructType'):
        describe_model(Node)
