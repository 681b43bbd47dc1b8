"""
Tests for ObjectBinder: construction, get/set and invocation by name.
"""

import pytest

from peephole.core.binder import ObjectBinder
from peephole.core.exceptions import (
    AmbiguousMatchError,
    ArgumentNullError,
    ConstructorNotFoundError,
    GenericConstraintError,
    MemberNotFoundError,
    TargetInvocationError,
)
from peephole.core.resolver import resolve_type
from peephole.core.visibility import VisibilityMask
from peephole_samples import overloads, widgets

WIDGETS = "peephole_samples.widgets"
SHAPES = "peephole_samples.shapes"
OVERLOADS = "peephole_samples.overloads"

PRIVATE = VisibilityMask.NON_PUBLIC | VisibilityMask.INSTANCE
PRIVATE_STATIC = VisibilityMask.NON_PUBLIC | VisibilityMask.STATIC


@pytest.fixture
def counter_binder():
    return ObjectBinder.create_instance(resolve_type(WIDGETS, "Counter"), [5])


class TestConstruction:
    def test_create_instance(self, counter_binder):
        assert isinstance(counter_binder.instance, widgets.Counter)
        assert counter_binder.instance.count == 5
        assert not counter_binder.is_static

    def test_default_arguments(self):
        binder = ObjectBinder.create_instance(resolve_type(WIDGETS, "Counter"))
        assert binder.instance.count == 0

    def test_generic_instance_keeps_its_arguments(self):
        handle = resolve_type(WIDGETS, "Box", [int])
        binder = ObjectBinder.create_instance(handle, [7])
        assert binder.instance.__orig_class__ == widgets.Box[int]
        assert binder.handle is handle

    def test_constructor_argument_types_follow_generic_arguments(self):
        handle = resolve_type(WIDGETS, "Box", [int])
        with pytest.raises(ConstructorNotFoundError):
            ObjectBinder.create_instance(handle, ["seven"])

    def test_parameterized_base_binds_constructor_types(self):
        binder = ObjectBinder.create_instance(resolve_type(WIDGETS, "IntBox"), [5])
        assert binder.invoke("_peek", PRIVATE) == 5
        with pytest.raises(ConstructorNotFoundError):
            ObjectBinder.create_instance(resolve_type(WIDGETS, "IntBox"), ["five"])

    def test_partially_parameterized_base(self):
        handle = resolve_type(WIDGETS, "Keyed", [int])
        binder = ObjectBinder.create_instance(handle, ["a", 1])
        assert binder.invoke("_key", PRIVATE) == "a"
        with pytest.raises(ConstructorNotFoundError):
            ObjectBinder.create_instance(handle, ["a", "b"])

    def test_constructor_exception_is_unwrapped(self):
        with pytest.raises(ValueError, match="must not be negative"):
            ObjectBinder.create_instance(resolve_type(WIDGETS, "Counter"), [-1])

    def test_no_matching_constructor(self):
        with pytest.raises(ConstructorNotFoundError) as excinfo:
            ObjectBinder.create_instance(resolve_type(WIDGETS, "Counter"), [1, 2, 3])
        assert "Counter" in excinfo.value.type_name

    def test_abstract_class(self):
        with pytest.raises(ConstructorNotFoundError, match="abstract"):
            ObjectBinder.create_instance(resolve_type(SHAPES, "Shape"), ["blob"])

    def test_overloaded_constructor(self):
        handle = resolve_type(OVERLOADS, "Temperature")
        assert ObjectBinder.create_instance(handle, ["30C"]).instance._celsius == 30.0
        assert ObjectBinder.create_instance(handle, [20]).instance._celsius == 20

    def test_explicit_constructor_parameter_types(self):
        handle = resolve_type(OVERLOADS, "Temperature")
        binder = ObjectBinder.create_instance(handle, [20], ctor_param_types=[float])
        assert binder.instance._celsius == 20

    def test_mask_does_not_restrict_constructors(self):
        handle = resolve_type(WIDGETS, "Counter")
        binder = ObjectBinder.create_instance(handle, [1], mask=VisibilityMask.PUBLIC)
        assert binder.instance.count == 1

    def test_null_handle(self):
        with pytest.raises(ArgumentNullError):
            ObjectBinder.create_instance(None)


class TestWrap:
    def test_wrap_none(self):
        assert ObjectBinder.wrap(None) is None

    def test_wrap_existing_object(self):
        counter = widgets.Counter(2)
        binder = ObjectBinder.wrap(counter)
        assert binder.instance is counter
        assert binder.handle == resolve_type(WIDGETS, "Counter")

    def test_wrapped_generic_without_alias(self):
        binder = ObjectBinder.wrap(widgets.Box(3))
        assert binder.invoke("_peek", PRIVATE) == 3
        assert binder.invoke("_replace", PRIVATE, ["any"]) == 3

    def test_wrapped_subclass_of_parameterized_base(self):
        binder = ObjectBinder.wrap(widgets.IntBox(4))
        assert binder.invoke("_peek", PRIVATE) == 4
        assert binder.invoke("_replace", PRIVATE, [6]) == 4
        with pytest.raises(MemberNotFoundError):
            binder.invoke("_replace", PRIVATE, ["six"])

    def test_static_binder(self):
        binder = ObjectBinder.create_static(resolve_type(WIDGETS, "Counter"))
        assert binder.is_static
        assert binder.instance is None
        assert binder.target_type is widgets.Counter


class TestGetSet:
    def test_get_field_and_property(self, counter_binder):
        assert counter_binder.get("_count", PRIVATE) == 5
        assert counter_binder.get("_doubled", PRIVATE) == 10
        assert counter_binder.get("count", VisibilityMask.DEFAULT) == 5
        assert counter_binder.get("__secret", PRIVATE) == "hidden"

    def test_set_field_and_property(self, counter_binder):
        counter_binder.set("_count", PRIVATE, 8)
        assert counter_binder.instance.count == 8
        counter_binder.set("_limit", PRIVATE, 9)
        assert counter_binder.get("__limit", PRIVATE) == 9
        counter_binder.set("__secret", PRIVATE, "revealed")
        assert counter_binder.instance._Counter__secret == "revealed"

    def test_property_without_setter(self, counter_binder):
        with pytest.raises(MemberNotFoundError, match="no setter"):
            counter_binder.set("_doubled", PRIVATE, 1)

    def test_property_exceptions_are_unwrapped(self, counter_binder):
        with pytest.raises(KeyError):
            counter_binder.get("_broken", PRIVATE)
        with pytest.raises(ValueError, match="limit must not be negative"):
            counter_binder.set("_limit", PRIVATE, -1)

    def test_wrong_visibility(self, counter_binder):
        with pytest.raises(MemberNotFoundError):
            counter_binder.get("_count", VisibilityMask.DEFAULT)

    def test_method_is_not_a_field(self, counter_binder):
        with pytest.raises(MemberNotFoundError, match="expected a field or property"):
            counter_binder.get("_increment", PRIVATE)

    def test_null_arguments(self, counter_binder):
        with pytest.raises(ArgumentNullError):
            counter_binder.get(None, PRIVATE)
        with pytest.raises(ArgumentNullError):
            counter_binder.set(None, PRIVATE, 1)
        with pytest.raises(ArgumentNullError) as excinfo:
            counter_binder.set("_count", PRIVATE, None)
        assert excinfo.value.argument == "value"

    def test_unset_slot(self):
        binder = ObjectBinder.wrap(widgets.Point(1))
        with pytest.raises(MemberNotFoundError, match="slot has no value"):
            binder.get("_y", PRIVATE)
        binder.set("_y", PRIVATE, 2)
        assert binder.get("_y", PRIVATE) == 2

    def test_static_fields(self):
        binder = ObjectBinder.create_static(resolve_type(WIDGETS, "Outer._Inner"))
        assert binder.get("_greeting", PRIVATE_STATIC) == "hello"
        binder.set("_greeting", PRIVATE_STATIC, "hi")
        try:
            assert widgets.Outer._Inner._greeting == "hi"
        finally:
            widgets.Outer._Inner._greeting = "hello"

    def test_static_binder_cannot_see_instance_members(self):
        binder = ObjectBinder.create_static(resolve_type(WIDGETS, "Counter"))
        with pytest.raises(MemberNotFoundError, match="static binder"):
            binder.get("_count", VisibilityMask.ALL)


class TestInvoke:
    def test_invoke_private_method(self, counter_binder):
        assert counter_binder.invoke("_increment", PRIVATE, [2]) == 7
        assert counter_binder.invoke("_increment", PRIVATE) == 8

    def test_invoke_mangled_method(self, counter_binder):
        counter_binder.invoke("__reset", PRIVATE)
        assert counter_binder.instance.count == 0

    def test_exceptions_are_unwrapped(self, counter_binder):
        with pytest.raises(OverflowError, match="limit 100 exceeded") as excinfo:
            counter_binder.invoke("_increment", PRIVATE, [500])
        assert not isinstance(excinfo.value, TargetInvocationError)
        assert excinfo.value.__context__ is None

    def test_callback_arguments(self, counter_binder):
        assert counter_binder.invoke("_apply", PRIVATE, [lambda n: n * 10]) == 50

    def test_optional_and_variadic_parameters(self, counter_binder):
        assert counter_binder.invoke("_maybe", PRIVATE, [None]) == "none"
        assert counter_binder.invoke("_maybe", PRIVATE, [4]) == "int:4"
        assert counter_binder.invoke("_total", PRIVATE, [1, 2, 3]) == 6
        assert counter_binder.invoke("_total", PRIVATE) == 0

    def test_none_for_a_non_optional_parameter(self, counter_binder):
        with pytest.raises(MemberNotFoundError, match="NoneType"):
            counter_binder.invoke("_increment", PRIVATE, [None])

    def test_overloads(self):
        binder = ObjectBinder.wrap(overloads.Calculator())
        assert binder.invoke("_twice", PRIVATE, [3]) == "int:6"
        assert binder.invoke("_twice", PRIVATE, [1.5]) == "float:3.0"
        assert binder.invoke("_twice", PRIVATE, [3], param_types=[float]) == "float:6"
        with pytest.raises(AmbiguousMatchError):
            binder.invoke("_pair", PRIVATE, [1, 2])

    def test_static_methods(self):
        handle = resolve_type(WIDGETS, "Counter")
        binder = ObjectBinder.create_static(handle)
        assert binder.invoke("_describe", PRIVATE_STATIC, [3]) == "count=3"
        assert isinstance(binder.invoke("_created", PRIVATE_STATIC), int)
        with pytest.raises(MemberNotFoundError):
            binder.invoke("_describe", PRIVATE, [3])

    def test_static_overloads(self):
        binder = ObjectBinder.create_static(resolve_type(OVERLOADS, "Calculator"))
        assert binder.invoke("_render", PRIVATE_STATIC, [4]) == "int:4"
        assert binder.invoke("_render", PRIVATE_STATIC, [[1, 2, 3]]) == "list:3"
        assert binder.invoke("_render", PRIVATE_STATIC, ["x"]) == "object:'x'"

    def test_generic_methods(self):
        binder = ObjectBinder.create_instance(resolve_type(WIDGETS, "Box", [int]), [5])
        assert binder.invoke("_coerce", PRIVATE, [str], method_generic_args=[str]) == "5"
        with pytest.raises(GenericConstraintError):
            binder.invoke("_coerce", PRIVATE, [str])
        with pytest.raises(GenericConstraintError):
            binder.invoke("_tag", PRIVATE, ["x"], method_generic_args=[int])

    def test_class_generic_arguments_apply(self):
        binder = ObjectBinder.create_instance(resolve_type(WIDGETS, "Box", [int]), [5])
        assert binder.invoke("_replace", PRIVATE, [6]) == 5
        with pytest.raises(MemberNotFoundError):
            binder.invoke("_replace", PRIVATE, ["six"])

    def test_field_is_not_a_method(self, counter_binder):
        with pytest.raises(MemberNotFoundError, match="expected a method"):
            counter_binder.invoke("_count", PRIVATE)

    def test_null_name(self, counter_binder):
        with pytest.raises(ArgumentNullError):
            counter_binder.invoke(None, PRIVATE)
