"""Tests for TypeMapper.map_parameter and the callback/closure helpers"""

import pytest

from gir_ffi_mapper.callbacks import GENERIC_CLOSURE_TS, TrampolineSignature
from gir_ffi_mapper.ffi_types import FFI_INT32, FFI_POINTER, BooleanType, Ownership
from gir_ffi_mapper.models import Direction, Parameter, Transfer, TypeRef
from gir_ffi_mapper.type_mapping import MappingConfig, MappingKind, TypeMapper


def _param(name, type_name, **kwargs):
    return Parameter(name=name, type=TypeRef(name=type_name), **kwargs)


class TestOutParameters:
    """Test Ref<> wrapping of out/inout parameters"""

    @pytest.mark.parametrize("direction", [Direction.OUT, Direction.INOUT])
    def test_primitive_is_wrapped(self, bare_mapper, direction):
        result = bare_mapper.map_parameter(_param("value", "gint", direction=direction))

        assert result.ts == "Ref<number>"
        assert result.inner_ts_type == "number"
        assert result.ffi.to_dict() == {
            "type": "ref",
            "innerType": {"type": "int", "size": 32, "unsigned": False},
        }

    def test_in_parameter_is_not_wrapped(self, bare_mapper):
        result = bare_mapper.map_parameter(_param("value", "gint"))

        assert result.ts == "number"
        assert result.inner_ts_type is None

    def test_out_object_is_wrapped(self, mapper):
        result = mapper.map_parameter(_param("child", "Widget", direction=Direction.OUT))

        assert result.ts == "Ref<Widget>"
        assert result.kind == MappingKind.CLASS
        assert result.ffi.inner_type.type == "gobject"
        assert result.imports[0].name == "Widget"

    def test_inout_object_is_not_wrapped(self, mapper):
        result = mapper.map_parameter(_param("widget", "Widget", direction=Direction.INOUT))

        assert result.ts == "Widget"
        assert result.ffi.type == "gobject"
        assert result.inner_ts_type is None

    def test_inout_record_is_wrapped(self, mapper):
        result = mapper.map_parameter(_param("border", "Border", direction=Direction.INOUT))

        assert result.ts == "Ref<Border>"

    def test_caller_allocated_boxed_is_passed_directly(self, registry):
        mapper = TypeMapper(registry, "Gdk")

        result = mapper.map_parameter(_param("rect", "Rectangle", direction=Direction.OUT, caller_allocates=True))

        assert result.ts == "Rectangle"
        assert result.ffi.type == "boxed"
        assert result.ffi.ownership == Ownership.BORROWED

    def test_caller_allocated_struct_is_passed_directly(self, mapper):
        result = mapper.map_parameter(_param("border", "Border", direction=Direction.OUT, caller_allocates=True))

        assert result.ts == "Border"
        assert result.ffi.type == "struct"

    def test_caller_allocated_fundamental_is_borrowed(self, mapper):
        result = mapper.map_parameter(
            _param("iter", "TreeIter", direction=Direction.OUT, caller_allocates=True, transfer_ownership=Transfer.FULL)
        )

        assert result.ffi.type == "fundamental"
        assert result.ffi.ownership == Ownership.BORROWED

    def test_caller_allocated_primitive_is_still_wrapped(self, bare_mapper):
        result = bare_mapper.map_parameter(_param("value", "gdouble", direction=Direction.OUT, caller_allocates=True))

        assert result.ts == "Ref<number>"

    def test_out_array_is_wrapped_with_offset(self, bare_mapper):
        param = Parameter(
            name="items",
            type=TypeRef(name="array", is_array=True, element_type=TypeRef(name="utf8"), size_param_index=1),
            direction=Direction.OUT,
        )

        result = bare_mapper.map_parameter(param, param_offset=1)

        assert result.ts == "Ref<string[]>"
        assert result.ffi.inner_type.size_param_index == 2


class TestParameterTransfer:
    """Test that the parameter annotation overrides the type's"""

    def test_transfer_full(self, mapper):
        result = mapper.map_parameter(_param("widget", "Widget", transfer_ownership=Transfer.FULL))

        assert result.ffi.ownership == Ownership.FULL

    def test_transfer_none(self, mapper):
        result = mapper.map_parameter(_param("widget", "Widget", transfer_ownership=Transfer.NONE))

        assert result.ffi.ownership == Ownership.BORROWED

    def test_parameter_annotation_beats_type_annotation(self, mapper):
        param = Parameter(
            name="widget",
            type=TypeRef(name="Widget", transfer_ownership=Transfer.FULL),
            transfer_ownership=Transfer.NONE,
        )

        assert mapper.map_parameter(param).ffi.ownership == Ownership.BORROWED


class TestTrampolines:
    """Test callback parameters bound to known trampolines"""

    def test_async_ready_callback(self, bare_mapper):
        result = bare_mapper.map_parameter(_param("callback", "Gio.AsyncReadyCallback"))

        assert result.ts == "(source: unknown, result: unknown) => void"
        assert result.kind == MappingKind.CALLBACK
        assert result.ffi.type == "callback"
        assert result.ffi.kind == "asyncReadyCallback"
        assert [a.to_dict() for a in result.ffi.arg_types] == [
            {"type": "gobject", "ownership": "borrowed"},
            {"type": "gobject", "ownership": "borrowed"},
        ]

    def test_destroy_notify(self, bare_mapper):
        result = bare_mapper.map_parameter(_param("destroy", "GLib.DestroyNotify"))

        assert result.ts == "() => void"
        assert result.ffi.kind == "destroyNotify"
        assert result.ffi.arg_types == ()

    def test_drawing_area_draw_func(self, bare_mapper):
        result = bare_mapper.map_parameter(_param("draw_func", "Gtk.DrawingAreaDrawFunc"))

        assert result.ts == "(self: DrawingArea, cr: Cairo.Context, width: number, height: number) => void"
        assert result.ffi.kind == "drawingAreaDrawFunc"
        assert [a.to_dict() for a in result.ffi.arg_types] == [
            {"type": "gobject", "ownership": "borrowed"},
            {"type": "boxed", "ownership": "borrowed", "innerType": "CairoContext"},
            {"type": "int", "size": 32, "unsigned": False},
            {"type": "int", "size": 32, "unsigned": False},
        ]

    def test_signature_derived_from_declaration(self, mapper):
        result = mapper.map_parameter(_param("callback", "TickCallback"))

        assert result.ts == "(widget: Widget, frameClock: Gdk.FrameClock) => boolean"
        assert result.ffi.kind == "tickCallback"
        assert result.ffi.return_type == BooleanType()
        assert [a.ownership for a in result.ffi.arg_types] == [Ownership.BORROWED, Ownership.BORROWED]
        assert [(i.namespace, i.name) for i in result.imports] == [("Gtk", "Widget"), ("Gdk", "FrameClock")]

    def test_supported_without_declaration(self, bare_mapper):
        result = bare_mapper.map_parameter(_param("callback", "Gtk.TickCallback"))

        assert result.ts == GENERIC_CLOSURE_TS
        assert result.ffi.kind == "tickCallback"

    @pytest.mark.parametrize("name", ["GLib.Closure", "GObject.Closure"])
    def test_generic_closure(self, mapper, name):
        result = mapper.map_parameter(_param("closure", name))

        assert result.ts == "(...args: unknown[]) => unknown"
        assert result.ffi.kind == "closure"
        assert mapper.has_unsupported_callback(_param("closure", name)) is True

    def test_unsupported_callback_is_a_pointer(self, mapper):
        result = mapper.map_parameter(_param("func", "CustomFilterFunc"))

        assert result.kind == MappingKind.CALLBACK
        assert result.ffi == FFI_POINTER

    def test_custom_trampoline(self, mapper):
        config = MappingConfig().with_trampoline(
            "Gtk.CustomFilterFunc",
            "customFilterFunc",
            TrampolineSignature(ts="(item: unknown) => boolean", arg_types=(FFI_INT32,), return_type=BooleanType()),
        )
        custom = TypeMapper(mapper.registry, "Gtk", config)

        result = custom.map_parameter(_param("func", "CustomFilterFunc"))

        assert result.ts == "(item: unknown) => boolean"
        assert result.ffi.kind == "customFilterFunc"
        assert custom.has_unsupported_callback(_param("func", "CustomFilterFunc")) is False


class TestCallbackHelpers:
    """Test is_callback, has_unsupported_callback and signature helpers"""

    def test_is_callback(self, mapper):
        assert mapper.is_callback("TickCallback") is True
        assert mapper.is_callback("Gio.AsyncReadyCallback") is True
        assert mapper.is_callback("Widget") is False

    def test_is_callback_without_registry(self, bare_mapper):
        assert bare_mapper.is_callback("Gio.AsyncReadyCallback") is False

    def test_has_unsupported_callback(self, mapper):
        assert mapper.has_unsupported_callback(_param("func", "CustomFilterFunc")) is True
        assert mapper.has_unsupported_callback(_param("callback", "TickCallback")) is False
        assert mapper.has_unsupported_callback(_param("widget", "Widget")) is False

    def test_callback_param_mappings_filter_user_data(self, mapper):
        mappings = mapper.get_callback_param_mappings(_param("callback", "TickCallback"))

        assert [m.name for m in mappings] == ["widget", "frame_clock"]
        assert mappings[1].mapping.ts == "Gdk.FrameClock"

    def test_callback_param_mappings_across_namespaces(self, mapper):
        mappings = mapper.get_callback_param_mappings(_param("callback", "Gio.AsyncReadyCallback"))

        assert [m.name for m in mappings] == ["source_object", "res"]

    def test_destroy_notify_has_no_arguments(self, mapper):
        assert mapper.get_callback_param_mappings(_param("destroy", "GLib.DestroyNotify")) == []

    def test_unsupported_callback_has_no_mappings(self, mapper):
        param = _param("func", "CustomFilterFunc")

        assert mapper.get_callback_param_mappings(param) is None
        assert mapper.get_callback_return_type(param) is None

    def test_callback_return_type(self, mapper):
        result = mapper.get_callback_return_type(_param("callback", "TickCallback"))

        assert result.ts == "boolean"

    def test_void_callback_return_type(self, mapper):
        result = mapper.get_callback_return_type(_param("callback", "Gio.AsyncReadyCallback"))

        assert result.ts == "void"
        assert result.ffi.type == "undefined"


class TestClosureTargets:
    """Test detection of user-data and destroy parameters"""

    def test_user_data_of_trampoline_callback(self, bare_mapper):
        params = [
            _param("callback", "Gio.AsyncReadyCallback", closure=1),
            _param("user_data", "gpointer"),
        ]

        assert bare_mapper.is_closure_target(1, params) is True

    def test_destroy_of_trampoline_callback(self, bare_mapper):
        params = [
            _param("callback", "Gio.AsyncReadyCallback", destroy=2),
            _param("user_data", "gpointer"),
            _param("destroy", "GLib.DestroyNotify"),
        ]

        assert bare_mapper.is_closure_target(2, params) is True

    def test_closure_and_destroy_together(self, mapper):
        params = [
            _param("callback", "TickCallback", closure=1, destroy=2),
            _param("user_data", "gpointer"),
            _param("notify", "GLib.DestroyNotify"),
        ]

        assert mapper.is_closure_target(0, params) is False
        assert mapper.is_closure_target(1, params) is True
        assert mapper.is_closure_target(2, params) is True

    def test_accepts_parameter_object(self, mapper):
        user_data = _param("user_data", "gpointer")
        params = [_param("callback", "TickCallback", closure=1), user_data]

        assert mapper.is_closure_target(user_data, params) is True
        assert mapper.is_closure_target(_param("other", "gpointer"), params) is False

    def test_non_closure_parameters(self, bare_mapper):
        params = [_param("widget", "Widget"), _param("label", "utf8")]

        assert bare_mapper.is_closure_target(0, params) is False
        assert bare_mapper.is_closure_target(1, params) is False

    def test_unsupported_callback_does_not_claim_user_data(self, mapper):
        params = [_param("func", "CustomFilterFunc", closure=1), _param("user_data", "gpointer")]

        assert mapper.is_closure_target(1, params) is False


class TestNullable:
    """Test is_nullable"""

    def test_nullable(self, bare_mapper):
        assert bare_mapper.is_nullable(_param("value", "utf8", nullable=True)) is True

    def test_optional(self, bare_mapper):
        assert bare_mapper.is_nullable(_param("value", "utf8", optional=True)) is True

    def test_required(self, bare_mapper):
        assert bare_mapper.is_nullable(_param("value", "utf8")) is False
