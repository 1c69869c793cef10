"""Tests for callable and namespace mapping"""

from gir_ffi_mapper.ffi_types import ArrayKind, Ownership
from gir_ffi_mapper.models import Function, Parameter, TypeRef
from gir_ffi_mapper.signatures import CallableKind, map_callable, map_namespace
from gir_ffi_mapper.type_mapping import TypeMapper


def _method(namespace, owner, name):
    cls = next(c for c in namespace.classes if c.name == owner)
    return next(m for m in cls.methods if m.name == name)


def _function(namespace, name):
    return next(f for f in namespace.functions if f.name == name)


class TestMapCallable:
    """Test map_callable on individual callables"""

    def test_closure_targets_are_hidden(self, mapper, gtk_namespace):
        fn = _method(gtk_namespace, "Widget", "add_tick_callback")

        result = map_callable(mapper, fn, CallableKind.METHOD, "Widget")

        assert result.supported is True
        assert [p.name for p in result.exposed_params] == ["callback"]
        assert result.exposed_params[0].mapping.ffi.kind == "tickCallback"
        assert result.exposed_return.ts == "number"

    def test_draw_func_hides_user_data_and_destroy(self, mapper, gtk_namespace):
        fn = _method(gtk_namespace, "DrawingArea", "set_draw_func")

        result = map_callable(mapper, fn, CallableKind.METHOD, "DrawingArea")

        assert [p.index for p in result.exposed_params] == [0]
        assert result.has_return is False

    def test_method_receiver_is_borrowed(self, registry, gio_namespace):
        mapper = TypeMapper(registry, "Gio")
        fn = _method(gio_namespace, "Application", "run")

        result = map_callable(mapper, fn, CallableKind.METHOD, "Application")

        assert result.receiver.ts == "Application"
        assert result.receiver.ffi.type == "gobject"
        assert result.receiver.ownership == Ownership.BORROWED

    def test_method_shifts_sized_array_index(self, registry, gio_namespace):
        mapper = TypeMapper(registry, "Gio")
        fn = _method(gio_namespace, "Application", "run")

        result = map_callable(mapper, fn, CallableKind.METHOD, "Application")
        argv = result.exposed_params[1]

        assert argv.mapping.ts == "string[]"
        assert argv.mapping.ffi.kind == ArrayKind.SIZED
        assert argv.mapping.ffi.size_param_index == 1
        assert argv.nullable is True

    def test_static_function_does_not_shift_index(self, registry, gio_namespace):
        mapper = TypeMapper(registry, "Gio")
        fn = _method(gio_namespace, "Application", "run")

        result = map_callable(mapper, fn, CallableKind.STATIC, "Application")

        assert result.receiver is None
        assert result.exposed_params[1].mapping.ffi.size_param_index == 0

    def test_unsupported_callback(self, mapper, gtk_namespace):
        result = map_callable(mapper, _function(gtk_namespace, "filter_items"), CallableKind.FUNCTION)

        assert result.supported is False
        assert result.reason == "Unsupported callback parameter 'func' of type 'CustomFilterFunc'"
        # The user-data argument stays visible when no trampoline owns it
        assert [p.name for p in result.exposed_params] == ["func", "user_data"]

    def test_variadic(self, mapper, gtk_namespace):
        result = map_callable(mapper, _function(gtk_namespace, "test_init"), CallableKind.FUNCTION)

        assert result.supported is False
        assert result.reason == "Variadic parameter '...'"
        assert result.exposed_param_list == [("Ref<number>", "argcp")]

    def test_unknown_types_are_collected(self, mapper, gtk_namespace):
        fn = _method(gtk_namespace, "Widget", "compute_bounds")

        result = map_callable(mapper, fn, CallableKind.METHOD, "Widget")

        assert result.supported is True
        assert result.unknown_types == ["Graphene.Rect"]
        assert result.exposed_params[1].mapping.ts == "Ref<number>"

    def test_unknown_array_element_is_reported_by_element_name(self, mapper):
        fn = Function(
            name="get_items",
            c_identifier="gtk_get_items",
            return_type=TypeRef(name="array", is_array=True, element_type=TypeRef(name="Pango.Item")),
        )

        result = map_callable(mapper, fn, CallableKind.FUNCTION)

        assert result.unknown_types == ["Pango.Item"]

    def test_external_return_type(self, mapper, gtk_namespace):
        result = map_callable(mapper, _method(gtk_namespace, "Widget", "get_display"), CallableKind.METHOD, "Widget")

        assert result.exposed_return.ts == "Gdk.Display"
        assert result.exposed_return.ownership == Ownership.BORROWED

    def test_unnamed_parameter_gets_positional_name(self, mapper):
        fn = Function(name="f", parameters=[Parameter(name="", type=TypeRef(name="gint"))])

        result = map_callable(mapper, fn, CallableKind.FUNCTION)

        assert result.exposed_params[0].name == "arg0"

    def test_to_dict(self, mapper, gtk_namespace):
        fn = gtk_namespace.classes[1].constructors[0]

        data = map_callable(mapper, fn, CallableKind.CONSTRUCTOR, "Button").to_dict()

        assert data["name"] == "new_with_label"
        assert data["cIdentifier"] == "gtk_button_new_with_label"
        assert data["kind"] == "constructor"
        assert data["owner"] == "Button"
        assert data["receiver"] is None
        assert data["parameters"][0]["mapping"]["ffi"] == {"type": "string", "ownership": "full"}
        assert data["returnType"]["ts"] == "Widget"
        assert data["supported"] is True
        assert data["unknownTypes"] == []


class TestMapNamespace:
    """Test map_namespace"""

    def test_maps_every_callable(self, mapper, gtk_namespace):
        result = map_namespace(mapper, gtk_namespace)

        assert len(result.callables) == 10
        assert [c.name for c in result.unsupported] == ["filter_items", "test_init"]
        assert result.unknown_types == ["Graphene.Rect"]

    def test_skipped_class_is_left_out(self, mapper, gtk_namespace):
        mapper.register_skipped_class("PrintUnixDialog")

        result = map_namespace(mapper, gtk_namespace)

        assert result.skipped_classes == ["PrintUnixDialog"]
        assert "get_page_setup" not in [c.name for c in result.callables]
        assert result.summary() == {
            "namespace": "Gtk",
            "version": "4.0",
            "entries": 13,
            "callables": 9,
            "supported": 7,
            "unsupported": 2,
            "unknownTypes": 1,
            "skippedClasses": 1,
        }

    def test_rehomes_mapper(self, mapper, gio_namespace):
        result = map_namespace(mapper, gio_namespace)

        assert mapper.namespace == "Gio"
        assert result.callables[0].qualified_name == "Application.run"
        assert result.callables[0].receiver.ts == "Application"

    def test_without_registry(self, gtk_namespace):
        result = map_namespace(TypeMapper(), gtk_namespace)

        assert result.entries == []
        assert len(result.callables) == 10

    def test_to_dict(self, mapper, gdk_namespace):
        data = map_namespace(mapper, gdk_namespace).to_dict()

        assert data["namespace"] == "Gdk"
        assert data["version"] == "4.0"
        assert [t["name"] for t in data["types"]] == ["Display", "FrameClock", "Rectangle", "RGBA"]
        assert data["callables"] == []
        assert data["skippedClasses"] == []
        assert data["unknownTypes"] == []
