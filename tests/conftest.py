"""
Pytest configuration and fixtures
"""

import pytest

from gir_ffi_mapper.models import (
    Callback,
    Class,
    Direction,
    Enumeration,
    EnumMember,
    Function,
    Interface,
    Namespace,
    Parameter,
    Record,
    TypeRef,
)
from gir_ffi_mapper.registry import TypeRegistry
from gir_ffi_mapper.type_mapping import TypeMapper


@pytest.fixture
def glib_namespace():
    """GLib: error record, boxed bytes, an opaque source, DestroyNotify"""
    return Namespace(
        name="GLib",
        version="2.0",
        shared_library="libglib-2.0.so.0",
        records=[
            Record(
                name="Error",
                c_type="GError",
                glib_type_name="GError",
                glib_get_type="g_error_get_type",
                copy_function="g_error_copy",
                free_function="g_error_free",
            ),
            Record(name="Bytes", c_type="GBytes", glib_type_name="GBytes", glib_get_type="g_bytes_get_type"),
            Record(name="Source", c_type="GSource", disguised=True),
        ],
        bitfields=[
            Enumeration(
                name="IOCondition",
                glib_get_type="g_io_condition_get_type",
                members=[EnumMember(name="in", value=1), EnumMember(name="out", value=4)],
            ),
        ],
        callbacks=[
            Callback(
                name="DestroyNotify",
                c_type="GDestroyNotify",
                parameters=[Parameter(name="data", type=TypeRef(name="gpointer"))],
            ),
        ],
    )


@pytest.fixture
def gobject_namespace():
    """GObject: root object, a fundamental class and the closure record"""
    return Namespace(
        name="GObject",
        version="2.0",
        shared_library="libgobject-2.0.so.0",
        classes=[
            Class(name="Object", c_type="GObject", glib_type_name="GObject", glib_get_type="g_object_get_type"),
            Class(name="InitiallyUnowned", parent="Object", glib_get_type="g_initially_unowned_get_type"),
            Class(
                name="ParamSpec",
                c_type="GParamSpec",
                glib_type_name="GParam",
                fundamental=True,
                ref_func="g_param_spec_ref_sink",
                unref_func="g_param_spec_unref",
            ),
        ],
        records=[
            Record(name="Closure", c_type="GClosure", glib_type_name="GClosure", glib_get_type="g_closure_get_type"),
            Record(name="Value", c_type="GValue", glib_type_name="GValue", glib_get_type="g_value_get_type"),
        ],
    )


@pytest.fixture
def gio_namespace():
    """Gio: application class, async-result interface, AsyncReadyCallback"""
    return Namespace(
        name="Gio",
        version="2.0",
        shared_library="libgio-2.0.so.0",
        classes=[
            Class(
                name="Application",
                parent="GObject.Object",
                glib_get_type="g_application_get_type",
                methods=[
                    Function(
                        name="run",
                        c_identifier="g_application_run",
                        return_type=TypeRef(name="gint"),
                        parameters=[
                            Parameter(name="argc", type=TypeRef(name="gint")),
                            Parameter(
                                name="argv",
                                type=TypeRef(
                                    name="array",
                                    is_array=True,
                                    element_type=TypeRef(name="filename"),
                                    size_param_index=0,
                                ),
                                nullable=True,
                            ),
                        ],
                    ),
                ],
            ),
            Class(name="Cancellable", parent="GObject.Object"),
        ],
        interfaces=[Interface(name="AsyncResult", glib_get_type="g_async_result_get_type")],
        callbacks=[
            Callback(
                name="AsyncReadyCallback",
                c_type="GAsyncReadyCallback",
                parameters=[
                    Parameter(name="source_object", type=TypeRef(name="GObject.Object"), nullable=True),
                    Parameter(name="res", type=TypeRef(name="AsyncResult")),
                    Parameter(name="data", type=TypeRef(name="gpointer"), closure=2),
                ],
            ),
        ],
    )


@pytest.fixture
def gdk_namespace():
    """Gdk: display class, boxed and fundamental records"""
    return Namespace(
        name="Gdk",
        version="4.0",
        shared_library="libgtk-4.so.1",
        classes=[
            Class(name="Display", parent="GObject.Object", glib_get_type="gdk_display_get_type"),
            Class(name="FrameClock", parent="GObject.Object", glib_get_type="gdk_frame_clock_get_type"),
        ],
        records=[
            Record(
                name="Rectangle",
                c_type="GdkRectangle",
                glib_type_name="GdkRectangle",
                glib_get_type="gdk_rectangle_get_type",
            ),
            Record(
                name="RGBA",
                c_type="GdkRGBA",
                glib_type_name="GdkRGBA",
                glib_get_type="gdk_rgba_get_type",
                copy_function="gdk_rgba_copy",
                free_function="gdk_rgba_free",
            ),
        ],
    )


@pytest.fixture
def gtk_namespace():
    """Gtk: widgets, enums, flags, records, callbacks and a few callables"""
    destroy = Parameter(name="notify", type=TypeRef(name="GLib.DestroyNotify"))
    return Namespace(
        name="Gtk",
        version="4.0",
        shared_library="libgtk-4.so.1",
        classes=[
            Class(
                name="Widget",
                parent="GObject.InitiallyUnowned",
                abstract=True,
                glib_get_type="gtk_widget_get_type",
                methods=[
                    Function(
                        name="add_tick_callback",
                        c_identifier="gtk_widget_add_tick_callback",
                        return_type=TypeRef(name="guint"),
                        parameters=[
                            Parameter(name="callback", type=TypeRef(name="TickCallback"), closure=1, destroy=2),
                            Parameter(name="user_data", type=TypeRef(name="gpointer")),
                            destroy,
                        ],
                    ),
                    Function(
                        name="get_display",
                        c_identifier="gtk_widget_get_display",
                        return_type=TypeRef(name="Gdk.Display"),
                    ),
                    Function(
                        name="get_size",
                        c_identifier="gtk_widget_get_size",
                        return_type=TypeRef(name="gint"),
                        parameters=[Parameter(name="orientation", type=TypeRef(name="Orientation"))],
                    ),
                    Function(
                        name="compute_bounds",
                        c_identifier="gtk_widget_compute_bounds",
                        return_type=TypeRef(name="gboolean"),
                        parameters=[
                            Parameter(name="target", type=TypeRef(name="Widget")),
                            Parameter(
                                name="out_bounds",
                                type=TypeRef(name="Graphene.Rect"),
                                direction=Direction.OUT,
                                caller_allocates=True,
                            ),
                        ],
                    ),
                ],
            ),
            Class(
                name="Button",
                parent="Widget",
                glib_get_type="gtk_button_get_type",
                constructors=[
                    Function(
                        name="new_with_label",
                        c_identifier="gtk_button_new_with_label",
                        return_type=TypeRef(name="Widget"),
                        parameters=[Parameter(name="label", type=TypeRef(name="utf8"))],
                    ),
                ],
            ),
            Class(
                name="DrawingArea",
                parent="Widget",
                glib_get_type="gtk_drawing_area_get_type",
                methods=[
                    Function(
                        name="set_draw_func",
                        c_identifier="gtk_drawing_area_set_draw_func",
                        parameters=[
                            Parameter(name="draw_func", type=TypeRef(name="DrawingAreaDrawFunc"), closure=1, destroy=2),
                            Parameter(name="user_data", type=TypeRef(name="gpointer")),
                            Parameter(name="destroy", type=TypeRef(name="GLib.DestroyNotify")),
                        ],
                    ),
                ],
            ),
            Class(
                name="PrintUnixDialog",
                parent="Widget",
                methods=[Function(name="get_page_setup", c_identifier="gtk_print_unix_dialog_get_page_setup")],
            ),
        ],
        interfaces=[Interface(name="Orientable", glib_get_type="gtk_orientable_get_type")],
        enumerations=[
            Enumeration(
                name="Orientation",
                glib_get_type="gtk_orientation_get_type",
                members=[EnumMember(name="horizontal", value=0), EnumMember(name="vertical", value=1)],
            ),
            Enumeration(name="text_direction"),
        ],
        bitfields=[Enumeration(name="StateFlags", glib_get_type="gtk_state_flags_get_type")],
        records=[
            Record(name="Border", c_type="GtkBorder"),
            Record(
                name="TreeIter",
                c_type="GtkTreeIter",
                glib_type_name="GtkTreeIter",
                glib_get_type="gtk_tree_iter_get_type",
                copy_function="gtk_tree_iter_copy",
                free_function="gtk_tree_iter_free",
            ),
        ],
        callbacks=[
            Callback(
                name="TickCallback",
                return_type=TypeRef(name="gboolean"),
                parameters=[
                    Parameter(name="widget", type=TypeRef(name="Widget")),
                    Parameter(name="frame_clock", type=TypeRef(name="Gdk.FrameClock")),
                    Parameter(name="user_data", type=TypeRef(name="gpointer"), closure=2),
                ],
            ),
            Callback(
                name="DrawingAreaDrawFunc",
                parameters=[
                    Parameter(name="drawing_area", type=TypeRef(name="DrawingArea")),
                    Parameter(name="cr", type=TypeRef(name="cairo.Context")),
                    Parameter(name="width", type=TypeRef(name="gint")),
                    Parameter(name="height", type=TypeRef(name="gint")),
                    Parameter(name="user_data", type=TypeRef(name="gpointer"), closure=4),
                ],
            ),
            Callback(
                name="CustomFilterFunc",
                return_type=TypeRef(name="gboolean"),
                parameters=[
                    Parameter(name="item", type=TypeRef(name="GObject.Object")),
                    Parameter(name="user_data", type=TypeRef(name="gpointer"), closure=1),
                ],
            ),
        ],
        functions=[
            Function(name="init", c_identifier="gtk_init"),
            Function(
                name="filter_items",
                c_identifier="gtk_filter_items",
                parameters=[
                    Parameter(name="func", type=TypeRef(name="CustomFilterFunc"), closure=1),
                    Parameter(name="user_data", type=TypeRef(name="gpointer")),
                ],
            ),
            Function(
                name="test_init",
                c_identifier="gtk_test_init",
                parameters=[
                    Parameter(name="argcp", type=TypeRef(name="gint"), direction=Direction.INOUT),
                    Parameter(name="...", type=TypeRef(name="none")),
                ],
            ),
        ],
    )


@pytest.fixture
def all_namespaces(glib_namespace, gobject_namespace, gio_namespace, gdk_namespace, gtk_namespace):
    return [glib_namespace, gobject_namespace, gio_namespace, gdk_namespace, gtk_namespace]


@pytest.fixture
def registry(all_namespaces):
    return TypeRegistry.from_namespaces(all_namespaces)


@pytest.fixture
def mapper(registry):
    """Mapper homed in Gtk with every fixture namespace registered"""
    return TypeMapper(registry, "Gtk")


@pytest.fixture
def bare_mapper():
    """Mapper without a registry"""
    return TypeMapper()
