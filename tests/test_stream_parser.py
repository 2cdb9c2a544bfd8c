"""Tests for the serialization stream parser."""
import pytest

from relic.core.constants import (
    SC_BLOCK_DATA,
    SC_ENUM,
    SC_EXTERNALIZABLE,
    SC_SERIALIZABLE,
    SC_WRITE_METHOD,
    TC_CLASSDESC,
    TC_PROXYCLASSDESC,
)
from relic.core.content import (
    ArrayContent,
    BlockData,
    ClassDescription,
    EnumContent,
    Instance,
    JavaLong,
    StringContent,
)
from relic.core.errors import (
    ExceptionRecordError,
    HandleResolutionError,
    NestingDepthError,
    RelicError,
    StreamBoundsError,
    StreamFormatError,
)
from relic.parsers.stream_parser import StreamParser

from tests.streams import H, StreamWriter, node_chain_stream, primitives_stream, ref


def parse(data: bytes):
    parser = StreamParser(data)
    return parser, parser.parse()


class TestHeader:
    """Stream magic and version validation."""

    def test_header_only(self):
        _, objects = parse(StreamWriter().getvalue())
        assert objects == []

    def test_bad_magic(self):
        data = b"\xca\xfe\x00\x05" + primitives_stream()[4:]
        with pytest.raises(StreamFormatError, match="magic"):
            parse(data)

    def test_bad_version(self):
        with pytest.raises(StreamFormatError, match="version"):
            parse(b"\xac\xed\x00\x04")

    def test_empty_buffer(self):
        with pytest.raises(StreamBoundsError):
            parse(b"")

    def test_every_error_is_a_relic_error(self):
        with pytest.raises(RelicError):
            parse(b"\x00\x00\x00\x00")


class TestObjects:
    """Instances, field data and class descriptors."""

    def test_primitive_fields(self):
        parser, objects = parse(primitives_stream())
        assert len(objects) == 1
        instance = objects[0]
        assert isinstance(instance, Instance)
        assert instance.handle == H + 1
        fields = instance.field_data["Primitives"]
        assert fields["f_boolean"] is True
        assert fields["f_byte"] == 1
        assert fields["f_char"] == "a"
        assert fields["f_double"] == 1.1
        assert fields["f_float"] == pytest.approx(2.2, rel=1e-6)
        assert fields["f_int"] == 3
        assert isinstance(fields["f_long"], JavaLong)
        assert fields["f_long"] == 4
        assert fields["f_short"] == 5
        assert [cd.name for cd in parser.class_descriptions] == ["Primitives"]
        assert len(parser.handles) == 2

    def test_superclass_data_is_read_first(self):
        w = StreamWriter()
        w.new_object(lambda w: w.class_desc(
            "Child", [("I", "x")],
            super_class=lambda w: w.class_desc("Parent", [("I", "x")]),
        ))
        w.i32(1).i32(2)
        parser, objects = parse(w.getvalue())
        assert objects[0].field_data == {"Parent": {"x": 1}, "Child": {"x": 2}}
        assert [cd.name for cd in parser.class_descriptions] == ["Parent", "Child"]
        assert objects[0].class_description.super_class.name == "Parent"

    def test_object_field_and_shared_descriptor(self):
        w = StreamWriter()
        w.new_object(lambda w: w.class_desc("Pair", [("L", "left", "LPair;")]))
        w.new_object(ref(H))
        w.null()
        _, objects = parse(w.getvalue())
        outer = objects[0]
        inner = outer.field_data["Pair"]["left"]
        assert isinstance(inner, Instance)
        assert inner.class_description is outer.class_description
        assert inner.field_data["Pair"]["left"] is None

    def test_write_method_annotations(self):
        w = StreamWriter()
        w.new_object(lambda w: w.class_desc(
            "Custom", [("I", "n")], flags=SC_SERIALIZABLE | SC_WRITE_METHOD
        ))
        w.i32(9).block(b"\x01\x02").string("extra").end_block()
        _, objects = parse(w.getvalue())
        items = objects[0].annotations["Custom"]
        assert isinstance(items[0], BlockData)
        assert items[0].data == b"\x01\x02"
        assert isinstance(items[1], StringContent)
        assert items[1].data == "extra"

    def test_externalizable_annotations(self):
        w = StreamWriter()
        w.new_object(lambda w: w.class_desc("Ext", flags=SC_EXTERNALIZABLE))
        w.string("payload").end_block()
        _, objects = parse(w.getvalue())
        assert objects[0].annotations["Ext"][0].data == "payload"

    def test_externalizable_block_data_rejected(self):
        w = StreamWriter()
        w.new_object(lambda w: w.class_desc(
            "Ext", flags=SC_EXTERNALIZABLE | SC_BLOCK_DATA
        ))
        w.block(b"\x00").end_block()
        with pytest.raises(StreamFormatError, match="SC_BLOCK_DATA"):
            parse(w.getvalue())

    def test_enum_with_write_method_rejected(self):
        w = StreamWriter()
        w.new_object(lambda w: w.class_desc(
            "Odd", flags=SC_SERIALIZABLE | SC_WRITE_METHOD | SC_ENUM
        ))
        w.end_block()
        with pytest.raises(StreamFormatError, match="SC_ENUM"):
            parse(w.getvalue())

    def test_null_class_description(self):
        w = StreamWriter()
        w.new_object(lambda w: w.null())
        with pytest.raises(StreamFormatError, match="null class description"):
            parse(w.getvalue())

    def test_invalid_field_type_code(self):
        w = StreamWriter()
        w.new_object(lambda w: w.class_desc("Bad", [("X", "field")]))
        with pytest.raises(StreamFormatError, match="field type"):
            parse(w.getvalue())

    def test_descriptor_reference_to_non_descriptor(self):
        w = StreamWriter()
        w.string("not a class")
        w.new_object(ref(H))
        with pytest.raises(StreamFormatError, match="expected a class description"):
            parse(w.getvalue())

    def test_descriptor_registered_before_body(self):
        w = StreamWriter()
        w.new_class(lambda w: w.class_desc("Self", annotations=lambda w: w.reference(H)))
        _, objects = parse(w.getvalue())
        cd = objects[0]
        assert isinstance(cd, ClassDescription)
        assert cd.annotations == [cd]

    def test_truncated_stream(self):
        with pytest.raises(StreamBoundsError):
            parse(primitives_stream()[:-2])

    def test_missing_end_of_annotation_block(self):
        w = StreamWriter()
        w.u8(TC_CLASSDESC).utf("Open").i64(1).u8(SC_SERIALIZABLE).i16(0)
        with pytest.raises(StreamFormatError, match="TC_ENDBLOCKDATA"):
            parse(w.getvalue())

    def test_negative_field_count(self):
        w = StreamWriter()
        w.new_object(lambda w: w.u8(TC_CLASSDESC).utf("Neg").i64(1).u8(SC_SERIALIZABLE).i16(-1))
        with pytest.raises(StreamFormatError, match="Invalid field count -1"):
            parse(w.getvalue())


class TestStringsAndReferences:

    def test_back_reference_resolves_same_node(self):
        w = StreamWriter().string("hello").reference(H)
        _, objects = parse(w.getvalue())
        assert objects[0].data == "hello"
        assert objects[1] is objects[0]

    def test_unregistered_handle(self):
        w = StreamWriter().string("hello").reference(H + 5)
        with pytest.raises(HandleResolutionError, match="0x7e0005"):
            parse(w.getvalue())

    def test_long_string_unsupported(self):
        w = StreamWriter().long_string("x" * 10)
        with pytest.raises(StreamFormatError, match="TC_LONGSTRING"):
            parse(w.getvalue())

    def test_top_level_null_is_dropped(self):
        w = StreamWriter().null().string("a").null()
        _, objects = parse(w.getvalue())
        assert [o.data for o in objects] == ["a"]

    def test_unknown_type_code(self):
        w = StreamWriter().u8(0x6F)
        with pytest.raises(StreamFormatError, match="Unknown content type code"):
            parse(w.getvalue())


class TestBlockData:

    def test_top_level_block_data(self):
        w = StreamWriter().block(b"abc").block_long(b"\x00" * 300)
        _, objects = parse(w.getvalue())
        assert objects[0].data == b"abc"
        assert objects[0].handle is None
        assert len(objects[1].data) == 300

    def test_block_data_in_field_value(self):
        w = StreamWriter()
        w.new_object(lambda w: w.class_desc("Holder", [("L", "o", "Ljava/lang/Object;")]))
        w.block(b"\x01")
        with pytest.raises(StreamFormatError, match="block data is not allowed"):
            parse(w.getvalue())


class TestArrays:

    def test_int_array(self):
        w = StreamWriter()
        w.new_array(lambda w: w.class_desc("[I", suid=0x4DBA602676EAB2A5), 3)
        w.i32(1).i32(-2).i32(3)
        parser, objects = parse(w.getvalue())
        array = objects[0]
        assert isinstance(array, ArrayContent)
        assert array.class_name == "[I"
        assert array.data == [1, -2, 3]
        assert parser.class_descriptions[0].is_array_class()

    def test_array_registered_before_elements(self):
        w = StreamWriter()
        w.new_array(lambda w: w.class_desc("[Ljava.lang.Object;"), 2)
        w.reference(H + 1).null()
        _, objects = parse(w.getvalue())
        array = objects[0]
        assert array.data[0] is array
        assert array.data[1] is None

    def test_negative_length(self):
        w = StreamWriter()
        w.new_array(lambda w: w.class_desc("[I"), -1)
        with pytest.raises(StreamFormatError, match="array length"):
            parse(w.getvalue())


class TestEnums:

    @staticmethod
    def color_stream() -> bytes:
        # Color H, java.lang.Enum H+1, RED H+2 ("RED" H+3), GREEN H+4 ("GREEN" H+5)
        w = StreamWriter()
        w.new_enum(lambda w: w.class_desc(
            "Color", flags=SC_SERIALIZABLE | SC_ENUM,
            super_class=lambda w: w.class_desc("java.lang.Enum", flags=SC_SERIALIZABLE | SC_ENUM),
        ), "RED")
        w.new_enum(ref(H), "GREEN")
        w.reference(H + 2)
        return w.getvalue()

    def test_enum_constants(self):
        parser, objects = parse(self.color_stream())
        red, green, again = objects
        assert isinstance(red, EnumContent)
        assert red.value == "RED"
        assert green.value == "GREEN"
        assert red.class_description is green.class_description

    def test_enum_registered_under_its_handle(self):
        _, objects = parse(self.color_stream())
        assert objects[2] is objects[0]

    def test_constants_collected_on_descriptor(self):
        parser, _ = parse(self.color_stream())
        color = parser.class_descriptions[-1]
        assert color.name == "Color"
        assert list(color.enum_constants) == ["RED", "GREEN"]


class TestClassObjects:

    def test_new_class(self):
        w = StreamWriter().new_class(lambda w: w.class_desc("java.lang.String"))
        _, objects = parse(w.getvalue())
        assert isinstance(objects[0], ClassDescription)
        assert objects[0].name == "java.lang.String"

    def test_class_requires_new_descriptor(self):
        w = StreamWriter().new_class(lambda w: w.class_desc("A")).new_class(ref(H))
        with pytest.raises(HandleResolutionError, match="new class description"):
            parse(w.getvalue())

    def test_class_rejects_null(self):
        w = StreamWriter().new_class(lambda w: w.null())
        with pytest.raises(HandleResolutionError):
            parse(w.getvalue())


class TestProxies:

    def test_proxy_descriptor(self):
        w = StreamWriter()
        w.new_object(lambda w: w.proxy_desc(
            ["java.lang.Runnable", "java.io.Closeable"],
            super_class=lambda w: w.class_desc(
                "java.lang.reflect.Proxy",
                [("L", "h", "Ljava/lang/reflect/InvocationHandler;")],
            ),
        ))
        w.null()
        parser, objects = parse(w.getvalue())
        proxy = objects[0].class_description
        assert proxy.is_proxy
        assert proxy.handle == H
        assert proxy.interfaces == ["java.lang.Runnable", "java.io.Closeable"]
        assert proxy.super_class.name == "java.lang.reflect.Proxy"
        assert objects[0].field_data == {"java.lang.reflect.Proxy": {"h": None}}
        assert parser.class_descriptions == [proxy.super_class, proxy]

    def test_proxy_annotations_precede_superclass(self):
        w = StreamWriter()
        w.new_object(lambda w: w.proxy_desc(
            ["java.lang.Runnable"], annotations=lambda w: w.string("loader")
        ))
        _, objects = parse(w.getvalue())
        proxy = objects[0].class_description
        assert [item.data for item in proxy.annotations] == ["loader"]
        assert proxy.annotations[0].handle == H + 1
        assert proxy.super_class is None
        assert objects[0].handle == H + 2

    def test_proxy_without_annotation_block_is_rejected(self):
        w = StreamWriter()
        w.new_object(lambda w: w.u8(TC_PROXYCLASSDESC).i32(1).utf("java.lang.Runnable").null())
        with pytest.raises(StreamFormatError, match="annotation block"):
            parse(w.getvalue())

    def test_negative_interface_count(self):
        w = StreamWriter()
        w.new_object(lambda w: w.u8(TC_PROXYCLASSDESC).i32(-2))
        with pytest.raises(StreamFormatError, match="Invalid proxy interface count -2"):
            parse(w.getvalue())


class TestResets:

    def test_reset_clears_handles(self):
        w = StreamWriter().string("a").reset().reference(H)
        with pytest.raises(HandleResolutionError):
            parse(w.getvalue())

    def test_reset_inside_class_annotations(self):
        w = StreamWriter()
        w.new_object(lambda w: w.class_desc(
            "Annotated", annotations=lambda w: w.string("x").reset().string("y")
        ))
        parser, objects = parse(w.getvalue())
        cd = objects[0].class_description
        assert [item.data for item in cd.annotations] == ["x", "y"]
        assert cd.annotations[1].handle == H
        assert objects[0].handle == H + 1
        assert parser.reset_count == 1
        assert parser.handles.resolve(H) is cd.annotations[1]

    def test_reset_inside_object_annotations(self):
        w = StreamWriter()
        w.new_object(lambda w: w.class_desc(
            "Custom", flags=SC_SERIALIZABLE | SC_WRITE_METHOD
        ))
        w.string("p").reset().string("q").end_block()
        w.reference(H)
        parser, objects = parse(w.getvalue())
        items = objects[0].annotations["Custom"]
        assert [item.data for item in items] == ["p", "q"]
        assert objects[1] is items[1]
        assert parser.reset_count == 1

    def test_handles_restart_after_reset(self):
        w = StreamWriter().string("a").reset().string("b").reference(H)
        parser, objects = parse(w.getvalue())
        assert [o.data for o in objects] == ["a", "b", "b"]
        assert objects[1].handle == H
        assert parser.reset_count == 1


class TestExceptions:

    def test_exception_record(self):
        w = StreamWriter().string("before")
        w.exception(lambda w: w.new_object(lambda w: w.class_desc(
            "java.io.IOException", [("L", "detailMessage", "Ljava/lang/String;")]
        )).string("boom"))
        parser, objects = parse(w.getvalue())
        error = objects[1]
        assert isinstance(error, Instance)
        assert error.is_exception_object
        assert error.field_data["java.io.IOException"]["detailMessage"].data == "boom"
        assert parser.reset_count == 2
        assert len(parser.handles) == 0

    def test_reset_inside_exception(self):
        w = StreamWriter().exception(lambda w: w.reset())
        with pytest.raises(ExceptionRecordError, match="TC_RESET"):
            parse(w.getvalue())

    def test_null_exception(self):
        w = StreamWriter().exception(lambda w: w.null())
        with pytest.raises(ExceptionRecordError, match="null"):
            parse(w.getvalue())

    def test_non_object_exception(self):
        w = StreamWriter().exception(lambda w: w.string("oops"))
        with pytest.raises(ExceptionRecordError, match="string"):
            parse(w.getvalue())

    def test_exception_object_is_marked_once(self):
        class RetainingParser(StreamParser):
            """Counts resets without clearing handles."""

            def _reset(self):
                self._reset_count += 1

        w = StreamWriter()
        w.exception(lambda w: w.new_object(lambda w: w.class_desc("java.lang.Error")))
        w.exception(lambda w: w.reference(H + 1))
        with pytest.raises(ExceptionRecordError, match="already read as an exception"):
            RetainingParser(w.getvalue()).parse()


class TestNesting:

    def test_deep_chain_decodes(self):
        _, objects = parse(node_chain_stream(100))
        node, depth = objects[0], 0
        while node is not None:
            depth += 1
            node = node.field_data["Node"]["next"]
        assert depth == 100

    def test_too_deep_chain_is_a_typed_error(self):
        with pytest.raises(NestingDepthError, match="nested too deeply") as info:
            parse(node_chain_stream(1000))
        assert isinstance(info.value, RelicError)
        assert info.value.offset is not None
