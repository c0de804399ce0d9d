# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Unit tests for tiny v1 and v2 encoding."""

import io

import pytest

from tinymap import (
    EncoderConfig,
    MappingTable,
    MissingDescriptorError,
    TinyFormat,
    decode,
    encode,
)


def _sample_table() -> MappingTable:
    table = MappingTable(("official", "named"))
    table.create_or_get_class("z").set_name("named", "Last")
    klass = table.create_or_get_class("a")
    klass.set_name("named", "Hello")
    method = klass.create_or_get_method("b", "()V")
    method.set_name("named", "greet")
    method.create_or_get_parameter(1).set_name("named", "second")
    method.create_or_get_parameter(0).set_name("named", "first")
    klass.create_or_get_method("a", "(I)V").create_or_get_parameter(0).set_name(
        "named", "value"
    )
    klass.create_or_get_method("c", "()V")
    klass.create_or_get_field("d", "I").set_name("named", "count")
    klass.create_or_get_field("e", "I")
    inner = table.create_or_get_class("a$f")
    inner.create_or_get_field("g", "J").set_name("named", "elapsed")
    table.create_or_get_class("y")
    return table


def test_enc_001_v2_output_is_sorted_and_nested() -> None:
    stream = io.StringIO()

    records = encode(_sample_table(), stream, TinyFormat.TINY_2, "official", "named")

    assert stream.getvalue() == (
        "tiny\t2\t0\tofficial\tnamed\n"
        "c\ta\tHello\n"
        "\tm\t(I)V\ta\t\n"
        "\t\tp\t0\t\tvalue\n"
        "\tm\t()V\tb\tgreet\n"
        "\t\tp\t0\t\tfirst\n"
        "\t\tp\t1\t\tsecond\n"
        "\tf\tI\td\tcount\n"
        "c\ta$f\t\n"
        "\tf\tJ\tg\telapsed\n"
        "c\tz\tLast\n"
    )
    assert records == 10


def test_enc_002_v2_class_without_mappings_is_elided() -> None:
    table = MappingTable(("official", "named"))
    table.create_or_get_class("a").create_or_get_field("b", "I")
    stream = io.StringIO()

    records = encode(table, stream, TinyFormat.TINY_2, "official", "named")

    assert stream.getvalue() == "tiny\t2\t0\tofficial\tnamed\n"
    assert records == 0


def test_enc_003_v1_output_lists_classes_then_fields_then_methods() -> None:
    stream = io.StringIO()

    encode(_sample_table(), stream, TinyFormat.TINY, "official", "named")

    assert stream.getvalue() == (
        "v1\tofficial\tnamed\n"
        "CLASS\ta\tHello\n"
        "CLASS\tz\tLast\n"
        "FIELD\ta\tI\td\tcount\n"
        "FIELD\ta$f\tJ\tg\telapsed\n"
        "METHOD\ta\t()V\tb\tgreet\n"
    )


def test_enc_004_missing_descriptor_fails_without_writing() -> None:
    table = MappingTable(("official", "named"))
    table.create_or_get_class("a").create_or_get_field("b", None).set_name(
        "named", "count"
    )

    for kind in (TinyFormat.TINY, TinyFormat.TINY_2):
        stream = io.StringIO()
        with pytest.raises(MissingDescriptorError) as exc_info:
            encode(table, stream, kind, "official", "named")
        assert stream.getvalue() == ""
        assert exc_info.value.owner == "a"
        assert exc_info.value.name == "b"


def test_enc_005_unmapped_member_without_descriptor_is_not_an_error() -> None:
    table = MappingTable(("official", "named"))
    klass = table.create_or_get_class("a")
    klass.set_name("named", "Hello")
    klass.create_or_get_method("b", None)
    stream = io.StringIO()

    encode(table, stream, TinyFormat.TINY_2, "official", "named")

    assert stream.getvalue() == "tiny\t2\t0\tofficial\tnamed\nc\ta\tHello\n"


def test_enc_006_detect_cannot_be_encoded() -> None:
    with pytest.raises(ValueError):
        encode(_sample_table(), io.StringIO(), TinyFormat.DETECT, "official", "named")


def test_enc_007_custom_class_key_changes_order() -> None:
    config = EncoderConfig(class_key=lambda entry: entry.name_or_source("named"))
    table = MappingTable(("official", "named"))
    table.create_or_get_class("a").set_name("named", "Zebra")
    table.create_or_get_class("b").set_name("named", "Apple")
    stream = io.StringIO()

    encode(table, stream, TinyFormat.TINY, "official", "named", config=config)

    assert stream.getvalue().splitlines()[1:] == ["CLASS\tb\tApple", "CLASS\ta\tZebra"]


def test_enc_008_selected_namespace_and_labels_are_written() -> None:
    table = MappingTable(("official", "intermediary", "named"))
    klass = table.create_or_get_class("a")
    klass.set_name("intermediary", "class_1")
    klass.set_name("named", "Hello")
    stream = io.StringIO()

    encode(table, stream, TinyFormat.TINY_2, "obf", "deobf", namespace="named")

    assert stream.getvalue() == "tiny\t2\t0\tobf\tdeobf\nc\ta\tHello\n"


def test_enc_009_v2_round_trip_preserves_named_entries() -> None:
    original = _sample_table()
    stream = io.StringIO()
    encode(original, stream, TinyFormat.TINY_2, "official", "named")

    decoded = decode(io.StringIO(stream.getvalue()), TinyFormat.TINY_2)

    klass = decoded.get_class("a")
    assert klass is not None
    assert klass.name("named") == "Hello"
    method = klass.methods[("b", "()V")]
    assert method.name("named") == "greet"
    assert {pos: param.name("named") for pos, param in method.parameters.items()} == {
        0: "first",
        1: "second",
    }
    assert klass.fields[("d", "I")].name("named") == "count"
    inner = decoded.get_class("a$f")
    assert inner is not None
    assert inner.fields[("g", "J")].name("named") == "elapsed"
    last = decoded.get_class("z")
    assert last is not None and last.name("named") == "Last"
    assert decoded.get_class("y") is None


def test_enc_010_parents_written_for_children_keep_absent_names() -> None:
    table = MappingTable(("official", "named"))
    method = table.create_or_get_class("a").create_or_get_method("b", "(I)V")
    method.create_or_get_parameter(0).set_name("named", "value")
    stream = io.StringIO()

    encode(table, stream, TinyFormat.TINY_2, "official", "named")
    decoded = decode(io.StringIO(stream.getvalue()), TinyFormat.TINY_2)

    assert stream.getvalue() == (
        "tiny\t2\t0\tofficial\tnamed\nc\ta\t\n\tm\t(I)V\tb\t\n\t\tp\t0\t\tvalue\n"
    )
    klass = decoded.get_class("a")
    assert klass is not None
    assert klass.name("named") is None
    decoded_method = klass.methods[("b", "(I)V")]
    assert decoded_method.name("named") is None
    assert decoded_method.parameters[0].name("named") == "value"
