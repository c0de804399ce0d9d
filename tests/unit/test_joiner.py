# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Unit tests for joining, projecting and migrating mapping tables."""

import pytest

from tinymap import MappingTable, NamespaceError, join, migrate, project
from tinymap.model import DEOBFUSCATED


def _tree_a() -> MappingTable:
    tree = MappingTable(("official", "intermediary"))
    klass = tree.create_or_get_class("a")
    klass.set_name("intermediary", "class_1")
    klass.create_or_get_field("b", "I").set_name("intermediary", "field_1")
    method = klass.create_or_get_method("c", "()V")
    method.set_name("intermediary", "method_1")
    method.create_or_get_parameter(0).set_name("intermediary", "p0")
    tree.create_or_get_class("z").set_name("intermediary", "class_9")
    return tree


def _tree_b() -> MappingTable:
    tree = MappingTable(("intermediary", "named"))
    klass = tree.create_or_get_class("class_1")
    klass.set_name("named", "World")
    klass.create_or_get_field("field_1", "J").set_name("named", "count")
    klass.create_or_get_method("method_1", "(I)V").set_name("named", "greet")
    tree.create_or_get_class("class_2").set_name("named", "Extra")
    return tree


def test_join_001_class_is_renamed_through_shared_namespace() -> None:
    joined = join(_tree_a(), "official", "intermediary", _tree_b(), "named")

    klass = joined.get_class("a")
    assert klass is not None
    assert klass.name(DEOBFUSCATED) == "World"


def test_join_002_missing_match_leaves_name_absent() -> None:
    joined = join(_tree_a(), "official", "intermediary", _tree_b(), "named")

    klass = joined.get_class("z")
    assert klass is not None
    assert klass.name(DEOBFUSCATED) is None
    assert not klass.has_mappings(DEOBFUSCATED)


def test_join_003_members_match_by_name_even_when_descriptor_changed() -> None:
    joined = join(_tree_a(), "official", "intermediary", _tree_b(), "named")

    klass = joined.get_class("a")
    assert klass is not None
    assert klass.methods[("c", "()V")].name(DEOBFUSCATED) == "greet"
    assert klass.fields[("b", "I")].name(DEOBFUSCATED) == "count"


def test_join_004_parameters_are_not_carried_over() -> None:
    joined = join(_tree_a(), "official", "intermediary", _tree_b(), "named")

    klass = joined.get_class("a")
    assert klass is not None
    assert klass.methods[("c", "()V")].parameters == {}


def test_join_005_join_is_not_symmetric() -> None:
    forward = join(_tree_a(), "official", "intermediary", _tree_b(), "named")
    backward = join(_tree_b(), "named", "intermediary", _tree_a(), "official")

    assert set(forward.classes) == {"a", "z"}
    assert set(backward.classes) == {"World", "Extra"}
    world = backward.get_class("World")
    extra = backward.get_class("Extra")
    assert world is not None and world.name(DEOBFUSCATED) == "a"
    assert extra is not None and extra.name(DEOBFUSCATED) is None


def test_join_006_separate_matching_namespaces_per_side() -> None:
    tree_a = MappingTable(("official", "old_intermediary"))
    tree_a.create_or_get_class("a").set_name("old_intermediary", "class_1")
    tree_b = MappingTable(("new_intermediary", "named"))
    tree_b.create_or_get_class("class_1").set_name("named", "World")

    joined = join(
        tree_a, "official", "new_intermediary", tree_b, "named", "old_intermediary"
    )

    klass = joined.get_class("a")
    assert klass is not None
    assert klass.name(DEOBFUSCATED) == "World"


@pytest.mark.parametrize(
    ("from_ns", "match_a", "to_ns", "match_b"),
    [
        ("named", "intermediary", "named", None),
        ("official", "official", "named", "intermediary"),
        ("official", "intermediary", "official", None),
        ("official", "intermediary", "named", "named"),
    ],
)
def test_join_007_missing_namespace_fails_before_traversal(
    from_ns: str, match_a: str, to_ns: str, match_b: str | None
) -> None:
    with pytest.raises(NamespaceError):
        join(_tree_a(), from_ns, match_a, _tree_b(), to_ns, match_b)


def test_join_008_member_keys_use_descriptor_in_from_namespace() -> None:
    tree_a = MappingTable(("official", "intermediary"))
    tree_a.create_or_get_class("a").set_name("intermediary", "class_1")
    method = tree_a.create_or_get_class("b").create_or_get_method("m", "(La;)V")
    method.set_name("intermediary", "method_1")
    tree_b = MappingTable(("intermediary", "named"))
    tree_b.create_or_get_class("class_2").create_or_get_method(
        "method_1", "(Lclass_1;)V"
    ).set_name("named", "run")

    joined = join(tree_a, "intermediary", "intermediary", tree_b, "named")

    klass = joined.get_class("b")
    assert klass is not None
    assert klass.methods[("method_1", "(Lclass_1;)V")].name(DEOBFUSCATED) == "run"


def test_join_009_project_reads_one_table_between_two_namespaces() -> None:
    tree = MappingTable(("official", "intermediary", "named"))
    klass = tree.create_or_get_class("a")
    klass.set_name("intermediary", "class_1")
    klass.set_name("named", "Hello")
    method = klass.create_or_get_method("b", "()V")
    method.set_name("intermediary", "method_1")
    method.create_or_get_parameter(0).set_name("named", "value")

    projected = project(tree, "intermediary", "named")

    out_class = projected.get_class("class_1")
    assert out_class is not None
    assert out_class.name(DEOBFUSCATED) == "Hello"
    out_method = out_class.methods[("method_1", "()V")]
    assert out_method.name(DEOBFUSCATED) is None
    assert out_method.parameters[0].name(DEOBFUSCATED) == "value"


def test_join_010_migrate_falls_back_to_own_name_when_unmatched() -> None:
    source = MappingTable(("intermediary", "named"))
    source.create_or_get_class("class_1").set_name("named", "OldName")
    source.create_or_get_class("class_2").set_name("named", "Kept")
    target = MappingTable(("intermediary", "named"))
    target.create_or_get_class("class_1").set_name("named", "NewName")

    migrated = migrate(source, target, "intermediary", "named")

    renamed = migrated.get_class("OldName")
    kept = migrated.get_class("Kept")
    assert renamed is not None and renamed.name(DEOBFUSCATED) == "NewName"
    assert kept is not None and kept.name(DEOBFUSCATED) == "Kept"
