import pytest

from caseforge.reuse import (
    Template,
    TemplateRegistry,
    is_should_panic,
    merge_attrs,
    sanitize_should_panic_duplication,
)

TWO_SIMPLE_CASES = ["rstest(a,  b, case(2, 2), case(4/2, 2))"]


@pytest.mark.parametrize(
    "attr",
    ["should_panic", "#[should_panic]", 'should_panic(expected="expected")', "  #[should_panic ]  "],
)
def test_is_should_panic_accepts_should_panic_paths(attr):
    assert is_should_panic(attr) is True


@pytest.mark.parametrize(
    "attr",
    ["test", "rstest(a, b)", "actix_rt::test", "my::should_panic", "::should_panic", "should_panicky", ""],
)
def test_is_should_panic_rejects_other_paths(attr):
    assert is_should_panic(attr) is False


def test_sanitize_drops_duplicated_should_panic():
    assert sanitize_should_panic_duplication(["should_panic", "should_panic"]) == ["should_panic"]


@pytest.mark.parametrize(
    "attrs",
    [
        ["should_panic"],
        ["should_panic", "should_panic", "should_panic"],
        ["should_panic", 'should_panic(expected="x")'],
        ["test", "test"],
        [],
    ],
)
def test_sanitize_leaves_other_lists_unchanged(attrs):
    assert sanitize_should_panic_duplication(attrs) == attrs


def test_sanitize_does_not_mutate_input():
    attrs = ["should_panic", "should_panic"]
    sanitize_should_panic_duplication(attrs)
    assert attrs == ["should_panic", "should_panic"]


def test_merge_puts_template_attributes_first():
    merged = merge_attrs(TWO_SIMPLE_CASES, ["should_panic"])
    assert merged == TWO_SIMPLE_CASES + ["should_panic"]


def test_merge_without_sanitize_keeps_duplicates():
    merged = merge_attrs(TWO_SIMPLE_CASES, ["should_panic", "should_panic"], sanitize=False)
    assert merged == TWO_SIMPLE_CASES + ["should_panic", "should_panic"]


def test_merge_with_sanitize_removes_duplicate():
    merged = merge_attrs(TWO_SIMPLE_CASES, ["should_panic", "should_panic"], sanitize=True)
    assert merged == TWO_SIMPLE_CASES + ["should_panic"]


def test_apply_simple_example_templates():
    registry = TemplateRegistry()
    registry.template("two_simple_cases", TWO_SIMPLE_CASES)

    assert registry.apply("two_simple_cases", []) == TWO_SIMPLE_CASES
    assert registry.apply("two_simple_cases", ["should_panic"]) == TWO_SIMPLE_CASES + ["should_panic"]


def test_apply_reuses_template_for_many_functions():
    registry = TemplateRegistry()
    registry.template("two_simple_cases", TWO_SIMPLE_CASES)
    first = registry.apply("two_simple_cases", ["trace"])
    second = registry.apply("two_simple_cases", [])
    assert first[: len(TWO_SIMPLE_CASES)] == second == TWO_SIMPLE_CASES


def test_apply_unknown_template_raises():
    registry = TemplateRegistry()
    with pytest.raises(KeyError, match="two_simple_cases"):
        registry.apply("two_simple_cases", [])


def test_registry_sanitize_flag_is_used():
    registry = TemplateRegistry(sanitize=True)
    registry.template("t", TWO_SIMPLE_CASES)
    assert registry.apply("t", ["should_panic", "should_panic"]) == TWO_SIMPLE_CASES + ["should_panic"]


def test_exported_excludes_local_templates():
    registry = TemplateRegistry()
    exported = registry.template("shared", ["rstest"])
    registry.template("private", ["rstest"], local=True)
    assert registry.exported() == (exported,)
    assert "private" in registry
    assert len(registry) == 2


def test_redefining_template_replaces_it():
    registry = TemplateRegistry()
    registry.template("t", ["rstest(a, case(1))"])
    registry.template("t", TWO_SIMPLE_CASES)
    assert registry.apply("t", []) == TWO_SIMPLE_CASES
    assert len(registry) == 1


def test_template_records_definition():
    registry = TemplateRegistry()
    defined = registry.template("two_simple_cases", TWO_SIMPLE_CASES, local=True)
    assert defined == Template("two_simple_cases", tuple(TWO_SIMPLE_CASES), True)
    assert registry.exported() == ()