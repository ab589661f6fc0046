# caseforge

Helpers for building and checking parametrized tests.

## Modules

- **`caseforge.teardown`** – `Fixture` pairs a value with a `TearDown` guard.
  `take()` moves the value out, `guard()` moves the guard out (the fixture then
  no longer releases it), and `close()` — or leaving a `with` block — runs the
  guard once. `compose(other)` returns a fixture whose guard releases its own
  guard first and then `other` (a `GuardPair`). `TearDownClosure` wraps a
  function as a guard; `EmptyGuard` does nothing and is what
  `Fixture.from_value` uses.
- **`caseforge.validation`** – checks on a test or fixture declaration, each
  yielding `CompileError`s: `missed_arguments`, `duplicate_arguments`,
  `invalid_cases`, `case_args_without_cases`, `async_once` and
  `generics_once` (with `has_some_generics` looking for generic parameters or
  `impl` types in a signature). `rstest_errors` and `fixture_errors` collect
  all problems for a test or a fixture. `merge_errors` runs several steps and
  raises an `ErrorsList` holding every error they raised.
- **`caseforge.reuse`** – `TemplateRegistry` stores named attribute sets
  (`Template`) and, with `apply`, puts a template's attributes in front of a
  function's own. `merge_attrs` does the same for plain lists;
  `sanitize_should_panic_duplication` drops the second of two identical
  `should_panic` attributes. `exported()` lists templates not defined as local.
- **`caseforge.toolchain`** – `allow_features` reads the features allowed by
  `-Zallow-features=` in encoded rustflags, `diagnostic_cfg` tells whether a
  channel may enable the diagnostic cfg, and `needs_should_panic_sanitize`
  tells whether a compiler version (1.50.0 or older) duplicates
  `should_panic` attributes.
- **`caseforge.project`** – `Project` creates a scratch cargo project with
  `cargo init`, edits its `Cargo.toml` (`add_dependency`,
  `add_local_dependency`), replaces or extends its code (`set_code_file`,
  `append_code`), creates workspace members (`subproject`) and runs
  `cargo test` (`run_tests`) or `cargo build` (`compile`), returning the
  `subprocess.CompletedProcess`. `Channel` picks the toolchain; by default it
  comes from the `CASEFORGE_TEST_CHANNEL` environment variable, falling back
  to stable.

## Install

```
pip install caseforge
```

## Examples

```python
from caseforge.teardown import Fixture, TearDownClosure

log = []
with Fixture(42, TearDownClosure(lambda: log.append("destroyed"))) as fx:
    value = fx.take()
assert value == 42
assert log == ["destroyed"]
```

```python
from caseforge.validation import Argument, Case, rstest_errors

errors = rstest_errors(
    fn_args=["a"],
    items=[Argument("a"), Argument("b")],
    case_args=[Argument("a")],
    cases=[Case(args=(1,)), Case(args=(1, 2))],
)
assert [str(e) for e in errors] == [
    "Missed argument: 'b' should be a test function argument.",
    "Wrong case signature: should match the given parameters list.",
]
```

```python
from caseforge.reuse import TemplateRegistry

registry = TemplateRegistry()
registry.template("two_simple_cases", ["#[rstest]", "#[case(2, 2)]"])
assert registry.apply("two_simple_cases", ["#[should_panic]"]) == [
    "#[rstest]", "#[case(2, 2)]", "#[should_panic]",
]
```

`Project` needs `cargo` on the `PATH`.

## What it does not do

The package has no command-line interface. `Project.run_tests` hands back the
finished process as it is: there are no helpers here for asserting on its
output or for checking which tests passed or failed — that is left to the
caller.