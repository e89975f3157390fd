"""Test diagnostic formatting and exception contracts."""

import pytest

from itemfilter.diagnostics import SOURCE, Diagnostic, Severity, error, warning
from itemfilter.errors import ConfigError, MultilineTextError, ReferenceDataError
from itemfilter.tokens import Range


class TestDiagnosticFormatting:
    def test_format_contains_line(self):
        d = error("Unknown filter keyword.", Range.on_line(0, 0, 3))
        formatted = d.format("Foo 1")
        assert "1 | Foo 1" in formatted

    def test_format_contains_carets(self):
        d = error("bad", Range.on_line(0, 4, 7))
        last = d.format("Foo bar").splitlines()[-1]
        assert last.endswith("    ^^^")

    def test_format_contains_severity_prefix(self):
        assert error("bad", Range.on_line(0, 0, 1)).format("x").startswith("error: bad")
        assert warning("meh", Range.on_line(0, 0, 1)).format("x").startswith("warning: meh")

    def test_format_contains_position(self):
        d = error("bad", Range.on_line(2, 4, 6))
        assert "--> input.filter:3:5" in d.format("Show xx")

    def test_format_with_custom_filename(self):
        d = error("bad", Range.on_line(0, 0, 1))
        assert "loot.filter:1:1" in d.format("x", "loot.filter")

    def test_empty_range_has_one_caret(self):
        d = error("bad", Range.on_line(0, 2, 2))
        assert d.format("ab").splitlines()[-1].endswith("  ^")

    def test_defaults(self):
        d = Diagnostic("m", Range.on_line(0, 0, 1), Severity.HINT)
        assert d.source == SOURCE == "item-filter"
        assert int(Severity.INFORMATION) == 3


class TestExceptions:
    def test_multiline_text_is_value_error(self):
        err = MultilineTextError("a\nb")
        assert isinstance(err, ValueError)
        assert err.text == "a\nb"

    def test_reference_data_error_message(self):
        err = ReferenceDataError("no range for 'Class'")
        assert isinstance(err, KeyError)
        assert str(err) == "no range for 'Class'"

    def test_config_error_names_source(self):
        err = ConfigError("'x' must be a boolean", "itemfilter.toml")
        assert str(err) == "itemfilter.toml: 'x' must be a boolean"

    def test_raised_from_tokenizer(self):
        from itemfilter.tokenizer import Tokenizer

        with pytest.raises(MultilineTextError):
            Tokenizer("Show\r\nHide")
