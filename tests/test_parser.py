"""Tests for the URM program parser."""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import pytest
from urm.parser import ParseError, parse_instruction, parse_program
from urm.program import Increase, Jump, Program, Translate, Zero


class TestParseInstruction:
    """Test single-instruction parsing."""

    def test_short_forms(self):
        assert parse_instruction("Z(1)") == Zero(1)
        assert parse_instruction("S(0)") == Increase(0)
        assert parse_instruction("T(2, 0)") == Translate(2, 0)
        assert parse_instruction("J(1, 2, 7)") == Jump(1, 2, 7)

    def test_case_and_whitespace(self):
        """Mnemonics are case-insensitive; spacing is free."""
        assert parse_instruction("  j ( 1 ,2,  0 )  ") == Jump(1, 2, 0)
        assert parse_instruction("t(3,4)") == Translate(3, 4)

    def test_long_forms(self):
        assert parse_instruction("ZERO(4)") == Zero(4)
        assert parse_instruction("succ(4)") == Increase(4)
        assert parse_instruction("Inc(4)") == Increase(4)
        assert parse_instruction("COPY(1, 2)") == Translate(1, 2)
        assert parse_instruction("Transfer(1, 2)") == Translate(1, 2)
        assert parse_instruction("jump(1, 2, 3)") == Jump(1, 2, 3)

    def test_line_number_prefix(self):
        """A matching line-number prefix is accepted."""
        assert parse_instruction("3: S(1)", expected_line=3) == Increase(1)
        assert parse_instruction("3. S(1)", expected_line=3) == Increase(1)

    def test_line_number_mismatch(self):
        with pytest.raises(ParseError) as exc:
            parse_instruction("4: S(1)", expected_line=3)
        assert exc.value.column == 1


class TestParseErrors:
    """Test error messages and positions."""

    def test_unknown_mnemonic(self):
        with pytest.raises(ParseError) as exc:
            parse_program("Z(1)\n  ADD(1, 2)")
        assert exc.value.line == 2
        assert exc.value.column == 3
        assert "ADD" in exc.value.message

    def test_wrong_arity(self):
        with pytest.raises(ParseError) as exc:
            parse_program("J(1, 2)")
        assert exc.value.line == 1
        assert exc.value.column == 2
        assert "3 operands" in exc.value.message

    def test_negative_operand(self):
        """Negative numbers are not naturals."""
        with pytest.raises(ParseError) as exc:
            parse_program("Z(-1)")
        assert exc.value.column == 3

    def test_bad_operand_column(self):
        with pytest.raises(ParseError) as exc:
            parse_program("T(1, x)")
        assert exc.value.column == 6
        assert "'x'" in exc.value.message

    def test_non_ascii_digits_rejected(self):
        """Only ASCII digits count as numbers."""
        with pytest.raises(ParseError) as exc:
            parse_program("S(\uff11)")
        assert exc.value.column == 3
        with pytest.raises(ParseError) as exc:
            parse_program("\uff11: S(1)")
        assert exc.value.message == "Expected an instruction mnemonic"

    def test_missing_operand(self):
        with pytest.raises(ParseError) as exc:
            parse_program("J(1,,3)")
        assert exc.value.column == 5

    def test_missing_paren(self):
        with pytest.raises(ParseError) as exc:
            parse_program("S 1")
        assert exc.value.message == "Expected '('"
        assert exc.value.column == 3

    def test_missing_close_paren(self):
        with pytest.raises(ParseError):
            parse_program("S(1")

    def test_trailing_text(self):
        with pytest.raises(ParseError) as exc:
            parse_program("S(1) S(2)")
        assert exc.value.column == 6

    def test_empty_operands(self):
        with pytest.raises(ParseError) as exc:
            parse_program("Z()")
        assert "got 0" in exc.value.message

    def test_error_is_value_error(self):
        """ParseError can be caught as ValueError."""
        with pytest.raises(ValueError):
            parse_program("???")

    def test_str_includes_position(self):
        with pytest.raises(ParseError) as exc:
            parse_program("\n\nX(1)")
        assert str(exc.value).startswith("line 3, column 1:")


class TestParseProgram:
    """Test whole-program parsing."""

    def test_comments_and_blank_lines(self):
        """Comments and blank lines do not count as program lines."""
        source = """
        # copy R1 into R0
        T(1, 0)   # the copy

        S(0)
        """
        assert parse_program(source) == Program([Translate(1, 0), Increase(0)])

    def test_numbered_program(self):
        source = "1: Z(0)\n# comment\n2: J(1, 1, 1)"
        assert parse_program(source) == Program([Zero(0), Jump(1, 1, 1)])

    def test_empty_source(self):
        assert len(parse_program("")) == 0
        assert len(parse_program("# nothing\n\n")) == 0

    def test_atomic(self):
        """A single bad line fails the whole program."""
        with pytest.raises(ParseError):
            parse_program("Z(1)\nS(1)\nQ(1)")
