"""
Compiler Pipeline Test Suite
============================

End-to-end tests for the Compiler facade, its options and the
convenience functions.
"""

from pathlib import Path

import pytest
from subc.compiler import (
    Compiler,
    CompilerOptions,
    CompilerResult,
    Stage,
    compile_c,
    compile_file,
)
from subc.errors import (
    LexError,
    ParseError,
    UnknownTargetError,
)
from subc.targets import LINUX, DARWIN, TARGETS, get_target, host_target


RETURN_2 = b"int main(void) {\n    return 2;\n}\n"


# =============================================================================
# Full Pipeline Tests
# =============================================================================

class TestCompileC:
    """Tests for compile_c and the full pipeline."""

    def test_return_2_linux(self):
        asm = compile_c(RETURN_2, target="linux")
        assert "main:" in asm
        assert "movl    $2, %eax" in asm
        assert asm.index("movl") < asm.index("ret")

    def test_return_2_darwin(self):
        asm = compile_c(RETURN_2, target="darwin")
        assert "_main:" in asm
        assert ".globl  _main" in asm

    @pytest.mark.parametrize("value", [0, 1, 42, 1000000])
    def test_parametric_round_trip(self, value):
        source = f"int main(void){{return {value};}}"
        asm = compile_c(source, target="linux")
        assert f"${value}," in asm

    def test_leading_zero_constant_is_octal(self):
        asm = compile_c(b"int main(void){return 010;}", target="linux")
        assert "movl    $8, %eax" in asm

    def test_invalid_octal_constant_fails(self):
        with pytest.raises(LexError):
            compile_c(b"int main(void){return 09;}", target="linux")

    def test_deterministic(self):
        first = compile_c(RETURN_2, target="linux")
        second = compile_c(RETURN_2, target="linux")
        assert first == second

    def test_text_and_bytes_agree(self):
        assert compile_c(RETURN_2, target="linux") == compile_c(
            RETURN_2.decode(), target="linux"
        )

    def test_lex_error_propagates(self):
        with pytest.raises(LexError):
            compile_c(b"int main(void) { return #; }")

    def test_parse_error_propagates(self):
        with pytest.raises(ParseError):
            compile_c(b"int main(void){return 2}")

    def test_unknown_target(self):
        with pytest.raises(UnknownTargetError):
            compile_c(RETURN_2, target="vax")


# =============================================================================
# Staged Compilation Tests
# =============================================================================

class TestStages:
    """CompilerOptions.stop_after ends the pipeline early."""

    def compile(self, stop_after: Stage) -> CompilerResult:
        options = CompilerOptions(target="linux", stop_after=stop_after)
        return Compiler(options).compile_source(RETURN_2, "return_2.c")

    def test_stop_after_lex(self):
        result = self.compile(Stage.LEX)
        assert result.stage == Stage.LEX
        assert len(result.tokens) == 10
        assert result.ast is None
        assert result.assembly == ""

    def test_stop_after_parse(self):
        result = self.compile(Stage.PARSE)
        assert result.stage == Stage.PARSE
        assert result.ast is not None
        assert result.asm is None

    def test_stop_after_codegen(self):
        result = self.compile(Stage.CODEGEN)
        assert result.stage == Stage.CODEGEN
        assert result.asm.function.name == "main"
        assert result.assembly == ""

    def test_full_pipeline(self):
        result = self.compile(Stage.EMIT)
        assert result.success
        assert result.stage == Stage.EMIT
        assert result.target == LINUX
        assert result.assembly.endswith("ret\n\n")

    @pytest.mark.parametrize("stop_after", list(Stage))
    def test_success_means_requested_stage_reached(self, stop_after):
        assert self.compile(stop_after).success

    def test_partial_result_is_not_success(self):
        assert not CompilerResult().success
        assert not CompilerResult(stage=Stage.PARSE).success
        assert CompilerResult(stage=Stage.PARSE, stop_after=Stage.PARSE).success

    def test_lex_failure_skips_later_stages(self):
        options = CompilerOptions(target="linux", stop_after=Stage.PARSE)
        with pytest.raises(LexError):
            Compiler(options).compile_source(b"1a;")

    def test_stop_after_lex_ignores_grammar(self):
        """Lex-only runs accept token streams the parser would reject."""
        options = CompilerOptions(stop_after=Stage.LEX)
        result = Compiler(options).compile_source(b"return return ;;")
        assert len(result.tokens) == 4

    def test_debug_logs_dumps(self, caplog):
        options = CompilerOptions(target="linux", debug=True)
        with caplog.at_level("DEBUG", logger="subc"):
            Compiler(options).compile_source(RETURN_2)
        assert "Token(RETURN" in caplog.text
        assert "Function int main(void)" in caplog.text
        assert "Mov Imm(2) -> Reg(eax)" in caplog.text

    def test_debug_does_not_change_output(self):
        plain = Compiler(CompilerOptions(target="linux")).compile_source(RETURN_2)
        debug = Compiler(CompilerOptions(target="linux", debug=True)).compile_source(RETURN_2)
        assert plain.assembly == debug.assembly


# =============================================================================
# Configuration Tests
# =============================================================================

class TestOptions:
    """CompilerOptions defaults, environment and target resolution."""

    def test_defaults(self):
        options = CompilerOptions()
        assert options.target is None
        assert options.stop_after == Stage.EMIT
        assert options.debug is False
        assert options.resolve_target() == host_target()

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("SUBC_TARGET", "darwin")
        monkeypatch.setenv("SUBC_DEBUG", "yes")
        options = CompilerOptions.from_env()
        assert options.resolve_target() == DARWIN
        assert options.debug is True

    def test_from_env_unset(self, monkeypatch):
        monkeypatch.delenv("SUBC_TARGET", raising=False)
        monkeypatch.delenv("SUBC_DEBUG", raising=False)
        options = CompilerOptions.from_env()
        assert options.target is None
        assert options.debug is False

    def test_get_target_case_insensitive(self):
        assert get_target("Linux") == LINUX

    def test_target_table(self):
        assert set(TARGETS) == {"linux", "darwin"}
        assert LINUX.symbol("main") == "main"
        assert DARWIN.symbol("main") == "_main"

    def test_host_target_on_macos(self, monkeypatch):
        monkeypatch.setattr("subc.targets.sys.platform", "darwin")
        assert host_target() == DARWIN

    def test_host_target_elsewhere(self, monkeypatch):
        monkeypatch.setattr("subc.targets.sys.platform", "linux")
        assert host_target() == LINUX


# =============================================================================
# File Compilation Tests
# =============================================================================

class TestCompileFile:

    def test_writes_output(self, tmp_path: Path):
        source = tmp_path / "return_2.c"
        source.write_bytes(RETURN_2)
        output = tmp_path / "return_2.s"

        asm = compile_file(source, output, target="linux")

        assert output.read_text() == asm
        assert "movl    $2, %eax" in asm

    def test_no_output_on_failure(self, tmp_path: Path):
        source = tmp_path / "bad.c"
        source.write_bytes(b"int main(void){return 2}")
        output = tmp_path / "bad.s"

        with pytest.raises(ParseError):
            compile_file(source, output, target="linux")
        assert not output.exists()

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            compile_file(tmp_path / "missing.c")

    def test_error_names_file(self, tmp_path: Path):
        source = tmp_path / "hash.c"
        source.write_bytes(b"#")
        with pytest.raises(LexError) as exc_info:
            Compiler().compile_file(source)
        assert str(exc_info.value).startswith(f"{source}:1:1: lex error")
