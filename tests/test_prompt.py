"""Tests for omnitea.prompt: the default system prompt and prompt files."""

from pathlib import Path

from omnitea.prompt import DEFAULT_SYSTEM_PROMPT, load_prompt


class TestPromptContent:
    def test_specifies_display_math_with_double_dollars(self):
        assert "$$" in DEFAULT_SYSTEM_PROMPT

    def test_specifies_inline_math_with_single_dollars(self):
        assert "$x$" in DEFAULT_SYSTEM_PROMPT
        assert "inline" in DEFAULT_SYSTEM_PROMPT.lower()

    def test_forbids_bracket_delimiters(self):
        assert "Do NOT use" in DEFAULT_SYSTEM_PROMPT

    def test_explains_the_speaker_prefix(self):
        # Matches the "{author} says: {content}" format of user entries
        assert "says:" in DEFAULT_SYSTEM_PROMPT

    def test_mentions_discord(self):
        assert "Discord" in DEFAULT_SYSTEM_PROMPT


class TestLoadPrompt:
    def test_none_returns_default(self):
        assert load_prompt(None) is DEFAULT_SYSTEM_PROMPT

    def test_reads_file_contents(self, tmp_path: Path):
        path = tmp_path / "prompt.md"
        path.write_text("Be brief.", encoding="utf-8")
        assert load_prompt(path) == "Be brief."

    def test_strips_trailing_whitespace_only(self, tmp_path: Path):
        path = tmp_path / "prompt.md"
        path.write_text("  Indented first line\nsecond\n\n", encoding="utf-8")
        assert load_prompt(path) == "  Indented first line\nsecond"

    def test_reads_utf8(self, tmp_path: Path):
        path = tmp_path / "prompt.md"
        path.write_text("Demuestra que √2 es irracional.", encoding="utf-8")
        assert load_prompt(path) == "Demuestra que √2 es irracional."
