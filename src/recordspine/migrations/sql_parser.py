"""Migration script parsing.

Two dialects, chosen once per process by ``settings.sql_parser``:

``legacy``
    One statement per line. Each line is stripped of surrounding whitespace
    and trailing ``;`` characters, and blank lines are skipped. Multi-line
    statements are not supported.

``delimited``
    Statements end at ``;`` unless the ``;`` is inside a string literal
    (``'...'`` or ``"..."``), a comment (``--`` or ``/* */``), or the
    ``BEGIN ... END`` body of a ``CREATE TRIGGER``. Comments are dropped.
"""

from __future__ import annotations

from recordspine.core.settings import SqlParserMode


def parse_legacy(script: str) -> list[str]:
    statements = []
    for line in script.splitlines():
        line = line.strip().rstrip(";").strip()
        if line:
            statements.append(line)
    return statements


class _DelimitedScanner:
    """Character scanner for the delimited dialect."""

    def __init__(self, script: str) -> None:
        self.script = script
        self.statements: list[str] = []
        self.current: list[str] = []
        self.word: list[str] = []
        self.words_upper: list[str] = []
        self.depth = 0

    def flush_word(self) -> None:
        if not self.word:
            return
        word = "".join(self.word).upper()
        self.word.clear()
        self.words_upper.append(word)
        if word == "CASE":
            self.depth += 1
        elif word == "BEGIN" and "TRIGGER" in self.words_upper:
            self.depth += 1
        elif word == "END" and self.depth > 0:
            self.depth -= 1

    def end_statement(self) -> None:
        statement = "".join(self.current).strip()
        if statement:
            self.statements.append(statement)
        self.current.clear()
        self.words_upper.clear()
        self.depth = 0

    def scan(self) -> list[str]:
        text = self.script
        i, n = 0, len(text)
        while i < n:
            ch = text[i]
            nxt = text[i + 1] if i + 1 < n else ""

            if ch in ("'", '"'):
                self.flush_word()
                end = i + 1
                while end < n:
                    if text[end] == ch:
                        # doubled quote is an escaped quote
                        if end + 1 < n and text[end + 1] == ch:
                            end += 2
                            continue
                        break
                    end += 1
                self.current.append(text[i:end + 1])
                i = end + 1
                continue

            if ch == "-" and nxt == "-":
                self.flush_word()
                end = text.find("\n", i)
                i = n if end == -1 else end
                continue

            if ch == "/" and nxt == "*":
                self.flush_word()
                end = text.find("*/", i + 2)
                self.current.append(" ")
                i = n if end == -1 else end + 2
                continue

            if ch.isalnum() or ch == "_":
                self.word.append(ch)
                self.current.append(ch)
                i += 1
                continue

            self.flush_word()
            if ch == ";" and self.depth == 0:
                self.end_statement()
            else:
                self.current.append(ch)
            i += 1

        self.flush_word()
        self.end_statement()
        return self.statements


def parse_delimited(script: str) -> list[str]:
    return _DelimitedScanner(script).scan()


def parse_script(script: str, mode: SqlParserMode | str = SqlParserMode.LEGACY) -> list[str]:
    """Split ``script`` into executable statements using ``mode``."""
    if SqlParserMode(mode) is SqlParserMode.DELIMITED:
        return parse_delimited(script)
    return parse_legacy(script)


__all__ = ["parse_legacy", "parse_delimited", "parse_script"]
