"""行単位の changelog 差分エンジン.

difflib の SequenceMatcher で changelog の行を比較する。raw 出力は人が読むためのもので、
新しい changelog で追加された行をそのまま出力する。追記だけの changelog なら
新しいエントリだけがちょうど得られる。
"""

from __future__ import annotations

import difflib
from pathlib import Path

from .base_adapter import BaseDiffEngine, DiffResult

REMOVED_HEADER = "<!-- removed since previous version -->"


class LineDiffEngine(BaseDiffEngine):
    """2つのテキストファイル間で追加・削除された行を求める.

    Args:
        encoding: changelog の文字コード（デコードできないバイトは置換する）
    """

    def __init__(self, encoding: str = "utf-8") -> None:
        self.encoding = encoding

    def _read_lines(self, path: Path) -> list[str]:
        return path.read_text(encoding=self.encoding, errors="replace").splitlines()

    def compare_lines(self, old_lines: list[str], new_lines: list[str]) -> DiffResult:
        matcher = difflib.SequenceMatcher(None, old_lines, new_lines, autojunk=False)
        added: list[str] = []
        removed: list[str] = []
        for tag, i1, i2, j1, j2 in matcher.get_opcodes():
            if tag in ("replace", "delete"):
                removed.extend(old_lines[i1:i2])
            if tag in ("replace", "insert"):
                added.extend(new_lines[j1:j2])
        return DiffResult(added=tuple(added), removed=tuple(removed))

    def compare_files(self, path_a: Path, path_b: Path) -> DiffResult:
        return self.compare_lines(self._read_lines(path_a), self._read_lines(path_b))

    def to_raw(self, diff: DiffResult) -> bytes:
        """差分を人が読む形のバイト列にする.

        追加行を先に出力し、削除行は REMOVED_HEADER の下に "- " を付けて続ける。
        差分が無ければ空のバイト列を返す。
        """
        lines = list(diff.added)
        if diff.removed:
            if lines:
                lines.append("")
            lines.append(REMOVED_HEADER)
            lines.extend(f"- {line}" for line in diff.removed)
        if not lines:
            return b""
        return ("\n".join(lines) + "\n").encode(self.encoding)
