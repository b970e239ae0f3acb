"""Dist extras exceptions.

派生アーティファクト生成で使う例外クラスを定義します。
I/O 失敗は組み込みの OSError をそのまま使います。
"""

from __future__ import annotations

from pathlib import Path


class DistExtrasError(Exception):
    """dist_extras 全体の基底例外."""


class ExtractionError(DistExtrasError):
    """アーカイブを展開できない（存在しない・壊れている・未対応形式）場合の例外.

    Attributes:
        archive_path: 展開しようとしたアーカイブのパス
        reason: 失敗理由
    """

    def __init__(self, archive_path: Path | str, reason: str) -> None:
        self.archive_path = Path(archive_path)
        self.reason = reason
        super().__init__(f"Cannot extract {self.archive_path}: {reason}")


class MissingSourceFileError(DistExtrasError):
    """展開済みワークスペース内に期待するファイル（changelog/readme）が無い場合の例外.

    エラーではなくスキップ条件として扱われ、オーケストレーター内で必ず処理されます。

    Attributes:
        workspace: 展開先ワークスペース
        relative_path: ワークスペース内で探したパス
    """

    def __init__(self, workspace: Path, relative_path: str) -> None:
        self.workspace = workspace
        self.relative_path = relative_path
        super().__init__(f"Source file '{relative_path}' not found in {workspace}")
