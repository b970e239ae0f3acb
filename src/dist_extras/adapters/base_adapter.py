"""外部コラボレーター用アダプタ（基底クラス）.

アーカイブ展開・差分計算・ファイル操作を共通インターフェースで扱うための
抽象基底クラスを定義します。オーケストレーターはこのインターフェースだけに依存し、
テストでは差し替え可能です。
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class DiffResult:
    """2ファイル間の行差分.

    Attributes:
        added: current 側で追加された行（出現順）
        removed: previous 側から削除された行（出現順）
    """

    added: tuple[str, ...] = ()
    removed: tuple[str, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.added and not self.removed


class BaseExtractor(ABC):
    """アーカイブ展開器の基底クラス."""

    @abstractmethod
    def extract(self, archive_path: Path, dest_dir: Path) -> None:
        """archive_path を dest_dir に展開する.

        Raises:
            ExtractionError: アーカイブが存在しない・壊れている・未対応形式の場合
        """
        ...


class BaseDiffEngine(ABC):
    """差分エンジンの基底クラス."""

    @abstractmethod
    def compare_files(self, path_a: Path, path_b: Path) -> DiffResult:
        """path_a（旧）と path_b（新）の差分を計算する.

        Raises:
            OSError: ファイルを読めない場合
        """
        ...

    @abstractmethod
    def to_raw(self, diff: DiffResult) -> bytes:
        """差分を書き出し用のバイト列に変換する."""
        ...


class BaseFilesystem(ABC):
    """ファイル操作サービスの基底クラス.

    失敗はすべて OSError として送出します（exists を除く）。
    """

    @abstractmethod
    def copy(self, src: Path, dst: Path) -> None: ...

    @abstractmethod
    def remove(self, path: Path) -> None: ...

    @abstractmethod
    def exists(self, path: Path) -> bool: ...

    @abstractmethod
    def write_bytes(self, path: Path, data: bytes) -> None: ...
