"""展開用ワークスペースの確保と解放.

ワークスペースは展開1回ごとに一意な名前で作られ、所有するステップの
どの終了経路（成功・差分失敗・コピー失敗・展開失敗）でも削除される。
"""

from __future__ import annotations

import tempfile
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from pathlib import Path
from uuid import uuid4

from loguru import logger

from dist_extras.adapters.base_adapter import BaseExtractor, BaseFilesystem

IdGenerator = Callable[[], str]


def uuid_token() -> str:
    return uuid4().hex


class WorkspaceFactory:
    """ワークスペースを作る.

    Args:
        extractor: アーカイブ展開器
        filesystem: 解放に使うファイル操作サービス
        id_generator: 一意トークンの生成関数（テストでは決定的なものに差し替える）
        temp_root: ワークスペースを作る親ディレクトリ（省略時はシステムの一時ディレクトリ）
    """

    def __init__(
        self,
        extractor: BaseExtractor,
        filesystem: BaseFilesystem,
        id_generator: IdGenerator | None = None,
        temp_root: Path | None = None,
    ) -> None:
        self.extractor = extractor
        self.filesystem = filesystem
        self.id_generator = id_generator or uuid_token
        self.temp_root = temp_root

    def new_path(self, prefix: str) -> Path:
        root = self.temp_root or Path(tempfile.gettempdir())
        return root / f"{prefix}{self.id_generator()}"

    @contextmanager
    def extracted(self, archive_path: Path, prefix: str) -> Iterator[Path]:
        """archive_path を新しいワークスペースに展開し、そのパスを yield する.

        with ブロックを抜けると（例外でも）ワークスペースを削除する。
        削除の失敗はログに残すだけで送出しない。
        """
        workspace = self.new_path(prefix)
        try:
            self.extractor.extract(archive_path, workspace)
            yield workspace
        finally:
            self.release(workspace)

    def release(self, workspace: Path) -> None:
        try:
            self.filesystem.remove(workspace)
        except OSError as e:
            logger.warning(f"Failed to remove workspace {workspace}: {e}")
