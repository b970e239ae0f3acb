"""ローカルディスク上のファイル操作サービス."""

from __future__ import annotations

import shutil
from pathlib import Path

from .base_adapter import BaseFilesystem


class LocalFilesystem(BaseFilesystem):
    """ローカルディスクを使うファイル操作サービス.

    copy() と write_bytes() は親ディレクトリが無ければ作成する。
    remove() はファイルとディレクトリツリーの両方を扱い、存在しないパスでは何もしない。
    """

    def copy(self, src: Path, dst: Path) -> None:
        dst.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(src, dst)

    def remove(self, path: Path) -> None:
        if path.is_dir() and not path.is_symlink():
            shutil.rmtree(path)
        elif path.exists() or path.is_symlink():
            path.unlink()

    def exists(self, path: Path) -> bool:
        return path.exists()

    def write_bytes(self, path: Path, data: bytes) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
