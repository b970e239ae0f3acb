"""zip / tar 形式の配布アーカイブ展開アダプタ."""

from __future__ import annotations

import lzma
import tarfile
import zipfile
import zlib
from pathlib import Path, PurePosixPath

from loguru import logger

from dist_extras.core.exceptions import ExtractionError

from .base_adapter import BaseExtractor

TAR_SUFFIXES = (".tar", ".tar.gz", ".tgz", ".tar.bz2", ".tbz2", ".tar.xz")

# 展開中にアーカイブ内容が原因で発生しうる例外
# RuntimeError: 暗号化 zip, NotImplementedError: 未対応の圧縮方式
_ARCHIVE_ERRORS = (
    zipfile.BadZipFile,
    tarfile.TarError,
    EOFError,
    RuntimeError,
    NotImplementedError,
    zlib.error,
    lzma.LZMAError,
    OSError,
)


def _is_unsafe_member(name: str) -> bool:
    member = PurePosixPath(name.replace("\\", "/"))
    return member.is_absolute() or ".." in member.parts


class ArchiveExtractor(BaseExtractor):
    """配布アーカイブをワークスペースディレクトリへ展開する.

    形式はファイル名の拡張子で判定する。展開先の外に出るメンバーが
    1つでもあればアーカイブ全体を失敗とする。
    展開中の例外は全て ``ExtractionError`` に変換する。
    """

    def extract(self, archive_path: Path, dest_dir: Path) -> None:
        """アーカイブを展開する.

        Args:
            archive_path: 展開するアーカイブ
            dest_dir: 展開先ディレクトリ（無ければ作成する）

        Raises:
            ExtractionError: アーカイブが存在しない・壊れている・暗号化されている・未対応形式の場合
        """
        if not archive_path.is_file():
            raise ExtractionError(archive_path, "archive not found")

        name = archive_path.name.lower()
        logger.debug(f"Extracting {archive_path} -> {dest_dir}")

        try:
            dest_dir.mkdir(parents=True, exist_ok=True)
            if name.endswith(".zip"):
                self._extract_zip(archive_path, dest_dir)
            elif name.endswith(TAR_SUFFIXES):
                self._extract_tar(archive_path, dest_dir)
            else:
                raise ExtractionError(archive_path, f"unsupported archive format '{archive_path.suffix}'")
        except _ARCHIVE_ERRORS as e:
            raise ExtractionError(archive_path, f"extraction failed ({type(e).__name__}: {e})") from e

    def _extract_zip(self, archive_path: Path, dest_dir: Path) -> None:
        with zipfile.ZipFile(archive_path) as zf:
            for member in zf.namelist():
                if _is_unsafe_member(member):
                    raise ExtractionError(archive_path, f"unsafe member path '{member}'")
            zf.extractall(dest_dir)

    def _extract_tar(self, archive_path: Path, dest_dir: Path) -> None:
        with tarfile.open(archive_path) as tf:
            members = tf.getmembers()
            for member in members:
                if _is_unsafe_member(member.name) or member.issym() or member.islnk():
                    raise ExtractionError(archive_path, f"unsafe member '{member.name}'")
            if hasattr(tarfile, "data_filter"):
                tf.extractall(dest_dir, members=members, filter="data")
            else:
                tf.extractall(dest_dir, members=members)
