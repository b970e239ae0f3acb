"""外部コラボレーター（展開・差分・ファイル操作）のアダプタ群."""

from .archive_extractor import ArchiveExtractor
from .base_adapter import BaseDiffEngine, BaseExtractor, BaseFilesystem, DiffResult
from .diff_engine import LineDiffEngine
from .filesystem import LocalFilesystem

__all__ = [
    "BaseExtractor",
    "BaseDiffEngine",
    "BaseFilesystem",
    "DiffResult",
    "ArchiveExtractor",
    "LineDiffEngine",
    "LocalFilesystem",
]
