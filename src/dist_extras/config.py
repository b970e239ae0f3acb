"""ビルド設定（archive ブロック）の読み込み."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import yaml
from loguru import logger


@dataclass(frozen=True)
class ArchiveConfig:
    """``archive`` ブロック.

    Attributes:
        directory: 出力ディレクトリからの相対パス（例: "dist"）
        absolute_directory: 設定されていれば directory より優先される絶対パス
    """

    directory: str | None = None
    absolute_directory: str | None = None

    def base_dir(self, output_root: Path) -> Path | None:
        """一次アーカイブの基準ディレクトリ. 設定が無ければ None（output_root を使う）."""
        if self.absolute_directory:
            return Path(self.absolute_directory)
        if self.directory:
            return output_root / self.directory
        return None


@dataclass(frozen=True)
class BuildConfig:
    archive: ArchiveConfig = field(default_factory=ArchiveConfig)
    output_dir: str | None = None


def parse_config(data: dict) -> BuildConfig:
    """設定辞書から BuildConfig を作る（未知のキーは無視）.

    Raises:
        ValueError: archive がマッピングでない場合
    """
    archive = data.get("archive") or {}
    if not isinstance(archive, dict):
        msg = f"'archive' must be a mapping, got {type(archive).__name__}"
        raise ValueError(msg)

    return BuildConfig(
        archive=ArchiveConfig(
            directory=archive.get("directory"),
            absolute_directory=archive.get("absolute-directory"),
        ),
        output_dir=data.get("output-dir"),
    )


def load_config(config_path: Path) -> BuildConfig:
    """YAML（または JSON）の設定ファイルを読み込む.

    Args:
        config_path: 設定ファイルのパス（satis.json 形式も可）

    Raises:
        FileNotFoundError: ファイルが存在しない場合
        ValueError: ルートがマッピングでない場合
    """
    if not config_path.exists():
        msg = f"Config file not found: {config_path}"
        raise FileNotFoundError(msg)

    with open(config_path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        msg = f"Config file must contain a mapping: {config_path}"
        raise ValueError(msg)

    config = parse_config(data)
    logger.info(f"Loaded config from {config_path}")
    return config
