"""派生アーティファクトビルダー（オーケストレーター）.

一次アーカイブのビルド後に実行し、changelog 差分と readme を生成して
パッケージ JSON の extra に公開URLを書き戻す。
changelog → readme の順に逐次実行し、前段が返したパッケージ列を後段に渡す。
"""

from __future__ import annotations

import argparse
import csv
import json
import sys
from dataclasses import asdict
from pathlib import Path
from typing import Any

from loguru import logger

from dist_extras.adapters.archive_extractor import ArchiveExtractor
from dist_extras.adapters.base_adapter import BaseDiffEngine, BaseExtractor, BaseFilesystem
from dist_extras.adapters.diff_engine import LineDiffEngine
from dist_extras.adapters.filesystem import LocalFilesystem
from dist_extras.config import BuildConfig, load_config
from dist_extras.core.models import ArtifactEffect, ExtractionResult, PackageVersion
from dist_extras.core.paths import DistPathResolver
from dist_extras.core.skipper import UnmodifiedSkipper
from dist_extras.core.workspace import IdGenerator, WorkspaceFactory
from dist_extras.extractors.changelog import ChangelogExtractor
from dist_extras.extractors.readme import ReadmeExtractor

EFFECTS_TSV_NAME = "dist_extras_effects.tsv"


def _collect_entries(document: Any) -> list[dict]:
    """パッケージ JSON からパッケージ辞書を（参照のまま）集める.

    対応形式:
        - パッケージ辞書のリスト
        - {"packages": [...]}
        - {"packages": {name: {version: {...}}}}（composer リポジトリ形式）
    """
    if isinstance(document, list):
        return [entry for entry in document if isinstance(entry, dict)]

    if isinstance(document, dict) and "packages" in document:
        packages = document["packages"]
        if isinstance(packages, list):
            return [entry for entry in packages if isinstance(entry, dict)]
        if isinstance(packages, dict):
            entries = []
            for versions in packages.values():
                if isinstance(versions, dict):
                    entries.extend(v for v in versions.values() if isinstance(v, dict))
                elif isinstance(versions, list):
                    entries.extend(v for v in versions if isinstance(v, dict))
            return entries

    msg = "Unsupported packages document: expected a list or a 'packages' mapping"
    raise ValueError(msg)


def _write_effects_tsv(path: Path, effects: list[ArtifactEffect]) -> None:
    if not effects:
        return
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8", newline="") as f:
        writer = csv.DictWriter(
            f,
            fieldnames=["package", "version", "artifact", "action", "note"],
            delimiter="\t",
        )
        writer.writeheader()
        for effect in effects:
            writer.writerow(asdict(effect))


def enrich_packages(
    packages: list[PackageVersion],
    output_dir: Path | str,
    config: BuildConfig | None = None,
    extractor: BaseExtractor | None = None,
    diff_engine: BaseDiffEngine | None = None,
    filesystem: BaseFilesystem | None = None,
    id_generator: IdGenerator | None = None,
    skip_changelog: bool = False,
    skip_readme: bool = False,
) -> ExtractionResult:
    """changelog と readme を順に抽出し、更新済みパッケージ列を返す.

    Args:
        packages: 一次アーカイブのビルド済みパッケージ列
        output_dir: ビルド出力ディレクトリ
        config: ビルド設定（archive ブロック）
        extractor: アーカイブ展開器（省略時は ArchiveExtractor）
        diff_engine: 差分エンジン（省略時は LineDiffEngine）
        filesystem: ファイル操作サービス（省略時は LocalFilesystem）
        id_generator: ワークスペース名の一意トークン生成関数
        skip_changelog: changelog 抽出を行わない
        skip_readme: readme 抽出を行わない
    """
    output_dir = Path(output_dir)
    config = config or BuildConfig()
    extractor = extractor or ArchiveExtractor()
    filesystem = filesystem or LocalFilesystem()

    resolver = DistPathResolver(output_dir, config.archive.base_dir(output_dir))
    skipper = UnmodifiedSkipper(resolver, filesystem)
    workspaces = WorkspaceFactory(extractor, filesystem, id_generator)

    current = list(packages)
    effects: list[ArtifactEffect] = []

    if not skip_changelog:
        result = ChangelogExtractor(
            resolver,
            extractor,
            diff_engine=diff_engine,
            filesystem=filesystem,
            skipper=skipper,
            workspaces=workspaces,
        ).extract(current)
        current, effects = result.packages, effects + result.effects

    if not skip_readme:
        result = ReadmeExtractor(
            resolver,
            extractor,
            filesystem=filesystem,
            skipper=skipper,
            workspaces=workspaces,
        ).extract(current)
        current, effects = result.packages, effects + result.effects

    return ExtractionResult(packages=current, effects=effects)


def enrich_repository(
    packages_path: Path | str,
    output_dir: Path | str | None = None,
    config_path: Path | str | None = None,
    report_dir: Path | str | None = None,
    output_path: Path | str | None = None,
    skip_changelog: bool = False,
    skip_readme: bool = False,
) -> list[PackageVersion]:
    """パッケージ JSON を読み込み、派生アーティファクトを生成して書き戻す.

    Args:
        packages_path: パッケージ JSON のパス
        output_dir: ビルド出力ディレクトリ（省略時は設定の output-dir）
        config_path: 設定ファイル（YAML/JSON）
        report_dir: 判断記録 TSV の出力先（None なら出力しない）
        output_path: 書き戻し先（省略時は packages_path を上書き）

    Raises:
        FileNotFoundError: packages_path が存在しない場合
        ValueError: 出力ディレクトリが決まらない場合、またはパッケージ JSON が不正な場合
    """
    packages_path = Path(packages_path)
    if not packages_path.exists():
        msg = f"Packages file not found: {packages_path}"
        raise FileNotFoundError(msg)

    config = load_config(Path(config_path)) if config_path else BuildConfig()
    if output_dir is None:
        if not config.output_dir:
            msg = "Output directory is required (--output-dir or 'output-dir' in config)"
            raise ValueError(msg)
        output_dir = config.output_dir

    with packages_path.open(encoding="utf-8") as f:
        document = json.load(f)
    entries = _collect_entries(document)
    packages = [PackageVersion.from_dict(entry) for entry in entries]
    logger.info(f"Loaded {len(packages)} package versions from {packages_path}")

    result = enrich_packages(
        packages,
        output_dir,
        config=config,
        skip_changelog=skip_changelog,
        skip_readme=skip_readme,
    )

    for entry, package in zip(entries, result.packages, strict=True):
        if package.metadata:
            entry["extra"] = dict(package.metadata)

    target = Path(output_path) if output_path else packages_path
    target.parent.mkdir(parents=True, exist_ok=True)
    with target.open("w", encoding="utf-8") as f:
        json.dump(document, f, indent=4, ensure_ascii=False)
    logger.info(f"Packages written to {target}")

    if report_dir:
        _write_effects_tsv(Path(report_dir) / EFFECTS_TSV_NAME, result.effects)

    failed = sum(1 for effect in result.effects if effect.action == "failed")
    if failed:
        logger.warning(f"{failed} artifact(s) failed, see log above")

    return result.packages


def main() -> None:
    """CLI エントリポイント."""
    parser = argparse.ArgumentParser(description="Build changelog and readme artifacts for built packages")
    parser.add_argument(
        "--packages",
        type=Path,
        required=True,
        help="Packages JSON (list, {'packages': [...]} or composer repository layout)",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=None,
        help="Build output directory holding the primary archives",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="YAML/JSON config with an 'archive' block (satis.json works)",
    )
    parser.add_argument(
        "--report-dir",
        type=Path,
        default=None,
        help="Optional directory for the effects TSV report",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Where to write the enriched packages JSON (default: overwrite --packages)",
    )
    parser.add_argument("--skip-changelog", action="store_true", help="Do not build changelog diffs")
    parser.add_argument("--skip-readme", action="store_true", help="Do not extract readme files")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")

    args = parser.parse_args()

    if args.verbose:
        logger.remove()
        logger.add(sys.stderr, level="DEBUG")

    enrich_repository(
        packages_path=args.packages,
        output_dir=args.output_dir,
        config_path=args.config,
        report_dir=args.report_dir,
        output_path=args.output,
        skip_changelog=args.skip_changelog,
        skip_readme=args.skip_readme,
    )


if __name__ == "__main__":
    main()
