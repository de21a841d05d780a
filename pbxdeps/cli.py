#!/usr/bin/env python3
"""
pbxdeps/cli.py
==============
pbxdeps CLI

Usage:
    python -m pbxdeps targets ./App.xcodeproj
    python -m pbxdeps packages ./App.xcworkspace --format json
    python -m pbxdeps deps ./App.xcworkspace App
    python -m pbxdeps graph ./App.xcworkspace --dot
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Tuple

from . import __version__
from .config import OUTPUT_FORMATS, ParserConfig
from .diagnostics import LoggingSink, MemorySink, TeeSink, register_levels
from .errors import PBXDepsError
from .graph import TargetGraph
from .models import LogLevel
from .parser import ProjectParser
from .reporters import BaseReporter, ConsoleReporter, JsonReporter, create_reporter

logger = logging.getLogger(__name__)


def load_config(args) -> ParserConfig:
    """설정 파일 로드 후 CLI 옵션으로 덮어쓰기"""
    if args.config:
        config = ParserConfig.load(Path(args.config))
    else:
        config = ParserConfig.discover(Path(args.path))

    if args.log_level:
        config.log_level = LogLevel.parse(args.log_level)
    if args.format:
        config.output_format = args.format

    return config


def configure_logging(level: LogLevel):
    register_levels()
    logging.basicConfig(
        level=level.logging_level,
        stream=sys.stderr,
        format="%(levelname)s: %(message)s",
    )


def open_project(args) -> Tuple[ProjectParser, ParserConfig, MemorySink]:
    """설정 로드, 로깅 구성, 파서 생성"""
    config = load_config(args)
    configure_logging(config.log_level)

    memory = MemorySink()
    sink = TeeSink(LoggingSink(min_level=config.log_level), memory)

    logger.debug("Opening %s", args.path)
    parser = ProjectParser(Path(args.path), log_level=config.log_level, sink=sink)
    return parser, config, memory


def make_reporter(args, config: ParserConfig) -> BaseReporter:
    return create_reporter(
        config.output_format,
        use_color=not args.no_color,
        verbose=args.verbose,
    )


def finish(reporter: BaseReporter, memory: MemorySink, config: ParserConfig):
    """콘솔 외 형식은 진단을 문서에 포함 (콘솔은 stderr 로그로 이미 출력됨)"""
    if not isinstance(reporter, ConsoleReporter):
        reporter.report_diagnostics(memory.at_least(config.log_level))
    if isinstance(reporter, JsonReporter):
        reporter.flush()


# =============================================================================
# Commands
# =============================================================================

def cmd_targets(args):
    """타겟 → 제품 목록"""
    parser, config, memory = open_project(args)
    reporter = make_reporter(args, config)

    targets = config.filter_targets(parser.all_targets)
    reporter.report_targets(targets, parser.targets_to_products)

    finish(reporter, memory, config)
    return 0


def cmd_packages(args):
    """패키지 제품 목록"""
    parser, config, memory = open_project(args)
    reporter = make_reporter(args, config)

    reporter.report_packages(parser.all_packages)

    finish(reporter, memory, config)
    return 0


def cmd_deps(args):
    """타겟의 직접 의존성"""
    parser, config, memory = open_project(args)
    reporter = make_reporter(args, config)

    dependencies = parser.dependencies(args.target)
    reporter.report_dependencies(args.target, dependencies)

    finish(reporter, memory, config)

    # 종료 코드: ERROR 이상 진단이 있으면 1
    return 1 if memory.at_least(LogLevel.ERROR) else 0


def cmd_graph(args):
    """직접 의존성 그래프 출력"""
    parser, config, _ = open_project(args)

    names = config.filter_names(t.name for t in parser.all_targets)
    graph = TargetGraph.from_parser(parser, names)

    if args.dot:
        print(graph.to_dot(max_nodes=args.max_nodes))
    else:
        print("```mermaid")
        print(graph.to_mermaid(max_nodes=args.max_nodes))
        print("```")

    return 0


# =============================================================================
# Main
# =============================================================================

def build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument('path', help='.xcodeproj 또는 .xcworkspace 경로')
    common.add_argument('--config', '-c', help='설정 파일 (기본: 번들 옆 .pbxdeps.yaml)')
    common.add_argument('--log-level', '-l',
                        choices=[lvl.value for lvl in LogLevel] + ['warn'],
                        help='최소 진단 레벨')
    common.add_argument('--format', '-f', choices=OUTPUT_FORMATS, help='출력 형식')
    common.add_argument('--no-color', action='store_true', help='색상 비활성화')
    common.add_argument('--verbose', action='store_true', help='상세 출력')

    parser = argparse.ArgumentParser(
        prog='pbxdeps',
        description='Xcode 프로젝트/워크스페이스 타겟 의존성 해석기'
    )
    parser.add_argument('--version', action='version', version=__version__)

    subparsers = parser.add_subparsers(dest='command', help='Commands')

    subparsers.add_parser('targets', parents=[common], help='타겟 → 제품 목록')
    subparsers.add_parser('packages', parents=[common], help='패키지 제품 목록')

    p_deps = subparsers.add_parser('deps', parents=[common], help='타겟의 직접 의존성')
    p_deps.add_argument('target', help='타겟 이름')

    p_graph = subparsers.add_parser('graph', parents=[common], help='의존성 그래프')
    p_graph.add_argument('--dot', action='store_true', help='DOT 형식으로 출력 (기본: Mermaid)')
    p_graph.add_argument('--max-nodes', type=int, default=100, help='최대 노드 수')

    return parser


def main(argv: Optional[list] = None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    commands = {
        'targets': cmd_targets,
        'packages': cmd_packages,
        'deps': cmd_deps,
        'graph': cmd_graph,
    }

    try:
        return commands[args.command](args)
    except PBXDepsError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
