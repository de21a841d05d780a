"""
pbxdeps/reporters.py
====================
조회 결과 리포터

지원 형식:
- Console: ANSI 색상 지원 터미널 출력
- Markdown: 문서화용 마크다운
- JSON: 기계 판독용 JSON
"""

import json
import sys
import os
from typing import IO, Any, Dict, Optional, Sequence
from abc import ABC, abstractmethod

from .models import Diagnostic, LogLevel, NativeTarget, PackageProduct


# =============================================================================
# ANSI 색상 코드
# =============================================================================

class Colors:
    """ANSI 색상 코드"""
    RED = "\033[91m"
    YELLOW = "\033[93m"
    BLUE = "\033[94m"
    GREEN = "\033[92m"
    GRAY = "\033[90m"
    WHITE = "\033[97m"
    CYAN = "\033[96m"
    BOLD = "\033[1m"
    RESET = "\033[0m"


# =============================================================================
# 기본 리포터
# =============================================================================

class BaseReporter(ABC):
    """리포터 기본 클래스"""

    def __init__(self, output: Optional[IO[str]] = None):
        self.output = output or sys.stdout

    def write(self, text: str):
        """출력 스트림에 쓰기"""
        self.output.write(text)

    def writeln(self, text: str = ""):
        """줄 바꿈 포함 쓰기"""
        self.output.write(text + "\n")

    @abstractmethod
    def report_targets(self, targets: Sequence[NativeTarget], products: Dict[str, str]):
        """타겟 → 제품 목록 출력"""

    @abstractmethod
    def report_packages(self, packages: Sequence[PackageProduct]):
        """패키지 제품 목록 출력"""

    @abstractmethod
    def report_dependencies(self, target: str, dependencies: Sequence[str]):
        """타겟의 직접 의존성 출력"""

    @abstractmethod
    def report_diagnostics(self, diagnostics: Sequence[Diagnostic]):
        """진단 출력"""


# =============================================================================
# 콘솔 리포터
# =============================================================================

class ConsoleReporter(BaseReporter):
    """콘솔 출력 리포터 (ANSI 색상 지원)"""

    SEVERITY_COLORS: Dict[LogLevel, str] = {
        LogLevel.CRITICAL: Colors.RED,
        LogLevel.ERROR: Colors.RED,
        LogLevel.WARNING: Colors.YELLOW,
        LogLevel.NOTICE: Colors.BLUE,
        LogLevel.INFO: Colors.WHITE,
        LogLevel.DEBUG: Colors.GRAY,
        LogLevel.TRACE: Colors.GRAY,
    }

    def __init__(
        self,
        output: Optional[IO[str]] = None,
        use_color: bool = True,
        verbose: bool = False
    ):
        super().__init__(output)
        self.verbose = verbose

        # 색상 사용 여부 결정
        self.use_color = use_color
        if os.getenv("NO_COLOR"):
            self.use_color = False
        if hasattr(self.output, 'isatty') and not self.output.isatty():
            self.use_color = False

    def color(self, text: str, color: str) -> str:
        """색상 적용"""
        if self.use_color:
            return f"{color}{text}{Colors.RESET}"
        return text

    def _header(self, text: str):
        self.writeln(self.color(f"--- {text} ---", Colors.BOLD))

    def report_targets(self, targets: Sequence[NativeTarget], products: Dict[str, str]):
        self._header(f"Targets ({len(targets)})")

        for target in targets:
            product = products.get(target.name)
            if product:
                self.writeln(f"  • {target.name} → {self.color(product, Colors.CYAN)}")
            else:
                self.writeln(f"  • {target.name} {self.color('(no product)', Colors.GRAY)}")
            if self.verbose and target.product_type:
                self.writeln(f"    {self.color(target.product_type, Colors.GRAY)}")

        self.writeln()

    def report_packages(self, packages: Sequence[PackageProduct]):
        self._header(f"Packages ({len(packages)})")

        for package in packages:
            if package.repository_url:
                self.writeln(f"  • {package.name} {self.color(package.repository_url, Colors.GRAY)}")
            else:
                self.writeln(f"  • {package.name}")

        self.writeln()

    def report_dependencies(self, target: str, dependencies: Sequence[str]):
        self._header(f"Dependencies of {target} ({len(dependencies)})")

        if not dependencies:
            self.writeln(f"  {self.color('(none)', Colors.GRAY)}")
        for dependency in dependencies:
            self.writeln(f"  • {dependency}")

        self.writeln()

    def report_diagnostics(self, diagnostics: Sequence[Diagnostic]):
        if not diagnostics:
            return

        self._header(f"Diagnostics ({len(diagnostics)})")
        for diagnostic in diagnostics:
            color = self.SEVERITY_COLORS.get(diagnostic.severity, Colors.WHITE)
            label = diagnostic.severity.value.upper()
            self.writeln(f"  [{self.color(label, color)}] {diagnostic.message}")

        self.writeln()


# =============================================================================
# Markdown 리포터
# =============================================================================

class MarkdownReporter(BaseReporter):
    """Markdown 형식 리포터"""

    def report_targets(self, targets: Sequence[NativeTarget], products: Dict[str, str]):
        self.writeln("## Targets")
        self.writeln()
        self.writeln("| Target | Product | Type |")
        self.writeln("|--------|---------|------|")
        for target in targets:
            product = products.get(target.name, "")
            self.writeln(f"| {target.name} | {product} | {target.product_type or ''} |")
        self.writeln()

    def report_packages(self, packages: Sequence[PackageProduct]):
        self.writeln("## Packages")
        self.writeln()
        for package in packages:
            if package.repository_url:
                self.writeln(f"- **{package.name}** ({package.repository_url})")
            else:
                self.writeln(f"- **{package.name}**")
        self.writeln()

    def report_dependencies(self, target: str, dependencies: Sequence[str]):
        self.writeln(f"## Dependencies of `{target}`")
        self.writeln()
        if not dependencies:
            self.writeln("_None_")
        for dependency in dependencies:
            self.writeln(f"- `{dependency}`")
        self.writeln()

    def report_diagnostics(self, diagnostics: Sequence[Diagnostic]):
        if not diagnostics:
            return
        self.writeln("## Diagnostics")
        self.writeln()
        for diagnostic in diagnostics:
            self.writeln(f"- **{diagnostic.severity.value}**: {diagnostic.message}")
        self.writeln()


# =============================================================================
# JSON 리포터
# =============================================================================

class JsonReporter(BaseReporter):
    """
    JSON 형식 리포터

    report_* 호출 결과를 모았다가 flush()에서 하나의 JSON 문서로 출력한다.
    """

    def __init__(self, output: Optional[IO[str]] = None, indent: int = 2):
        super().__init__(output)
        self.indent = indent
        self._document: Dict[str, Any] = {}

    def report_targets(self, targets: Sequence[NativeTarget], products: Dict[str, str]):
        self._document["targets"] = [
            {
                "name": t.name,
                "product": products.get(t.name),
                "product_type": t.product_type,
            }
            for t in targets
        ]

    def report_packages(self, packages: Sequence[PackageProduct]):
        self._document["packages"] = [p.to_dict() for p in packages]

    def report_dependencies(self, target: str, dependencies: Sequence[str]):
        self._document["target"] = target
        self._document["dependencies"] = list(dependencies)

    def report_diagnostics(self, diagnostics: Sequence[Diagnostic]):
        self._document["diagnostics"] = [d.to_dict() for d in diagnostics]

    def flush(self):
        """모은 결과를 JSON으로 출력"""
        self.writeln(json.dumps(self._document, indent=self.indent))
        self._document = {}


def create_reporter(
    fmt: str,
    output: Optional[IO[str]] = None,
    use_color: bool = True,
    verbose: bool = False
) -> BaseReporter:
    """출력 형식 이름으로 리포터 생성"""
    if fmt == "json":
        return JsonReporter(output)
    if fmt == "markdown":
        return MarkdownReporter(output)
    return ConsoleReporter(output, use_color=use_color, verbose=verbose)


# =============================================================================
# Exports
# =============================================================================

__all__ = [
    'Colors',
    'BaseReporter',
    'ConsoleReporter',
    'MarkdownReporter',
    'JsonReporter',
    'create_reporter',
]
