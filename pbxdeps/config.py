"""
pbxdeps/config.py
=================
설정 파일 (.pbxdeps.yaml)

형식:
    log_level: warning
    format: console
    ignore_targets:
      - "*Tests"
      - pattern: "Pods-*"
        reason: CocoaPods aggregate

ignore_targets는 목록 출력(targets, graph)에서만 타겟을 숨긴다.
dependencies() 해석에는 영향을 주지 않는다.
"""

import fnmatch
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple

import yaml

from .errors import ConfigError
from .models import LogLevel, NativeTarget


CONFIG_FILE_NAME = ".pbxdeps.yaml"
OUTPUT_FORMATS = ("console", "json", "markdown")


# =============================================================================
# 무시 규칙
# =============================================================================

@dataclass(frozen=True)
class TargetIgnoreRule:
    """타겟 이름 글로브 무시 규칙"""
    pattern: str
    reason: str = ""

    def matches(self, name: str) -> bool:
        return fnmatch.fnmatchcase(name, self.pattern)


# =============================================================================
# 설정
# =============================================================================

@dataclass
class ParserConfig:
    """pbxdeps 실행 설정"""
    log_level: LogLevel = LogLevel.INFO
    output_format: str = "console"
    ignore_targets: List[TargetIgnoreRule] = field(default_factory=list)
    source: Optional[Path] = None

    def add_rule(self, pattern: str, reason: str = ""):
        """무시 규칙 추가"""
        self.ignore_targets.append(TargetIgnoreRule(pattern=pattern, reason=reason))

    def should_ignore_target(self, name: str) -> Tuple[bool, str]:
        """타겟을 목록에서 숨겨야 하는지 확인"""
        for rule in self.ignore_targets:
            if rule.matches(name):
                return True, rule.reason or f"Matched ignore rule: {rule.pattern}"
        return False, ""

    def filter_targets(self, targets: Iterable[NativeTarget]) -> List[NativeTarget]:
        return [t for t in targets if not self.should_ignore_target(t.name)[0]]

    def filter_names(self, names: Iterable[str]) -> List[str]:
        return [n for n in names if not self.should_ignore_target(n)[0]]

    # =========================================================================
    # 로드
    # =========================================================================

    @classmethod
    def from_dict(cls, data: Dict[str, Any], source: Optional[Path] = None) -> "ParserConfig":
        """딕셔너리에서 설정 생성"""
        config = cls(source=source)

        if "log_level" in data:
            try:
                config.log_level = LogLevel.parse(str(data["log_level"]))
            except ValueError as e:
                raise ConfigError(f"Unknown log level: {data['log_level']!r}") from e

        if "format" in data:
            fmt = str(data["format"]).lower()
            if fmt not in OUTPUT_FORMATS:
                raise ConfigError(f"Unknown output format: {data['format']!r}")
            config.output_format = fmt

        for rule in data.get("ignore_targets") or []:
            if isinstance(rule, str):
                config.add_rule(rule)
            elif isinstance(rule, dict) and rule.get("pattern"):
                config.add_rule(str(rule["pattern"]), reason=str(rule.get("reason", "")))
            else:
                raise ConfigError(f"Invalid ignore_targets entry: {rule!r}")

        return config

    @classmethod
    def load(cls, config_path: Path) -> "ParserConfig":
        """
        YAML 파일에서 로드

        Raises:
            ConfigError: 파일을 읽을 수 없거나 YAML/값이 잘못됨
        """
        config_path = Path(config_path)

        try:
            with open(config_path, encoding='utf-8') as f:
                data = yaml.safe_load(f) or {}
        except OSError as e:
            raise ConfigError(f"Cannot read config {config_path}: {e}") from e
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigError(f"Config {config_path} must be a mapping")

        return cls.from_dict(data, source=config_path)

    @classmethod
    def discover(cls, project_path: Path) -> "ParserConfig":
        """프로젝트 번들 옆의 .pbxdeps.yaml을 찾아 로드 (없으면 기본값)"""
        candidate = Path(project_path).parent / CONFIG_FILE_NAME
        if candidate.is_file():
            return cls.load(candidate)
        return cls()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "log_level": self.log_level.value,
            "format": self.output_format,
            "ignore_targets": [
                {"pattern": r.pattern, "reason": r.reason} for r in self.ignore_targets
            ],
        }

    def save(self, config_path: Path):
        """YAML 파일로 저장"""
        with open(config_path, 'w', encoding='utf-8') as f:
            yaml.safe_dump(self.to_dict(), f, sort_keys=False, allow_unicode=True)


__all__ = [
    'CONFIG_FILE_NAME',
    'OUTPUT_FORMATS',
    'TargetIgnoreRule',
    'ParserConfig',
]
