"""
pbxdeps/pbxproj.py
==================
Xcode 기술 파일 읽기

기능:
- project.pbxproj 읽기 (OpenStep ASCII plist, XML/바이너리 plist)
- contents.xcworkspacedata 읽기 (워크스페이스가 참조하는 xcodeproj 목록)

문법 검증은 목표가 아님: 파싱 가능한 만큼만 읽고, 읽을 수 없으면 ProjectLoadError.
"""

import os
import plistlib
import re
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Any, Dict, List, Tuple

from .errors import ProjectLoadError


PBXPROJ_FILE = "project.pbxproj"
WORKSPACE_DATA_FILE = "contents.xcworkspacedata"


class PlistSyntaxError(ValueError):
    """OpenStep plist 파싱 실패"""

    def __init__(self, message: str, offset: int):
        self.offset = offset
        super().__init__(f"{message} (at offset {offset})")


# =============================================================================
# OpenStep plist 토큰
# =============================================================================

class Tokens:
    """OpenStep plist 토큰 정규식"""
    PATTERN = re.compile(r'''
          (?P<ws>\s+)
        | (?P<comment>/\*.*?\*/|//[^\n]*)
        | (?P<quoted>"(?:[^"\\]|\\.)*"|'(?:[^'\\]|\\.)*')
        | (?P<data><[0-9a-fA-F\s]*>)
        | (?P<bare>[A-Za-z0-9_$+/:.\-]+)
        | (?P<punct>[{}()=;,])
    ''', re.VERBOSE | re.DOTALL)

    ESCAPE = re.compile(r'\\(U[0-9a-fA-F]{4}|[0-7]{1,3}|.)', re.DOTALL)

    SIMPLE_ESCAPES = {
        'n': '\n', 't': '\t', 'r': '\r', 'a': '\a',
        'b': '\b', 'f': '\f', 'v': '\v',
    }


def _unescape(body: str) -> str:
    def replace(m: "re.Match[str]") -> str:
        seq = m.group(1)
        if seq[0] == 'U' and len(seq) == 5:
            return chr(int(seq[1:], 16))
        if seq[0] in '01234567':
            return chr(int(seq, 8))
        return Tokens.SIMPLE_ESCAPES.get(seq, seq)

    return Tokens.ESCAPE.sub(replace, body)


# =============================================================================
# OpenStep plist 파서
# =============================================================================

class OpenStepParser:
    """
    OpenStep (NeXTSTEP) 형식 plist 파서

    Xcode가 project.pbxproj를 저장하는 형식:
        // !$*UTF8*$!
        {
            archiveVersion = 1;
            objects = {
                ABC123 /* App */ = { isa = PBXNativeTarget; name = App; };
            };
        }

    알고리즘: 정규식 토크나이저 + 재귀 하강 파서
    - 딕셔너리 {key = value;}
    - 배열 (a, b, c,)
    - 문자열 (따옴표 / 비따옴표), 데이터 <hex>
    """

    def __init__(self, text: str):
        self.text = text
        self._tokens = self._tokenize(text)
        self._pos = 0

    def _tokenize(self, text: str) -> List[Tuple[str, str, int]]:
        tokens: List[Tuple[str, str, int]] = []
        offset = 0
        length = len(text)

        while offset < length:
            m = Tokens.PATTERN.match(text, offset)
            if not m:
                raise PlistSyntaxError(f"Unexpected character {text[offset]!r}", offset)
            kind = m.lastgroup
            if kind not in ("ws", "comment"):
                tokens.append((kind, m.group(kind), offset))
            offset = m.end()

        return tokens

    def parse(self) -> Any:
        """전체 문서 파싱"""
        value = self._parse_value()
        if self._pos != len(self._tokens):
            _, text, offset = self._tokens[self._pos]
            raise PlistSyntaxError(f"Trailing content {text!r}", offset)
        return value

    # =========================================================================
    # 토큰 조작
    # =========================================================================

    def _peek(self) -> Tuple[str, str, int]:
        if self._pos >= len(self._tokens):
            raise PlistSyntaxError("Unexpected end of input", len(self.text))
        return self._tokens[self._pos]

    def _next(self) -> Tuple[str, str, int]:
        token = self._peek()
        self._pos += 1
        return token

    def _expect(self, punct: str):
        kind, text, offset = self._next()
        if kind != "punct" or text != punct:
            raise PlistSyntaxError(f"Expected {punct!r}, got {text!r}", offset)

    # =========================================================================
    # 값 파싱
    # =========================================================================

    def _parse_value(self) -> Any:
        kind, text, offset = self._next()

        if kind == "punct":
            if text == "{":
                return self._parse_dict()
            if text == "(":
                return self._parse_array()
            raise PlistSyntaxError(f"Unexpected {text!r}", offset)

        if kind == "quoted":
            return _unescape(text[1:-1])

        if kind == "data":
            return bytes.fromhex(re.sub(r'\s+', '', text[1:-1]))

        return text

    def _parse_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {}

        while True:
            kind, text, _ = self._peek()
            if kind == "punct" and text == "}":
                self._pos += 1
                return result

            key = self._parse_value()
            if not isinstance(key, str):
                raise PlistSyntaxError("Dictionary key must be a string", self._peek()[2])
            self._expect("=")
            result[key] = self._parse_value()
            self._expect(";")

    def _parse_array(self) -> List[Any]:
        result: List[Any] = []

        while True:
            kind, text, _ = self._peek()
            if kind == "punct" and text == ")":
                self._pos += 1
                return result

            result.append(self._parse_value())

            kind, text, offset = self._next()
            if kind == "punct" and text == ")":
                return result
            if kind != "punct" or text != ",":
                raise PlistSyntaxError(f"Expected ',' or ')', got {text!r}", offset)


def parse_openstep(text: str) -> Any:
    """OpenStep plist 문자열 파싱"""
    return OpenStepParser(text).parse()


# =============================================================================
# project.pbxproj
# =============================================================================

def read_pbxproj(project_path: Path) -> Dict[str, Any]:
    """
    xcodeproj 번들에서 project.pbxproj 읽기

    Args:
        project_path: .xcodeproj 디렉토리

    Returns:
        최상위 plist 딕셔너리 (objects, rootObject 포함)

    Raises:
        ProjectLoadError: 파일이 없거나 파싱할 수 없음
    """
    pbxproj = Path(project_path) / PBXPROJ_FILE
    if not pbxproj.is_file():
        raise ProjectLoadError(project_path, f"{PBXPROJ_FILE} not found")

    raw = pbxproj.read_bytes()

    try:
        if raw.startswith(b"bplist") or raw.lstrip().startswith(b"<?xml"):
            data = plistlib.loads(raw)
        else:
            data = parse_openstep(raw.decode("utf-8"))
    except (PlistSyntaxError, plistlib.InvalidFileException, UnicodeDecodeError, ValueError) as e:
        raise ProjectLoadError(project_path, str(e)) from e

    if not isinstance(data, dict) or not isinstance(data.get("objects"), dict):
        raise ProjectLoadError(project_path, "missing 'objects' table")

    return data


# =============================================================================
# contents.xcworkspacedata
# =============================================================================

def _resolve_location(location: str, group_dir: Path, workspace_path: Path) -> Path:
    """
    워크스페이스 location 속성을 경로로 변환

    - group:     둘러싼 Group 기준 상대 경로
    - container: 워크스페이스가 있는 디렉토리 기준
    - absolute:  절대 경로
    - self:      워크스페이스를 포함하는 번들 기준 (xcodeproj 내장 워크스페이스)
    """
    kind, _, rel = location.partition(":")

    if kind == "absolute":
        base = Path("/")
    elif kind == "container":
        base = workspace_path.parent
    elif kind == "self":
        base = workspace_path.parent
    else:
        base = group_dir

    if not rel:
        return base
    return Path(os.path.normpath(str(base / rel)))


def read_workspace_projects(workspace_path: Path) -> List[Path]:
    """
    워크스페이스가 참조하는 .xcodeproj 경로 목록 (문서 순서)

    Raises:
        ProjectLoadError: contents.xcworkspacedata가 없거나 XML이 아님
    """
    workspace_path = Path(workspace_path)
    data_file = workspace_path / WORKSPACE_DATA_FILE
    if not data_file.is_file():
        raise ProjectLoadError(workspace_path, f"{WORKSPACE_DATA_FILE} not found")

    try:
        root = ET.parse(str(data_file)).getroot()
    except ET.ParseError as e:
        raise ProjectLoadError(workspace_path, str(e)) from e

    projects: List[Path] = []

    def walk(element: ET.Element, group_dir: Path):
        for child in element:
            location = child.get("location", "")
            if child.tag == "Group":
                sub_dir = _resolve_location(location, group_dir, workspace_path) if location else group_dir
                walk(child, sub_dir)
            elif child.tag == "FileRef" and location:
                ref = _resolve_location(location, group_dir, workspace_path)
                if ref.suffix == ".xcodeproj" and ref not in projects:
                    projects.append(ref)

    walk(root, workspace_path.parent)
    return projects


__all__ = [
    'PBXPROJ_FILE',
    'WORKSPACE_DATA_FILE',
    'PlistSyntaxError',
    'OpenStepParser',
    'parse_openstep',
    'read_pbxproj',
    'read_workspace_projects',
]
