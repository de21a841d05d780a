"""
pbxdeps/graph.py
================
타겟 의존성 그래프 및 시각화

기능:
- 인접 리스트 기반 방향 그래프 (직접 의존성 엣지만)
- ProjectParser.dependencies()로 그래프 구성
- Mermaid/DOT 시각화

전이적 폐포는 계산하지 않는다.
"""

from collections import defaultdict
from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, Iterable, List, Optional, Tuple

if TYPE_CHECKING:
    from .parser import ProjectParser


@dataclass(frozen=True)
class TargetEdge:
    """의존성 엣지 (source 타겟 → 해석된 의존성 식별자)"""
    source: str
    target: str


class TargetGraph:
    """
    타겟 의존성 그래프 (방향 그래프)

    내부 구조:
    - _nodes: 노드 목록 (추가 순서 유지)
    - _adjacency: 인접 리스트 (정방향: A→B는 A가 B에 의존)
    - _reverse: 역방향 인접 리스트
    """

    def __init__(self):
        self._nodes: Dict[str, None] = {}
        self._adjacency: Dict[str, List[str]] = defaultdict(list)
        self._reverse: Dict[str, List[str]] = defaultdict(list)
        self._edges: Dict[Tuple[str, str], TargetEdge] = {}

    @classmethod
    def from_parser(
        cls,
        parser: "ProjectParser",
        targets: Optional[Iterable[str]] = None
    ) -> "TargetGraph":
        """
        파서의 모든 (또는 지정한) 타겟에서 그래프 구성

        Args:
            parser: ProjectParser
            targets: 포함할 타겟 이름 (None이면 all_targets 전체)
        """
        graph = cls()
        names = list(targets) if targets is not None else [t.name for t in parser.all_targets]

        for name in names:
            graph.add_node(name)
            for dependency in parser.dependencies(name):
                graph.add_edge(TargetEdge(source=name, target=dependency))

        return graph

    # =========================================================================
    # 노드/엣지 추가
    # =========================================================================

    def add_node(self, name: str):
        """노드 추가"""
        self._nodes.setdefault(name, None)

    def add_edge(self, edge: TargetEdge):
        """엣지 추가"""
        key = (edge.source, edge.target)

        self.add_node(edge.source)
        self.add_node(edge.target)

        if key not in self._edges:
            self._edges[key] = edge
            self._adjacency[edge.source].append(edge.target)
            self._reverse[edge.target].append(edge.source)

    # =========================================================================
    # 조회 메서드
    # =========================================================================

    def has_edge(self, source: str, target: str) -> bool:
        return (source, target) in self._edges

    def get_dependencies(self, node: str) -> List[str]:
        """노드의 직접 의존성 (정방향)"""
        return list(self._adjacency.get(node, []))

    def get_dependents(self, node: str) -> List[str]:
        """노드를 의존하는 타겟 (역방향)"""
        return list(self._reverse.get(node, []))

    @property
    def node_count(self) -> int:
        return len(self._nodes)

    @property
    def edge_count(self) -> int:
        return len(self._edges)

    def get_roots(self) -> List[str]:
        """루트 노드들 (아무도 의존하지 않는 노드)"""
        return [n for n in self._nodes if not self._reverse.get(n)]

    def get_leaves(self) -> List[str]:
        """리프 노드들 (다른 것에 의존하지 않는 노드)"""
        return [n for n in self._nodes if not self._adjacency.get(n)]

    # =========================================================================
    # Mermaid 시각화
    # =========================================================================

    def to_mermaid(self, max_nodes: int = 100) -> str:
        """
        Mermaid 형식 그래프 문자열 생성

        Args:
            max_nodes: 최대 표시 노드 수

        Returns:
            Mermaid 다이어그램 문자열 (graph TD 형식)
        """
        lines = ["graph TD"]
        nodes_to_show = set(list(self._nodes)[:max_nodes])

        for source in self._nodes:
            if source not in nodes_to_show:
                continue
            targets = [t for t in self._adjacency.get(source, []) if t in nodes_to_show]

            if not targets and not self._reverse.get(source):
                lines.append(f"    {self._mermaid_id(source)}[\"{source}\"]")

            for target in targets:
                src_id = self._mermaid_id(source)
                tgt_id = self._mermaid_id(target)
                lines.append(f"    {src_id}[\"{source}\"] --> {tgt_id}[\"{target}\"]")

        if len(self._nodes) > max_nodes:
            lines.append(f"    %% ... and {len(self._nodes) - max_nodes} more nodes")

        return "\n".join(lines)

    def _mermaid_id(self, name: str) -> str:
        """Mermaid 노드 ID (특수문자 제거)"""
        return "".join(c if c.isalnum() else "_" for c in name)

    # =========================================================================
    # DOT (Graphviz) 시각화
    # =========================================================================

    def to_dot(self, max_nodes: int = 100) -> str:
        """DOT (Graphviz) 형식 그래프 문자열 생성"""
        lines = [
            "digraph TargetGraph {",
            "    rankdir=TB;",
            '    node [shape=box, style=rounded];',
        ]

        nodes_to_show = list(self._nodes)[:max_nodes]
        shown = set(nodes_to_show)

        for name in nodes_to_show:
            lines.append(f'    {self._dot_id(name)} [label="{name}"];')

        for source in nodes_to_show:
            for target in self._adjacency.get(source, []):
                if target in shown:
                    lines.append(f'    {self._dot_id(source)} -> {self._dot_id(target)};')

        lines.append("}")
        return "\n".join(lines)

    def _dot_id(self, name: str) -> str:
        """DOT 노드 ID"""
        if not name.isidentifier():
            return f'"{name}"'
        return name

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, node: str) -> bool:
        return node in self._nodes

    def __repr__(self) -> str:
        return f"TargetGraph(nodes={self.node_count}, edges={self.edge_count})"


__all__ = [
    'TargetEdge',
    'TargetGraph',
]
