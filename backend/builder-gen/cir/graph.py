import networkx as nx # type: ignore
from dataclasses import asdict, is_dataclass
from typing import Any, Dict, List

class CIRGraph:
    """
    Typed multi-graph representing the CIR of a PHP code base.
    Nodes: TypeDecl, Field, Method, Parameter, Constant
    Edges: HAS_FIELD, HAS_METHOD, HAS_CONSTANT, PARAM_OF, INHERITS, IMPLEMENTS

    Insertion order is kept by networkx, so edge order doubles as
    declaration order.
    """
    def __init__(self) -> None:
        self.g = nx.MultiDiGraph()

    def add_node(self, node_id: str, kind: str, payload: Any) -> None:
        self.g.add_node(node_id, kind=kind, payload=payload)

    def add_edge(self, src: str, dst: str, etype: str) -> None:
        """
        etype examples: HAS_FIELD, HAS_METHOD, HAS_CONSTANT, PARAM_OF,
                        INHERITS, IMPLEMENTS
        """
        self.g.add_edge(src, dst, etype=etype)

    def kind_of(self, node_id: str) -> str | None:
        if node_id not in self.g:
            return None
        return self.g.nodes[node_id].get("kind")

    def payload(self, node_id: str) -> Any:
        return self.g.nodes[node_id].get("payload")

    def nodes_of_kind(self, kind: str) -> List[str]:
        return [nid for nid, data in self.g.nodes(data=True) if data.get("kind") == kind]

    def targets(self, src: str, etype: str, kind: str | None = None) -> List[str]:
        """Outgoing neighbours over `etype` edges, in insertion order."""
        return [
            dst for _, dst, data in self.g.out_edges(src, data=True)
            if data.get("etype") == etype and (kind is None or self.kind_of(dst) == kind)
        ]

    def sources(self, dst: str, etype: str, kind: str | None = None) -> List[str]:
        """Incoming neighbours over `etype` edges, in insertion order."""
        return [
            src for src, _, data in self.g.in_edges(dst, data=True)
            if data.get("etype") == etype and (kind is None or self.kind_of(src) == kind)
        ]

    def to_debug_json(self) -> Dict[str, Any]:
        """
        Convert graph to JSON-like dict for debugging / API responses.
        The same shape is accepted back by the CIR adapter.
        """
        nodes = []
        for node_id, data in self.g.nodes(data=True):
            # endpoints of IMPLEMENTS/INHERITS edges to types outside the CIR
            if data.get("kind") is None:
                continue
            payload = data.get("payload")
            if is_dataclass(payload):
                attrs = asdict(payload)
                attrs.pop("parameters", None)
            elif hasattr(payload, "__dict__"):
                attrs = dict(payload.__dict__)
            else:
                attrs = dict(payload) if isinstance(payload, dict) else {}
            attrs.pop("id", None)
            nodes.append({
                "id": node_id,
                "kind": data.get("kind"),
                "attrs": attrs,
            })

        edges = []
        for src, dst, data in self.g.edges(data=True):
            edges.append({
                "src": src,
                "dst": dst,
                "type": data.get("etype"),
            })

        return {"nodes": nodes, "edges": edges}
