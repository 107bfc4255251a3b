from __future__ import annotations

import json
import logging
from dataclasses import replace
from typing import Any, Dict, List, Optional, Set, Tuple

from cir.model import (
    Constant,
    EntityDeclaration,
    Field,
    Method,
    Parameter,
    TypeDecl,
    TypeRef,
)
from cir.graph import CIRGraph

logger = logging.getLogger(__name__)

_VISIBILITIES = ("public", "protected", "private")
_CLASS_KINDS = ("class", "enum")


def _visibility(attrs: Dict[str, Any], node_id: str) -> str:
    # PHP members without a modifier are public
    vis = str(attrs.get("visibility") or "public").lower()
    if vis not in _VISIBILITIES:
        raise ValueError(f"Invalid visibility '{vis}' on node {node_id}")
    return vis


def _name(attrs: Dict[str, Any], node_id: str) -> str:
    name = attrs.get("name")
    if not name:
        raise ValueError(f"CIR node {node_id} has no name")
    return str(name)


def _type_ref(raw: Any, nullable: Optional[bool] = None) -> Optional[TypeRef]:
    """
    Accepts the structured form {"name": "string", "nullable": true}
    or the plain form "?string".
    """
    if raw is None or raw == "":
        return None
    if isinstance(raw, dict):
        name = raw.get("name")
        if not name:
            return None
        ref = TypeRef.parse(str(name))
        if ref is None:
            return None
        if raw.get("nullable"):
            ref = replace(ref, nullable=True)
    elif isinstance(raw, str):
        ref = TypeRef.parse(raw)
        if ref is None:
            return None
    else:
        raise ValueError(f"Unsupported type descriptor: {raw!r}")

    if nullable:
        ref = replace(ref, nullable=True)
    return ref


def _split_full_name(name: str) -> Tuple[str, str]:
    """'App\\Models\\User' -> ('App\\Models', 'User')"""
    name = name.lstrip("\\")
    if "\\" not in name:
        return "", name
    ns, _, short = name.rpartition("\\")
    return ns, short


class CIRJsonAdapter:
    """
    CIR JSON → CIRGraph → EntityDeclaration.

    The JSON document is produced by an external PHP reflector in the
    same {nodes, edges} shape that CIRGraph.to_debug_json() emits.
    Supported node kinds: TypeDecl, Field, Method, Parameter, Constant.
    Supported edges: HAS_FIELD, HAS_METHOD, HAS_CONSTANT, PARAM_OF,
    INHERITS, IMPLEMENTS.
    """

    # ---------------- Loading ----------------

    def build_cir_graph_for_document(self, cir: Dict[str, Any]) -> CIRGraph:
        if not isinstance(cir, dict):
            raise ValueError(f"Expected CIR object, got {type(cir).__name__}")

        nodes = cir.get("nodes")
        edges = cir.get("edges", [])
        if not isinstance(nodes, list) or not isinstance(edges, list):
            raise ValueError("CIR must contain 'nodes' and 'edges' lists")

        graph = CIRGraph()
        for n in nodes:
            if not isinstance(n, dict):
                raise ValueError(f"CIR node must be an object: {n!r}")
            node_id = n.get("id")
            kind = n.get("kind")
            if not isinstance(node_id, str) or not isinstance(kind, str) or not node_id or not kind:
                raise ValueError(f"CIR node without id/kind: {n!r}")
            attrs = n.get("attrs") or {}
            if not isinstance(attrs, dict):
                raise ValueError(f"CIR node {node_id} has non-object attrs: {attrs!r}")
            graph.add_node(node_id, kind, self._payload_for(node_id, kind, attrs))

        for e in edges:
            if not isinstance(e, dict):
                raise ValueError(f"CIR edge must be an object: {e!r}")
            src, dst, etype = e.get("src"), e.get("dst"), e.get("type")
            if not all(isinstance(v, str) and v for v in (src, dst, etype)):
                raise ValueError(f"CIR edge without src/dst/type: {e!r}")
            graph.add_edge(src, dst, etype)

        logger.debug("Loaded CIR with %d nodes, %d edges", len(nodes), len(edges))
        return graph

    def build_cir_graph_for_files(self, files: List[str]) -> CIRGraph:
        """
        Merge several CIR JSON files into one graph.
        Unreadable or invalid files are skipped and reported in
        graph.g.graph["parse_errors"].
        """
        graph = CIRGraph()
        errors: List[Dict[str, str]] = []

        for path in files:
            try:
                with open(path, "r", encoding="utf-8") as f:
                    doc = json.load(f)
                part = self.build_cir_graph_for_document(doc)
            except (OSError, json.JSONDecodeError, ValueError) as e:
                logger.warning("Skipping CIR file %s: %s", path, e)
                errors.append({"file": path, "error": str(e)})
                continue
            graph.g.update(part.g)

        graph.g.graph["parse_errors"] = errors
        return graph

    def _payload_for(self, node_id: str, kind: str, attrs: Dict[str, Any]) -> Any:
        if kind == "TypeDecl":
            name = attrs.get("name") or ""
            namespace = attrs.get("namespace")
            if namespace is None:
                namespace, name = _split_full_name(name)
            if not name:
                raise ValueError(f"TypeDecl {node_id} has no name")
            return TypeDecl(
                id=node_id,
                name=name,
                namespace=namespace.strip("\\"),
                kind=(attrs.get("kind") or "class").lower(),
                is_abstract=bool(attrs.get("is_abstract")),
            )

        if kind == "Field":
            return Field(
                id=node_id,
                name=_name(attrs, node_id),
                visibility=_visibility(attrs, node_id),
                is_static=bool(attrs.get("is_static")),
                doc_comment=attrs.get("doc_comment"),
                type=_type_ref(attrs.get("type")),
            )

        if kind == "Method":
            return Method(
                id=node_id,
                name=_name(attrs, node_id),
                visibility=_visibility(attrs, node_id),
                is_static=bool(attrs.get("is_static")),
            )

        if kind == "Parameter":
            if "has_default" in attrs:
                has_default = bool(attrs["has_default"])
            else:
                has_default = "default" in attrs or bool(attrs.get("default_constant"))
            return Parameter(
                id=node_id,
                name=_name(attrs, node_id),
                type=_type_ref(attrs.get("type"), attrs.get("nullable")),
                position=int(attrs.get("position") or 0),
                has_default=has_default,
                default=attrs.get("default"),
                default_constant=attrs.get("default_constant") or None,
            )

        if kind == "Constant":
            return Constant(
                id=node_id,
                name=_name(attrs, node_id),
                visibility=_visibility(attrs, node_id),
            )

        # unknown kinds are kept as raw attrs
        return dict(attrs)

    # ---------------- Lookup ----------------

    def type_ids(self, graph: CIRGraph, kinds: Tuple[str, ...] | None = None) -> List[str]:
        out = []
        for tid in graph.nodes_of_kind("TypeDecl"):
            t: TypeDecl = graph.payload(tid)
            if kinds is None or t.kind in kinds:
                out.append(tid)
        return out

    def find_type_id(self, graph: CIRGraph, class_name: str) -> str:
        """
        Resolve a class handle: a node id, or a (possibly \\-prefixed)
        full name. Class names compare case-insensitively, like PHP.
        """
        if graph.kind_of(class_name) == "TypeDecl":
            return class_name

        wanted = class_name.lstrip("\\").lower()
        for tid in graph.nodes_of_kind("TypeDecl"):
            if graph.payload(tid).full_name.lower() == wanted:
                return tid

        raise ValueError(f"Class not found in CIR: {class_name}")

    def known_classes(self, graph: CIRGraph) -> frozenset:
        return frozenset(
            graph.payload(tid).full_name.lower()
            for tid in self.type_ids(graph, _CLASS_KINDS)
        )

    def implementers(self, graph: CIRGraph, interface_name: str) -> List[TypeDecl]:
        """
        Non-interface TypeDecls implementing `interface_name`, directly or
        through a parent class or a parent interface.
        """
        wanted = interface_name.lstrip("\\").lower()
        found = []
        for tid in graph.nodes_of_kind("TypeDecl"):
            if graph.payload(tid).kind == "interface":
                continue
            if wanted in self._supertype_names(graph, tid):
                found.append(graph.payload(tid))
        return found

    def _supertype_names(self, graph: CIRGraph, type_id: str) -> Set[str]:
        """Lower-cased full names of every parent class and interface."""
        names: Set[str] = set()
        seen: Set[str] = {type_id}
        pending = [type_id]
        while pending:
            current = pending.pop()
            for etype in ("INHERITS", "IMPLEMENTS"):
                for dst in graph.targets(current, etype):
                    names.add(self._name_of(graph, dst).lower())
                    if dst not in seen:
                        seen.add(dst)
                        pending.append(dst)
        return names

    def _name_of(self, graph: CIRGraph, node_id: str) -> str:
        # IMPLEMENTS/INHERITS may point at types outside the CIR (plain names)
        if graph.kind_of(node_id) == "TypeDecl":
            return graph.payload(node_id).full_name
        name = node_id[len("type:"):] if node_id.startswith("type:") else node_id
        return name.lstrip("\\")

    # ---------------- Entity view ----------------

    def build_entity(self, cir: Dict[str, Any], class_name: str) -> EntityDeclaration:
        graph = self.build_cir_graph_for_document(cir)
        return self.entity_for(graph, self.find_type_id(graph, class_name))

    def entity_for(self, graph: CIRGraph, type_id: str) -> EntityDeclaration:
        """
        Own members first (declaration order), then members inherited
        through INHERITS. Overridden members appear once.
        """
        type_decl: TypeDecl = graph.payload(type_id)

        fields: List[Field] = []
        methods: List[Method] = []
        constants: List[Constant] = []
        seen_fields: Set[str] = set()
        seen_methods: Set[str] = set()
        seen_constants: Set[str] = set()

        for depth, tid in enumerate(self._class_chain(graph, type_id)):
            owner: TypeDecl = graph.payload(tid)

            for fid in graph.targets(tid, "HAS_FIELD", "Field"):
                f: Field = graph.payload(fid)
                if f.name in seen_fields or (depth and f.visibility == "private"):
                    continue
                seen_fields.add(f.name)
                fields.append(f)

            for mid in graph.targets(tid, "HAS_METHOD", "Method"):
                m: Method = graph.payload(mid)
                if m.name.lower() in seen_methods:
                    continue
                seen_methods.add(m.name.lower())
                methods.append(replace(
                    m,
                    declaring_class=owner.full_name,
                    parameters=self._parameters(graph, mid),
                ))

            for cid in graph.targets(tid, "HAS_CONSTANT", "Constant"):
                c: Constant = graph.payload(cid)
                if c.name in seen_constants:
                    continue
                seen_constants.add(c.name)
                constants.append(c)

        return EntityDeclaration(
            type=type_decl,
            fields=tuple(fields),
            methods=tuple(methods),
            constants=tuple(constants),
            known_classes=self.known_classes(graph),
        )

    def _parameters(self, graph: CIRGraph, method_id: str) -> Tuple[Parameter, ...]:
        params = [graph.payload(pid) for pid in graph.sources(method_id, "PARAM_OF", "Parameter")]
        # stable: edge order breaks ties
        return tuple(sorted(params, key=lambda p: p.position))

    def _class_chain(self, graph: CIRGraph, type_id: str) -> List[str]:
        chain: List[str] = []
        current: Optional[str] = type_id
        while current is not None and current not in chain:
            chain.append(current)
            parents = [
                p for p in graph.targets(current, "INHERITS")
                if graph.kind_of(p) == "TypeDecl"
            ]
            current = parents[0] if parents else None
        return chain
