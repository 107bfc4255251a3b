# tests/conftest.py
from __future__ import annotations

import os
import sys
from typing import Any, Dict, List, Optional

import pytest

CURRENT_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.dirname(CURRENT_DIR)
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from cir.graph import CIRGraph  # noqa: E402
from cir.model import Constant, Field, Method, Parameter, TypeDecl, TypeRef  # noqa: E402

FIXTURES_DIR = os.path.join(CURRENT_DIR, "fixtures")


class CIRDoc:
    """Small helper to assemble the CIR a PHP reflector would send."""

    def __init__(self) -> None:
        self.graph = CIRGraph()

    def add_class(self, full_name: str, kind: str = "class", is_abstract: bool = False) -> str:
        namespace, _, name = full_name.rpartition("\\")
        type_id = f"type:{full_name}"
        self.graph.add_node(
            type_id, "TypeDecl",
            TypeDecl(id=type_id, name=name, namespace=namespace, kind=kind, is_abstract=is_abstract),
        )
        return type_id

    def add_field(self, type_id: str, name: str, visibility: str = "public", is_static: bool = False,
                  doc_comment: Optional[str] = None, type: Optional[str] = None) -> str:
        field_id = f"field:{type_id[5:]}:{name}"
        self.graph.add_node(field_id, "Field", Field(
            id=field_id, name=name, visibility=visibility, is_static=is_static,
            doc_comment=doc_comment, type=TypeRef.parse(type),
        ))
        self.graph.add_edge(type_id, field_id, "HAS_FIELD")
        return field_id

    def add_method(self, type_id: str, name: str, params: List[Dict[str, Any]] = (),
                   visibility: str = "public", is_static: bool = False) -> str:
        method_id = f"method:{type_id[5:]}:{name}"
        self.graph.add_node(method_id, "Method", Method(
            id=method_id, name=name, visibility=visibility, is_static=is_static,
        ))
        self.graph.add_edge(type_id, method_id, "HAS_METHOD")

        for pos, p in enumerate(params):
            param_id = f"param:{type_id[5:]}:{name}:{p['name']}"
            self.graph.add_node(param_id, "Parameter", Parameter(
                id=param_id,
                name=p["name"],
                type=TypeRef.parse(p.get("type")),
                position=pos,
                has_default="default" in p or "default_constant" in p,
                default=p.get("default"),
                default_constant=p.get("default_constant"),
            ))
            self.graph.add_edge(param_id, method_id, "PARAM_OF")
        return method_id

    def add_constant(self, type_id: str, name: str, visibility: str = "public") -> str:
        const_id = f"const:{type_id[5:]}:{name}"
        self.graph.add_node(const_id, "Constant", Constant(id=const_id, name=name, visibility=visibility))
        self.graph.add_edge(type_id, const_id, "HAS_CONSTANT")
        return const_id

    def inherits(self, child_id: str, parent_id: str) -> None:
        self.graph.add_edge(child_id, parent_id, "INHERITS")

    def implements(self, type_id: str, interface_name: str) -> None:
        self.graph.add_edge(type_id, f"type:{interface_name}", "IMPLEMENTS")

    def to_json(self) -> Dict[str, Any]:
        return self.graph.to_debug_json()


@pytest.fixture
def cir_doc() -> CIRDoc:
    return CIRDoc()


@pytest.fixture
def fixtures_dir() -> str:
    return FIXTURES_DIR
