from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

import config
from adapters.cir_json_adapter import CIRJsonAdapter
from cir.model import EntityDeclaration, Field, Method, Parameter, TypeRef
from php_code import GeneratedClass, GeneratedMethod, PhpLiteral, PhpNamespace
from php_printer import PsrPrinter

logger = logging.getLogger(__name__)

_VAR_ANNOTATION = re.compile(r"@var (\S+)")


# ======================================================================
#  NAMING / ELIGIBILITY
# ======================================================================

def should_generate_builder(class_name: str) -> bool:
    """
    False for classes that already are builders, generated
    (FooBuilderMethods) or hand-written (FooBuilder).
    """
    short = class_name.rpartition("\\")[2]
    return not any(short.endswith(suffix) for suffix in config.SKIP_SUFFIXES)


def builder_simple_name(class_name: str) -> str:
    return class_name.rpartition("\\")[2] + config.BUILDER_SUFFIX


# ======================================================================
#  MEMBER CLASSIFICATION
# ======================================================================

@dataclass(frozen=True)
class PropertyMember:
    field: Field


@dataclass(frozen=True)
class SetterMember:
    method: Method


@dataclass(frozen=True)
class MutatorMember:
    method: Method


Member = Union[PropertyMember, SetterMember, MutatorMember]


def classify_members(entity: EntityDeclaration) -> List[Member]:
    """
    One walk over the declaration. Only public instance members are
    kept; order is declaration order within fields and within methods.
    """
    members: List[Member] = []

    for f in entity.fields:
        if f.is_static or f.visibility != "public":
            continue
        members.append(PropertyMember(f))

    for m in entity.methods:
        if m.is_static or not m.is_public:
            continue
        if m.name.startswith("set") and len(m.parameters) == 1:
            members.append(SetterMember(m))
        elif m.name.startswith("with") and len(m.parameters) > 0:
            members.append(MutatorMember(m))

    return members


# ======================================================================
#  PROPERTY TYPES
# ======================================================================

def _normalize_type(name: str, nullable: bool = False) -> Tuple[str, bool]:
    """Strip '?' and a leading 'null|' or trailing '|null' into the flag."""
    if name.startswith("?"):
        nullable = True
        name = name.lstrip("?")

    if name.startswith("null|"):
        name = name[5:]
        nullable = True
    elif name.endswith("|null"):
        name = name[:-5]
        nullable = True

    return name, nullable


def parse_var_annotation(doc_comment: Optional[str]) -> Optional[TypeRef]:
    """'/** @var string|null */' -> TypeRef('string', nullable=True)"""
    if not doc_comment:
        return None
    match = _VAR_ANNOTATION.search(doc_comment)
    if not match:
        return None
    name, nullable = _normalize_type(match.group(1))
    if not name:
        return None
    return TypeRef(name=name, nullable=nullable)


def resolve_property_type(f: Field, known_classes: Iterable[str]) -> Optional[TypeRef]:
    """
    The declared type of a public property, or None when it is missing
    or not usable as a parameter type (unknown class, generics, unions).
    """
    if f.type is not None:
        name, nullable = _normalize_type(f.type.name, f.type.nullable)
        ref: Optional[TypeRef] = TypeRef(name, nullable) if name else None
    else:
        ref = parse_var_annotation(f.doc_comment)

    if ref is None:
        return None

    if ref.kind == "builtin":
        return ref

    if ref.name.lstrip("\\").lower() in {c.lower() for c in known_classes}:
        return ref

    logger.debug("Ignoring unknown type '%s' on property $%s", ref.name, f.name)
    return None


# ======================================================================
#  GENERATOR
# ======================================================================

class BuilderGenerator:
    """
    Entity declaration -> PHP source of <Entity>BuilderMethods.

    One instance per entity. generate() has no side effects and is
    deterministic for a given declaration.
    """

    def __init__(
        self,
        entity: EntityDeclaration,
        printer: Optional[PsrPrinter] = None,
        marker_interface: Optional[str] = None,
        known_classes: Optional[Iterable[str]] = None,
    ) -> None:
        self.entity = entity
        self.printer = printer or PsrPrinter()
        self.marker_interface = marker_interface or config.MARKER_INTERFACE
        extra = config.KNOWN_CLASSES if known_classes is None else tuple(known_classes)
        self.known_classes = frozenset(entity.known_classes) | {c.lstrip("\\").lower() for c in extra}

    def generate(self) -> str:
        namespace = PhpNamespace(self.entity.namespace)
        namespace.add_use(self.entity.namespace)

        builder_class = GeneratedClass(self._builder_simple_name())
        builder_class.add_implement(self.marker_interface)
        builder_class.add_property("entity", "private")
        self._add_constructor(builder_class, namespace)

        members = classify_members(self.entity)
        self._add_public_properties(builder_class, members)
        self._add_setters(builder_class, members)
        self._add_mutators(builder_class, members)
        self._add_build_method(builder_class)

        namespace.add(builder_class)
        logger.info(
            "Generated %s with %d methods",
            self.get_builder_name(), len(builder_class.methods),
        )
        return self.printer.print_file(namespace)

    def get_builder_name(self) -> str:
        return self.entity.namespace + "\\" + self._builder_simple_name()

    def should_generate_builder(self) -> bool:
        return should_generate_builder(self.entity.full_name)

    def _builder_simple_name(self) -> str:
        return builder_simple_name(self.entity.name)

    # ---------- passes ----------

    def _add_constructor(self, builder_class: GeneratedClass, namespace: PhpNamespace) -> None:
        # TODO: support entities whose constructor has required parameters
        method = builder_class.add_method("__construct")
        method.body = "$this->entity = new " + namespace.simplify_name(self.entity.full_name) + ";"

    def _add_public_properties(self, builder_class: GeneratedClass, members: List[Member]) -> None:
        for member in members:
            if not isinstance(member, PropertyMember):
                continue
            name = member.field.name

            method = builder_class.add_method("with" + name[:1].upper() + name[1:])
            method.body = f"$this->entity->{name} = $value;\n\nreturn $this;"
            method.is_final = True

            type_ref = resolve_property_type(member.field, self.known_classes)
            if type_ref is not None:
                method.add_parameter("value", type_ref.name, type_ref.nullable)
            else:
                method.add_parameter("value")

    def _add_setters(self, builder_class: GeneratedClass, members: List[Member]) -> None:
        for member in members:
            if not isinstance(member, SetterMember):
                continue
            setter = member.method

            method = builder_class.add_method("with" + setter.name[3:])
            method.body = f"$this->entity->{setter.name}($value);\n\nreturn $this;"
            method.is_final = True
            self._mirror_parameter(method, setter, setter.parameters[0], "value")

    def _add_mutators(self, builder_class: GeneratedClass, members: List[Member]) -> None:
        for member in members:
            if not isinstance(member, MutatorMember):
                continue
            mutator = member.method

            arguments = ", ".join(f"${p.name}" for p in mutator.parameters)
            method = builder_class.add_method(mutator.name)
            method.body = f"$this->entity = $this->entity->{mutator.name}({arguments});\n\nreturn $this;"
            method.is_final = True
            for param in mutator.parameters:
                self._mirror_parameter(method, mutator, param, param.name)

    def _add_build_method(self, builder_class: GeneratedClass) -> None:
        method = builder_class.add_method("build")
        method.body = "return $this->entity;"
        method.return_type = self.entity.full_name
        method.is_final = True

    # ---------- parameters ----------

    def _mirror_parameter(self, method: GeneratedMethod, source: Method, param: Parameter, name: str) -> None:
        kwargs: Dict[str, Any] = {}
        if param.type is not None:
            kwargs["type"] = param.type.name
            kwargs["nullable"] = param.type.nullable
        if param.has_default:
            kwargs["default"] = self._default_value(source, param)
        method.add_parameter(name, **kwargs)

    def _default_value(self, source: Method, param: Parameter) -> Any:
        if not param.is_default_constant:
            return param.default

        ref = param.default_constant.lstrip("\\")
        if "::" not in ref:
            # global constant, e.g. PHP_EOL
            return PhpLiteral(ref)

        owner, _, const_name = ref.partition("::")
        if owner.lower() in ("self", "static"):
            owner = source.declaring_class or self.entity.full_name

        if owner.lstrip("\\").lower() == self.entity.full_name.lower():
            constant = self.entity.find_constant(const_name)
            if constant is not None and constant.visibility != "public":
                # still emitted; the builder cannot read this constant
                logger.warning(
                    "Default of $%s in %s::%s() uses %s constant %s::%s",
                    param.name, self.entity.full_name, source.name,
                    constant.visibility, owner, const_name,
                )

        return PhpLiteral(f"{owner}::{const_name}")


# ======================================================================
#  CIR-LEVEL HELPERS
# ======================================================================

def generate_builder(cir: Dict[str, Any], class_name: str) -> Dict[str, Any]:
    """
    CIR JSON + class name -> {"class_name", "builder_name", "generated", "php"}.
    Ineligible classes are reported with generated=False and empty php.
    """
    adapter = CIRJsonAdapter()
    entity = adapter.build_entity(cir, class_name)
    return _generate_for(entity)


def generate_all(cir: Dict[str, Any]) -> List[Dict[str, Any]]:
    """One result per eligible concrete class, in CIR order."""
    adapter = CIRJsonAdapter()
    graph = adapter.build_cir_graph_for_document(cir)

    results = []
    for tid in adapter.type_ids(graph, ("class",)):
        entity = adapter.entity_for(graph, tid)
        if not should_generate_builder(entity.full_name):
            logger.debug("Skipping %s", entity.full_name)
            continue
        if entity.type.is_abstract:
            logger.debug("Skipping abstract class %s", entity.full_name)
            continue
        results.append(_generate_for(entity))
    return results


def _generate_for(entity: EntityDeclaration) -> Dict[str, Any]:
    generator = BuilderGenerator(entity)
    generated = generator.should_generate_builder()
    return {
        "class_name": entity.full_name,
        "builder_name": generator.get_builder_name(),
        "generated": generated,
        "php": generator.generate() if generated else "",
    }


def discover_builders(cir: Dict[str, Any], marker_interface: Optional[str] = None) -> List[str]:
    """Full names of CIR classes implementing the marker interface, directly or inherited."""
    adapter = CIRJsonAdapter()
    graph = adapter.build_cir_graph_for_document(cir)
    marker = marker_interface or config.MARKER_INTERFACE
    return [t.full_name for t in adapter.implementers(graph, marker)]


def render_marker_interface(marker_interface: Optional[str] = None) -> str:
    """PHP source of the empty marker interface itself."""
    marker = (marker_interface or config.MARKER_INTERFACE).lstrip("\\")
    ns, _, short = marker.rpartition("\\")
    namespace = PhpNamespace(ns)
    namespace.add(GeneratedClass(short, kind="interface"))
    return PsrPrinter().print_file(namespace)
