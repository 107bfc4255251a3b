from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

# Type names that are never namespace-qualified
KEYWORDS = frozenset({
    "string", "int", "float", "bool", "array", "object", "callable",
    "iterable", "void", "self", "parent", "static", "mixed", "null",
    "false", "true", "never",
})


@dataclass(frozen=True)
class PhpLiteral:
    """Code emitted verbatim where a value is expected."""
    code: str

    def __str__(self) -> str:
        return self.code


_NO_DEFAULT = object()


@dataclass
class GeneratedParameter:
    name: str
    type: Optional[str] = None
    nullable: bool = False
    default: Any = _NO_DEFAULT

    @property
    def has_default(self) -> bool:
        return self.default is not _NO_DEFAULT


@dataclass
class GeneratedMethod:
    name: str
    body: str = ""
    parameters: List[GeneratedParameter] = field(default_factory=list)
    return_type: Optional[str] = None
    visibility: str = "public"
    is_final: bool = False
    is_static: bool = False

    def add_parameter(self, name: str, type: Optional[str] = None, nullable: bool = False,
                      default: Any = _NO_DEFAULT) -> GeneratedParameter:
        param = GeneratedParameter(name=name, type=type, nullable=nullable, default=default)
        self.parameters.append(param)
        return param


@dataclass
class GeneratedProperty:
    name: str
    visibility: str = "private"


@dataclass
class GeneratedClass:
    name: str
    kind: str = "class"
    implements: List[str] = field(default_factory=list)
    properties: List[GeneratedProperty] = field(default_factory=list)
    # keyed by lower-cased name (PHP method names are case-insensitive);
    # re-adding a name replaces the method in place
    methods: Dict[str, GeneratedMethod] = field(default_factory=dict)

    def add_implement(self, name: str) -> None:
        self.implements.append(name)

    def add_property(self, name: str, visibility: str = "private") -> GeneratedProperty:
        prop = GeneratedProperty(name=name, visibility=visibility)
        self.properties.append(prop)
        return prop

    def add_method(self, name: str) -> GeneratedMethod:
        key = name.lower()
        if key in self.methods:
            logger.warning("Method %s::%s generated twice, keeping the last one", self.name, name)
        method = GeneratedMethod(name=name)
        self.methods[key] = method
        return method


@dataclass
class PhpNamespace:
    name: str = ""
    # alias -> full name
    uses: Dict[str, str] = field(default_factory=dict)
    classes: List[GeneratedClass] = field(default_factory=list)

    def add(self, cls: GeneratedClass) -> None:
        self.classes.append(cls)

    def add_use(self, name: str, alias: Optional[str] = None) -> None:
        name = name.lstrip("\\")
        if not name:
            return
        if alias is None:
            alias = name.rpartition("\\")[2]
        self.uses[alias] = name

    def simplify_name(self, name: str) -> str:
        """
        Shortest printable form of a full class name inside this namespace.
        `use` aliases win over the namespace-relative form, so with
        `namespace App; use App;` the class App\\Foo prints as App\\Foo.
        """
        if not name or name.lower() in KEYWORDS:
            return name
        name = name.lstrip("\\")
        lower = name.lower()

        shortest: Optional[str] = None
        for alias, original in self.uses.items():
            if (lower + "\\").startswith(original.lower() + "\\"):
                short = alias + name[len(original):]
                if shortest is None or len(short) < len(shortest):
                    shortest = short

        if shortest is None and self.name and lower.startswith(self.name.lower() + "\\"):
            return name[len(self.name) + 1:]
        if shortest is not None:
            return shortest
        return ("\\" if self.name else "") + name

    def simplify_type(self, type_name: str) -> str:
        return "|".join(self.simplify_name(part) for part in type_name.split("|"))
