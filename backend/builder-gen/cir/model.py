from dataclasses import dataclass, field
from typing import Any, Literal, Optional, Tuple

Visibility = Literal["public", "protected", "private"]

# PHP builtin type names accepted as parameter types
BUILTIN_TYPES = (
    "int", "bool", "string", "float", "iterable",
    "callable", "array", "object", "void",
)

@dataclass(frozen=True)
class TypeRef:
    name: str
    nullable: bool = False

    @property
    def kind(self) -> str:
        return "builtin" if self.name.lower() in BUILTIN_TYPES else "class"

    @classmethod
    def parse(cls, raw: Optional[str]) -> Optional["TypeRef"]:
        """'?string' -> TypeRef('string', True). Empty input -> None."""
        if not raw:
            return None
        raw = raw.strip()
        nullable = raw.startswith("?")
        name = raw.lstrip("?")
        if not name:
            return None
        return cls(name=name, nullable=nullable)

    def __str__(self) -> str:
        return ("?" if self.nullable else "") + self.name

@dataclass
class TypeDecl:
    id: str
    name: str                 # simple name, e.g. Foo
    namespace: str = ""       # e.g. App\Models ("" = global)
    kind: Literal["class", "interface", "trait", "enum"] = "class"
    is_abstract: bool = False

    @property
    def full_name(self) -> str:
        return f"{self.namespace}\\{self.name}" if self.namespace else self.name

@dataclass
class Field:
    id: str
    name: str
    visibility: Visibility = "public"
    is_static: bool = False
    doc_comment: Optional[str] = None
    type: Optional[TypeRef] = None

@dataclass
class Method:
    id: str
    name: str
    visibility: Visibility = "public"
    is_static: bool = False
    declaring_class: str = ""     # full name; differs from the entity for inherited methods
    parameters: Tuple["Parameter", ...] = ()

    @property
    def is_public(self) -> bool:
        return self.visibility == "public"

@dataclass
class Parameter:
    id: str
    name: str
    type: Optional[TypeRef] = None
    position: int = 0
    has_default: bool = False
    default: Any = None
    default_constant: Optional[str] = None   # e.g. self::X, Other\Cls::Y, PHP_EOL

    @property
    def is_default_constant(self) -> bool:
        return self.has_default and self.default_constant is not None

@dataclass
class Constant:
    id: str
    name: str
    visibility: Visibility = "public"

@dataclass
class EntityDeclaration:
    """Read-only view of one class: its own members followed by inherited ones."""
    type: TypeDecl
    fields: Tuple[Field, ...] = ()
    methods: Tuple[Method, ...] = ()
    constants: Tuple[Constant, ...] = ()
    # full names of every class known to the CIR, lower-cased
    known_classes: frozenset = field(default_factory=frozenset)

    @property
    def name(self) -> str:
        return self.type.name

    @property
    def namespace(self) -> str:
        return self.type.namespace

    @property
    def full_name(self) -> str:
        return self.type.full_name

    def find_constant(self, name: str) -> Optional[Constant]:
        for c in self.constants:
            if c.name == name:
                return c
        return None
