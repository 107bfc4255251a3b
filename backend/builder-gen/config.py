# backend/builder-gen/config.py
from __future__ import annotations

import os

from dotenv import load_dotenv  # type: ignore

load_dotenv()

# Marker interface every generated builder implements
MARKER_INTERFACE = (os.getenv("BUILDER_MARKER_INTERFACE") or "").strip().lstrip("\\") or "Kelunik\\Builders\\Builder"

BUILDER_SUFFIX = "BuilderMethods"
# Classes whose simple name ends with one of these never get a builder
SKIP_SUFFIXES = ("BuilderMethods", "Builder")

# PHP classes that exist without being part of the reflected code base.
# Property annotations naming one of these keep their type.
BUILTIN_CLASSES = (
    "stdClass", "Closure", "Generator", "ArrayObject", "ArrayIterator",
    "DateTime", "DateTimeImmutable", "DateInterval", "DateTimeZone", "DatePeriod",
    "SplObjectStorage", "SplFileInfo", "SplQueue", "SplStack",
    "Exception", "Error", "ErrorException",
    "InvalidArgumentException", "RuntimeException", "LogicException",
)

_extra = os.getenv("BUILDER_KNOWN_CLASSES", "")
KNOWN_CLASSES = BUILTIN_CLASSES + tuple(
    c.strip().lstrip("\\") for c in _extra.split(",") if c.strip()
)

LOG_LEVEL = (os.getenv("BUILDER_LOG_LEVEL") or "INFO").strip().upper()

SERVICE_URL = (os.getenv("BUILDER_SERVICE_URL") or "").strip() or "http://127.0.0.1:7100"
