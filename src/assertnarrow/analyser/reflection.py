"""
Reflection

PHPStan Pattern: PHPStan\\Reflection\\MethodReflection, PHPStan\\DependencyInjection\\Container
Reference: DESIGN.md (host analyser)

Static calls in snippets are resolved to a ``MethodReflection`` through the
class aliases in ``utils/config.py``; extensions are looked up by the
declaring class.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, TYPE_CHECKING

from ..shared.nodes import StaticCall
from ..shared.types import normalize_class_name
from ..utils.config import DEFAULT_CLASS_ALIASES

if TYPE_CHECKING:
    from .extensions import StaticMethodTypeSpecifyingExtension

logger = logging.getLogger("assertnarrow.analyser.reflection")


@dataclass(frozen=True)
class MethodReflection:
    declaring_class: str
    name: str

    def get_name(self) -> str:
        return self.name

    def __str__(self) -> str:
        return f"{self.declaring_class}::{self.name}"


class ExtensionRegistry:
    """Static-method type-specifying extensions, keyed by lowercased class name."""

    def __init__(self, class_aliases: Optional[Mapping[str, str]] = None):
        self._aliases: Dict[str, str] = {
            alias.lower(): target
            for alias, target in (class_aliases if class_aliases is not None else DEFAULT_CLASS_ALIASES).items()
        }
        self._extensions: Dict[str, List['StaticMethodTypeSpecifyingExtension']] = {}

    def register(self, extension: 'StaticMethodTypeSpecifyingExtension') -> None:
        key = normalize_class_name(extension.get_class()).lower()
        self._extensions.setdefault(key, []).append(extension)
        logger.debug(f"Registered {extension.__class__.__name__} for {extension.get_class()}")

    def resolve_class(self, name: str) -> str:
        name = normalize_class_name(name)
        return self._aliases.get(name.lower(), name)

    def reflect(self, node: StaticCall) -> MethodReflection:
        return MethodReflection(self.resolve_class(str(node.class_name)), node.method)

    def extensions_for(self, class_name: str) -> List['StaticMethodTypeSpecifyingExtension']:
        return list(self._extensions.get(self.resolve_class(class_name).lower(), []))

    def all_extensions(self) -> List['StaticMethodTypeSpecifyingExtension']:
        return [extension for extensions in self._extensions.values() for extension in extensions]
