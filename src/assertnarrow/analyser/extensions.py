"""
Type-Specifying Extension Protocol

PHPStan Pattern: PHPStan\\Type\\StaticMethodTypeSpecifyingExtension
Reference: DESIGN.md (host analyser)

Extensions teach the type specifier what a static call guarantees about its
arguments once it has returned.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from ..shared.nodes import StaticCall
from .reflection import MethodReflection
from .specified_types import SpecifiedTypes, TypeSpecifierContext

if TYPE_CHECKING:
    from .scope import Scope
    from .type_specifier import TypeSpecifier


class StaticMethodTypeSpecifyingExtension(ABC):

    @abstractmethod
    def get_class(self) -> str:
        """Fully qualified name of the class whose static methods are handled."""
        raise NotImplementedError

    @abstractmethod
    def is_static_method_supported(self, method: MethodReflection, node: StaticCall,
                                   context: TypeSpecifierContext) -> bool:
        raise NotImplementedError

    @abstractmethod
    def specify_types(self, method: MethodReflection, node: StaticCall, scope: 'Scope',
                      context: TypeSpecifierContext) -> SpecifiedTypes:
        raise NotImplementedError


class TypeSpecifierAwareExtension(ABC):
    """Extensions that need the type specifier get it injected once."""

    @abstractmethod
    def set_type_specifier(self, type_specifier: 'TypeSpecifier') -> None:
        raise NotImplementedError
