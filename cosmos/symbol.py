"""
The symbol path model.

A symbol is an immutable sequence of atoms with a single flag telling qualified
symbols (rooted at the global namespace, e.g. `\\Foo\\Bar`) apart from references
(relative names such as `Bar\\Baz`, meaningful only against a resolution context).
"""

from enum import Enum
from typing import Iterable, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, field_validator

from .config import ATOM_PATTERN, NAMESPACE_SEPARATOR, PARENT_ATOM, SELF_ATOM
from .exceptions import CosmosError, ErrorCode


class SymbolType(Enum):
    CLASS = "class"
    INTERFACE = "interface"
    TRAIT = "trait"
    ENUM = "enum"
    FUNCTION = "function"
    CONSTANT = "constant"

    @property
    def is_type(self) -> bool:
        """True for the class-like kinds, which share one import namespace."""
        return self not in (SymbolType.FUNCTION, SymbolType.CONSTANT)


class Symbol(BaseModel):
    model_config = ConfigDict(frozen=True)

    atoms: Tuple[str, ...] = ()
    is_qualified: bool = True

    @field_validator("atoms")
    @classmethod
    def _validate_atoms(cls, atoms):
        for atom in atoms:
            if atom in (SELF_ATOM, PARENT_ATOM):
                continue
            if not ATOM_PATTERN.match(atom):
                raise CosmosError(ErrorCode.INVALID_SYMBOL_ATOM, atom=atom)
        return atoms

    # --- Factories ---

    @classmethod
    def from_string(cls, text: str) -> "Symbol":
        """
        Parses a symbol string. A leading separator makes the symbol qualified,
        an empty string is the self reference and empty segments are dropped.
        """
        if text == NAMESPACE_SEPARATOR:
            return cls.global_namespace()
        if text == "":
            return cls(atoms=(SELF_ATOM,), is_qualified=False)

        parts = text.split(NAMESPACE_SEPARATOR)
        is_qualified = parts[0] == ""
        return cls(atoms=tuple(part for part in parts if part != ""), is_qualified=is_qualified)

    @classmethod
    def from_atoms(cls, atoms: Iterable[str], is_qualified: bool = True) -> "Symbol":
        return cls(atoms=tuple(atoms), is_qualified=is_qualified)

    @classmethod
    def global_namespace(cls) -> "Symbol":
        return cls(atoms=(), is_qualified=True)

    # --- Accessors ---

    @property
    def name(self) -> Optional[str]:
        return self.atoms[-1] if self.atoms else None

    @property
    def is_global(self) -> bool:
        return self.is_qualified and not self.atoms

    def atom_at(self, index: int) -> str:
        return self.atoms[index]

    def slice_atoms(self, start: int, count: Optional[int] = None) -> "Symbol":
        end = None if count is None else start + count
        return Symbol(atoms=self.atoms[start:end], is_qualified=self.is_qualified)

    # --- Path Operations ---

    def join(self, reference: "Symbol") -> "Symbol":
        if reference.is_qualified:
            return reference
        return Symbol(atoms=self.atoms + reference.atoms, is_qualified=self.is_qualified)

    def normalize(self) -> "Symbol":
        atoms = []
        for atom in self.atoms:
            if atom == SELF_ATOM:
                continue
            if atom == PARENT_ATOM:
                if atoms and atoms[-1] != PARENT_ATOM:
                    atoms.pop()
                elif not self.is_qualified:
                    atoms.append(PARENT_ATOM)
                continue
            atoms.append(atom)

        if not self.is_qualified and not atoms:
            atoms = [SELF_ATOM]
        return Symbol(atoms=tuple(atoms), is_qualified=self.is_qualified)

    def is_ancestor_of(self, other: "Symbol") -> bool:
        if self.is_qualified != other.is_qualified:
            return False
        ancestor = self.normalize().atoms
        descendant = other.normalize().atoms
        if not self.is_qualified and ancestor == (SELF_ATOM,):
            ancestor = ()
        return len(ancestor) < len(descendant) and descendant[: len(ancestor)] == ancestor

    def relative_to(self, ancestor: "Symbol") -> "Symbol":
        """The reference that joined onto `ancestor` yields this symbol."""
        normalized = self.normalize()
        if ancestor.is_ancestor_of(normalized):
            prefix_size = 0 if ancestor.is_global else len(ancestor.normalize().atoms)
            return Symbol(atoms=normalized.atoms[prefix_size:], is_qualified=False)
        return normalized

    def to_absolute(self) -> "Symbol":
        if self.is_qualified:
            return self
        return Symbol(atoms=self.atoms, is_qualified=True)

    def to_relative(self) -> "Symbol":
        if not self.is_qualified:
            return self
        return Symbol(atoms=self.atoms or (SELF_ATOM,), is_qualified=False)

    # --- Rendering ---

    def runtime_string(self) -> str:
        """The form PHP uses at run time and in use statements, without a leading separator."""
        return NAMESPACE_SEPARATOR.join(self.atoms)

    def __str__(self) -> str:
        if self.is_qualified:
            return NAMESPACE_SEPARATOR + self.runtime_string()
        return self.runtime_string()


def as_symbol(value: Union[Symbol, str]) -> Symbol:
    """Accepts either a Symbol or its string form."""
    return Symbol.from_string(value) if isinstance(value, str) else value
