"""
The resolution context: a namespace plus the use statements in effect inside it.
"""

from typing import Dict, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, field_validator

from cosmos.config import NAMESPACE_ATOM, PARENT_ATOM
from cosmos.symbol import Symbol, as_symbol
from cosmos.use_statement import UseStatement, UseStatementType

from .renderer import ResolutionContextRenderer

SymbolIndex = Dict[UseStatementType, Dict[str, Symbol]]


class ResolutionContext(BaseModel):
    model_config = ConfigDict(frozen=True)

    primary_namespace: Symbol = Field(default_factory=Symbol.global_namespace)
    use_statements: Tuple[UseStatement, ...] = ()

    # Effective alias -> imported symbol, per import namespace. Built on first use.
    _index: Optional[SymbolIndex] = PrivateAttr(default=None)

    @field_validator("primary_namespace", mode="before")
    @classmethod
    def _coerce_namespace(cls, value):
        if isinstance(value, str):
            value = Symbol.from_string(value)
        if isinstance(value, Symbol):
            return value.to_absolute().normalize()
        return value

    def symbol_index(self) -> SymbolIndex:
        if self._index is None:
            index: SymbolIndex = {use_type: {} for use_type in UseStatementType}
            for statement in self.use_statements:
                for clause in statement.clauses:
                    index[statement.type][clause.effective_alias] = clause.symbol
            self._index = index
        return self._index

    def resolve(self, reference: Union[Symbol, str], use_type: UseStatementType = UseStatementType.TYPE) -> Symbol:
        """
        Resolves a reference as PHP would inside this context.

        Single-atom references are looked up among the imports of `use_type`. Longer
        references always resolve their first atom through type imports, since that
        atom names a namespace or class.
        """
        reference = as_symbol(reference)
        if reference.is_qualified:
            return reference.normalize()

        first_atom = reference.atoms[0]
        if first_atom.lower() == NAMESPACE_ATOM:
            return self.primary_namespace.join(reference.slice_atoms(1)).normalize()

        if first_atom != PARENT_ATOM:
            lookup_type = use_type if len(reference.atoms) == 1 else UseStatementType.TYPE
            imported = self.symbol_index()[lookup_type].get(first_atom)
            if imported is not None:
                return imported.join(reference.slice_atoms(1)).normalize()

        return self.primary_namespace.join(reference).normalize()

    def reference_for(self, symbol: Union[Symbol, str], use_type: UseStatementType = UseStatementType.TYPE) -> Symbol:
        """The shortest reference that resolves back to `symbol` inside this context."""
        symbol = as_symbol(symbol).to_absolute().normalize()

        best = symbol
        if self.primary_namespace.is_ancestor_of(symbol):
            relative = symbol.relative_to(self.primary_namespace)
            # An import with the same alias shadows the namespace member
            if self.resolve(relative, use_type) == symbol:
                best = relative

        for statement in self.use_statements:
            for clause in statement.clauses:
                candidate = None
                if statement.type is use_type and clause.symbol == symbol:
                    candidate = Symbol.from_atoms([clause.effective_alias], is_qualified=False)
                elif statement.type is UseStatementType.TYPE and clause.symbol.is_ancestor_of(symbol):
                    remainder = symbol.relative_to(clause.symbol)
                    candidate = Symbol.from_atoms((clause.effective_alias,) + remainder.atoms, is_qualified=False)

                # Fewer atoms wins; on a tie an unqualified reference beats `\Name`
                if candidate is None or (len(candidate.atoms), candidate.is_qualified) >= (len(best.atoms), best.is_qualified):
                    continue
                if self.resolve(candidate, use_type) == symbol:
                    best = candidate

        return best

    def __str__(self) -> str:
        return ResolutionContextRenderer().render_context(self)
