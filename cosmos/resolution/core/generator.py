"""
Generates the resolution context needed to refer to a set of symbols from inside a namespace.

Symbols close enough to the namespace are referenced relatively and need no import.
Everything else gets a use statement, and imports that would share a short name are
given longer aliases by borrowing atoms from their own namespace, moving outward,
until every alias is unique.
"""

from typing import Dict, Iterable, List, Optional, Tuple, Union

from cosmos.config import DEFAULT_MAX_REFERENCE_ATOMS
from cosmos.symbol import Symbol, as_symbol
from cosmos.use_statement import UseStatement, UseStatementClause, UseStatementNormalizer, UseStatementType

from .context import ResolutionContext

# A clause paired with the number of atoms already borrowed for its alias
_AliasEntry = Tuple[UseStatementClause, int]


class ResolutionContextGenerator:
    def __init__(
        self,
        max_reference_atoms: int = DEFAULT_MAX_REFERENCE_ATOMS,
        normalizer: Optional[UseStatementNormalizer] = None,
    ):
        self.max_reference_atoms = max_reference_atoms
        self.normalizer = normalizer or UseStatementNormalizer()

    def generate(
        self,
        primary_namespace: Union[Symbol, str, None] = None,
        type_symbols: Optional[Iterable[Union[Symbol, str]]] = None,
        function_symbols: Optional[Iterable[Union[Symbol, str]]] = None,
        constant_symbols: Optional[Iterable[Union[Symbol, str]]] = None,
    ) -> ResolutionContext:
        if primary_namespace is None:
            namespace = Symbol.global_namespace()
        else:
            namespace = as_symbol(primary_namespace).to_absolute().normalize()

        categories = [
            (UseStatementType.TYPE, type_symbols),
            (UseStatementType.FUNCTION, function_symbols),
            (UseStatementType.CONSTANT, constant_symbols),
        ]

        use_statements = []
        for use_type, symbols in categories:
            clauses = self._import_clauses(namespace, symbols or [])
            clauses = resolve_alias_collisions(clauses)
            clauses.sort(key=lambda clause: clause.symbol.runtime_string())
            use_statements.extend(UseStatement(clauses=(clause,), type=use_type) for clause in clauses)

        return ResolutionContext(primary_namespace=namespace, use_statements=tuple(use_statements))

    def generate_normalized(self, context: ResolutionContext) -> ResolutionContext:
        """Rebuilds `context` with deduplicated, sorted, single-clause use statements."""
        return ResolutionContext(
            primary_namespace=context.primary_namespace,
            use_statements=tuple(self.normalizer.normalize(context.use_statements)),
        )

    def _import_clauses(self, namespace: Symbol, symbols: Iterable[Union[Symbol, str]]) -> List[UseStatementClause]:
        clauses: Dict[str, UseStatementClause] = {}
        for value in symbols:
            symbol = as_symbol(value).to_absolute().normalize()
            if not self._needs_import(namespace, symbol):
                continue
            clauses.setdefault(str(symbol), UseStatementClause(symbol=symbol))
        return list(clauses.values())

    def _needs_import(self, namespace: Symbol, symbol: Symbol) -> bool:
        if not namespace.is_ancestor_of(symbol):
            return True
        return len(symbol.atoms) - len(namespace.atoms) > self.max_reference_atoms


def resolve_alias_collisions(clauses: Iterable[UseStatementClause]) -> List[UseStatementClause]:
    """
    Lengthens colliding aliases until every clause imports under a unique name.

    Each pass builds the next generation of alias buckets from the previous one. A clause
    in a shared bucket borrows the next atom outward from the end of its symbol, so
    `\\Foo\\Bar\\Qux` grows from `Qux` to `BarQux` to `FooBarQux`. Iteration stops once
    a pass changes nothing. Clauses still colliding after that are told apart by a
    numeric suffix, in symbol order.
    """
    buckets = _bucket_by_alias((clause, 0) for clause in clauses)

    changed = True
    while changed:
        changed = False
        next_buckets: Dict[str, List[_AliasEntry]] = {}
        for alias, entries in buckets.items():
            if len(entries) < 2:
                next_buckets.setdefault(alias, []).extend(entries)
                continue

            for clause, borrowed in entries:
                atoms = clause.symbol.atoms
                position = len(atoms) - (borrowed + 2)
                if position < 0:
                    next_buckets.setdefault(alias, []).append((clause, borrowed))
                    continue

                new_alias = atoms[position] + alias
                extended = UseStatementClause(symbol=clause.symbol, alias=new_alias)
                next_buckets.setdefault(new_alias, []).append((extended, borrowed + 1))
                changed = True
        buckets = next_buckets

    return _suffix_remaining_collisions(buckets)


def _bucket_by_alias(entries: Iterable[_AliasEntry]) -> Dict[str, List[_AliasEntry]]:
    buckets: Dict[str, List[_AliasEntry]] = {}
    for entry in entries:
        buckets.setdefault(entry[0].effective_alias, []).append(entry)
    return buckets


def _suffix_remaining_collisions(buckets: Dict[str, List[_AliasEntry]]) -> List[UseStatementClause]:
    used_aliases = set(buckets)
    resolved = []
    for alias, entries in buckets.items():
        ordered = sorted((clause for clause, _ in entries), key=lambda clause: clause.symbol.runtime_string())
        resolved.append(ordered[0])

        suffix = 2
        for clause in ordered[1:]:
            while f"{alias}{suffix}" in used_aliases:
                suffix += 1
            new_alias = f"{alias}{suffix}"
            used_aliases.add(new_alias)
            resolved.append(UseStatementClause(symbol=clause.symbol, alias=new_alias))
    return resolved
