"""
Use statement clauses, use statements and their normalizer.
"""

from enum import Enum
from typing import Dict, Iterable, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, field_validator

from .config import PARENT_ATOM, SELF_ATOM
from .exceptions import CosmosError, ErrorCode
from .symbol import Symbol, SymbolType


class UseStatementType(Enum):
    TYPE = "type"
    FUNCTION = "function"
    CONSTANT = "const"

    @classmethod
    def for_symbol_type(cls, symbol_type: SymbolType) -> "UseStatementType":
        if symbol_type is SymbolType.FUNCTION:
            return cls.FUNCTION
        if symbol_type is SymbolType.CONSTANT:
            return cls.CONSTANT
        return cls.TYPE

    @property
    def keyword(self) -> str:
        """The keyword written after `use`, empty for type imports."""
        return "" if self is UseStatementType.TYPE else self.value


class UseStatementClause(BaseModel):
    model_config = ConfigDict(frozen=True)

    symbol: Symbol
    alias: Optional[Symbol] = None

    @field_validator("symbol", mode="before")
    @classmethod
    def _coerce_symbol(cls, value):
        if isinstance(value, str):
            value = Symbol.from_string(value)
        if isinstance(value, Symbol):
            return value.to_absolute().normalize()
        return value

    @field_validator("alias", mode="before")
    @classmethod
    def _validate_alias(cls, value):
        if value is None:
            return None
        alias = Symbol.from_string(value) if isinstance(value, str) else value
        if not isinstance(alias, Symbol):
            return alias
        if alias.is_qualified or len(alias.atoms) != 1 or alias.atoms[0] in (SELF_ATOM, PARENT_ATOM):
            raise CosmosError(ErrorCode.INVALID_ALIAS, alias=str(alias))
        return alias

    @property
    def effective_alias(self) -> str:
        if self.alias is not None:
            return self.alias.atoms[0]
        return self.symbol.name

    def __str__(self) -> str:
        if self.alias is None:
            return self.symbol.runtime_string()
        return f"{self.symbol.runtime_string()} as {self.alias}"


class UseStatement(BaseModel):
    model_config = ConfigDict(frozen=True)

    clauses: Tuple[UseStatementClause, ...]
    type: UseStatementType = UseStatementType.TYPE

    @field_validator("clauses")
    @classmethod
    def _validate_clauses(cls, clauses):
        if not clauses:
            raise CosmosError(ErrorCode.EMPTY_USE_STATEMENT)
        return clauses

    def __str__(self) -> str:
        keyword = f"{self.type.keyword} " if self.type.keyword else ""
        return f"use {keyword}" + ", ".join(str(clause) for clause in self.clauses)


class UseStatementNormalizer:
    """Dedupes, sorts and regroups use statements so equal import sets render identically."""

    def normalize(self, use_statements: Iterable[UseStatement]) -> List[UseStatement]:
        buckets: Dict[UseStatementType, List[UseStatementClause]] = {use_type: [] for use_type in UseStatementType}
        for statement in use_statements:
            buckets[statement.type].extend(statement.clauses)

        normalized = []
        for use_type in UseStatementType:
            for clause in self.normalize_clauses(buckets[use_type]):
                normalized.append(UseStatement(clauses=(clause,), type=use_type))
        return normalized

    def normalize_clauses(self, clauses: Iterable[UseStatementClause]) -> List[UseStatementClause]:
        unique: Dict[str, UseStatementClause] = {}
        for clause in clauses:
            unique.setdefault(str(clause), clause)
        return [unique[key] for key in sorted(unique)]
