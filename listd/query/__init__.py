"""
Listing query compilation.

Composes criteria into predicates, renders them into parameterized page
and count queries, and paginates the results by keyset.
"""

from .pagination import Cursor, PageDirection, PageWindow, PaginationController, PAGE_SIZE
from .predicates import (
    Predicate,
    PredicateKind,
    PredicateComposer,
    area_column,
    ordering_for,
    MINIMUM_PRICE,
)
from .compiler import (
    CompiledQuery,
    ListingQueryPlan,
    ParameterList,
    QueryCompiler,
    QueryCompileError,
    render_predicate,
    render_where,
    CATALOG_JOINS,
)

__all__ = [
    'Cursor',
    'PageDirection',
    'PageWindow',
    'PaginationController',
    'PAGE_SIZE',
    'Predicate',
    'PredicateKind',
    'PredicateComposer',
    'area_column',
    'ordering_for',
    'MINIMUM_PRICE',
    'CompiledQuery',
    'ListingQueryPlan',
    'ParameterList',
    'QueryCompiler',
    'QueryCompileError',
    'render_predicate',
    'render_where',
    'CATALOG_JOINS',
]
