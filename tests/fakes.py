"""
In-memory stand-ins for the listing store used across the test suite.

`InMemoryCatalog` evaluates composed predicates directly against row
dictionaries keyed by the same column targets the compiler renders, so
query semantics can be checked without a database. `FakeConnection` and
`FakePool` mimic the slice of the asyncpg API the services use.
"""

from difflib import SequenceMatcher
from decimal import Decimal
from typing import Any, Callable, Dict, List, Optional

from listd.models import Ordering
from listd.query import PageDirection, PaginationController, Predicate, PredicateKind, QueryCompiler
from listd.query.predicates import LISTING_DESCRIPTION, LISTING_ID, RELEVANCE_SCORE


def word_similarity(text: Optional[str], term: str) -> float:
    """Share of the term's words that occur in the text."""
    words = term.lower().split()
    if not words or not text:
        return 0.0
    haystack = set(text.lower().split())
    return sum(1 for w in words if w in haystack) / len(words)


def strict_word_similarity(name: Optional[str], term: str) -> float:
    if not name:
        return 0.0
    return SequenceMatcher(None, name.lower(), term.lower()).ratio()


SIMILARITY = {
    "word_similarity": word_similarity,
    "strict_word_similarity": strict_word_similarity,
}


def make_row(
    listing_id: int,
    *,
    property_type: str = "house",
    listing_type: str = "for-sale",
    status: str = "available",
    price: Any = 1_000_000,
    bedrooms: Optional[int] = 2,
    bathrooms: Optional[int] = 1,
    parking_space: Optional[int] = 0,
    floor_area: Any = None,
    lot_area: Any = None,
    building_size: Any = None,
    city: str = "Makati",
    description: str = "",
) -> Dict[str, Any]:
    """Catalog row keyed by qualified column targets."""
    return {
        "listing.id": listing_id,
        "listing.price": Decimal(price),
        "listing.description": description,
        "property_status.slug": status,
        "property_type.slug": property_type,
        "listing_type.slug": listing_type,
        "property.bedrooms": bedrooms,
        "property.bathrooms": bathrooms,
        "property.parking_space": parking_space,
        "property.floor_area": None if floor_area is None else Decimal(floor_area),
        "property.lot_area": None if lot_area is None else Decimal(lot_area),
        "property.building_size": None if building_size is None else Decimal(building_size),
        "city.name": city,
    }


def evaluate(predicate: Predicate, row: Dict[str, Any]) -> bool:
    """Truth value of one predicate for one row, with SQL NULL semantics."""
    value = row.get(predicate.target)

    if predicate.kind is PredicateKind.EQUALITY:
        return value is not None and value == predicate.values[0]

    if predicate.kind is PredicateKind.RANGE:
        low, high = predicate.values
        if value is None:
            return False
        if high is None:
            return value >= low
        return low <= value <= high

    if predicate.kind is PredicateKind.FUZZY_THRESHOLD:
        term, threshold = predicate.values
        return SIMILARITY[predicate.operator](value, term) > threshold

    if predicate.kind is PredicateKind.CURSOR_BOUND:
        if value is None:
            return False
        key = predicate.values[0]
        return value < key if predicate.operator == "<" else value > key

    raise AssertionError(f"unexpected predicate kind {predicate.kind}")


class InMemoryCatalog:
    """Runs listing query plans over a list of rows."""

    def __init__(self, rows: List[Dict[str, Any]]):
        self.rows = rows

    def _scored(self, plan) -> List[Dict[str, Any]]:
        if plan.search is None:
            return [dict(r) for r in self.rows]
        return [
            dict(r, **{RELEVANCE_SCORE: word_similarity(r[LISTING_DESCRIPTION], plan.search)})
            for r in self.rows
        ]

    def matching(self, plan) -> List[Dict[str, Any]]:
        return [r for r in self._scored(plan) if all(evaluate(p, r) for p in plan.predicates)]

    def page(self, plan) -> List[Dict[str, Any]]:
        """Rows in page-query order, trimmed to the page size."""
        key = LISTING_ID if plan.ordering is Ordering.IDENTITY else RELEVANCE_SCORE
        ordered = sorted(
            self.matching(plan),
            key=lambda r: (r[key], r[LISTING_ID]),
            reverse=plan.direction is PageDirection.FORWARD,
        )
        return [dict(r, id=r[LISTING_ID]) for r in ordered[:plan.page_size]]

    def count(self, plan) -> int:
        return len(self.matching(plan))

    def run(self, criteria, compiler: Optional[QueryCompiler] = None):
        """Plan, fetch and window one request; returns (window, count)."""
        compiler = compiler or QueryCompiler()
        plan = compiler.plan(criteria)
        window = PaginationController(compiler.page_size).window(
            self.page(plan), plan.ordering, plan.direction
        )
        return window, self.count(plan)


class FakeTransaction:
    """Buffers writes and publishes them only on a clean exit."""

    def __init__(self, conn: 'FakeConnection'):
        self.conn = conn

    async def __aenter__(self):
        self.conn.in_transaction = True
        self.conn.pending = []
        return self

    async def __aexit__(self, exc_type, exc, tb):
        self.conn.in_transaction = False
        if exc_type is None:
            self.conn.committed.extend(self.conn.pending)
            self.conn.commits += 1
        else:
            self.conn.rollbacks += 1
        self.conn.pending = []
        return False


class FakeConnection:
    """
    Scripted connection.

    `responses` maps a SQL fragment to the result of the first statement
    containing it. A response may be a value, an exception instance to
    raise, or a callable receiving the bound parameters.
    """

    def __init__(self, responses: Dict[str, Any]):
        self.responses = responses
        self.calls: List[tuple] = []
        self.pending: List[tuple] = []
        self.committed: List[tuple] = []
        self.in_transaction = False
        self.commits = 0
        self.rollbacks = 0

    def transaction(self) -> FakeTransaction:
        return FakeTransaction(self)

    def _respond(self, method: str, sql: str, args: tuple) -> Any:
        self.calls.append((method, sql, args))
        for fragment, response in self.responses.items():
            if fragment not in sql:
                continue
            if isinstance(response, BaseException):
                raise response
            result = response(*args) if callable(response) else response
            if "INSERT INTO" in sql:
                write = (fragment, args)
                if self.in_transaction:
                    self.pending.append(write)
                else:
                    self.committed.append(write)
            return result
        raise AssertionError(f"no scripted response for statement:\n{sql}")

    async def fetch(self, sql: str, *args):
        return self._respond("fetch", sql, args)

    async def fetchval(self, sql: str, *args):
        return self._respond("fetchval", sql, args)

    async def fetchrow(self, sql: str, *args):
        return self._respond("fetchrow", sql, args)

    async def execute(self, sql: str, *args):
        return self._respond("execute", sql, args)

    def statements(self, fragment: str) -> List[tuple]:
        return [call for call in self.calls if fragment in call[1]]


class FakePool:
    """Pool handing out a single connection and counting releases."""

    def __init__(self, conn: Optional[FakeConnection] = None, acquire_error: Optional[BaseException] = None):
        self.conn = conn
        self.acquire_error = acquire_error
        self.acquired = 0
        self.released = 0
        self.timeouts: List[float] = []

    async def acquire(self, timeout: Optional[float] = None):
        self.timeouts.append(timeout)
        if self.acquire_error is not None:
            raise self.acquire_error
        self.acquired += 1
        return self.conn

    async def release(self, conn) -> None:
        self.released += 1


class FakeCache:
    """Dictionary-backed async cache with optional failures."""

    def __init__(self, error_factory: Optional[Callable[[], BaseException]] = None):
        self.store: Dict[str, str] = {}
        self.ttls: Dict[str, int] = {}
        self.error_factory = error_factory

    async def get(self, key: str):
        if self.error_factory:
            raise self.error_factory()
        return self.store.get(key)

    async def setex(self, key: str, ttl: int, value: str):
        if self.error_factory:
            raise self.error_factory()
        self.store[key] = value
        self.ttls[key] = ttl
