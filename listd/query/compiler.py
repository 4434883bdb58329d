"""
Listing query compiler.

Renders one predicate tuple into the coupled query shapes of a listing
request: the page, its matching count and, for free-text search, the
relevance-ranked variant. Every value is sent as a positional parameter;
the only text spliced into a statement is the fixed column targets and
operators declared in this package.
"""

from dataclasses import dataclass
from typing import Any, List, Optional, Tuple

from listd.filtering.schemas import ListingCriteria
from listd.models.enums import Ordering
from .pagination import PAGE_SIZE, PageDirection
from .predicates import (
    LISTING_DESCRIPTION,
    LISTING_ID,
    RELEVANCE_SCORE,
    STRICT_WORD_SIMILARITY,
    WORD_SIMILARITY,
    Predicate,
    PredicateComposer,
    PredicateKind,
    ordering_for,
)


CATALOG_JOINS = """
FROM listings AS listing
INNER JOIN listing_types AS listing_type ON listing_type.id = listing.listing_type_id
INNER JOIN property_status ON property_status.id = listing.property_status_id
INNER JOIN properties AS property ON property.listing_id = listing.id
INNER JOIN property_types AS property_type ON property_type.id = property.property_type_id
INNER JOIN cities AS city ON city.id = property.city_id
""".strip()

LISTING_PROJECTION = (
    "listing.id",
    "INITCAP(listing.listing_title) AS listing_title",
    "listing.listing_url",
    "listing.price",
    "listing.price_formatted",
    "listing.price_for_rent_per_sqm",
    "listing.price_for_sale_per_sqm",
    "listing.price_for_rent_per_sqm_formatted",
    "listing.price_for_sale_per_sqm_formatted",
    "listing_type.name AS listing_type",
    "property_status.name AS property_status",
    "property_type.name AS property_type",
    "listing.sub_category",
    "property.building_name",
    "property.subdivision_name",
    "property.floor_area",
    "property.lot_area",
    "property.building_size",
    "property.bedrooms",
    "property.bathrooms",
    "property.parking_space",
    "city.name AS city",
    "property.area",
    "property.address",
    "property.features",
    "property.main_image_url",
    "property.project_name",
    "ST_AsGeoJSON(listing.coordinates)::json->'coordinates' AS coordinates",
    "listing.latitude_in_text",
    "listing.longitude_in_text",
    "listing.description",
    "listing.created_at",
)

SIMILARITY_FUNCTIONS = {
    WORD_SIMILARITY: "WORD_SIMILARITY",
    STRICT_WORD_SIMILARITY: "STRICT_WORD_SIMILARITY",
}

CURSOR_OPERATORS = ("<", ">")


class QueryCompileError(ValueError):
    """A predicate cannot be rendered with bound parameters only."""


@dataclass(frozen=True)
class CompiledQuery:
    """Statement text plus its positional parameters"""
    sql: str
    params: Tuple[Any, ...]


class ParameterList:
    """Collects bound values and hands out `$n` placeholders."""

    def __init__(self):
        self._values: List[Any] = []

    def add(self, value: Any) -> str:
        self._values.append(value)
        return f"${len(self._values)}"

    def values(self) -> Tuple[Any, ...]:
        return tuple(self._values)


def render_predicate(predicate: Predicate, params: ParameterList) -> str:
    """
    Render one predicate as a boolean condition.

    Args:
        predicate: Predicate to render
        params: Collector receiving every value the predicate binds

    Returns:
        Condition text referencing placeholders only

    Raises:
        QueryCompileError: If the predicate names an operator or function
            outside the closed set this compiler knows
    """
    if predicate.kind is PredicateKind.EQUALITY:
        return f"{predicate.target} = {params.add(predicate.values[0])}"

    if predicate.kind is PredicateKind.RANGE:
        low, high = predicate.values
        if high is None:
            return f"{predicate.target} >= {params.add(low)}"
        return f"{predicate.target} BETWEEN {params.add(low)} AND {params.add(high)}"

    if predicate.kind is PredicateKind.FUZZY_THRESHOLD:
        function = SIMILARITY_FUNCTIONS.get(predicate.operator)
        if function is None:
            raise QueryCompileError(f"Unknown similarity function: {predicate.operator!r}")
        term, threshold = predicate.values
        return f"{function}({predicate.target}, {params.add(term)}) > {params.add(threshold)}"

    if predicate.kind is PredicateKind.CURSOR_BOUND:
        if predicate.operator not in CURSOR_OPERATORS:
            raise QueryCompileError(f"Unknown cursor operator: {predicate.operator!r}")
        return f"{predicate.target} {predicate.operator} {params.add(predicate.values[0])}"

    raise QueryCompileError(f"Unknown predicate kind: {predicate.kind!r}")


def render_where(predicates: Tuple[Predicate, ...], params: ParameterList) -> str:
    """Conjunction of predicates, empty when there are none."""
    if not predicates:
        return ""
    return "WHERE " + "\nAND ".join(render_predicate(p, params) for p in predicates)


@dataclass(frozen=True)
class ListingQueryPlan:
    """
    Everything needed to render the query shapes of one request.

    Attributes:
        predicates: Composed predicates, cursor bound last
        ordering: Active ordering key
        direction: Direction of the cursor (FORWARD for a first page)
        search: Free-text term, search shape only
        page_size: Rows per page
    """
    predicates: Tuple[Predicate, ...]
    ordering: Ordering
    direction: PageDirection
    search: Optional[str]
    page_size: int = PAGE_SIZE

    @property
    def filters(self) -> Tuple[Predicate, ...]:
        return tuple(p for p in self.predicates if p.kind is not PredicateKind.CURSOR_BOUND)

    @property
    def cursor(self) -> Optional[Predicate]:
        for predicate in self.predicates:
            if predicate.kind is PredicateKind.CURSOR_BOUND:
                return predicate
        return None


class QueryCompiler:
    """
    Compiles listing criteria into page and count queries.

    Both shapes are rendered from the same plan and the same predicate
    tuple, in the same order, so their WHERE clauses and leading
    parameters are identical.
    """

    def __init__(
        self,
        composer: Optional[PredicateComposer] = None,
        page_size: int = PAGE_SIZE
    ):
        self.composer = composer or PredicateComposer()
        self.page_size = page_size

    def plan(self, criteria: ListingCriteria) -> ListingQueryPlan:
        """Compose the predicates and pagination mode of a request."""
        cursor = self.composer.cursor(criteria)
        return ListingQueryPlan(
            predicates=self.composer.compose(criteria),
            ordering=ordering_for(criteria),
            direction=cursor.direction if cursor else PageDirection.FORWARD,
            search=criteria.search if criteria.is_search else None,
            page_size=self.page_size,
        )

    def compile(self, criteria: ListingCriteria) -> Tuple[ListingQueryPlan, CompiledQuery, CompiledQuery]:
        """Plan a request and render its page and count queries."""
        plan = self.plan(criteria)
        return plan, self.page_query(plan), self.count_query(plan)

    def page_query(self, plan: ListingQueryPlan) -> CompiledQuery:
        """Full projection, cursor applied, ordered and limited to one page."""
        if plan.ordering is Ordering.RELEVANCE:
            return self._ranked(plan, count=False)

        params = ParameterList()
        where = render_where(plan.predicates, params)
        direction = "DESC" if plan.direction is PageDirection.FORWARD else "ASC"
        limit = params.add(plan.page_size)
        sql = "\n".join([
            "SELECT",
            ",\n".join(LISTING_PROJECTION),
            CATALOG_JOINS,
            where,
            f"ORDER BY {LISTING_ID} {direction}",
            f"LIMIT {limit}",
        ])
        return CompiledQuery(sql=sql, params=params.values())

    def count_query(self, plan: ListingQueryPlan) -> CompiledQuery:
        """Number of rows matching the page's predicates, no ordering or limit."""
        if plan.ordering is Ordering.RELEVANCE:
            return self._ranked(plan, count=True)

        params = ParameterList()
        where = render_where(plan.predicates, params)
        sql = "\n".join([
            "SELECT COUNT(*) AS count",
            CATALOG_JOINS,
            where,
        ])
        return CompiledQuery(sql=sql, params=params.values())

    def _ranked(self, plan: ListingQueryPlan, count: bool) -> CompiledQuery:
        """Search shape: score the filtered set, then page over the score.

        The cursor bounds the score alone; `id` only orders rows within a
        page. Rows tied with the boundary score that did not fit on the
        page are not resumable, so search pages are not keyset-complete
        the way identity pages are.
        """
        if plan.search is None:
            raise QueryCompileError("Relevance ordering requires a search term")

        params = ParameterList()
        score = f"WORD_SIMILARITY({LISTING_DESCRIPTION}, {params.add(plan.search)}) AS {RELEVANCE_SCORE}"
        where = render_where(plan.filters, params)
        ranked = "\n".join([
            "WITH ranked AS (",
            "SELECT",
            ",\n".join(LISTING_PROJECTION + (score,)),
            CATALOG_JOINS,
            where,
            ")",
        ])

        cursor = plan.cursor
        outer_where = render_where((cursor,), params) if cursor else ""

        if count:
            sql = "\n".join(filter(None, [ranked, "SELECT COUNT(*) AS count FROM ranked", outer_where]))
            return CompiledQuery(sql=sql, params=params.values())

        direction = "DESC" if plan.direction is PageDirection.FORWARD else "ASC"
        limit = params.add(plan.page_size)
        sql = "\n".join(filter(None, [
            ranked,
            "SELECT * FROM ranked",
            outer_where,
            f"ORDER BY {RELEVANCE_SCORE} {direction}, id {direction}",
            f"LIMIT {limit}",
        ]))
        return CompiledQuery(sql=sql, params=params.values())
