"""
Property-based tests for the listing query compiler.

These tests verify that page and count queries are rendered from the same
predicates and that caller-supplied values only ever travel as bound
parameters.
"""

from decimal import Decimal

import pytest
from hypothesis import given, settings, strategies as st

from listd.filtering import ListingCriteria
from listd.models import PropertyType
from listd.query import (
    ParameterList,
    Predicate,
    PredicateKind,
    QueryCompileError,
    QueryCompiler,
    render_predicate,
)


search_terms = st.text(min_size=1, max_size=40).filter(lambda s: s.strip())

criteria_strategy = st.builds(
    ListingCriteria,
    property_type=st.one_of(st.none(), st.sampled_from(list(PropertyType))),
    min_bedrooms=st.one_of(st.none(), st.integers(min_value=0, max_value=5)),
    max_bedrooms=st.one_of(st.none(), st.integers(min_value=0, max_value=5)),
    min_price=st.one_of(st.none(), st.integers(min_value=0, max_value=10**7).map(Decimal)),
    max_price=st.one_of(st.none(), st.integers(min_value=0, max_value=10**7).map(Decimal)),
    before=st.one_of(st.none(), st.integers(min_value=0, max_value=10**6).map(Decimal)),
    after=st.one_of(st.none(), st.integers(min_value=0, max_value=10**6).map(Decimal)),
)


def where_clause(sql):
    start = sql.index("WHERE")
    end = sql.find("ORDER BY")
    return sql[start:end if end != -1 else None].strip()


@given(criteria=criteria_strategy)
@settings(max_examples=100)
def test_page_and_count_share_predicates(criteria):
    """
    **Feature: listing-catalog, Property 6: Coupled page and count**

    For any criteria, the page and count queries carry the same WHERE
    clause and the same leading parameters; the page adds only its limit.
    """
    _, page, count = QueryCompiler().compile(criteria)

    assert where_clause(page.sql) == where_clause(count.sql)
    assert page.params[:-1] == count.params
    assert page.params[-1] == 10
    assert "LIMIT" not in count.sql
    assert "ORDER BY" not in count.sql


@given(term=search_terms)
@settings(max_examples=100)
def test_search_term_is_bound_not_embedded(term):
    """
    **Feature: listing-catalog, Property 7: Parameter safety**

    For any search term, the term appears among the bound parameters and
    the statement text is independent of it.
    """
    criteria = ListingCriteria(search=term)
    compiler = QueryCompiler()
    _, page, count = compiler.compile(criteria)
    _, reference_page, _ = compiler.compile(ListingCriteria(search="reference"))

    assert criteria.search in page.params
    assert criteria.search in count.params
    assert page.sql == reference_page.sql


@given(property_type=st.sampled_from(list(PropertyType)))
@settings(max_examples=20)
def test_enum_values_are_bound_too(property_type):
    criteria = ListingCriteria(property_type=property_type, listing_type="for-rent")
    _, page, _ = QueryCompiler().compile(criteria)

    assert property_type.value in page.params
    assert "for-rent" in page.params
    assert "'available'" not in page.sql


def test_placeholders_are_numbered_in_order():
    criteria = ListingCriteria(min_bedrooms=2, max_bedrooms=3, after=Decimal(40))
    _, page, count = QueryCompiler().compile(criteria)

    assert "property_status.slug = $1" in page.sql
    assert "listing.price >= $2" in page.sql
    assert "property.bedrooms BETWEEN $3 AND $4" in page.sql
    assert "listing.id < $5" in page.sql
    assert "LIMIT $6" in page.sql
    assert "ORDER BY listing.id DESC" in page.sql
    assert page.params == ("available", Decimal(5000), 2, 3, 40, 10)
    assert "listing.id < $5" in count.sql


def test_backward_page_fetches_ascending():
    _, page, _ = QueryCompiler().compile(ListingCriteria(before=Decimal(40)))

    assert "listing.id > $3" in page.sql
    assert "ORDER BY listing.id ASC" in page.sql


def test_search_shape_ranks_then_pages_on_score():
    criteria = ListingCriteria(search="swimming pool", after=Decimal("0.4"))
    plan, page, count = QueryCompiler().compile(criteria)

    assert page.sql.startswith("WITH ranked AS (")
    assert "WORD_SIMILARITY(listing.description, $1) AS description_similarity" in page.sql
    assert "WORD_SIMILARITY(listing.description, $4) > $5" in page.sql
    assert "description_similarity < $6" in page.sql
    assert "ORDER BY description_similarity DESC, id DESC" in page.sql
    assert page.params == ("swimming pool", "available", Decimal(5000), "swimming pool", 0.0, 0.4, 10)

    assert "SELECT COUNT(*) AS count FROM ranked" in count.sql
    assert count.params == page.params[:-1]
    assert plan.cursor.target == "description_similarity"


def test_custom_page_size_is_bound():
    _, page, _ = QueryCompiler(page_size=25).compile(ListingCriteria())

    assert page.params[-1] == 25


def test_unknown_similarity_function_is_rejected():
    predicate = Predicate.similar("levenshtein", "city.name", "Makati", 0.5)

    with pytest.raises(QueryCompileError):
        render_predicate(predicate, ParameterList())


def test_unknown_cursor_operator_is_rejected():
    predicate = Predicate(PredicateKind.CURSOR_BOUND, "listing.id", (4,), "<= 1 OR 1=1 --")

    with pytest.raises(QueryCompileError):
        render_predicate(predicate, ParameterList())
