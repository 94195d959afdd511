import pytest

from bookstore.catalog.query import IN_STOCK, Predicate, SortSpec, plan_query
from bookstore.catalog.schemas import Book
from bookstore.errors import InvalidQuery


def _book(**overrides):
    data = {
        "id": "b1",
        "title": "The C++ Programming Language",
        "price": 40.0,
        "stock": 2,
        "category": "Computing",
        "author": "Bjarne Stroustrup",
        "rating": 4.0,
    }
    data.update(overrides)
    return Book(**data)


class TestPlanQuery:

    def test_defaults(self):
        spec = plan_query()
        assert spec.filters == (IN_STOCK,)
        assert spec.sort is None
        assert spec.page == 1
        assert spec.limit == 10
        assert spec.skip == 0

    def test_filters_are_built_from_parameters(self):
        spec = plan_query(category="Fiction", author="Toni Morrison", rating="3.5", title="bel")
        assert spec.filters == (
            IN_STOCK,
            Predicate("category", "eq", "Fiction"),
            Predicate("author", "eq", "Toni Morrison"),
            Predicate("rating", "gte", 3.5),
            Predicate("title", "icontains", "bel"),
        )

    def test_rating_value_is_numeric(self):
        spec = plan_query(rating="4")
        rating = [p for p in spec.filters if p.field == "rating"][0]
        assert isinstance(rating.value, float)

    def test_empty_values_are_ignored(self):
        spec = plan_query(category="", author="  ", rating="", title="", page="", limit="", sort_by="")
        assert spec.filters == (IN_STOCK,)
        assert spec.page == 1
        assert spec.limit == 10
        assert spec.sort is None

    @pytest.mark.parametrize("rating", ["abc", "nan", "inf", "4 stars"])
    def test_non_numeric_rating_is_rejected(self, rating):
        with pytest.raises(InvalidQuery) as excinfo:
            plan_query(rating=rating)
        assert excinfo.value.errors[0]["field"] == "rating"

    @pytest.mark.parametrize("value", ["0", "-1", "abc", "1.5", "1_000", "+3", "\u0663", "1e2", "0x10"])
    def test_bad_page_is_rejected(self, value):
        with pytest.raises(InvalidQuery):
            plan_query(page=value)

    @pytest.mark.parametrize("value", ["0", "-5", "ten", "1_0", "+5", "\uff15", "5.0"])
    def test_bad_limit_is_rejected(self, value):
        with pytest.raises(InvalidQuery) as excinfo:
            plan_query(limit=value)
        assert excinfo.value.errors[0]["field"] == "limit"

    def test_surrounding_whitespace_is_allowed(self):
        spec = plan_query(page=" 4 ", limit="\t25\n")
        assert spec.page == 4
        assert spec.limit == 25

    def test_limit_is_clamped(self):
        assert plan_query(limit="1000", max_limit=50).limit == 50
        assert plan_query(limit="20", max_limit=50).limit == 20

    def test_skip_follows_page_and_limit(self):
        spec = plan_query(page="3", limit="5")
        assert spec.skip == 10

    def test_sort_ascending_by_default(self):
        assert plan_query(sort_by="price").sort == SortSpec("price", descending=False)

    def test_sort_descending(self):
        assert plan_query(sort_by="rating", order="desc").sort == SortSpec("rating", descending=True)

    @pytest.mark.parametrize("order", ["DESC", "down", "asc", ""])
    def test_other_orders_sort_ascending(self, order):
        assert plan_query(sort_by="stock", order=order).sort.descending is False

    def test_order_without_sort_field_is_ignored(self):
        assert plan_query(order="desc").sort is None

    @pytest.mark.parametrize("field", ["author", "description", "id", "price; drop"])
    def test_unknown_sort_field_is_rejected(self, field):
        with pytest.raises(InvalidQuery) as excinfo:
            plan_query(sort_by=field)
        assert excinfo.value.errors[0]["field"] == "sortBy"


class TestPredicate:

    def test_title_fragment_is_literal_and_case_insensitive(self):
        book = _book()
        assert Predicate("title", "icontains", "c++").matches(book)
        assert Predicate("title", "icontains", "PROGRAMMING").matches(book)
        assert not Predicate("title", "icontains", "c.+").matches(book)

    def test_stock_predicate(self):
        assert IN_STOCK.matches(_book(stock=1))
        assert not IN_STOCK.matches(_book(stock=0))

    def test_exact_match_is_case_sensitive(self):
        assert Predicate("category", "eq", "Computing").matches(_book())
        assert not Predicate("category", "eq", "computing").matches(_book())

    def test_missing_value_never_matches(self):
        assert not Predicate("description", "icontains", "x").matches(_book(description=None))

    def test_spec_matches_all_filters(self):
        spec = plan_query(category="Computing", rating="4")
        assert spec.matches(_book())
        assert not spec.matches(_book(rating=3.9))
        assert not spec.matches(_book(stock=0))
