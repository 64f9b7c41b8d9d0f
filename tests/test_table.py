import pytest

from ratings_client.table import Column, SortableTable, SortDirection, search_filter
from schemas import StoreWithRating


def make_store(id, name, email, address, average=0.0, total=0, user_rating=None):
    return StoreWithRating(
        id=id,
        name=name,
        email=email,
        address=address,
        owner_id="owner",
        average_rating=average,
        total_ratings=total,
        user_rating=user_rating,
    )


@pytest.fixture
def stores():
    return [
        make_store("1", "Zenith Hardware", "zenith@shops.com", "MG Road, Pune", 4.5, 2, 5),
        make_store("2", "Apex Bakery", "apex@shops.com", "FC Road, Pune", 3.0, 1),
        make_store("3", "Metro Grocers", "metro@shops.com", "Andheri, Mumbai", 4.5, 4, 2),
        make_store("4", "Blue Lagoon Cafe", "lagoon@cafe.in", "Baner, Pune", 0.0, 0),
    ]


@pytest.fixture
def table():
    return SortableTable(
        [
            Column("Name", "name", sortable=True),
            Column("Email", "email"),
            Column("Rating", "average_rating", sortable=True, render=lambda s: f"{s.average_rating:.1f}"),
            Column("Your Rating", "user_rating", sortable=True),
        ]
    )


def ids(rows):
    return [row.id for row in rows]


def test_unsorted_keeps_input_order(table, stores):
    assert ids(table.rows(stores)) == ["1", "2", "3", "4"]


def test_header_cycles_ascending_descending_unsorted(table, stores):
    table.toggle_sort("name")
    assert table.sort_direction is SortDirection.ASC
    assert ids(table.rows(stores)) == ["2", "4", "3", "1"]

    table.toggle_sort("name")
    assert table.sort_direction is SortDirection.DESC
    assert ids(table.rows(stores)) == ["1", "3", "4", "2"]

    table.toggle_sort("name")
    assert table.sort_key is None
    assert ids(table.rows(stores)) == ids(stores)


def test_sort_is_stable_for_equal_values(table, stores):
    table.toggle_sort("average_rating")
    assert ids(table.rows(stores)) == ["4", "2", "1", "3"]
    table.toggle_sort("average_rating")
    # equal averages keep their original relative order in both directions
    assert ids(table.rows(stores)) == ["1", "3", "2", "4"]


def test_switching_column_starts_ascending(table, stores):
    table.toggle_sort("name")
    table.toggle_sort("name")
    table.toggle_sort("average_rating")
    assert table.sort_key == "average_rating"
    assert table.sort_direction is SortDirection.ASC


def test_missing_values_sort_last(table, stores):
    table.toggle_sort("user_rating")
    assert ids(table.rows(stores)) == ["3", "1", "2", "4"]
    table.toggle_sort("user_rating")
    assert ids(table.rows(stores)) == ["1", "3", "2", "4"]


def test_non_sortable_column_ignores_clicks(table, stores):
    table.toggle_sort("email")
    assert table.sort_key is None
    with pytest.raises(KeyError):
        table.toggle_sort("nonexistent")


def test_render_uses_custom_cells_and_marks_sorted_header(table, stores):
    table.toggle_sort("name")
    grid = table.render(stores[:2])
    assert grid[0] == ["Name ▲", "Email", "Rating", "Your Rating"]
    assert grid[1] == ["Apex Bakery", "apex@shops.com", "3.0", ""]
    assert grid[2] == ["Zenith Hardware", "zenith@shops.com", "4.5", "5"]


def test_row_click_receives_row(stores):
    clicked = []
    table = SortableTable([Column("Name", "name")], on_row_click=clicked.append)
    table.click_row(stores[2])
    assert clicked == [stores[2]]


def test_rows_can_be_mappings():
    table = SortableTable([Column("Name", "name", sortable=True)])
    table.toggle_sort("name")
    assert table.rows([{"name": "b"}, {"name": "a"}]) == [{"name": "a"}, {"name": "b"}]


def test_numbers_sort_before_strings():
    table = SortableTable([Column("Value", "value", sortable=True)])
    table.toggle_sort("value")
    rows = [{"value": "b"}, {"value": 10}, {"value": "a"}, {"value": 2}]
    assert [r["value"] for r in table.rows(rows)] == [2, 10, "a", "b"]


@pytest.mark.parametrize("query", ["pune", "PUNE", "shops.com", "cafe", "zzz", "", " ", "Baner "])
def test_search_filter_is_case_insensitive_subset(stores, query):
    fields = ("name", "email", "address")
    result = search_filter(stores, query, fields)
    expected = [
        s for s in stores
        if any(query.lower() in getattr(s, f).lower() for f in fields)
    ]
    assert result == expected
    assert all(row in stores for row in result)


def test_search_filter_keeps_whitespace_in_query(stores):
    assert ids(search_filter(stores, "Baner ", ("address",))) == []
    assert ids(search_filter(stores, "Baner,", ("address",))) == ["4"]
    assert ids(search_filter(stores, "  ", ("address",))) == []


def test_search_filter_only_looks_at_declared_fields(stores):
    assert ids(search_filter(stores, "shops.com", ("name", "address"))) == []
    assert ids(search_filter(stores, "mumbai", ("name", "address"))) == ["3"]
