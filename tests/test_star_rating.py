import pytest

from ratings_client.star_rating import StarRating, StarSize, format_rating, round_half_up


def test_click_reports_one_based_star():
    seen = []
    widget = StarRating(2, on_change=seen.append, size=StarSize.LARGE)
    widget.click(4)
    widget.click(1)
    assert seen == [4, 1]
    # the widget waits for its owner to pass the new value in
    assert widget.value == 2


def test_read_only_ignores_clicks_and_hover():
    seen = []
    widget = StarRating(3, on_change=seen.append, read_only=True)
    assert widget.click(5) is None
    widget.hover(5)
    assert seen == []
    assert widget.render() == "★★★☆☆"


def test_without_callback_is_display_only():
    widget = StarRating(1)
    assert not widget.interactive
    assert widget.click(3) is None


def test_hover_previews_without_changing_value():
    widget = StarRating(1, on_change=lambda value: None)
    widget.hover(4)
    assert widget.render() == "★★★★☆"
    widget.hover(None)
    assert widget.render() == "★☆☆☆☆"
    assert widget.value == 1


def test_unset_value_renders_empty_row():
    assert StarRating().render() == "☆☆☆☆☆"
    assert StarRating().stars == [False] * 5


def test_out_of_range_values_are_rejected():
    with pytest.raises(ValueError):
        StarRating(6)
    with pytest.raises(ValueError):
        StarRating(0, on_change=print).click(0)


@pytest.mark.parametrize("average,stars", [(0.0, 0), (None, 0), (2.49, 2), (2.5, 3), (3.5, 4), (4.75, 5)])
def test_round_half_up(average, stars):
    assert round_half_up(average) == stars


def test_format_rating():
    assert format_rating(0.0) == "0.0"
    assert format_rating(None) == "0.0"
    assert format_rating(4.25) == "4.2"
    assert format_rating(4) == "4.0"
