import pytest

from reveal_app.surface import FontSpec
from reveal_app.text_layout import MIN_FONT_SIZE, build_layout, fit_font_size, split_units


def test_split_units_letter_mode():
    assert split_units("Hi there", "letter") == ["H", "i", " ", "t", "h", "e", "r", "e"]


def test_split_units_word_mode_keeps_whitespace_tokens():
    assert split_units("Hi  there you", "word") == ["Hi", "  ", "there", " ", "you"]


def test_split_units_word_mode_on_single_word():
    assert split_units("Proof", "word") == ["Proof"]


def test_build_layout_centers_units(surface):
    layout = build_layout(surface, "AB", FontSpec(size_px=20), 100.0)

    assert layout.x == pytest.approx(40.0)
    assert layout.width == pytest.approx(20.0)
    assert layout.end_x == pytest.approx(60.0)
    assert [u.text for u in layout.units] == ["A", "B"]
    assert [u.start_x for u in layout.units] == pytest.approx([40.0, 50.0])
    assert sum(u.width for u in layout.units) == pytest.approx(layout.width)


def test_build_layout_word_mode_flags_whitespace(surface):
    layout = build_layout(surface, "to proof", FontSpec(size_px=10), 200.0, mode="word")

    assert [u.text for u in layout.units] == ["to", " ", "proof"]
    assert [u.is_whitespace for u in layout.units] == [False, True, False]
    # Each unit starts where the previous one ends.
    for prev, unit in zip(layout.units, layout.units[1:]):
        assert unit.start_x == pytest.approx(prev.start_x + prev.width)


def test_fit_font_size_keeps_nominal_size_when_text_fits(surface):
    assert fit_font_size(surface, "AB", 1000.0) == pytest.approx(78.0)


def test_fit_font_size_shrinks_long_titles(surface):
    # 30 glyphs at half an em each must fit in 860px.
    assert fit_font_size(surface, "x" * 30, 1000.0) == pytest.approx(57.0)


def test_fit_font_size_never_goes_below_minimum(surface):
    assert fit_font_size(surface, "x" * 100, 1000.0) == pytest.approx(MIN_FONT_SIZE)


def test_fit_font_size_nominal_size_is_clamped(surface):
    assert fit_font_size(surface, "AB", 300.0) == pytest.approx(30.0)
    assert fit_font_size(surface, "AB", 4000.0) == pytest.approx(84.0)


def test_fit_font_size_floor_holds_for_fractional_nominal_size(surface):
    # 400 * 0.078 = 31.2: stepping down by whole pixels would land on 23.2.
    size = fit_font_size(surface, "x" * 100, 400.0)
    assert size == pytest.approx(MIN_FONT_SIZE)
    assert size >= MIN_FONT_SIZE
