#!/usr/bin/env python3
"""Tests for color conversion, luminance adjustment and spectrum sorting."""

import pytest


SAMPLE_COLORS = ["#b60017", "#2a3b4e", "#000000", "#ffffff", "#808080", "#00ff7f", "#123456"]


class TestHexConversion:
    """Tests for hex <-> RGB parsing and formatting."""

    def test_hex_to_rgb_with_and_without_marker(self):
        """Leading '#' is optional."""
        from color_math import hex_to_rgb

        assert hex_to_rgb("#B60017") == (182, 0, 23)
        assert hex_to_rgb("b60017") == (182, 0, 23)

    @pytest.mark.parametrize("value", ["#fff", "#12345", "#1234567", "#gg0000", "", "##b60017", None])
    def test_hex_to_rgb_rejects_malformed(self, value):
        """Anything but six hex digits raises InvalidColorFormat."""
        from color_math import InvalidColorFormat, hex_to_rgb

        with pytest.raises(InvalidColorFormat):
            hex_to_rgb(value)

    def test_invalid_color_is_a_value_error(self):
        from color_math import InvalidColorFormat

        assert issubclass(InvalidColorFormat, ValueError)

    def test_rgb_to_hex_is_lowercase_and_padded(self):
        from color_math import rgb_to_hex

        assert rgb_to_hex(10, 0, 1) == "#0a0001"
        assert rgb_to_hex(255, 245, 246) == "#fff5f6"

    @pytest.mark.parametrize("value", SAMPLE_COLORS + ["#B60017", "#ABCDEF"])
    def test_round_trip(self, value):
        """hex -> rgb -> hex is identity up to case."""
        from color_math import hex_to_rgb, rgb_to_hex

        assert rgb_to_hex(*hex_to_rgb(value)) == value.lower()


class TestHsl:
    """Tests for RGB <-> HSL conversion."""

    def test_primary_hues(self):
        from color_math import rgb_to_hsl

        assert rgb_to_hsl(255, 0, 0) == (0.0, 1.0, 0.5)
        assert rgb_to_hsl(0, 255, 0)[0] == pytest.approx(1 / 3)
        assert rgb_to_hsl(0, 0, 255)[0] == pytest.approx(2 / 3)

    def test_negative_hue_wraps_into_unit_interval(self):
        """Reds leaning towards blue get a hue just below 1."""
        from color_math import hex_to_hsl

        hue, saturation, lightness = hex_to_hsl("#B60017")
        assert 0.97 < hue < 0.98
        assert saturation == pytest.approx(1.0)
        assert lightness == pytest.approx(182 / 255 / 2)

    def test_achromatic_has_zero_hue_and_saturation(self):
        from color_math import rgb_to_hsl

        assert rgb_to_hsl(128, 128, 128)[:2] == (0.0, 0.0)

    def test_hsl_to_rgb_achromatic_ignores_hue(self):
        from color_math import hsl_to_rgb

        assert hsl_to_rgb(0.7, 0, 0.5) == (128, 128, 128)

    @pytest.mark.parametrize("value", SAMPLE_COLORS)
    def test_hsl_round_trip(self, value):
        from color_math import hex_to_rgb, hsl_to_rgb, rgb_to_hsl

        rgb = hex_to_rgb(value)
        assert hsl_to_rgb(*rgb_to_hsl(*rgb)) == rgb


class TestAdjustLuminance:
    """Tests for deriving background and text colors."""

    def test_candy_apple_red_background_and_text(self):
        """The 0.98 / 0.02 pair for #B60017."""
        from color_math import adjust_luminance

        assert adjust_luminance("#B60017", 0.98) == "#fff5f6"
        assert adjust_luminance("#B60017", 0.02) == "#0a0001"

    @pytest.mark.parametrize("value", ["#b60017", "#2a3b4e", "#00ff7f", "#123456"])
    @pytest.mark.parametrize("target", [0.3, 0.5, 0.7])
    def test_preserves_hue_and_saturation(self, value, target):
        from color_math import adjust_luminance, hex_to_hsl

        hue, saturation, _ = hex_to_hsl(value)
        new_hue, new_saturation, new_lightness = hex_to_hsl(adjust_luminance(value, target))

        assert new_hue == pytest.approx(hue, abs=0.01)
        assert new_saturation == pytest.approx(saturation, abs=0.02)
        assert new_lightness == pytest.approx(target, abs=0.01)

    @pytest.mark.parametrize("target", [0.0, 0.02, 0.25, 0.5, 0.98, 1.0])
    def test_grayscale_stays_grayscale(self, target):
        from color_math import adjust_luminance, hex_to_rgb

        r, g, b = hex_to_rgb(adjust_luminance("#808080", target))
        assert r == g == b

    def test_is_deterministic(self):
        from color_math import adjust_luminance

        assert adjust_luminance("#2A3B4E", 0.98) == adjust_luminance("#2a3b4e", 0.98)

    def test_rejects_out_of_range_target(self):
        from color_math import adjust_luminance

        with pytest.raises(ValueError):
            adjust_luminance("#B60017", 1.5)

    def test_rejects_malformed_color(self):
        from color_math import InvalidColorFormat, adjust_luminance

        with pytest.raises(InvalidColorFormat):
            adjust_luminance("red", 0.5)


class TestSpectrumSort:
    """Tests for hue ordering of poems."""

    def test_hue_near_one_sorts_before_red(self, make_poem):
        """Hues 0.95, 0.05, 0.5 order as 0.95 (-0.05), 0.05, 0.5."""
        from color_math import hex_to_hsl, sort_poems_by_spectrum

        cyan = make_poem(id="cyan", hex="#00ffff")  # hue 0.5
        orange = make_poem(id="orange", hex="#ff4d00")  # hue ~0.05
        crimson = make_poem(id="crimson", hex="#ff0050")  # hue ~0.95
        assert hex_to_hsl("#ff0050")[0] > 0.9

        ordered = sort_poems_by_spectrum([cyan, orange, crimson])
        assert [p.id for p in ordered] == ["crimson", "orange", "cyan"]

    def test_colorless_items_are_excluded(self, make_poem):
        from color_math import sort_poems_by_spectrum

        poems = [
            make_poem(id="red", hex="#ff0000"),
            make_poem(id="plain", hex=None),
            make_poem(id="blue", hex="#0000ff"),
        ]

        ordered = sort_poems_by_spectrum(poems)
        assert len(ordered) == 2
        assert [p.id for p in ordered] == ["red", "blue"]

    def test_equal_hues_keep_input_order(self, make_poem):
        from color_math import sort_poems_by_spectrum

        poems = [
            make_poem(id="dark-red", hex="#800000"),
            make_poem(id="red", hex="#ff0000"),
            make_poem(id="light-red", hex="#ff8080"),
        ]

        assert [p.id for p in sort_poems_by_spectrum(poems)] == ["dark-red", "red", "light-red"]

    def test_sort_by_spectrum_with_key_function(self):
        from color_math import sort_by_spectrum

        items = [{"c": "#0000ff"}, {"c": None}, {"c": "#ffff00"}, {}]
        ordered = sort_by_spectrum(items, lambda item: item.get("c"))
        assert ordered == [{"c": "#ffff00"}, {"c": "#0000ff"}]
