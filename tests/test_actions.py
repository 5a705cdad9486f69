"""Tests for scalesmith.app.actions (pure reducers)."""

from dataclasses import replace

import pytest

from scalesmith import defaults
from scalesmith.app.actions import apply_command
from scalesmith.app.commands import (
    ApplyEasingFunction,
    ChangeColorValue,
    ChangeCurveName,
    ChangeCurveValue,
    ChangeCurveValues,
    ChangePaletteBackgroundColor,
    ChangePaletteName,
    ChangeScaleColors,
    ChangeScaleCurve,
    ChangeScaleName,
    ChangeScaleNamingScheme,
    CreateColor,
    CreateCurveFromScale,
    CreateNamingSchemeFromScale,
    CreatePalette,
    CreateScale,
    DeleteColor,
    DeleteCurve,
    DeletePalette,
    DeleteScale,
    DuplicatePalette,
    DuplicateScale,
    ImportScales,
    PopColor,
    Undo,
    UpdateNamingScheme,
)
from scalesmith.colorspace import CSS_COLORS, cubic_bezier, hex_to_color, linear
from scalesmith.curves import resolve_scale
from scalesmith.presets import EXAMPLE_SCALES
from scalesmith.types import Channel, Color, Curve, NamingScheme, Scale


def run(palettes, command, ctx):
    return apply_command(palettes, command, ctx).palettes


def colors_of(palettes, scale_id="s1", palette_id="p1"):
    return palettes[palette_id].scales[scale_id].colors


def with_scale(palettes, scale, palette_id="p1"):
    palette = palettes[palette_id]
    return {**palettes, palette_id: replace(palette, scales={**palette.scales, scale.id: scale})}


# ---------------------------------------------------------------------------
# Palettes
# ---------------------------------------------------------------------------

class TestPalettes:

    def test_create_palette_seeds_example_scales(self, ctx):
        result = apply_command({}, CreatePalette(), ctx)
        (palette_id, palette), = result.palettes.items()

        assert palette.name == defaults.DEFAULT_PALETTE_NAME
        assert palette.background_color == "#ffffff"
        assert sorted(s.name for s in palette.scales.values()) == sorted(EXAMPLE_SCALES)
        assert palette.curves == {} and palette.naming_schemes == {}
        assert result.navigate_to == f"/local/{palette_id}"

    def test_single_hex_example_becomes_one_color_scale(self, ctx):
        palette = next(iter(run({}, CreatePalette(), ctx).values()))
        black = next(s for s in palette.scales.values() if s.name == "black")
        assert black.colors == (Color(0.0, 0.0, 0.0),)

    def test_duplicate_palette_uses_fresh_ids(self, palettes, ctx):
        palettes = run(palettes, CreateCurveFromScale("p1", "s1", Channel.LIGHTNESS), ctx)
        palettes = run(palettes, CreateNamingSchemeFromScale("p1", "s1"), ctx)

        result = apply_command(palettes, DuplicatePalette("p1"), ctx)

        new_id = next(pid for pid in result.palettes if pid != "p1")
        copy = result.palettes[new_id]
        original = palettes["p1"]
        assert copy.name == "Test (copy)"
        assert result.navigate_to == f"/local/{new_id}"
        assert not set(copy.scales) & set(original.scales)
        assert not set(copy.curves) & set(original.curves)
        (scale,) = copy.scales.values()
        assert scale.curves[Channel.LIGHTNESS] in copy.curves
        assert scale.naming_scheme_id in copy.naming_schemes
        assert resolve_scale(copy.curves, scale) == resolve_scale(
            original.curves, original.scales["s1"]
        )
        assert result.palettes["p1"] is original

    def test_delete_palette(self, palettes, ctx):
        assert run(palettes, DeletePalette("p1"), ctx) == {}

    def test_rename_and_background(self, palettes, ctx):
        palettes = run(palettes, ChangePaletteName("p1", "Brand"), ctx)
        palettes = run(palettes, ChangePaletteBackgroundColor("p1", "#000000"), ctx)
        assert palettes["p1"].name == "Brand"
        assert palettes["p1"].background_color == "#000000"

    def test_import_scales_merge_and_replace(self, palettes, ctx):
        imported = Scale(id="s9", name="imported", colors=(Color(1, 2, 3),))

        merged = run(palettes, ImportScales("p1", {"s9": imported}), ctx)
        assert set(merged["p1"].scales) == {"s1", "s9"}

        replaced = run(palettes, ImportScales("p1", {"s9": imported}, replace=True), ctx)
        assert set(replaced["p1"].scales) == {"s9"}

    def test_input_not_mutated(self, palettes, palette, ctx):
        run(palettes, ChangePaletteName("p1", "Other"), ctx)
        assert palettes["p1"] is palette
        assert palette.name == "Test"


# ---------------------------------------------------------------------------
# Scales
# ---------------------------------------------------------------------------

class TestScales:

    def test_create_scale_from_css_color(self, palettes, ctx):
        result = run(palettes, CreateScale("p1"), ctx)
        new_scale = next(s for sid, s in result["p1"].scales.items() if sid != "s1")
        assert new_scale.name in CSS_COLORS
        assert new_scale.colors == (hex_to_color(CSS_COLORS[new_scale.name]),)
        assert new_scale.curves == {}
        assert new_scale.naming_scheme_id is None

    def test_delete_scale(self, palettes, ctx):
        assert run(palettes, DeleteScale("p1", "s1"), ctx)["p1"].scales == {}

    def test_duplicate_scale(self, palettes, ctx):
        result = apply_command(palettes, DuplicateScale("p1", "s1"), ctx)
        scales = result.palettes["p1"].scales
        copy_id = next(sid for sid in scales if sid != "s1")

        assert scales[copy_id].name == "blue (copy)"
        assert scales[copy_id].colors == scales["s1"].colors
        assert result.navigate_to == f"/local/p1/scale/{copy_id}"

    def test_rename_scale(self, palettes, ctx):
        assert run(palettes, ChangeScaleName("p1", "s1", "navy"), ctx)["p1"].scales["s1"].name == "navy"

    def test_change_scale_colors(self, palettes, ctx):
        reordered = tuple(reversed(colors_of(palettes)))
        result = run(palettes, ChangeScaleColors("p1", "s1", reordered), ctx)
        assert colors_of(result) == reordered


# ---------------------------------------------------------------------------
# Colors
# ---------------------------------------------------------------------------

class TestCreateColor:

    def test_append_darkens_by_ten(self, palettes, ctx):
        scale = Scale(id="s1", name="one", colors=(Color(0, 50, 50),))
        palettes = with_scale(palettes, scale)

        result = run(palettes, CreateColor("p1", "s1", after_index=0), ctx)

        assert colors_of(result) == (Color(0, 50, 50), Color(0, 50, 40))

    def test_default_appends_at_end(self, palettes, ctx):
        result = run(palettes, CreateColor("p1", "s1"), ctx)
        assert [c.lightness for c in colors_of(result)] == [10.0, 20.0, 30.0, 20.0]

    def test_darkening_clamped_at_zero(self, palettes, ctx):
        palettes = with_scale(palettes, Scale(id="s1", name="x", colors=(Color(0, 0, 4),)))
        assert colors_of(run(palettes, CreateColor("p1", "s1"), ctx))[-1].lightness == 0.0

    def test_insert_in_middle_copies_exactly(self, palettes, ctx):
        result = run(palettes, CreateColor("p1", "s1", after_index=0), ctx)
        assert [c.lightness for c in colors_of(result)] == [10.0, 10.0, 20.0, 30.0]

    def test_empty_scale_gets_css_color(self, palettes, ctx):
        palettes = with_scale(palettes, Scale(id="s1", name="empty"))
        (color,) = colors_of(run(palettes, CreateColor("p1", "s1"), ctx))
        assert color in {hex_to_color(h) for h in CSS_COLORS.values()}


class TestRemoveColor:

    def test_pop_color(self, palettes, ctx):
        result = run(palettes, PopColor("p1", "s1"), ctx)
        assert [c.lightness for c in colors_of(result)] == [10.0, 20.0]

    @pytest.mark.parametrize("command", [PopColor("p1", "s1"), DeleteColor("p1", "s1", 0)])
    def test_floor_of_one_color(self, palettes, ctx, command):
        palettes = with_scale(palettes, Scale(id="s1", name="x", colors=(Color(1, 2, 3),)))
        assert run(palettes, command, ctx) is palettes

    @pytest.mark.parametrize("command", [PopColor("p1", "s1"), DeleteColor("p1", "s1", 1)])
    def test_refused_under_naming_scheme(self, palettes, ctx, command):
        palettes = run(palettes, CreateNamingSchemeFromScale("p1", "s1"), ctx)
        assert run(palettes, command, ctx) is palettes

    def test_delete_color_at_index(self, palettes, ctx):
        result = run(palettes, DeleteColor("p1", "s1", 1), ctx)
        assert [c.lightness for c in colors_of(result)] == [10.0, 30.0]

    def test_delete_out_of_range_is_noop(self, palettes, ctx):
        assert run(palettes, DeleteColor("p1", "s1", 7), ctx) is palettes


class TestChangeColorValue:

    def test_partial_merge(self, palettes, ctx):
        result = run(palettes, ChangeColorValue("p1", "s1", 2, {Channel.HUE: 15.0}), ctx)
        assert colors_of(result)[2] == Color(15.0, 80.0, 30.0)
        assert colors_of(result)[:2] == colors_of(palettes)[:2]

    def test_out_of_range_is_noop(self, palettes, ctx):
        assert run(palettes, ChangeColorValue("p1", "s1", 3, {Channel.HUE: 1.0}), ctx) is palettes


# ---------------------------------------------------------------------------
# Curves
# ---------------------------------------------------------------------------

class TestCurves:

    def _with_curve(self, palettes, ctx, channel=Channel.LIGHTNESS):
        palettes = run(palettes, CreateCurveFromScale("p1", "s1", channel), ctx)
        curve_id = palettes["p1"].scales["s1"].curves[channel]
        return palettes, curve_id

    def test_create_curve_from_scale(self, palettes, ctx):
        before = resolve_scale({}, palettes["p1"].scales["s1"])
        palettes, curve_id = self._with_curve(palettes, ctx)
        palette = palettes["p1"]

        curve = palette.curves[curve_id]
        assert curve.name == "blue lightness"
        assert curve.values == (10.0, 20.0, 30.0)
        assert [c.lightness for c in colors_of(palettes)] == [0.0, 0.0, 0.0]
        assert resolve_scale(palette.curves, palette.scales["s1"]) == before

    def test_rename_curve(self, palettes, ctx):
        palettes, curve_id = self._with_curve(palettes, ctx)
        result = run(palettes, ChangeCurveName("p1", curve_id, "ramp"), ctx)
        assert result["p1"].curves[curve_id].name == "ramp"

    def test_delete_curve_restores_absolute_values(self, palettes, ctx):
        palettes, curve_id = self._with_curve(palettes, ctx)
        palettes = run(palettes, ChangeCurveValues("p1", curve_id, (0.0, 50.0, 100.0)), ctx)

        result = run(palettes, DeleteCurve("p1", curve_id), ctx)

        assert result["p1"].curves == {}
        assert result["p1"].scales["s1"].curves == {}
        assert [c.lightness for c in colors_of(result)] == [0.0, 50.0, 100.0]

    def test_detach_preserves_rendered_colors(self, palettes, ctx):
        palettes, curve_id = self._with_curve(palettes, ctx)
        palettes = run(palettes, ChangeCurveValue("p1", curve_id, 1, 55.0), ctx)
        palette = palettes["p1"]
        before = resolve_scale(palette.curves, palette.scales["s1"])

        result = run(palettes, ChangeScaleCurve("p1", "s1", Channel.LIGHTNESS, None), ctx)

        scale = result["p1"].scales["s1"]
        assert scale.curves == {}
        assert resolve_scale(result["p1"].curves, scale) == before
        # Curve itself stays in the palette
        assert curve_id in result["p1"].curves

    def test_attach_existing_curve(self, palettes, ctx):
        curve = Curve(id="shared", name="shared", type=Channel.SATURATION, values=(5.0, 6.0, 7.0))
        palettes = {"p1": replace(palettes["p1"], curves={"shared": curve})}

        result = run(palettes, ChangeScaleCurve("p1", "s1", Channel.SATURATION, "shared"), ctx)

        scale = result["p1"].scales["s1"]
        assert scale.curves == {Channel.SATURATION: "shared"}
        assert [c.saturation for c in scale.colors] == [0.0, 0.0, 0.0]
        assert [c.saturation for c in resolve_scale(result["p1"].curves, scale)] == [5.0, 6.0, 7.0]

    def test_change_curve_value_out_of_range(self, palettes, ctx):
        palettes, curve_id = self._with_curve(palettes, ctx)
        assert run(palettes, ChangeCurveValue("p1", curve_id, 3, 1.0), ctx) is palettes


class TestEasing:

    def _curve_palettes(self, palettes, values):
        curve = Curve(id="c1", name="c", type=Channel.LIGHTNESS, values=tuple(values))
        return {"p1": replace(palettes["p1"], curves={"c1": curve})}

    def test_linear_keeps_linear_curve(self, palettes, ctx):
        palettes = self._curve_palettes(palettes, [0.0, 10.0, 20.0])
        result = run(palettes, ApplyEasingFunction("p1", "c1", linear), ctx)
        assert result["p1"].curves["c1"].values == (0.0, 10.0, 20.0)

    def test_interior_values_follow_easing(self, palettes, ctx):
        palettes = self._curve_palettes(palettes, [0.0, 99.0, 0.0, 100.0])
        result = run(palettes, ApplyEasingFunction("p1", "c1", lambda t: t * t), ctx)
        # 100 * (1/3)^2 = 11.11.., 100 * (2/3)^2 = 44.44..
        assert result["p1"].curves["c1"].values == (0.0, 11.1, 44.4, 100.0)

    def test_rounds_half_up(self, palettes, ctx):
        palettes = self._curve_palettes(palettes, [0.0, 0.0, 0.5])
        result = run(palettes, ApplyEasingFunction("p1", "c1", linear), ctx)
        # 0.25 -> 0.3 (half-up), not banker's 0.2
        assert result["p1"].curves["c1"].values == (0.0, 0.3, 0.5)

    def test_descending_endpoints(self, palettes, ctx):
        palettes = self._curve_palettes(palettes, [90.0, 0.0, 0.0, 0.0, 10.0])
        result = run(palettes, ApplyEasingFunction("p1", "c1", linear), ctx)
        assert result["p1"].curves["c1"].values == (90.0, 70.0, 50.0, 30.0, 10.0)

    def test_bezier_keeps_endpoints(self, palettes, ctx):
        palettes = self._curve_palettes(palettes, [20.0, 0.0, 0.0, 80.0])
        easing = cubic_bezier(0.42, 0.0, 0.58, 1.0)
        values = run(palettes, ApplyEasingFunction("p1", "c1", easing), ctx)["p1"].curves["c1"].values
        assert values[0] == 20.0 and values[-1] == 80.0
        assert values[0] < values[1] < values[2] < values[3]

    @pytest.mark.parametrize("values", [[], [42.0]])
    def test_fewer_than_two_values_is_noop(self, palettes, ctx, values):
        palettes = self._curve_palettes(palettes, values)
        assert run(palettes, ApplyEasingFunction("p1", "c1", linear), ctx) is palettes


# ---------------------------------------------------------------------------
# Naming schemes
# ---------------------------------------------------------------------------

class TestNamingSchemes:

    def test_create_from_scale(self, palettes, ctx):
        result = run(palettes, CreateNamingSchemeFromScale("p1", "s1"), ctx)
        scale = result["p1"].scales["s1"]
        scheme = result["p1"].naming_schemes[scale.naming_scheme_id]
        assert scheme.name == "blue naming scheme"
        assert scheme.names == ("0", "1", "2")

    def test_attach_pads_with_last_color(self, palettes, ctx):
        scheme = NamingScheme(id="n1", name="n", names=("a", "b", "c", "d", "e"))
        palettes = {"p1": replace(palettes["p1"], naming_schemes={"n1": scheme})}

        result = run(palettes, ChangeScaleNamingScheme("p1", "s1", "n1"), ctx)

        colors = colors_of(result)
        assert len(colors) == 5
        assert colors[3] == colors[4] == colors_of(palettes)[2]

    def test_attach_truncates(self, palettes, ctx):
        scheme = NamingScheme(id="n1", name="n", names=("a", "b"))
        palettes = {"p1": replace(palettes["p1"], naming_schemes={"n1": scheme})}

        result = run(palettes, ChangeScaleNamingScheme("p1", "s1", "n1"), ctx)

        assert colors_of(result) == colors_of(palettes)[:2]
        assert result["p1"].scales["s1"].naming_scheme_id == "n1"

    def test_detach_keeps_colors(self, palettes, ctx):
        palettes = run(palettes, CreateNamingSchemeFromScale("p1", "s1"), ctx)
        result = run(palettes, ChangeScaleNamingScheme("p1", "s1", None), ctx)
        assert result["p1"].scales["s1"].naming_scheme_id is None
        assert colors_of(result) == colors_of(palettes)

    def test_update_resizes_users(self, palettes, ctx):
        palettes = run(palettes, CreateNamingSchemeFromScale("p1", "s1"), ctx)
        scheme_id = palettes["p1"].scales["s1"].naming_scheme_id
        updated = NamingScheme(id=scheme_id, name="sizes", names=("sm", "md", "lg", "xl"))

        result = run(palettes, UpdateNamingScheme("p1", updated), ctx)

        assert result["p1"].naming_schemes[scheme_id] == updated
        assert len(colors_of(result)) == 4


def test_history_commands_rejected(palettes, ctx):
    with pytest.raises(ValueError):
        apply_command(palettes, Undo(), ctx)
