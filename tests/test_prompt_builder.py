from looksim.prompting.prompt_builder import (
    build_hair_png_prompt,
    build_replicate_edit_prompt,
    build_settings_clause,
    build_style_request,
)


def test_settings_clause_orders_color_volume_parting():
    clause = build_settings_clause({"color": "ash-gray", "volume": "voluminous", "parting": "left"})
    assert clause == "ash gray hair color, with high volume and body, parted on the left side"


def test_natural_color_and_unknown_values_are_skipped():
    clause = build_settings_clause({"color": "natural", "volume": "huge", "parting": "center"})
    assert clause == "parted in the center"


def test_missing_settings_leave_prompt_untouched():
    assert build_settings_clause(None) == ""
    assert build_style_request("  two block cut ") == "two block cut"


def test_style_request_appends_clause():
    assert build_style_request("bob cut", {"volume": "flat"}) == "bob cut, with flat sleek low volume"


def test_replicate_prompt_embeds_request():
    prompt = build_replicate_edit_prompt("bob cut")
    assert prompt.startswith("Change ONLY the hairstyle to: bob cut.")
    assert "identity must remain 100% the same" in prompt


def test_hair_png_prompt_gender():
    assert build_hair_png_prompt("short fade", "male").startswith("A male hairstyle")
    assert build_hair_png_prompt("long waves", None).startswith("A female hairstyle")
    assert "short fade," in build_hair_png_prompt("short fade", "male")
