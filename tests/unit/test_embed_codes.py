"""Embed code generator tests."""

from __future__ import annotations

from leadform.embed import embed_codes, generate_iframe_code, generate_shortcode, shortcode_name


def test_shortcode_uses_last_path_segment() -> None:
    assert generate_shortcode("/embed/phone-lead") == '[phone-lead width="100%" height="600"]'
    assert generate_shortcode("/embed/property-estimator/") == '[property-estimator width="100%" height="600"]'


def test_shortcode_for_saved_configuration() -> None:
    assert (
        generate_shortcode("/embed/dynamic-form", "01JB8Z")
        == '[dynamic_form id="01JB8Z" width="100%" height="600"]'
    )


def test_shortcode_with_id_keeps_the_embed_path_name() -> None:
    assert generate_shortcode("/embed/phone-lead", "abc") == '[phone-lead id="abc" width="100%" height="600"]'
    assert generate_shortcode("/embed/phone-lead", "abc") != generate_shortcode("/embed/property-estimator", "abc")


def test_dynamic_form_path_uses_fixed_name() -> None:
    assert generate_shortcode("/embed/dynamic-form") == '[dynamic_form width="100%" height="600"]'


def test_distinct_segments_give_distinct_shortcodes() -> None:
    paths = ["/embed/phone-lead", "/embed/property-estimator", "/forms/phone-leads"]
    names = {shortcode_name(path) for path in paths}
    assert len(names) == len(paths)


def test_iframe_code_shape() -> None:
    code = generate_iframe_code("https://forms.example.com/", "/embed/dynamic-form", "abc 1")
    assert code == (
        "<iframe\n"
        '  src="https://forms.example.com/embed/dynamic-form?id=abc+1"\n'
        '  width="100%"\n'
        '  height="600"\n'
        '  style="border:none; border-radius:8px;"\n'
        '  frameborder="0">\n'
        "</iframe>"
    )


def test_iframe_without_id_has_no_query() -> None:
    code = generate_iframe_code("https://forms.example.com", "/embed/phone-lead")
    assert 'src="https://forms.example.com/embed/phone-lead"' in code


def test_embed_codes_are_deterministic() -> None:
    first = embed_codes("https://forms.example.com", "/embed/dynamic-form", "x")
    second = embed_codes("https://forms.example.com", "/embed/dynamic-form", "x")
    assert first == second
    assert set(first) == {"iframe", "shortcode"}
