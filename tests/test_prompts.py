from lod_checker.models import LODLevel
from lod_checker.prompts import SYSTEM_PROMPT, build_instruction


def test_defaults_for_missing_element_and_context():
    text = build_instruction(LODLevel.LOD400)
    assert "Element Type: Unknown/Auto-detect." in text
    assert "Additional Context: None." in text
    assert "Target LOD: LOD 400." in text


def test_user_values_are_embedded():
    text = build_instruction(LODLevel.LOD500, "Air Handling Unit", "  Serial numbers in properties panel ")
    assert "Element Type: Air Handling Unit." in text
    assert "Additional Context: Serial numbers in properties panel." in text
    assert text.count("LOD 500") >= 3


def test_all_three_facets_are_requested():
    text = build_instruction(LODLevel.LOD300, "Beam")
    for facet in ("Geometry", "Parameters", "Information Level"):
        assert facet in text


def test_system_prompt_defines_every_tier():
    assert "VDC Coordinator" in SYSTEM_PROMPT
    for level in LODLevel:
        assert level.value in SYSTEM_PROMPT
