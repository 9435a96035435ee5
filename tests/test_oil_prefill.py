from scan_engine import SkinProfile, SupportGoal, generate_oil_prefill
from scan_engine.oil_prefill import determine_goal_from_scan, goal_description, goal_label


def test_goal_follows_flag_priority(make_result):
    assert determine_goal_from_scan(make_result([("barrier_disruptor", 3), ("acne_trigger", 1)])) is SupportGoal.ACNE
    assert determine_goal_from_scan(make_result([("glycation", 1)])) is SupportGoal.BRIGHTEN
    assert determine_goal_from_scan(make_result()) is SupportGoal.CALM


def test_calm_blend_for_irritant(make_result):
    draft = generate_oil_prefill(make_result([("irritant", 2)]))

    assert draft.goal is SupportGoal.CALM
    assert [(o.name, o.percentage) for o in draft.base_oils] == [
        ("Jojoba Oil", 50),
        ("Sunflower Oil", 30),
        ("Avocado Oil", 20),
    ]
    assert draft.boost_ingredients == ["Vitamin E"]
    assert draft.scent == "Lavender"
    assert draft.rationale[0] == "Based on detected Irritant in your scanned product"


def test_fragrance_sensitive_profile_stays_unscented(make_result):
    draft = generate_oil_prefill(
        make_result([("irritant", 2)]), profile=SkinProfile(flags=["fragrance_sensitive"])
    )
    assert draft.scent == "Unscented"
    assert draft.rationale[-1] == "Keeping unscented to avoid fragrance irritation"


def test_allergies_remove_oils_and_renormalize(make_result):
    draft = generate_oil_prefill(
        make_result([("irritant", 2)]), profile=SkinProfile(allergies=["Avocado"])
    )
    assert [(o.name, o.percentage) for o in draft.base_oils] == [
        ("Jojoba Oil", 63),
        ("Sunflower Oil", 38),
    ]


def test_allergy_to_every_oil_keeps_blend(make_result):
    draft = generate_oil_prefill(
        make_result(), profile=SkinProfile(allergies=["oil"]), goal=SupportGoal.BARRIER
    )
    assert [o.name for o in draft.base_oils] == ["Jojoba Oil", "Avocado Oil", "Sunflower Oil"]
    assert draft.boost_ingredients == ["Vitamin E"]


def test_explicit_goal_overrides_scan(make_result):
    draft = generate_oil_prefill(make_result([("irritant", 2)]), goal=SupportGoal.BRIGHTEN)
    payload = draft.to_dict()

    assert payload["goal"] == "brighten"
    assert payload["scent"] == "Citrus Blend"
    assert payload["boostIngredients"] == ["Rosehip Oil", "Vitamin E"]
    assert goal_label(SupportGoal.BRIGHTEN) == "Brighten & Even"
    assert goal_description(SupportGoal.BRIGHTEN).startswith("Antioxidant-rich")
