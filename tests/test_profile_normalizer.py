from scan_engine import SkinType, normalize_quiz_to_profile, validate_profile


def test_quiz_answers_map_to_flags():
    profile = normalize_quiz_to_profile(
        {
            "skin_type": ["Oily", "Sensitive"],
            "skincare_goals": ["Reduce acne or breakouts"],
            "skin_concerns": ["Redness or rosacea", "Reduce acne or breakouts"],
            "allergies": ["Coconut", "I'm not sure"],
            "sun_exposure": "Daily / I work outside",
        }
    )

    assert profile.skin_type is SkinType.SENSITIVE
    assert profile.flags == [
        "acne_prone",
        "rosacea_prone",
        "allergy_prone",
        "sun_sensitive",
        "fragrance_sensitive",
    ]
    assert profile.allergies == ["Coconut"]
    assert profile.updated_at


def test_first_skin_type_wins_unless_sensitive():
    profile = normalize_quiz_to_profile({"skin_type": ["Dry", "Oily"]})
    assert profile.skin_type is SkinType.DRY
    assert profile.flags == []
    assert profile.allergies is None


def test_empty_quiz_is_normal_skin():
    profile = normalize_quiz_to_profile({})
    assert profile.skin_type is SkinType.NORMAL
    assert profile.flags == []


def test_validate_profile_drops_bad_values():
    profile = validate_profile(
        {"skinType": "scaly", "flags": ["acne_prone", 3], "allergies": "nuts", "updatedAt": 5}
    )

    assert profile.skin_type is SkinType.NORMAL
    assert profile.flags == ["acne_prone"]
    assert profile.allergies is None
    assert isinstance(profile.updated_at, str)


def test_validate_profile_keeps_good_values():
    profile = validate_profile(
        {
            "skinType": "oily",
            "flags": ["acne_prone"],
            "allergies": ["avocado"],
            "updatedAt": "2024-01-01T00:00:00+00:00",
        }
    )
    assert profile.to_dict() == {
        "skinType": "oily",
        "flags": ["acne_prone"],
        "allergies": ["avocado"],
        "updatedAt": "2024-01-01T00:00:00+00:00",
    }


def test_validate_profile_rejects_non_dicts():
    assert validate_profile(None) is None
    assert validate_profile([]) is None
    assert validate_profile("oily") is None
