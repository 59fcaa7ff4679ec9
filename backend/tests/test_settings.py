from interview_sim.session.settings import SessionSettings


def test_settings_accept_strings_and_aliases():
    settings = SessionSettings.coerce(
        {
            "position": "Backend Developer",
            "experience": "Senior",
            "duration": "15",
            "questionCount": "4",
            "skills": ["Node.js"],
        }
    )
    assert settings.experience == "senior"
    assert settings.duration == 15
    assert settings.duration_seconds == 900
    assert settings.question_count == 4
    assert settings.skills == ["Node.js"]


def test_settings_defaults():
    settings = SessionSettings.coerce(None)
    assert settings.position == "Frontend Developer"
    assert settings.experience == "mid"
    assert settings.duration == 30
    assert settings.question_count == 4
    assert settings.skills == ["React", "JavaScript"]


def test_settings_clamp_and_fallback():
    settings = SessionSettings.coerce(
        {"experience": "wizard", "duration": "500", "question_count": 0, "skills": "Go, , Rust"}
    )
    assert settings.experience == "mid"
    assert settings.duration == 120
    assert settings.question_count == 1
    assert settings.skills == ["Go", "Rust"]

    assert SessionSettings.coerce({"duration": "soon"}).duration == 30
    assert SessionSettings.coerce(settings) is settings
