from adcreative_genai.config import MAX_KEY_SLOTS, Settings


def test_numbered_keys_in_slot_order():
    s = Settings(_env_file=None, api_key_3="c", api_key_1="a", api_key_22="z")
    assert s.api_keys() == ["a", "c", "z"]


def test_blank_slots_are_skipped():
    s = Settings(_env_file=None, api_key_1="  ", api_key_2="b")
    assert s.api_keys() == ["b"]


def test_legacy_key_only_when_numbered_slots_empty():
    assert Settings(_env_file=None, api_key="legacy").api_keys() == ["legacy"]
    assert Settings(_env_file=None, api_key="legacy", api_key_4="d").api_keys() == ["d"]


def test_keys_read_from_environment(monkeypatch):
    monkeypatch.setenv("API_KEY_1", "env-one")
    monkeypatch.setenv(f"API_KEY_{MAX_KEY_SLOTS}", "env-last")
    assert Settings(_env_file=None).api_keys() == ["env-one", "env-last"]


def test_defaults():
    s = Settings(_env_file=None)
    assert s.api_keys() == []
    assert s.rotation_backoff_seconds == 0.5
    assert s.min_section_length == 50
    assert s.max_section_retries == 2
