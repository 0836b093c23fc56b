import pytest

from statline.retention import RetentionPolicy


def test_defaults():
    p = RetentionPolicy()
    assert p.window_length == 3600
    assert p.cleanup_interval == 300


def test_cleanup_must_be_shorter_than_window():
    with pytest.raises(ValueError):
        RetentionPolicy(window_length=300, cleanup_interval=300)
    with pytest.raises(ValueError):
        RetentionPolicy(window_length=60, cleanup_interval=120)


def test_durations_must_be_positive():
    with pytest.raises(ValueError):
        RetentionPolicy(window_length=0, cleanup_interval=-1)


def test_from_config_and_cutoff():
    p = RetentionPolicy.from_config({"WINDOW_LENGTH": 1000, "CLEANUP_INTERVAL": 500})
    assert p.cutoff(1200) == 200
