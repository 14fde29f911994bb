import pytest

from config import CONFIG, get_config, update_config


def test_get_config_returns_copy() -> None:
    config = get_config()
    config["delimiter"] = ","
    assert CONFIG["delimiter"] == ";"


def test_update_config() -> None:
    update_config(num_workers=2, duplicate_suffix="_")
    assert CONFIG["num_workers"] == 2
    assert CONFIG["duplicate_suffix"] == "_"


def test_update_config_unknown_key() -> None:
    with pytest.raises(KeyError, match="Unknown config key"):
        update_config(separator=",")
