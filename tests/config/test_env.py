from __future__ import annotations

import pytest

from catalogsync.config import (
    InvalidConfigurationError,
    MissingConfigurationError,
    env_float,
    env_int,
    env_list,
    optional_env,
    require_env_vars,
)


def test_require_env_vars_returns_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_VAR", "value")

    assert require_env_vars(["EXAMPLE_VAR"]) == {"EXAMPLE_VAR": "value"}


def test_require_env_vars_lists_every_missing_name(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("MISSING_B", raising=False)
    monkeypatch.setenv("MISSING_A", "   ")

    with pytest.raises(MissingConfigurationError) as exc:
        require_env_vars(["MISSING_B", "MISSING_A"])

    assert "MISSING_A, MISSING_B" in str(exc.value)


def test_optional_env_treats_blank_as_unset(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_VAR", "  ")
    assert optional_env("EXAMPLE_VAR") is None

    monkeypatch.setenv("EXAMPLE_VAR", " padded ")
    assert optional_env("EXAMPLE_VAR") == "padded"


def test_env_int_parses_and_bounds(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("EXAMPLE_INT", raising=False)
    assert env_int("EXAMPLE_INT", 5) == 5

    monkeypatch.setenv("EXAMPLE_INT", "8")
    assert env_int("EXAMPLE_INT", 5, minimum=1) == 8

    monkeypatch.setenv("EXAMPLE_INT", "0")
    with pytest.raises(InvalidConfigurationError, match="EXAMPLE_INT"):
        env_int("EXAMPLE_INT", 5, minimum=1)

    monkeypatch.setenv("EXAMPLE_INT", "eight")
    with pytest.raises(InvalidConfigurationError, match="an integer"):
        env_int("EXAMPLE_INT", 5)


def test_env_float_requires_positive_numbers(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("EXAMPLE_FLOAT", raising=False)
    assert env_float("EXAMPLE_FLOAT", None) is None

    monkeypatch.setenv("EXAMPLE_FLOAT", "2.5")
    assert env_float("EXAMPLE_FLOAT", None) == 2.5

    monkeypatch.setenv("EXAMPLE_FLOAT", "-1")
    with pytest.raises(InvalidConfigurationError, match="a positive number"):
        env_float("EXAMPLE_FLOAT", None)


def test_env_list_drops_blank_entries(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_LIST", "acme, ,globex,")

    assert env_list("EXAMPLE_LIST") == ("acme", "globex")
