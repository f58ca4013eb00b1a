from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Dict, Iterator, List

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

import quick_quote
import shipcalc.quote_service as quote_service


class FakeORSClient:
    def __init__(self, labels: List[str], meters: float = 100_000.0) -> None:
        self.labels = labels
        self.meters = meters
        self.directions_calls: List[Dict[str, Any]] = []

    def pelias_autocomplete(self, **kwargs: Any) -> Dict[str, Any]:
        return {
            "features": [
                {
                    "geometry": {"coordinates": [79.8 + idx, 6.9 + idx]},
                    "properties": {"label": label},
                }
                for idx, label in enumerate(self.labels)
            ]
        }

    def directions(self, **kwargs: Any) -> Dict[str, Any]:
        self.directions_calls.append(kwargs)
        return {"routes": [{"summary": {"distance": self.meters}}]}


def _answers(values: List[str]):
    iterator: Iterator[str] = iter(values)

    def _input(prompt: str) -> str:
        return next(iterator)

    return _input


@pytest.fixture(autouse=True)
def _rupee_label(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(quote_service, "CURRENCY_LABEL", "Rs.")


def test_first_match_run_prints_breakdown(capsys: pytest.CaptureFixture[str]) -> None:
    client = FakeORSClient(["Colombo, Sri Lanka", "Kandy, Sri Lanka"])

    exit_code = quick_quote.main(
        ["--pickup", "Colombo", "--delivery", "Kandy", "--first-match"],
        client=client,
    )

    out = capsys.readouterr().out
    assert exit_code == 0
    assert "Pickup location: Colombo, Sri Lanka" in out
    assert "Route: Colombo, Sri Lanka → Colombo, Sri Lanka" in out
    assert "Package: 10 x 10 x 10 cm, Standard" in out
    assert "Insurance: no" in out
    assert "Total Cost" in out
    assert "Rs. 380.00" in out
    assert client.directions_calls[0]["coordinates"] == [[79.8, 6.9], [79.8, 6.9]]


def test_interactive_run_picks_suggestions_and_prompts_details(
    capsys: pytest.CaptureFixture[str],
) -> None:
    client = FakeORSClient(["Colombo, Sri Lanka", "Kandy, Sri Lanka"])
    answers = _answers(["1", "2", "", "", "", "fragile"])

    exit_code = quick_quote.main(
        ["--pickup", "Colombo", "--delivery", "Kandy", "--insurance"],
        client=client,
        input_fn=answers,
    )

    out = capsys.readouterr().out
    assert exit_code == 0
    assert "[2] Kandy, Sri Lanka" in out
    assert "Delivery location: Kandy, Sri Lanka" in out
    assert "Package Type Multiplier  1.5x" in out
    assert "Rs. 627.00" in out
    assert client.directions_calls[0]["coordinates"] == [[79.8, 6.9], [80.8, 7.9]]


def test_no_suggestions_reports_missing_selection(capsys: pytest.CaptureFixture[str]) -> None:
    client = FakeORSClient([])

    exit_code = quick_quote.main(
        ["--pickup", "Nowhere", "--delivery", "Kandy", "--first-match"],
        client=client,
    )

    out = capsys.readouterr().out
    assert exit_code == 1
    assert "No suggestions found for 'Nowhere'." in out
    assert "Error: Please select valid pickup and delivery locations" in out
    assert client.directions_calls == []


def test_out_of_range_dimension_is_reported(capsys: pytest.CaptureFixture[str]) -> None:
    client = FakeORSClient(["Galle, Sri Lanka"])

    exit_code = quick_quote.main(
        ["--pickup", "Galle", "--delivery", "Galle", "--first-match", "--length", "5"],
        client=client,
    )

    assert exit_code == 1
    assert "Error: Length must be between 10 and 1000 cm" in capsys.readouterr().out


def test_prompt_float_enforces_bounds(capsys: pytest.CaptureFixture[str]) -> None:
    value = quick_quote.prompt_float(
        "Length (cm)",
        default=10.0,
        minimum=10.0,
        maximum=1000.0,
        input_fn=_answers(["abc", "5", "1200", "42"]),
    )

    out = capsys.readouterr().out
    assert value == 42.0
    assert "Enter a numeric value." in out
    assert "Value must be ≥ 10." in out
    assert "Value must be ≤ 1000." in out


def test_prompt_choice_allows_retyping() -> None:
    assert quick_quote.prompt_choice("Select", 3, input_fn=_answers(["9", "x", "2"])) == 1
    assert quick_quote.prompt_choice("Select", 3, input_fn=_answers([""])) is None
