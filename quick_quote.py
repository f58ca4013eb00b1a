#!/usr/bin/env python3
"""Quick shipping quote from the command line.

Collects pickup/delivery addresses and package details (from arguments or
prompts), lets the user pick each address from the provider's suggestions,
fetches the driving distance and prints the itemised cost breakdown.
"""
from __future__ import annotations

import argparse
import logging
import sys
from typing import Callable, Optional, Sequence, TYPE_CHECKING

from shipcalc.form_state import DELIVERY, PICKUP, FormController
from shipcalc.pricing import (
    DEFAULT_DIMENSION_CM,
    DEFAULT_PACKAGE_TYPE,
    MAX_DIMENSION_CM,
    MIN_DIMENSION_CM,
    PACKAGE_OPTIONS,
)
from shipcalc.search import ManualTimer

if TYPE_CHECKING:  # pragma: no cover - hints for type-checkers only
    from openrouteservice import Client

InputFn = Callable[[str], str]

_LOCATION_PROMPTS = {
    PICKUP: "Pickup location",
    DELIVERY: "Delivery location",
}


def prompt_input(
    prompt: str, default: Optional[str] = None, *, input_fn: InputFn = input
) -> str:
    while True:
        suffix = f" [{default}]" if default else ""
        value = input_fn(f"{prompt}{suffix}: ").strip()
        if not value and default is not None:
            return default
        if value:
            return value
        print("This field is required. Please enter a value.")


def prompt_float(
    prompt: str,
    default: Optional[float] = None,
    minimum: Optional[float] = None,
    maximum: Optional[float] = None,
    *,
    input_fn: InputFn = input,
) -> float:
    while True:
        suffix = f" [{default:g}]" if default is not None else ""
        value = input_fn(f"{prompt}{suffix}: ").strip()
        if not value and default is not None:
            value = str(default)
        try:
            num = float(value)
        except ValueError:
            print("Enter a numeric value.")
            continue
        if minimum is not None and num < minimum:
            print(f"Value must be ≥ {minimum:g}.")
            continue
        if maximum is not None and num > maximum:
            print(f"Value must be ≤ {maximum:g}.")
            continue
        return num


def prompt_choice(prompt: str, count: int, *, input_fn: InputFn = input) -> Optional[int]:
    """Return a zero-based index, or ``None`` when the user wants to retype."""

    while True:
        raw = input_fn(f"{prompt} [1-{count}, blank to search again]: ").strip()
        if not raw:
            return None
        if raw.isdigit() and 1 <= int(raw) <= count:
            return int(raw) - 1
        print(f"Ignoring invalid selection: {raw}")


def resolve_location(
    controller: FormController,
    name: str,
    text: Optional[str],
    *,
    first_match: bool = False,
    input_fn: InputFn = input,
) -> bool:
    """Resolve the *name* location to coordinates via provider suggestions.

    Returns ``False`` when a non-interactive lookup finds nothing.
    """

    label = _LOCATION_PROMPTS[name]
    while True:
        if text is None:
            text = prompt_input(label, input_fn=input_fn)
        controller.edit_location(name, text)
        controller.flush_suggestions()
        suggestions = controller.state.location(name).suggestions

        if not suggestions:
            print(f"No suggestions found for '{text}'.")
            if first_match:
                return False
            text = None
            continue

        if first_match:
            choice: Optional[int] = 0
        else:
            print(f"\n{label} suggestions:")
            for idx, suggestion in enumerate(suggestions, start=1):
                print(f"  [{idx}] {suggestion.label}")
            choice = prompt_choice("Select", len(suggestions), input_fn=input_fn)
            if choice is None:
                text = None
                continue

        state = controller.select_suggestion(name, choice)
        print(f"{label}: {state.location(name).text}")
        return True


def gather_package_details(
    controller: FormController, args: argparse.Namespace, *, input_fn: InputFn = input
) -> None:
    interactive = not args.first_match
    for name, label, value in (
        ("length_cm", "Length (cm)", args.length),
        ("width_cm", "Width (cm)", args.width),
        ("height_cm", "Height (cm)", args.height),
    ):
        if value is None:
            value = (
                prompt_float(
                    label,
                    default=DEFAULT_DIMENSION_CM,
                    minimum=MIN_DIMENSION_CM,
                    maximum=MAX_DIMENSION_CM,
                    input_fn=input_fn,
                )
                if interactive
                else DEFAULT_DIMENSION_CM
            )
        controller.set_dimension(name, value)

    package_type = args.package_type
    if package_type is None:
        if interactive:
            options = ", ".join(option.id for option in PACKAGE_OPTIONS)
            package_type = prompt_input(
                f"Package type ({options})",
                default=DEFAULT_PACKAGE_TYPE,
                input_fn=input_fn,
            )
        else:
            package_type = DEFAULT_PACKAGE_TYPE
    controller.set_package_type(package_type)
    controller.set_insurance(bool(args.insurance))


def parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Quick shipping quote")
    parser.add_argument("--pickup")
    parser.add_argument("--delivery")
    parser.add_argument("--length", type=float)
    parser.add_argument("--width", type=float)
    parser.add_argument("--height", type=float)
    parser.add_argument("--package-type", dest="package_type")
    parser.add_argument(
        "--insurance", action="store_true", help="Add insurance coverage (+10%%)"
    )
    parser.add_argument(
        "--first-match",
        action="store_true",
        help="Use the top suggestion for each address and defaults for missing values",
    )
    parser.add_argument("--verbose", action="store_true")
    return parser.parse_args(argv)


def main(
    argv: Sequence[str] | None = None,
    *,
    client: Optional["Client"] = None,
    input_fn: InputFn = input,
) -> int:
    args = parse_args(sys.argv[1:] if argv is None else argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    controller = FormController(client=client, delay=0.0, timer_factory=ManualTimer)

    print("\n--- Shipping Quote ---")
    for name, text in ((PICKUP, args.pickup), (DELIVERY, args.delivery)):
        if not resolve_location(
            controller, name, text, first_match=args.first_match, input_fn=input_fn
        ):
            break

    gather_package_details(controller, args, input_fn=input_fn)
    state = controller.submit()
    controller.close()

    result = controller.last_result
    if state.result is None or result is None:
        print(f"Error: {state.error}")
        return 1

    print("\n--- Cost Breakdown ---")
    print(result.summary_text)
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
