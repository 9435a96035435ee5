"""
Interactive helper to run the scanner without remembering flags.
Workflow:
- Ask language first so all prompts/output localize correctly.
- Prompt for pasted ingredients or a barcode, then skin sensitivities via a
  numbered list.
- Build the engine from environment settings, run and record the scan, print
  the formatted report with personalization.

Usage:
    python simple_cli.py
"""
from typing import List, Optional

from scan_engine import (
    InputType,
    ScanEngineError,
    ScanRequest,
    ScanSettings,
    SkinFlag,
    SkinProfile,
    build_engine,
    get_profile_overlay,
    get_recommended_goal,
)
from main import _t, render_text_result


def prompt_input_mode(lang: str = "en") -> str:
    """Ask whether to scan pasted text or a barcode."""
    while True:
        raw = input("Input type [paste/barcode]: ").strip().lower()
        if raw in ("paste", "p", "text", ""):
            return "paste"
        if raw in ("barcode", "b", "ean"):
            return "barcode"
        print("Please enter 'paste' or 'barcode'.")


def prompt_ingredients(lang: str = "en") -> str:
    """Read lines until an empty one; newlines act as separators."""
    print(_t("prompt_ingredients", lang))
    lines: List[str] = []
    while True:
        line = input()
        if not line.strip():
            break
        lines.append(line)
    return "\n".join(lines)


def prompt_profile_flags(lang: str = "en") -> List[str]:
    """
    Console-friendly "dropdown": list the skin flags and let the user pick by number.
    Returns flag values (e.g. fragrance_sensitive).
    """
    options = list(SkinFlag)
    print("\n" + _t("select_flags", lang))
    for idx, flag in enumerate(options, start=1):
        print(f"  {idx:2d}. {flag.value.replace('_', ' ')}")

    while True:
        raw = input(_t("selection_prompt", lang)).strip()
        if not raw:
            return []
        try:
            indices = [
                int(token) for token in raw.replace(" ", "").split(",") if token.strip()
            ]
        except ValueError:
            print(_t("select_error_numbers", lang))
            continue

        invalid = [i for i in indices if i < 1 or i > len(options)]
        if invalid:
            print(_t("select_error_range", lang).format(invalid=invalid))
            continue

        return [options[i - 1].value for i in indices]


def main() -> None:
    lang = input(_t("prompt_language", "en")).strip() or "en"
    print(_t("cli_title", lang))
    mode = prompt_input_mode(lang=lang)
    if mode == "barcode":
        request = ScanRequest(
            input_type=InputType.BARCODE, barcode=input(_t("prompt_barcode", lang)).strip()
        )
    else:
        request = ScanRequest(
            input_type=InputType.PASTE, ingredients_text=prompt_ingredients(lang)
        )
    flags = prompt_profile_flags(lang=lang)
    profile: Optional[SkinProfile] = SkinProfile(flags=flags) if flags else None

    engine = build_engine(ScanSettings.from_env())
    try:
        outcome = engine.scan(request)
    except ScanEngineError:
        print(_t("analysis_failed", lang))
        return

    overlay = get_profile_overlay(outcome.result, profile) if profile else None
    goal = get_recommended_goal(outcome.result, profile)
    print()
    print(render_text_result(outcome, overlay, goal, lang=lang))


if __name__ == "__main__":
    main()
