"""
CLI entrypoint to scan an ingredient list for known skin triggers.

Flow:
- Parse user inputs (pasted text, file, barcode or catalog product id, profile
  flags, output format, data sources).
- Build the ScanEngine from environment settings overridden by CLI flags.
- Analyse the ingredient list and, unless --no-save, record the scan event.
- Personalize with the skin profile (overlay + recommended support goal).
- Render either a text dashboard or JSON payload.
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Dict, List, Optional

from scan_engine import (
    InputType,
    ScanEngineError,
    ScanRequest,
    ScanSettings,
    SkinProfile,
    build_engine,
    get_profile_overlay,
    get_recommended_goal,
)
from scan_engine.oil_prefill import goal_label
from scan_engine.settings import configure_logging

# Simple i18n table for CLI output (extendable with more locales).
TRANSLATIONS = {
    "en": {
        "cli_title": "=== Ingredient Trigger Scanner ===",
        "prompt_language": "Preferred language (e.g. en, pt) [en]: ",
        "prompt_barcode": "Enter product barcode: ",
        "prompt_ingredients": "Paste the ingredient list (finish with an empty line):",
        "select_flags": "Select skin sensitivities (comma-separated numbers, blank for none):",
        "selection_prompt": "Your selection: ",
        "select_error_numbers": "Use numbers from the list (e.g. 1,3,5).",
        "select_error_range": "Choices out of range: {invalid}. Try again.",
        "quick_view": "=== Quick view ===",
        "details": "=== Details ===",
        "risk_score": "Risk score",
        "flags": "Flags",
        "matched_ingredients": "Matched ingredients",
        "summary": "Summary",
        "for_you": "=== For your skin ===",
        "adjusted_score": "Adjusted score",
        "warnings": "Warnings",
        "actions": "Recommended actions",
        "support_goal": "Suggested support blend",
        "scan_id": "Scan id",
        "no_matches": "No trigger ingredients matched.",
        "analysis_failed": "Analysis failed, please try again.",
        "tier_high": "high",
        "tier_moderate": "moderate",
        "tier_low": "low",
        "severity_1": "low",
        "severity_2": "moderate",
        "severity_3": "high",
    },
    "pt": {
        "cli_title": "=== Verificador de Ingredientes Sensibilizantes ===",
        "prompt_language": "Idioma preferido (ex.: en, pt) [en]: ",
        "prompt_barcode": "Introduza o código de barras do produto: ",
        "prompt_ingredients": "Cole a lista de ingredientes (termine com uma linha vazia):",
        "select_flags": "Selecione as sensibilidades (números separados por vírgula, vazio para nenhuma):",
        "selection_prompt": "A sua escolha: ",
        "select_error_numbers": "Use os números da lista (ex.: 1,3,5).",
        "select_error_range": "Opções fora do intervalo: {invalid}. Tente novamente.",
        "quick_view": "=== Visão rápida ===",
        "details": "=== Detalhes ===",
        "risk_score": "Pontuação de risco",
        "flags": "Alertas",
        "matched_ingredients": "Ingredientes identificados",
        "summary": "Resumo",
        "for_you": "=== Para a sua pele ===",
        "adjusted_score": "Pontuação ajustada",
        "warnings": "Avisos",
        "actions": "Ações recomendadas",
        "support_goal": "Mistura de apoio sugerida",
        "scan_id": "Id da análise",
        "no_matches": "Nenhum ingrediente sensibilizante identificado.",
        "analysis_failed": "A análise falhou, tente novamente.",
        "tier_high": "alto",
        "tier_moderate": "moderado",
        "tier_low": "baixo",
        "severity_1": "baixa",
        "severity_2": "moderada",
        "severity_3": "alta",
    },
}


def _t(key: str, lang: str = "en") -> str:
    """Translate a key to the requested language with English fallback."""
    bundle = TRANSLATIONS.get(lang, TRANSLATIONS["en"])
    template = bundle.get(key) or TRANSLATIONS["en"].get(key, key)
    return template


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Configure and parse CLI arguments."""
    parser = argparse.ArgumentParser(
        description="Flag potentially irritating ingredients in a cosmetic ingredient list"
    )
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--ingredients", help="Ingredient list, comma separated")
    source.add_argument(
        "--ingredients-file", help="Path to a text file holding the ingredient list"
    )
    source.add_argument("--barcode", help="Product barcode to resolve")
    source.add_argument("--product-id", help="Catalog product id to resolve")
    parser.add_argument(
        "--profile-flags",
        default="",
        help="Comma-separated skin flags (e.g. fragrance_sensitive,acne_prone)",
    )
    parser.add_argument(
        "--skin-type",
        default="normal",
        choices=["oily", "dry", "combination", "normal", "sensitive"],
        help="Skin type for personalization (default: normal)",
    )
    parser.add_argument(
        "--format",
        choices=["text", "json"],
        default="text",
        help="Output format (default: text)",
    )
    parser.add_argument(
        "--strict-matching",
        action="store_true",
        default=None,
        help="Require whole-word matches instead of plain substring containment",
    )
    parser.add_argument(
        "--db-dsn",
        default=None,
        help="PostgreSQL DSN. If set, triggers, products and scans use the database.",
    )
    parser.add_argument(
        "--triggers-csv",
        default=None,
        help="Path to a trigger ingredient CSV. Defaults to the bundled db/trigger_ingredients.csv.",
    )
    parser.add_argument(
        "--history",
        default=None,
        help="Path to the scan history CSV (default: db/history/scan_events.csv)",
    )
    parser.add_argument("--user-id", default=None, help="User id attached to the saved scan")
    parser.add_argument(
        "--no-save",
        action="store_true",
        default=False,
        help="Analyse only; do not record a scan event",
    )
    parser.add_argument(
        "--lang",
        default="en",
        help="Language for output labels (e.g. en, pt). Defaults to en.",
    )
    parser.add_argument("--log-level", default=None, help="Logging level (default: INFO)")
    return parser.parse_args(argv)


def settings_from_args(args: argparse.Namespace) -> ScanSettings:
    """Environment settings with CLI flags taking precedence."""
    settings = ScanSettings.from_env()
    if args.db_dsn:
        settings.db_dsn = args.db_dsn
    if args.triggers_csv:
        settings.triggers_csv = args.triggers_csv
    if args.history:
        settings.history_csv = args.history
    if args.strict_matching is not None:
        settings.word_boundary = args.strict_matching
    if args.log_level:
        settings.log_level = args.log_level.upper()
    return settings


def request_from_args(args: argparse.Namespace) -> ScanRequest:
    if args.barcode:
        return ScanRequest(
            input_type=InputType.BARCODE, barcode=args.barcode, user_id=args.user_id
        )
    if args.product_id:
        return ScanRequest(
            input_type=InputType.PRODUCT, product_id=args.product_id, user_id=args.user_id
        )
    text = args.ingredients
    if args.ingredients_file:
        text = Path(args.ingredients_file).read_text(encoding="utf-8")
    return ScanRequest(
        input_type=InputType.PASTE, ingredients_text=text or "", user_id=args.user_id
    )


def profile_from_flags(raw_flags: str, skin_type: str = "normal") -> Optional[SkinProfile]:
    flags = [flag.strip().lower() for flag in raw_flags.split(",") if flag.strip()]
    if not flags and skin_type == "normal":
        return None
    return SkinProfile(skin_type=skin_type, flags=flags)


def render_bar(score: float, width: int = 30) -> str:
    """ASCII bar to visualize a 0-100 score."""
    filled = int((score / 100.0) * width)
    return f"[{'#' * filled}{'.' * (width - filled)}]"


def render_text_result(
    outcome, overlay=None, goal=None, lang: str = "en"
) -> str:
    """Pretty-print a scan in a text-first dashboard layout."""
    result = outcome.result
    lines = [_t("quick_view", lang)]
    lines.append(
        f"{_t('risk_score', lang)}: {result.risk_score}/100 "
        f"({_t('tier_' + result.risk_tier.value, lang)}) {render_bar(result.risk_score)}"
    )
    if outcome.scan_id:
        lines.append(f"{_t('scan_id', lang)}: {outcome.scan_id}")

    if result.flags:
        lines.append(f"\n{_t('flags', lang)}:")
        for flag in result.flags:
            severity = _t(f"severity_{flag.severity}", lang)
            lines.append(f"  - {flag.label} ({severity}): {', '.join(flag.matched)}")

    lines.append(f"\n{_t('summary', lang)}:")
    for sentence in result.summary:
        lines.append(f"  - {sentence}")

    lines.append("\n" + _t("details", lang))
    lines.append(f"{_t('matched_ingredients', lang)}:")
    if not result.matched_ingredients:
        lines.append(f"  {_t('no_matches', lang)}")
    for match in result.matched_ingredients:
        lines.append(
            f"  - {match.name} [{match.slug}] via \"{match.matched_term}\" "
            f"(severity {match.severity}) | {match.notes}"
        )

    if overlay is not None or goal is not None:
        lines.append("\n" + _t("for_you", lang))
    if overlay is not None:
        if overlay.adjusted_risk_score is not None:
            lines.append(
                f"{_t('adjusted_score', lang)}: {overlay.adjusted_risk_score}/100 "
                f"{render_bar(overlay.adjusted_risk_score)}"
            )
        if overlay.personal_warnings:
            lines.append(f"{_t('warnings', lang)}:")
            lines.extend(f"  - {warning}" for warning in overlay.personal_warnings)
        if overlay.recommended_actions:
            lines.append(f"{_t('actions', lang)}:")
            lines.extend(f"  - {action}" for action in overlay.recommended_actions)
    if goal is not None:
        lines.append(
            f"{_t('support_goal', lang)}: {goal_label(goal.goal)} "
            f"({goal.confidence.value}) | {goal.reason}"
        )

    lines.append(f"\n{result.disclaimer}")
    return "\n".join(lines)


def build_output(outcome, overlay=None, goal=None) -> Dict:
    """JSON payload: the scan result plus optional personalization."""
    output = outcome.to_dict()
    if overlay is not None:
        output["profileOverlay"] = overlay.to_dict()
    if goal is not None:
        output["recommendedGoal"] = goal.to_dict()
    return output


def main(argv: Optional[List[str]] = None) -> int:
    """Entrypoint: build the engine, run the scan, personalize, and render output."""
    args = parse_args(argv)
    settings = settings_from_args(args)
    configure_logging(settings.log_level)
    log = logging.getLogger("main")

    engine = build_engine(settings)
    request = request_from_args(args)
    try:
        outcome = engine.analyze(request) if args.no_save else engine.scan(request)
    except ScanEngineError as exc:
        log.error("Analyze error: %s", exc)
        print(_t("analysis_failed", args.lang), file=sys.stderr)
        return 1

    profile = profile_from_flags(args.profile_flags, args.skin_type)
    overlay = get_profile_overlay(outcome.result, profile) if profile else None
    goal = get_recommended_goal(outcome.result, profile)

    if args.format == "json":
        print(json.dumps(build_output(outcome, overlay, goal), indent=2))
    else:
        print(render_text_result(outcome, overlay, goal, lang=args.lang))
    return 0


if __name__ == "__main__":
    sys.exit(main())
