import argparse
import json
import logging
import sys
from datetime import date
from pathlib import Path

from cardrewards.api.app import run as run_api
from cardrewards.config import settings
from cardrewards.domain.models import AppSettings
from cardrewards.repository.card_store import CardStore
from cardrewards.schemas.requests import CardRewardsRequest
from cardrewards.schemas.responses import CardRewardsResponse
from cardrewards.services.orchestrator import RewardsOrchestrator
from cardrewards.validators.reward_rule import validate_reward_rule


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Card rewards unified entrypoint")
    parser.add_argument(
        "mode",
        nargs="?",
        choices=["api", "calculate", "validate"],
        default="api",
        help="Run mode: api (default), calculate, validate",
    )
    parser.add_argument("rule_file", nargs="?", help="Reward rule JSON file (validate mode)")
    parser.add_argument("--card", dest="card_id", help="Only calculate this card id")
    parser.add_argument("--date", type=date.fromisoformat, help="Reference date, YYYY-MM-DD")
    parser.add_argument("--data", default=settings.card_data_file, help="Card data JSON file")
    return parser


def _format_rewards(payload: CardRewardsResponse) -> str:
    lines = []
    for item in payload.cards:
        calc = item.calculation
        unit = "miles" if calc.reward_type == "miles" else "cashback"
        lines.append(
            f"{item.card_name} [{item.period.start_date} .. {item.period.end_date}]: "
            f"spend ${calc.total_spend:.2f}, eligible ${calc.eligible_spend:.2f}, "
            f"{unit} {calc.reward_earned:.2f} (${calc.reward_earned_dollars:.2f}, "
            f"{item.effective_rate:.2f}%)"
        )
        for sub in calc.subcategory_breakdowns or []:
            lines.append(f"  - {sub.name} ({sub.flag_color.value}): reward {sub.reward_earned:.2f}")
        for rule in item.rule_calculations:
            lines.append(f"  - rule {rule.rule_id}: reward {rule.reward_earned:.2f}")
    return "\n".join(lines)


def main() -> None:
    args = build_parser().parse_args()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.mode == "api":
        run_api()
        return

    if args.mode == "validate":
        if not args.rule_file:
            raise SystemExit("validate mode needs a rule JSON file")
        payload = json.loads(Path(args.rule_file).read_text(encoding="utf-8"))
        result = validate_reward_rule(payload)
        print(result.model_dump_json(indent=2))
        sys.exit(0 if result.ok else 1)

    orchestrator = RewardsOrchestrator(
        CardStore(args.data),
        AppSettings(miles_valuation=settings.miles_valuation),
    )
    result = orchestrator.card_rewards(CardRewardsRequest(card_id=args.card_id, reference_date=args.date))
    print(_format_rewards(result))


if __name__ == "__main__":
    main()
