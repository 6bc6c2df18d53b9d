"""
Scenario replay.

Feeds a recorded sequence of pairs through a fresh engine and reports the
verdict of every check for every step. Handy for reproducing a board from
a bug report or pinning down which pair breaks a level.

Scenario format:
    {
        "level": "Level 4.NF+NP",
        "pairs": [
            [["top-0", "bottom-0"], ["top-1", "bottom-1"]],
            {"label": "branch", "connections": [{"nodes": ["top-1", "bottom-0"]},
                                                {"top": "top-2", "bottom": "bottom-1"}]}
        ]
    }

"sequence" and "steps" are accepted in place of "pairs".
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Mapping, Optional, Sequence

from .engine import PuzzleEngine
from .export import to_dot_board
from .levels import canonical_level, describe_level, get_checks_for_level
from .logging_config import configure_logging
from .validation import ScenarioError, ValidationError, as_connection, as_pair
from .violations import RuleCode, TurnResult

logger = logging.getLogger(__name__)


# =============================================================================
# Scenario Normalization
# =============================================================================


def _normalize_connection(value: Any, pair_index: int, conn_index: int) -> list[str]:
    if isinstance(value, (list, tuple)):
        nodes = value
    elif isinstance(value, Mapping) and "nodes" in value:
        nodes = value["nodes"]
    elif isinstance(value, Mapping):
        nodes = [value.get("top"), value.get("bottom")]
    else:
        nodes = None

    if not isinstance(nodes, (list, tuple)) or len(nodes) != 2 or None in nodes:
        raise ScenarioError(
            f"Pair #{pair_index + 1}, connection #{conn_index + 1} must specify two nodes."
        )
    try:
        conn = as_connection(list(nodes))
    except ValidationError as exc:
        raise ScenarioError(f"Pair #{pair_index + 1}, connection #{conn_index + 1}: {exc}") from exc
    return [str(conn.top), str(conn.bottom)]


def _normalize_pair(value: Any, index: int) -> dict[str, Any]:
    label = None
    if isinstance(value, (list, tuple)):
        raw = value
    elif isinstance(value, Mapping):
        raw = value.get("connections", value.get("edges"))
        label = value.get("label", value.get("id"))
    else:
        raw = None

    if not isinstance(raw, (list, tuple)) or len(raw) != 2:
        raise ScenarioError(f"Pair #{index + 1} must describe exactly two vertical connections.")

    return {
        "label": label,
        "connections": [_normalize_connection(conn, index, i) for i, conn in enumerate(raw)],
    }


def normalize_scenario(scenario: Any, level: Optional[str] = None) -> dict[str, Any]:
    """
    Validate a scenario and convert it to {"level", "pairs"}.

    Args:
        scenario: Scenario mapping
        level: Level to use when the scenario names none

    Raises:
        ScenarioError: If the scenario is malformed
        UnknownLevelError: If the level is not known
    """
    if not isinstance(scenario, Mapping):
        raise ScenarioError("Scenario must be an object with { level, pairs }")

    name = scenario.get("level") or level
    if not name:
        raise ScenarioError("Missing level. Provide it in the scenario or via --level.")

    source = scenario.get("pairs", scenario.get("sequence", scenario.get("steps")))
    if not isinstance(source, (list, tuple)):
        raise ScenarioError("Scenario must include a 'pairs' (or 'sequence') array.")

    return {
        "level": canonical_level(name),
        "pairs": [_normalize_pair(pair, i) for i, pair in enumerate(source)],
    }


# =============================================================================
# Replay
# =============================================================================


def _check_steps(level: str, result: TurnResult) -> list[dict[str, Any]]:
    if result.code is RuleCode.CONNECTION:
        return [{"label": "connection", "ok": False, "message": result.message}]

    steps: list[dict[str, Any]] = []
    for spec in get_checks_for_level(level):
        if not result.ok and spec.code is result.code:
            steps.append({"label": spec.label, "ok": False, "message": result.message})
            break
        steps.append({"label": spec.label, "ok": True, "message": None})
    return steps


def replay_sequence(
    scenario: Any,
    *,
    level: Optional[str] = None,
    stop_on_failure: bool = True,
    verbose: bool = False,
) -> dict[str, Any]:
    """
    Replay a scenario through a fresh engine.

    Every pair is submitted as one turn, with row bounds disabled. Failed
    steps are rolled back by the engine, so later steps see the board as
    it was before the failure.

    Args:
        scenario: Scenario mapping (see module docstring)
        level: Level used when the scenario names none
        stop_on_failure: Stop at the first failing step
        verbose: Attach the board state after every step

    Returns:
        {"level", "steps", "final_state"} report, JSON-compatible.

    Raises:
        ScenarioError: If the scenario is malformed
        UnknownLevelError: If the level is not known
    """
    normalized = normalize_scenario(scenario, level)
    name = normalized["level"]
    engine = PuzzleEngine(enforce_row_bounds=False)
    steps: list[dict[str, Any]] = []

    for index, pair in enumerate(normalized["pairs"]):
        result = engine.submit_pair(pair["connections"], name)
        pair_id = as_pair(pair["connections"]).key
        committed = next((p for p in engine.pairs if p.key == pair_id), None)
        record: dict[str, Any] = {
            "index": index + 1,
            "label": pair["label"],
            "pair_id": pair_id,
            "nodes": pair["connections"],
            "color": committed.color if committed else None,
            "ok": result.ok,
            "message": result.message,
            "checks": _check_steps(name, result),
            "violations": [v.to_dict() for v in result.violations],
        }
        if verbose:
            record["state_after"] = engine.summary()
        steps.append(record)
        logger.debug("step %d: %s", index + 1, "ok" if result.ok else result.message)

        if not result.ok and stop_on_failure:
            break

    return {
        "level": name,
        "steps": steps,
        "final_state": engine.summary(),
        "dot": to_dot_board(engine.pattern_log),
    }


# =============================================================================
# Command Line
# =============================================================================


def _is_file(spec: str) -> bool:
    try:
        return Path(spec).is_file()
    except (OSError, ValueError):
        return False


def _load_scenario(spec: str) -> Any:
    try:
        if _is_file(spec):
            return json.loads(Path(spec).read_text(encoding="utf-8-sig"))
        return json.loads(spec)
    except json.JSONDecodeError as exc:
        raise ScenarioError(f"Scenario is neither a file nor valid JSON: {exc}") from exc


def format_report(report: Mapping[str, Any]) -> str:
    """Human readable rendering of a replay report."""
    lines = [f"Level: {report['level']}", describe_level(report["level"])]
    steps = report["steps"]
    if not steps:
        lines.append("No connection pairs processed.")
        return "\n".join(lines)

    for step in steps:
        nodes = " , ".join(f"{top}->{bottom}" for top, bottom in step["nodes"])
        suffix = f" ({step['label']})" if step["label"] else ""
        status = "OK" if step["ok"] else "FAIL"
        lines.append(f"#{step['index']}{suffix}: {nodes} [{status}]")
        for check in step["checks"]:
            state = "ok" if check["ok"] else "fail"
            message = f" :: {check['message']}" if check["message"] else ""
            lines.append(f"  - {state:<4} {check['label']}{message}")

    failed = next((step for step in steps if not step["ok"]), None)
    if failed is None:
        lines.append("All checks passed.")
    else:
        reason = next((c["label"] for c in failed["checks"] if not c["ok"]), "validation failure")
        if any(step["index"] > failed["index"] for step in steps):
            lines.append(
                f"Failure at step #{failed['index']} due to {reason}, "
                "continued processing remaining steps."
            )
        else:
            lines.append(f"Stopped at step #{failed['index']} due to {reason}.")
    return "\n".join(lines)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="taiko-replay",
        description="Replay a sequence of connection pairs and report every check",
    )
    parser.add_argument("scenario", nargs="?", help="Scenario JSON file or inline JSON")
    parser.add_argument("-s", "--scenario", dest="scenario_option", help="Scenario JSON file or inline JSON")
    parser.add_argument("--level", help="Level name (overrides the scenario)")
    parser.add_argument("-p", "--pairs", help="JSON array of pairs (overrides the scenario)")
    parser.add_argument("-c", "--continue", dest="keep_going", action="store_true",
                        help="Keep going after a failing step")
    parser.add_argument("-v", "--verbose", action="store_true", help="Include the board after every step")
    parser.add_argument("-j", "--json", action="store_true", help="Print the report as JSON")
    parser.add_argument("--dot", action="store_true", help="Print the final board as Graphviz DOT")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        type=str.upper,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default WARNING)",
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Entry point of the taiko-replay command."""
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)

    try:
        spec = args.scenario_option or args.scenario
        scenario: Any = _load_scenario(spec) if spec else {}
        if not isinstance(scenario, dict):
            raise ScenarioError("Scenario must be an object with { level, pairs }")
        if args.level:
            scenario["level"] = args.level
        if args.pairs:
            try:
                scenario["pairs"] = json.loads(args.pairs)
            except json.JSONDecodeError:
                raise ScenarioError(
                    "Failed to parse --pairs JSON. Ensure it is a valid JSON array."
                ) from None

        report = replay_sequence(
            scenario,
            stop_on_failure=not args.keep_going,
            verbose=args.verbose,
        )
    except (ValidationError, OSError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps(report, indent=2))
    elif args.dot:
        print(report["dot"])
    else:
        print(format_report(report))
    return 0


if __name__ == "__main__":
    sys.exit(main())
