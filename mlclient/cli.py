"""
Predict locally from a model or logistic regression.

Loads the resource from a JSON file (or fetches it by id with the configured
connection), makes one prediction and prints it as JSON.

Usage:
    mlclient-predict --resource model.json --input '{"petal length": 3}'
    mlclient-predict --resource logisticregression/<id> --input '{"age": 40}'
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any

from mlclient.api.resources import get_resource_type
from mlclient.client_logging import get_logger
from mlclient.core.constants import LAST_PREDICTION, PROPORTIONAL
from mlclient.core.exceptions import MLClientError
from mlclient.local.logistic import LocalLogisticRegression
from mlclient.local.model import LocalModel

logger = get_logger(__name__)

MISSING_STRATEGIES = {"last": LAST_PREDICTION, "proportional": PROPORTIONAL}
KINDS = {"model": LocalModel, "logistic": LocalLogisticRegression}


def _load_resource(arg: str) -> str | dict[str, Any]:
    path = Path(arg)
    if path.is_file():
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    return arg


def _detect_kind(resource: str | dict[str, Any]) -> str:
    if isinstance(resource, str):
        return "logistic" if get_resource_type(resource) == "logisticregression" else "model"
    payload = resource.get("object", resource)
    return "logistic" if "logistic_regression" in payload else "model"


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Predict locally from a finished resource")
    ap.add_argument("--resource", required=True, help="resource JSON file or resource id")
    ap.add_argument("--input", required=True, help="input data as a JSON object keyed by field name")
    ap.add_argument("--kind", choices=sorted(KINDS), default=None, help="resource kind (detected by default)")
    ap.add_argument(
        "--missing-strategy",
        choices=sorted(MISSING_STRATEGIES),
        default="last",
        help="missing value strategy for models",
    )
    return ap


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        input_data = json.loads(args.input)
    except json.JSONDecodeError as e:
        print(f"[mlclient] ERROR: --input is not valid JSON: {e}", file=sys.stderr)
        return 1
    if not isinstance(input_data, dict):
        print("[mlclient] ERROR: --input must be a JSON object", file=sys.stderr)
        return 1

    try:
        resource = _load_resource(args.resource)
        kind = args.kind or _detect_kind(resource)
        local = KINDS[kind](resource)
        options: dict[str, Any] = {}
        if kind == "model":
            options["missing_strategy"] = MISSING_STRATEGIES[args.missing_strategy]
        result = local.predict(input_data, **options)
    except (MLClientError, json.JSONDecodeError) as e:
        logger.error("cli_predict_failed", error=str(e))
        print(f"[mlclient] ERROR: {e}", file=sys.stderr)
        return 1
    print(json.dumps(result, indent=2, default=str))
    return 0


if __name__ == "__main__":
    sys.exit(main())
