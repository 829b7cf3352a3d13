# scripts/generate_schemas.py
"""Write JSON schemas of the public Proofline models to ``docs/schemas``."""

from __future__ import annotations

import json
from inspect import isclass
from pathlib import Path

import proofline.models as models
from proofline.core.changes import ChangeEvent
from proofline.models import ProoflineBaseModel
from proofline.review.rpc import GetProjectForReviewArgs, SubmitClientFeedbackArgs

EXTRA_MODELS = (ChangeEvent, GetProjectForReviewArgs, SubmitClientFeedbackArgs)


def iter_models() -> list[type]:
    """Exported record models plus the RPC argument and change event shapes."""
    found = [
        obj
        for obj in (getattr(models, name, None) for name in models.__all__)
        if isclass(obj) and issubclass(obj, ProoflineBaseModel) and obj is not ProoflineBaseModel
    ]
    return [*found, *EXTRA_MODELS]


def main() -> None:  # pragma: no cover - script entry
    out_dir = Path(__file__).resolve().parents[1] / "docs" / "schemas"
    out_dir.mkdir(parents=True, exist_ok=True)

    for model in iter_models():
        path = out_dir / f"{model.__name__}.json"
        path.write_text(json.dumps(model.model_json_schema(), indent=2, sort_keys=True))
        print(f"wrote {path.relative_to(out_dir.parents[1])}")


if __name__ == "__main__":  # pragma: no cover - CLI execution
    main()
