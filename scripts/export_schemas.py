"""Export JSON schemas for the drafting contract and the status polling response."""

import json
from pathlib import Path

from pydantic import BaseModel

from backend.app.models import DraftedItinerary, PricingConfig, StatusReport

SCHEMAS: dict[str, type[BaseModel]] = {
    "DraftedItinerary": DraftedItinerary,
    "StatusReport": StatusReport,
    "PricingConfig": PricingConfig,
}


def main(schemas_dir: Path = Path("docs/schemas")) -> list[Path]:
    """Export schemas to docs/schemas/."""
    schemas_dir.mkdir(parents=True, exist_ok=True)

    written = []
    for name, model in SCHEMAS.items():
        path = schemas_dir / f"{name}.schema.json"
        with open(path, "w") as f:
            json.dump(model.model_json_schema(by_alias=True), f, indent=2)
        print(f"Exported {name} schema to {path}")
        written.append(path)
    return written


if __name__ == "__main__":
    main()
