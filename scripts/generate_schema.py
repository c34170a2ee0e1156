import json
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from rtlcraft.model import AnalysisReport, DesignIntent, EstimationConfig


def generate_schema():
    output_dir = project_root / "schemas"
    output_dir.mkdir(parents=True, exist_ok=True)

    # Report schema (the --json output of 'rtlcraft.py analyze')
    # Config/intent schemas for callers that build estimation inputs
    for filename, model in (
        ("analysis_report.schema.json", AnalysisReport),
        ("estimation_config.schema.json", EstimationConfig),
        ("design_intent.schema.json", DesignIntent),
    ):
        try:
            schema = model.model_json_schema(by_alias=True)
            with open(output_dir / filename, "w") as f:
                json.dump(schema, f, indent=2)
                f.write("\n")
            print(f"Generated {output_dir / filename}")
        except Exception as e:
            print(f"Error generating {model.__name__} schema: {e}")


if __name__ == "__main__":
    generate_schema()
