#!/usr/bin/env python3
"""
Export the telemetry API's OpenAPI schema to a JSON file.
Usage: export_openapi.py [output.json]   (default: docs/openapi.json)
"""
import json
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from main import app

if __name__ == "__main__":
    default_output = Path(__file__).parent.parent / "docs" / "openapi.json"
    output_file = Path(sys.argv[1]) if len(sys.argv) > 1 else default_output
    output_file.parent.mkdir(parents=True, exist_ok=True)

    openapi_schema = app.openapi()
    with open(output_file, "w") as f:
        json.dump(openapi_schema, f, indent=2)

    paths = openapi_schema.get("paths", {})
    print(f"✓ OpenAPI schema exported to {output_file}")
    print(f"  Title: {openapi_schema.get('info', {}).get('title')}")
    for path in sorted(paths):
        print(f"  {', '.join(m.upper() for m in paths[path])} {path}")
