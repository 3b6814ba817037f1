"""Write the API's openapi.json for front-end client generation."""

import json
from pathlib import Path

from quirra.main import app


def main() -> None:
    schema = app.openapi()
    output = Path("openapi.json")
    output.write_text(json.dumps(schema, indent=2, ensure_ascii=False) + "\n")
    print(f"Generated {output} ({len(schema['paths'])} paths)")


if __name__ == "__main__":
    main()
