from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent.parent.parent / "config"
RULES_PATH = BASE_DIR / "rules.toml"
SAMPLE_DATA_PATH = BASE_DIR / "sample.csv"

# violations spelled out in an outcome's detail before it is truncated
MAX_LISTED_VIOLATIONS = 20
