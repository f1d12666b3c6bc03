#!/usr/bin/env python3
"""
Check part catalog YAML files.

Each file must match the catalog schema and build a PartCatalog (unique part
names). Keywords shared by more than one part are reported as warnings: a
record mentioning such a keyword counts as a service of every one of them.

Usage:
  validate_catalog.py [FILE_OR_DIR ...]   (default: the bundled catalog)
"""
import sys
from collections import defaultdict
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import yaml
from jsonschema import ValidationError, validate

from fleetparts import PartCatalog
from fleetparts.catalog import DEFAULT_CATALOG_PATH, CatalogError, catalog_from_dict, load_schema


def shared_keywords(catalog: PartCatalog) -> Dict[str, List[str]]:
    """Lower-cased keywords listed under more than one part."""
    owners = defaultdict(list)
    for part in catalog.parts:
        for keyword in {kw.lower() for kw in part.keywords}:
            owners[keyword].append(part.name)
    return {kw: names for kw, names in owners.items() if len(names) > 1}


def check_catalog_file(filepath: Path, schema: dict) -> Tuple[Optional[PartCatalog], List[str]]:
    """Returns the built catalog (None on failure) and a list of errors."""
    try:
        with open(filepath, encoding="utf-8") as f:
            data = yaml.safe_load(f)
        validate(instance=data, schema=schema)
        return catalog_from_dict(data), []
    except yaml.YAMLError as e:
        return None, [f"YAML parse error: {e}"]
    except ValidationError as e:
        errors = [f"Schema validation error: {e.message}"]
        if e.path:
            errors.append(f"  at path: {'.'.join(str(p) for p in e.path)}")
        return None, errors
    except CatalogError as e:
        return None, [f"Catalog error: {e}"]
    except OSError as e:
        return None, [f"Error: {e}"]


def collect_files(args: List[str]) -> List[Path]:
    """Expand directories to the YAML files they contain."""
    files = []
    for arg in args:
        path = Path(arg)
        if path.is_dir():
            files.extend(sorted(list(path.glob("*.yaml")) + list(path.glob("*.yml"))))
        else:
            files.append(path)
    return files


def main(argv=None):
    args = argv if argv is not None else sys.argv[1:]
    files = collect_files(args) if args else [DEFAULT_CATALOG_PATH]
    if not files:
        print("Warning: No catalog files found")
        return 0

    schema = load_schema()
    all_valid = True
    for filepath in files:
        catalog, errors = check_catalog_file(filepath, schema)
        if errors:
            print(f"FAIL: {filepath.name}")
            for error in errors:
                print(f"  {error}")
            all_valid = False
            continue
        print(f"OK: {filepath.name} ({len(catalog)} parts)")
        for keyword, names in sorted(shared_keywords(catalog).items()):
            print(f"  WARN: keyword '{keyword}' is shared by {', '.join(names)}")

    return 0 if all_valid else 1


if __name__ == "__main__":
    sys.exit(main())
