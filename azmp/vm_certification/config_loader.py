"""Load certification run options from YAML files."""

from pathlib import Path

import yaml

from azmp.vm_certification.models.config import CertificationOptions


def load_options(options_file: Path) -> CertificationOptions:
    """Load run options from a YAML file.

    Args:
        options_file: Path to the YAML options file

    Returns:
        Parsed run options

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If YAML is invalid or doesn't match schema

    """
    if not options_file.exists():
        raise FileNotFoundError(f"Options file not found: {options_file}")

    try:
        with options_file.open() as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {options_file}: {e}") from e

    if data is None:
        raise ValueError(f"Empty options file: {options_file}")

    if not isinstance(data, dict):
        raise ValueError(f"Options file must contain a mapping: {options_file}")

    try:
        return CertificationOptions.model_validate(data)
    except Exception as e:
        raise ValueError(f"Invalid options schema in {options_file}: {e}") from e


def merge_options(
    base: CertificationOptions, **overrides: object
) -> CertificationOptions:
    """Return a copy of base with every non-None override applied."""
    updates = {key: value for key, value in overrides.items() if value is not None}
    return CertificationOptions.model_validate({**base.model_dump(), **updates})
