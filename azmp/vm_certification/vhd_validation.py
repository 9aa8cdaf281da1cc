"""Classify VHD files by container format, size and alignment."""

import logging
from pathlib import PurePath

from azmp.vm_certification.filesystem import FileSystem
from azmp.vm_certification.models.certification import VHDValidation

logger = logging.getLogger(__name__)

BYTES_PER_GB = 1024**3
ALIGNMENT_BYTES = 1024 * 1024
MAX_SIZE_GB = 1023
MIN_SIZE_GB = 1

FORMAT_ERROR = "VHD must be in .vhd format (not VHDX)"
ALIGNMENT_ERROR = "VHD size must be 1MB aligned"


def detect_format(vhd_path: str) -> str:
    """Return the container format implied by the file extension.

    Only an exact ``.vhd`` extension (any case) is treated as VHD; every
    other extension is reported as VHDX.
    """
    if PurePath(vhd_path).suffix.lower() == ".vhd":
        return "VHD"
    return "VHDX"


def validate_vhd(vhd_path: str, filesystem: FileSystem) -> VHDValidation:
    """Validate format, size and alignment of a VHD file.

    Args:
        vhd_path: Path to the VHD file
        filesystem: File-system capability used to stat the file

    Returns:
        Validation findings; ``is_valid`` is False when any error was found

    Raises:
        OSError: If the file cannot be stat'ed

    """
    errors: list[str] = []
    warnings: list[str] = []

    image_format = detect_format(vhd_path)
    if image_format != "VHD":
        errors.append(FORMAT_ERROR)

    size_bytes = filesystem.stat(vhd_path).size_bytes
    exact_size_gb = size_bytes / BYTES_PER_GB
    size_gb = round(exact_size_gb, 2)

    if exact_size_gb > MAX_SIZE_GB:
        errors.append(
            f"VHD size ({exact_size_gb:.3f}GB) exceeds maximum of {MAX_SIZE_GB}GB"
        )

    has_correct_alignment = size_bytes % ALIGNMENT_BYTES == 0
    if not has_correct_alignment:
        errors.append(ALIGNMENT_ERROR)

    if exact_size_gb < MIN_SIZE_GB:
        warnings.append(
            f"VHD size ({exact_size_gb:.3f}GB) is very small - verify this is correct"
        )

    logger.debug(
        f"Validated {vhd_path}: format={image_format} size={size_gb}GB "
        f"errors={len(errors)} warnings={len(warnings)}"
    )

    return VHDValidation(
        format=image_format,
        size_gb=size_gb,
        has_correct_alignment=has_correct_alignment,
        errors=errors,
        warnings=warnings,
    )
