"""Deterministic asset naming for bulk generation.

Names have the form ``{site_prefix}-{ASSET_TYPE}-{number}`` where numbers are
consecutive from ``start_number`` and zero-padded to at least four digits. The
site prefix is normalised by stripping surrounding whitespace, and the same
normalised prefix is stored as the asset's site.
Preview and generation both go through :func:`generate_names`, so a preview is
always a prefix of the generated batch.
"""

from assetforge.errors import ValidationError

MIN_BATCH_SIZE = 1
MAX_BATCH_SIZE = 100
PREVIEW_SIZE = 5
NUMBER_WIDTH = 4
FALLBACK_ASSET_TYPE = "ASSET"


def validate_naming_inputs(site_prefix: str, count: int, start_number: int) -> None:
    """Raise ValidationError if the naming inputs are out of range."""
    if site_prefix is None or not site_prefix.strip():
        raise ValidationError("Please enter a site prefix")
    if count is None or not MIN_BATCH_SIZE <= count <= MAX_BATCH_SIZE:
        raise ValidationError(
            f"Quantity must be between {MIN_BATCH_SIZE} and {MAX_BATCH_SIZE}",
            {"quantity": count},
        )
    if start_number is None or start_number < 0:
        raise ValidationError(
            "Starting number must be 0 or greater", {"start_number": start_number}
        )


def format_asset_name(site_prefix: str, asset_type: str | None, number: int) -> str:
    """Build one name; the prefix is stripped and the type upper-cased."""
    type_part = (asset_type or "").strip().upper() or FALLBACK_ASSET_TYPE
    return f"{site_prefix.strip()}-{type_part}-{number:0{NUMBER_WIDTH}d}"


def generate_names(
    site_prefix: str, asset_type: str | None, start_number: int, count: int
) -> list[str]:
    """Return ``count`` distinct names numbered from ``start_number``.

    Numbers wider than four digits are kept whole, never truncated.

    Raises:
        ValidationError: on an empty prefix, a count outside 1-100 or a
            negative start number.
    """
    validate_naming_inputs(site_prefix, count, start_number)
    return [
        format_asset_name(site_prefix, asset_type, start_number + offset)
        for offset in range(count)
    ]


def preview_names(
    site_prefix: str, asset_type: str | None, start_number: int, quantity: int
) -> list[str]:
    """First ``min(5, quantity)`` names of the batch ``generate_names`` would build."""
    return generate_names(site_prefix, asset_type, start_number, quantity)[
        :PREVIEW_SIZE
    ]
