"""Line item identity for cart lines.

A cart line is one (product, size, color) combination. The key is the only
identity carts use to merge repeated adds, so it must be stable for the same
variant however the size or color label was spaced when it was picked.
"""


def normalize_option(value) -> str:
    """Trim an option label and collapse inner whitespace runs to one space."""
    if value is None:
        return ""
    return " ".join(str(value).split())


def line_item_key(product_id, size, color) -> str:
    return f"{str(product_id).strip()}-{normalize_option(size)}-{normalize_option(color)}"
