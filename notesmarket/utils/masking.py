"""Wallet address masking: partial redaction for anyone who does not own the address."""

VISIBLE_START_CHARS = 8
VISIBLE_END_CHARS = 8
MASK_SEPARATOR = "..."


def mask(address: str | None) -> str | None:
    """
    Keep the first and last 8 characters, drop everything in between.
    None, empty and short addresses (<= 16 chars) are returned unchanged.
    """
    if not address:
        return address
    if len(address) <= VISIBLE_START_CHARS + VISIBLE_END_CHARS:
        return address
    return address[:VISIBLE_START_CHARS] + MASK_SEPARATOR + address[-VISIBLE_END_CHARS:]


def mask_for_viewer(address: str | None, viewer_own_address: str | None) -> str | None:
    """Full address only if it is exactly the viewer's own address, masked otherwise."""
    if address == viewer_own_address:
        return address
    return mask(address)
