from __future__ import annotations


class OdooError(RuntimeError):
    """Raised for Odoo authentication, RPC and workflow failures."""


_KNOWN_FAILURES: list[tuple[tuple[str, ...], str]] = [
    (
        ("pos.order.create_from_ui",),
        "the connected Odoo instance does not expose the create_from_ui POS API. "
        "Ensure the POS module is installed or disable POS sync.",
    ),
    (
        ("No open POS session",),
        "no open POS session was found. Start a POS session in Odoo before sending kitchen tickets.",
    ),
    (
        ("No POS configuration",),
        "no POS configuration is available in Odoo. Configure a POS or disable POS sync.",
    ),
    (
        ("does not match format", "time data"),
        "Odoo rejected the order timestamp. Check the server timezone configuration.",
    ),
]


def describe_odoo_error(error: BaseException | str | None, context: str) -> str:
    """Turn an Odoo failure into a one-line warning prefixed with *context*."""
    raw = str(error) if error is not None else ""
    if not raw:
        return f"{context}: unexpected error"

    for needles, friendly in _KNOWN_FAILURES:
        if all(needle in raw for needle in needles):
            return f"{context}: {friendly}"

    concise = raw.split("\n")[0].split("::")[0].strip() or raw.strip()
    return f"{context}: {concise}"
