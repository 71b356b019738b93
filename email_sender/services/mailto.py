"""Prefilled compose link for handing a draft to the user's own mail client."""
from urllib.parse import quote


def build_mailto_url(recipients: list[str], subject: str = "", body: str = "") -> str:
    """RFC 6068: mailto:addr1,addr2?subject=...&body=... ("" when there are no recipients)."""
    addrs = [a.strip() for a in recipients or [] if a and a.strip()]
    if not addrs:
        return ""
    params = []
    if subject:
        params.append(f"subject={quote(subject)}")
    if body:
        params.append(f"body={quote(body)}")
    url = "mailto:" + ",".join(quote(a, safe="@") for a in addrs)
    if params:
        url += "?" + "&".join(params)
    return url
