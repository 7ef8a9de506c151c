from urllib.parse import urlparse, urlunparse


def canonicalize_url(url: str) -> str:
    cleaned = url.strip()
    if not cleaned:
        return ""

    if "://" not in cleaned:
        cleaned = f"https://{cleaned}"

    parsed = urlparse(cleaned)
    scheme = parsed.scheme if parsed.scheme in {"http", "https"} else "https"
    netloc = (parsed.netloc or parsed.path).lower()
    path = parsed.path if parsed.netloc else ""
    path = path.rstrip("/") or "/"

    return urlunparse((scheme, netloc, path, "", parsed.query, parsed.fragment))


def looks_like_url(value: str) -> bool:
    candidate = value.strip()
    if not candidate or " " in candidate:
        return False
    parsed = urlparse(candidate if "://" in candidate else f"https://{candidate}")
    return "." in parsed.netloc
