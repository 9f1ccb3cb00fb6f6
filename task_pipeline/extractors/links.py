"""Link extraction: pull URLs out of the raw task text."""

import re

URL_PATTERN = re.compile(r"https?://\S+")


def extract_links(text: str) -> tuple[str, list[str]]:
    """Split text into (remainder, links).

    Links are kept in order of first occurrence, duplicates included.
    Whitespace around a removed link is left alone.
    """
    links = URL_PATTERN.findall(text)
    remainder = URL_PATTERN.sub("", text)
    return remainder, links
