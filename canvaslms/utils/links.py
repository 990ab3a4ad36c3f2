"""Parsing of RFC 8288 ``Link`` headers used by Canvas for pagination."""
import re
from collections.abc import Collection
from dataclasses import dataclass

import httpx
from loguru import logger

from canvaslms.exceptions import ParseError

LINK_PATTERN = re.compile(r'<(?P<url>.*?)>; rel="(?P<rel>.*?)"')


@dataclass(frozen=True)
class PageLink:
    url: httpx.URL
    page: int


LinkSet = dict[str, PageLink]


def parse_page_link(url: str) -> PageLink:
    """
    Build a PageLink from a linked URL.

    :param url: The URL between the angle brackets of a Link entry
    :return: The parsed URL and its ``page`` query parameter
    :raises ParseError: If the URL is invalid or its page parameter is missing or non-numeric
    """
    try:
        parsed = httpx.URL(url)
    except httpx.InvalidURL as e:
        raise ParseError(f"Invalid link URL {url!r}: {e}") from e

    raw_page = parsed.params.get('page')
    if raw_page is None:
        raise ParseError(f"Could not parse page num: no page parameter in {url!r}")
    try:
        page = int(raw_page, 10)
    except ValueError as e:
        raise ParseError(f"Could not parse page num {raw_page!r} in {url!r}") from e
    if page < 1:
        raise ParseError(f"Page numbers start at 1, got {page} in {url!r}")
    return PageLink(url=parsed, page=page)


def parse_link_header(value: str | None, essential: Collection[str] | None = None) -> LinkSet:
    """
    Extract every ``<URL>; rel="NAME"`` entry from a Link header value.

    A missing or empty header gives an empty LinkSet. Whether an absent relation
    matters is up to the caller.

    :param value: Raw Link header value
    :param essential: Relations that must parse. Malformed links for any other
        relation are logged and skipped. ``None`` treats every relation as essential.
    :return: Mapping of relation name to PageLink
    :raises ParseError: If an essential link has a missing or non-numeric page
    """
    links: LinkSet = {}
    if not value:
        return links

    for match in LINK_PATTERN.finditer(value):
        rel = match.group('rel')
        try:
            links[rel] = parse_page_link(match.group('url'))
        except ParseError as e:
            if essential is None or rel in essential:
                raise
            logger.warning(f'Ignoring malformed "{rel}" link: {e}')
    return links


def parse_response_links(response: httpx.Response, essential: Collection[str] | None = None) -> LinkSet:
    """Parse the Link header of a response."""
    return parse_link_header(response.headers.get('link'), essential=essential)
