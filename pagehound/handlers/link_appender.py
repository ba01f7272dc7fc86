"""
Link appender handler.

Discovers URLs in HTML documents and feeds the ones not seen before back
into the frontier queue. This is the only way new URLs enter a crawl.
"""

from collections.abc import Set

from pagehound.core.context import CrawlContext
from pagehound.documents import Document, LinkKind
from pagehound.exceptions import InvalidURLError, LinkResolutionError
from pagehound.handlers.base import Handler
from pagehound.models import Request
from pagehound.utils import metrics
from pagehound.utils.options import as_bool
from pagehound.utils.url_utils import (
    HTTP_SCHEMES,
    get_host,
    host_matches_domain,
    parse_http_url,
    resolve_link,
    split_link,
)


class LinkAppender(Handler):
    """
    Enqueue links found in HTML documents.

    Features:
    - Selectable link collections (anchors, images, header links, scripts, frames)
    - Optional domain restriction, including subdomains
    - At-most-once enqueue per URL for the handler's lifetime
    """

    type_name = "LinkAppender"
    OPTIONS = {
        "followhref": "follow_href",
        "followimg": "follow_img",
        "followlink": "follow_link",
        "followscript": "follow_script",
        "followframes": "follow_frames",
        "samedomain": "same_domain",
        "domain": "domain",
    }

    def __init__(
        self,
        follow_href: bool = True,
        follow_img: bool = False,
        follow_link: bool = False,
        follow_script: bool = False,
        follow_frames: bool = False,
        same_domain: bool = False,
        domain: str | None = None,
        **kwargs,
    ):
        """
        Initialize the link appender.

        Args:
            follow_href: Follow <a href> links.
            follow_img: Follow <img src> links.
            follow_link: Follow <link href> links.
            follow_script: Follow <script src> links.
            follow_frames: Follow <frame src> and <iframe src> links.
            same_domain: Restrict to the seed URL's domain when no domain is set.
            domain: Only follow links on this domain or its subdomains.
        """
        super().__init__(**kwargs)
        self.follow_href = as_bool(follow_href, "followhref")
        self.follow_img = as_bool(follow_img, "followimg")
        self.follow_link = as_bool(follow_link, "followlink")
        self.follow_script = as_bool(follow_script, "followscript")
        self.follow_frames = as_bool(follow_frames, "followframes")
        self.same_domain = as_bool(same_domain, "samedomain")
        self.domain = domain.lower().strip(".") if domain else None
        self._discovered: set[str] = set()

    @property
    def discovered(self) -> Set[str]:
        """URLs seen so far (read-only view)."""
        return frozenset(self._discovered)

    def enabled_kinds(self) -> list[LinkKind]:
        """Link collections to harvest, in harvesting order."""
        flags = [
            (LinkKind.ANCHOR, self.follow_href),
            (LinkKind.IMAGE, self.follow_img),
            (LinkKind.HEADER_LINK, self.follow_link),
            (LinkKind.SCRIPT, self.follow_script),
            (LinkKind.FRAME, self.follow_frames),
        ]
        return [kind for kind, enabled in flags if enabled]

    def handle(self, document: Document, context: CrawlContext) -> None:
        if self.same_domain and not self.domain and context.base_url:
            self.domain = get_host(context.base_url) or None

        self._discovered.add(document.url)

        html = document.as_html()
        if html is None:
            return

        for kind in self.enabled_kinds():
            for link in html.links_of(kind):
                url = self._resolve(link, document.url, context)
                if url is None or url in self._discovered:
                    continue

                self._discovered.add(url)
                context.queue.append(Request(url, referrer=document.url))
                context.logger.link_enqueued(url=url, referrer=document.url)
                metrics.record_link_enqueued(get_host(url))

        metrics.update_queue_size(context.queue.size())

    def _resolve(self, link: str, source_url: str, context: CrawlContext) -> str | None:
        """
        Turn a raw link into an absolute URL to enqueue.

        Returns:
            The URL, or None if the link is to be skipped.
        """
        parts = split_link(link)
        if parts is None:
            context.logger.link_rejected(link=link, reason="unparseable")
            return None

        scheme = parts.scheme.lower()
        if scheme and scheme not in HTTP_SCHEMES:
            context.logger.link_rejected(link=link, reason=f"scheme '{scheme}'")
            return None

        if parts.netloc:
            host = (parts.hostname or "").lower()
            if self.domain and not host_matches_domain(host, self.domain):
                context.logger.link_rejected(link=link, reason="outside domain")
                return None
            url = link.strip()
            if not scheme:
                # Scheme-relative link
                url = f"{source_url.split(':', 1)[0]}:{url}"
            try:
                parse_http_url(url)
            except InvalidURLError as e:
                context.log(self.name, {
                    "link": link,
                    "message": f"Unable to parse link URL: {e.reason}",
                })
                return None
            return url

        if not parts.path:
            context.logger.link_rejected(link=link, reason="no host or path")
            return None

        try:
            return resolve_link(source_url, parts)
        except LinkResolutionError as e:
            context.log(self.name, {"link": link, "message": e.message})
            return None

