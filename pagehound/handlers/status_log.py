"""
Status logging handler.

Writes a one-line summary of every document to the diagnostic log, at a
level chosen from the status class.
"""

from pagehound.core.context import CrawlContext
from pagehound.documents import Document
from pagehound.handlers.base import Handler
from pagehound.utils.logging import CrawlerLogger


class StatusLog(Handler):
    """Log "url status length" for each document."""

    type_name = "StatusLog"

    def __init__(self, logger: CrawlerLogger | None = None, **kwargs):
        super().__init__(**kwargs)
        self.logger = logger or CrawlerLogger("status")

    def handle(self, document: Document, context: CrawlContext) -> None:
        length = len(document.body)
        summary = f"{document.url} {document.status} {length}"
        status_class = document.status // 100

        if status_class in (1, 2):
            self.logger.info(summary, url=document.url, status_code=document.status)
        elif status_class == 3:
            self.logger.info(
                summary,
                url=document.url,
                status_code=document.status,
                redirect=True,
                location=document.header("location"),
            )
        elif status_class == 4:
            self.logger.warning(summary, url=document.url, status_code=document.status)
        else:
            self.logger.error(summary, url=document.url, status_code=document.status)

        context.log(self.name, {"status": document.status, "length": length})
