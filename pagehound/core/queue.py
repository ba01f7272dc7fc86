"""
Frontier queue for pagehound.

Holds pending requests and serves them in one of two orders, fixed when the
queue is created:

- FIFO (default) serves the longest-pending request first, which gives a
  breadth-first crawl shape.
- LIFO serves the newest request first, so the crawl finishes the
  dependencies of one page before moving on to the next.

The queue applies no deduplication or filtering; URL discovery sources own
that policy.
"""

from collections import deque

from pagehound.models import Request


class FrontierQueue:
    """Ordered collection of pending requests."""

    def __init__(self, lifo: bool = False):
        self._lifo = bool(lifo)
        self._targets: deque[Request] = deque()

    @property
    def lifo(self) -> bool:
        return self._lifo

    def append(self, target: Request | str) -> Request:
        """
        Add a request to the queue.

        Args:
            target: A Request, or a URL string which is wrapped into a GET
                request.

        Returns:
            The queued request.

        Raises:
            InvalidURLError: If a URL string is not a valid HTTP URL.
        """
        request = target if isinstance(target, Request) else Request(str(target))
        self._targets.append(request)
        return request

    def next(self) -> Request | None:
        """
        Remove and return the next request.

        Returns:
            The next request, or None when nothing is pending.
        """
        if not self._targets:
            return None
        return self._targets.pop() if self._lifo else self._targets.popleft()

    def size(self) -> int:
        """Number of pending requests."""
        return len(self._targets)

    def __len__(self) -> int:
        return len(self._targets)

    def __bool__(self) -> bool:
        return bool(self._targets)

    def __repr__(self) -> str:
        discipline = "LIFO" if self._lifo else "FIFO"
        return f"FrontierQueue({discipline}, pending={len(self._targets)})"
