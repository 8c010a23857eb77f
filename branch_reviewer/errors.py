class ReviewerError(Exception):
    """Base class for failures that abort a review invocation."""


class InvalidRevision(ReviewerError):
    pass


class NoMergeBase(ReviewerError):
    pass


class SubprocessFailure(ReviewerError):
    pass


class EmptyChangeSet(ReviewerError):
    pass


class BoundaryError(ReviewerError):
    """The chat endpoint failed or returned something unusable."""


class TransportError(BoundaryError):
    pass


class MalformedResponse(BoundaryError):
    pass
