"""Errors raised while fetching and parsing feeds."""


class FeedError(Exception):
    """Base class for all feed download errors."""


class FetchError(FeedError):
    """Raised when the feed document cannot be downloaded."""


class ParseError(FeedError):
    """Raised when the downloaded bytes are not a recognized RSS or Atom feed."""


class IconError(FeedError):
    """Base class for favicon problems. These never fail a download."""


class IconDerivationError(IconError):
    """Raised when no favicon URL can be built from the feed's links."""


class IconFetchError(IconError):
    """Raised when the favicon request fails."""


class IconDecodeError(IconError):
    """Raised when the favicon bytes are not a decodable image."""


class ItemLinkMissing(FeedError):
    """Raised for a feed entry that has no usable link."""
