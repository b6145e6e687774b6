"""Error taxonomy shared by the query engine, the HTTP service and the client."""


class InventorySearchError(Exception):
    """Base class for inventory search errors."""


class InvalidArgument(InventorySearchError, ValueError):
    """A required argument is missing or blank. Never retried."""


class UpstreamFailure(InventorySearchError):
    """The transport could not produce a response envelope.

    Raised for connection errors, timeouts and bodies that do not decode as an
    envelope. Failed envelopes returned by the service are not raised.
    """
