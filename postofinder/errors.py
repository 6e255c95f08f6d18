from __future__ import annotations


class PostoFinderError(Exception):
    """Base class for errors surfaced to callers of the station lookup."""


class InputError(PostoFinderError):
    """Coordinates were missing, malformed or outside geographic bounds."""


class UpstreamUnavailable(PostoFinderError):
    """The Overpass geo source could not be reached or answered badly."""


class StationLookupError(PostoFinderError):
    """Any other failure while assembling the station list."""
