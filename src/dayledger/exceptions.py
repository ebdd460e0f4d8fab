#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
class MalformedTimeError(Exception):
    pass


class MalformedDateError(Exception):
    pass


class InvalidRangeError(Exception):
    pass


class UnresolvedOverrideConflict(Exception):
    """Raised when two overrides resolve to the same template and date. The
    store guarantees at most one override per pair, so this signals a corrupt
    snapshot rather than a user error."""


class SearchError(Exception):
    pass
