"""
Exceptions raised by the cart and the item configurator.

Rejected selections (a full multi group, a duplicate pick) are not errors and
never raise; these cover misuse of the cart API itself.
"""


class CartError(Exception):
    """Base exception for cart operations."""
    pass


class CartLineNotFoundError(CartError):
    """Raised when an operation references a cart line id that is not in the cart."""

    def __init__(self, line_ids):
        if isinstance(line_ids, str):
            line_ids = [line_ids]
        self.line_ids = list(line_ids)
        super().__init__(f"Cart line(s) not found: {', '.join(self.line_ids)}")


class GroupedLineEditError(CartError):
    """
    Raised when editing a display group backed by more than one cart line.

    A single edited configuration cannot be spread back over several distinct
    lines; the group has to be removed and re-added instead.
    """

    def __init__(self, line_ids):
        self.line_ids = list(line_ids)
        super().__init__(
            "Cannot edit grouped items. Please remove and add again with desired options."
        )


class SelectionIncompleteError(CartError):
    """Raised when committing a configuration while a required option group is empty."""

    def __init__(self, group_names):
        self.group_names = list(group_names)
        super().__init__(f"Required options not selected: {', '.join(self.group_names)}")
