"""
Mixins for value objects, whose instances are defined entirely by their attributes.
"""


def quote(val):
    return "None" if val is None else "'%s'" % (val,)


def sorted_attributes(obj):
    return sorted(vars(obj).items())


class StringerMixin:
    """ renders the class name followed by the attributes, sorted by name. """

    def __str__(self):
        items = ", ".join("'%s': %s" % (key, quote(val)) for key, val in sorted_attributes(self))
        return "%s:{%s}" % (type(self).__name__, items)


class CommonEqualityMixin:
    """
    Equality and hashing over the instance attributes. Two instances are equal when they are of
    the same class and their attributes are equal. Hashing requires hashable attribute values.
    """

    def __eq__(self, other):
        return type(other) is type(self) and vars(self) == vars(other)

    def __hash__(self):
        return hash((type(self).__name__,) + tuple(sorted_attributes(self)))
