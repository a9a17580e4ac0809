"""
Mixins for the value objects: tracks, events, control messages and settings.
The value of an object is its instance dictionary.
"""


def quote(val):
    return "None" if val is None else "'%s'" % (val,)


class StringerMixin:
    """ renders the class name and the attribute values, sorted by attribute name. """

    def __str__(self):
        items = ("'%s': %s" % (key.lstrip('_'), quote(val)) for key, val in sorted(self.__dict__.items()))
        return "%s:{%s}" % (type(self).__name__, ", ".join(items))

    def __repr__(self):
        return str(self)


class CommonEqualityMixin:
    """
    Equality and hashing by value. Objects are equal when they have the same type
    and equal attributes. Instances must not be modified once they are hashed.
    """

    def __eq__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        return self.__dict__ == other.__dict__

    def __ne__(self, other):
        result = self.__eq__(other)
        return result if result is NotImplemented else not result

    def __hash__(self):
        return hash((type(self),) + tuple(sorted(self.__dict__.items())))
