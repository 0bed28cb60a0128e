"""
Point2D - a class written as a class module

Fields:
- x, y: coordinates (both default to 0)

Methods take the instance's dispatcher as `self` and talk to it (and to
other instances) only through messages.
"""
import math

__class_info__ = {
    'name': 'Point2D',
    'description': 'Point in the plane',
    'version': '1.0.0',
    'author': 'object-dispatch',
}

__fields__ = [
    ('x', 0),
    ('y', 0),
]


def dot(self, other):
    """Dot product with another point"""
    return self('x') * other('x') + self('y') * other('y')


def norm(self):
    """Euclidean length"""
    return math.sqrt(self('dot', self))


def translate(self, dx, dy):
    """Move in place; returns self so calls can be chained"""
    self('x', self('x') + dx)
    self('y', self('y') + dy)
    return self


def as_tuple(self):
    return (self('x'), self('y'))
