"""
Counter - a class whose methods message themselves

Fields:
- count: current value
- step: increment used by `increment`
"""

__class_info__ = {
    'name': 'Counter',
    'description': 'Counter with a configurable step',
    'version': '1.0.0',
}

__fields__ = [
    ('count', 0),
    ('step', 1),
]


def increment(self):
    self('count', self('count') + self('step'))
    return self('count')


def increment_by(self, times):
    """Increment `times` times, recursing through the dispatcher"""
    if times <= 0:
        return self('count')
    self('increment')
    return self('increment_by', times - 1)


def reset(self):
    self('count', 0)
    return 0
