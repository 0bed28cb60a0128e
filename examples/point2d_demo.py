"""
Point2D Demo

Loads the Point2D class module and walks through dispatching messages.

Run from the repository root:
    python examples/point2d_demo.py
"""
from pathlib import Path

from object_dispatch import DispatchConfig, MISSING, ObjectRuntime


def main():
    runtime = ObjectRuntime(config=DispatchConfig(trace=True))
    runtime.load_class(Path(__file__).parent / 'classes' / 'point2d.py')

    a = runtime.new('point2d', ('x', 1), ('y', -2))
    b = runtime.new('point2d')

    print(f"A = {a('as_tuple')}, B = {b('as_tuple')}")
    print(f"A . B = {a('dot', b)}")

    b('y', 42)
    print(f"after B.y = 42: B . A = {b('dot', a)}")

    result = a('z')
    print(f"A.z -> {result!r} (missing: {result is MISSING})")

    print()
    print("A's log:")
    for entry in runtime.get_logs(a):
        print(f"  {entry['level']:<8} {entry['message']}")


if __name__ == '__main__':
    main()
