"""
SVG path data parsing and export.

Parsing supports M L H V C S Q T A Z in absolute and relative form, with
implicit command repetition. A path ends at its first closepath; use
parse_svg_paths for data holding several subpaths.
"""

import re

from bezierfit.errors import ParseError
from bezierfit.models import Arc, BezierCurve, Cubic, Line, Point, Quadratic, arc, cubic, line, quad

_TOKEN_RE = re.compile(
    r"(?P<command>[A-Za-z])"
    r"|(?P<number>[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)"
    r"|(?P<separator>[\s,]+)"
    r"|(?P<other>.)"
)

# Numbers consumed per repetition of each command
_ARITY = {"M": 2, "L": 2, "H": 1, "V": 1, "C": 6, "S": 4, "Q": 4, "T": 2, "A": 7, "Z": 0}


def tokenize(data):
    """
    Split path data into (command, [numbers]) pairs.

    Signs start a new number unless they follow an exponent, and a second
    decimal point starts a new number, so "1-2.5.5" reads as 1, -2.5, .5.
    """
    commands = []
    for match in _TOKEN_RE.finditer(data):
        kind = match.lastgroup
        text = match.group()

        if kind == "command":
            if text.upper() not in _ARITY:
                raise ParseError(f"Unknown command '{text}' at position {match.start()}")
            commands.append((text, []))
        elif kind == "number":
            if not commands:
                raise ParseError(f"Path data must start with a command, found '{text}'")
            commands[-1][1].append(float(text))
        elif kind == "other":
            raise ParseError(f"Unexpected character '{text}' at position {match.start()}")

    return commands


class _PathBuilder:
    """Turns tokenized commands into segments, tracking the pen state."""

    def __init__(self):
        self.current = Point(x=0.0, y=0.0)
        self.start = self.current
        self.segments = []
        self.last_was_move = False

    def _point(self, x, y, relative):
        if relative:
            return Point(x=self.current.x + x, y=self.current.y + y)
        return Point(x=x, y=y)

    def _push(self, segment):
        self.segments.append(segment)
        self.current = segment.last_point
        self.last_was_move = False

    def apply(self, command, numbers):
        name = command.upper()
        relative = command.islower()
        arity = _ARITY[name]

        if name == "Z":
            if numbers:
                raise ParseError(f"Command '{command}' takes no arguments, got {len(numbers)}")
            self.close()
            return

        if not numbers or len(numbers) % arity != 0:
            raise ParseError(
                f"Command '{command}' needs a multiple of {arity} numbers, got {len(numbers)}"
            )

        handler = getattr(self, f"_{name.lower()}")
        for i in range(0, len(numbers), arity):
            # extra pairs after a move are implicit line-tos
            if name == "M" and i > 0:
                self._l(numbers[i:i + 2], relative)
            else:
                handler(numbers[i:i + arity], relative)

    def _m(self, args, relative):
        target = self._point(args[0], args[1], relative)
        if self.last_was_move:
            self.segments.append(line(self.current, target))
        self.current = target
        self.start = target
        self.last_was_move = True

    def _l(self, args, relative):
        self._push(line(self.current, self._point(args[0], args[1], relative)))

    def _h(self, args, relative):
        x = self.current.x + args[0] if relative else args[0]
        self._push(line(self.current, Point(x=x, y=self.current.y)))

    def _v(self, args, relative):
        y = self.current.y + args[0] if relative else args[0]
        self._push(line(self.current, Point(x=self.current.x, y=y)))

    def _c(self, args, relative):
        p1 = self._point(args[0], args[1], relative)
        p2 = self._point(args[2], args[3], relative)
        end = self._point(args[4], args[5], relative)
        self._push(cubic(self.current, p1, p2, end))

    def _s(self, args, relative):
        p2 = self._point(args[0], args[1], relative)
        end = self._point(args[2], args[3], relative)
        p1 = self._reflected_control(Cubic, 2)
        self._push(cubic(self.current, p1, p2, end))

    def _q(self, args, relative):
        p1 = self._point(args[0], args[1], relative)
        end = self._point(args[2], args[3], relative)
        self._push(quad(self.current, p1, end))

    def _t(self, args, relative):
        end = self._point(args[0], args[1], relative)
        p1 = self._reflected_control(Quadratic, 1)
        self._push(quad(self.current, p1, end))

    def _a(self, args, relative):
        end = self._point(args[5], args[6], relative)
        self._push(arc(
            self.current,
            end,
            rx=args[0],
            ry=args[1],
            angle=args[2],
            large_arc=args[3] != 0.0,
            sweep=args[4] != 0.0,
        ))

    def _reflected_control(self, kind, index):
        """Previous segment's control point mirrored through the pen."""
        if self.segments and isinstance(self.segments[-1], kind):
            ctrl = self.segments[-1].points[index]
            return Point(x=2.0 * self.current.x - ctrl.x, y=2.0 * self.current.y - ctrl.y)
        return self.current

    def close(self):
        if self.current != self.start:
            self.segments.append(line(self.current, self.start))
            self.current = self.start
        self.last_was_move = False


def _build(commands):
    builder = _PathBuilder()
    closed = False
    for command, numbers in commands:
        builder.apply(command, numbers)
        if command in "Zz":
            closed = True

    if closed and builder.segments:
        return BezierCurve.new_closed(builder.segments)
    return BezierCurve.new(builder.segments)


def _split_subpaths(commands):
    subpaths = [[]]
    for command, numbers in commands:
        subpaths[-1].append((command, numbers))
        if command in "Zz":
            subpaths.append([])
    return [s for s in subpaths if s]


def parse_svg_path(data):
    """
    Parse one path. A closepath yields a closed curve.

    Raises:
        ParseError: malformed data, or more commands after a closepath
    """
    subpaths = _split_subpaths(tokenize(data))
    if len(subpaths) > 1:
        raise ParseError("Path data holds multiple subpaths; use parse_svg_paths")
    return _build(subpaths[0] if subpaths else [])


def parse_svg_paths(data):
    """Parse path data into one curve per closepath-terminated subpath."""
    return [_build(subpath) for subpath in _split_subpaths(tokenize(data))]


def format_number(value):
    """Shortest text for a float: 10.0 -> '10', 0.5 -> '0.5'."""
    value = float(value)
    if value.is_integer():
        return str(int(value))
    return repr(value)


def _pair(p):
    return f"{format_number(p.x)},{format_number(p.y)}"


def _segment_command(segment):
    if isinstance(segment, Line):
        p0, p1 = segment.points
        if p1.x == p0.x:
            return f"V {format_number(p1.y)}"
        if p1.y == p0.y:
            return f"H {format_number(p1.x)}"
        return f"L {_pair(p1)}"
    if isinstance(segment, Quadratic):
        return f"Q {_pair(segment.points[1])} {_pair(segment.points[2])}"
    if isinstance(segment, Cubic):
        return "C " + " ".join(_pair(p) for p in segment.points[1:])
    if isinstance(segment, Arc):
        return (
            f"A {format_number(segment.rx)},{format_number(segment.ry)} "
            f"{format_number(segment.angle)},{int(segment.large_arc)},{int(segment.sweep)} "
            f"{_pair(segment.end)}"
        )
    raise TypeError(f"Not a segment: {type(segment).__name__}")


def to_svg_path(curve):
    """
    Export a curve as path data, e.g. "M 50,200 C 100,50 200,50 250,200".

    An empty curve gives an empty string. A closed curve ends with " Z".
    """
    if not curve.segments:
        return ""

    parts = [f"M {_pair(curve.segments[0].first_point)}"]
    parts.extend(_segment_command(s) for s in curve.segments)
    result = " ".join(parts)
    if curve.is_closed:
        result += " Z"
    return result
