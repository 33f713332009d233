from pydantic import BaseModel, ConfigDict, model_validator


class Rectangle(BaseModel):
    """
    Half-open integer pixel rectangle.

    A point ``(x, y)`` is inside when ``min_x <= x < max_x`` and
    ``min_y <= y < max_y``.  Frames loaded from disk start at the origin;
    offset rectangles describe frames that only cover part of the scene.

    Parameters
    ----------
    min_x, min_y : int
        Inclusive top-left corner.
    max_x, max_y : int
        Exclusive bottom-right corner.  Must not be smaller than the
        matching minimum.

    Examples
    --------
    >>> r = Rectangle(min_x=0, min_y=0, max_x=640, max_y=480)
    >>> r.intersect(Rectangle(min_x=600, min_y=400, max_x=700, max_y=500))
    Rectangle(min_x=600, min_y=400, max_x=640, max_y=480)
    """
    model_config = ConfigDict(frozen=True)

    min_x: int = 0
    min_y: int = 0
    max_x: int = 0
    max_y: int = 0

    @model_validator(mode="after")
    def validate_corners(self):
        if self.max_x < self.min_x or self.max_y < self.min_y:
            raise ValueError(f"Malformed rectangle: {self!r}")
        return self

    @classmethod
    def from_shape(cls, rows: int, cols: int, origin=(0, 0)) -> "Rectangle":
        x, y = origin
        return cls(min_x=x, min_y=y, max_x=x + cols, max_y=y + rows)

    @property
    def dx(self) -> int:
        return self.max_x - self.min_x

    @property
    def dy(self) -> int:
        return self.max_y - self.min_y

    def empty(self) -> bool:
        return self.min_x >= self.max_x or self.min_y >= self.max_y

    def contains(self, x: int, y: int) -> bool:
        return self.min_x <= x < self.max_x and self.min_y <= y < self.max_y

    def intersect(self, other: "Rectangle") -> "Rectangle":
        """
        Largest rectangle contained in both ``self`` and *other*.

        Returns the zero rectangle when they do not overlap.
        """
        r = Rectangle(
            min_x=max(self.min_x, other.min_x),
            min_y=max(self.min_y, other.min_y),
            max_x=max(min(self.max_x, other.max_x), max(self.min_x, other.min_x)),
            max_y=max(min(self.max_y, other.max_y), max(self.min_y, other.min_y)),
        )
        if r.empty():
            return Rectangle()
        return r
