from pydantic import BaseModel, Field


class ScrollResult(BaseModel):
    """Points returned by one scroll page, or by all pages when collected with do_scroll_all."""

    result: list[dict] = Field(default_factory=list)
    # cursor of the following page; None once the last page was read
    next_page_offset: str | int | None = None

    def point_ids(self) -> list[str | int]:
        return [point["id"] for point in self.result if "id" in point]
