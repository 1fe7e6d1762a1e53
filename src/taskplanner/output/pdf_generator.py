"""PDF generation for schedule output.

This module creates printable PDF calendars showing:
- A week grid with every block placed on its day and time
- A summary page with unschedulable tasks and repaired conflicts
"""

from datetime import date, datetime, timedelta
from io import BytesIO
from pathlib import Path
from typing import Optional, Union

from taskplanner.domain.models import (
    BlockStatus,
    CalendarBlock,
    SchedulingResult,
    Task,
)

# Color definitions (RGB tuples, 0-1 scale)
COLORS = {
    BlockStatus.PROPOSED: (0.6, 0.75, 0.95),  # Light blue
    BlockStatus.SCHEDULED: (0.4, 0.6, 0.85),  # Blue
    BlockStatus.ACCEPTED: (0.4, 0.7, 0.4),  # Green
    BlockStatus.REJECTED: (0.85, 0.5, 0.5),  # Red
    BlockStatus.COMPLETED: (0.6, 0.6, 0.6),  # Gray
    BlockStatus.MISSED: (0.8, 0.6, 0.2),  # Orange
    "external": (0.9, 0.9, 0.7),  # Pale yellow
    "grid": (0.85, 0.85, 0.85),
}


class PDFGenerator:
    """Generates printable PDF calendars.

    Example:
        >>> generator = PDFGenerator()
        >>> generator.generate(result, tasks_map, "week.pdf")
    """

    def __init__(
        self,
        page_width: float = 792,  # Letter landscape width (11")
        page_height: float = 612,  # Letter landscape height (8.5")
        margin: float = 36,  # 0.5 inch margins
        day_start_hour: int = 7,
        day_end_hour: int = 20,
    ):
        self.page_width = page_width
        self.page_height = page_height
        self.margin = margin
        self.day_start_hour = day_start_hour
        self.day_end_hour = day_end_hour

    def generate(
        self,
        result: SchedulingResult,
        tasks_map: dict[str, Task],
        output_path: Union[str, Path],
        week_start: Optional[date] = None,
        include_summary: bool = True,
    ) -> None:
        """Generate PDF calendar and save to file.

        Args:
            result: The scheduling result to render.
            tasks_map: Dict mapping task IDs to Task objects.
            output_path: Path to save the PDF.
            week_start: First day shown. Defaults to the day of the earliest block.
            include_summary: Whether to include the summary page.
        """
        canvas, pagesize = self._import_canvas()
        c = canvas.Canvas(str(output_path), pagesize=pagesize)
        self._draw(c, result, tasks_map, week_start, include_summary)
        c.save()

    def generate_to_buffer(
        self,
        result: SchedulingResult,
        tasks_map: dict[str, Task],
        week_start: Optional[date] = None,
        include_summary: bool = True,
    ) -> BytesIO:
        """Generate PDF and return as bytes buffer."""
        canvas, pagesize = self._import_canvas()
        buffer = BytesIO()
        c = canvas.Canvas(buffer, pagesize=pagesize)
        self._draw(c, result, tasks_map, week_start, include_summary)
        c.save()
        buffer.seek(0)
        return buffer

    @staticmethod
    def _import_canvas():
        try:
            from reportlab.lib.pagesizes import landscape, letter
            from reportlab.pdfgen import canvas
        except ImportError:
            raise ImportError(
                "reportlab is required for PDF generation. "
                "Install with: pip install reportlab"
            )
        return canvas, landscape(letter)

    def _draw(
        self,
        c,
        result: SchedulingResult,
        tasks_map: dict[str, Task],
        week_start: Optional[date],
        include_summary: bool,
    ) -> None:
        if week_start is None:
            if result.blocks:
                week_start = min(b.start_time for b in result.blocks).date()
            else:
                week_start = date.today()

        self._draw_week_page(c, result.blocks, week_start)
        if include_summary:
            self._draw_summary_page(c, result, tasks_map)

    def _draw_week_page(self, c, blocks: list[CalendarBlock], week_start: date) -> None:
        """Draw the week grid with one column per day."""
        header_height = 50
        label_width = 40

        grid_left = self.margin + label_width
        grid_right = self.page_width - self.margin
        grid_top = self.page_height - self.margin - header_height
        grid_bottom = self.margin + 30
        column_width = (grid_right - grid_left) / 7
        hours = self.day_end_hour - self.day_start_hour
        hour_height = (grid_top - grid_bottom) / hours

        week_end = week_start + timedelta(days=6)
        c.setFont("Helvetica-Bold", 16)
        c.drawString(
            self.margin,
            self.page_height - self.margin - 20,
            f"Weekly Plan - {week_start.strftime('%b %d')} to {week_end.strftime('%b %d, %Y')}",
        )
        c.setFont("Helvetica", 10)
        c.drawString(
            self.margin,
            self.page_height - self.margin - 35,
            f"Blocks: {len(blocks)}",
        )

        # Day headers and column lines
        c.setStrokeColorRGB(*COLORS["grid"])
        for day in range(7):
            x = grid_left + day * column_width
            current = week_start + timedelta(days=day)
            c.setFillColorRGB(0, 0, 0)
            c.setFont("Helvetica-Bold", 9)
            c.drawCentredString(x + column_width / 2, grid_top + 5, current.strftime("%a %m/%d"))
            c.line(x, grid_top, x, grid_bottom)
        c.line(grid_right, grid_top, grid_right, grid_bottom)

        # Hour lines and labels
        c.setFont("Helvetica", 7)
        for hour in range(hours + 1):
            y = grid_top - hour * hour_height
            c.line(grid_left, y, grid_right, y)
            c.drawRightString(grid_left - 4, y - 3, f"{self.day_start_hour + hour:02d}:00")

        for block in blocks:
            day_index = (block.start_time.date() - week_start).days
            if not 0 <= day_index < 7:
                continue
            top = self._hour_offset(block.start_time)
            bottom = self._hour_offset(block.end_time, same_day_as=block.start_time)
            top = max(0.0, min(top, hours))
            bottom = max(0.0, min(bottom, hours))
            if bottom <= top:
                continue

            x = grid_left + day_index * column_width + 2
            y = grid_top - bottom * hour_height
            height = (bottom - top) * hour_height

            color = COLORS["external"] if block.is_external else COLORS.get(
                block.status, (0.5, 0.5, 0.5)
            )
            c.setFillColorRGB(*color)
            c.setStrokeColorRGB(0.3, 0.3, 0.3)
            c.rect(x, y, column_width - 4, height, fill=1, stroke=1)

            c.setFillColorRGB(0, 0, 0)
            c.setFont("Helvetica", 6)
            c.drawString(x + 2, y + height - 8, block.title[:28])
            if height > 16:
                c.drawString(
                    x + 2,
                    y + height - 15,
                    f"{block.start_time.strftime('%H:%M')}-{block.end_time.strftime('%H:%M')}",
                )

        self._draw_legend(c, self.margin, self.margin + 5)
        c.showPage()

    def _hour_offset(self, moment: datetime, same_day_as: Optional[datetime] = None) -> float:
        """Hours from the top of the grid to a moment."""
        offset = moment.hour + moment.minute / 60 - self.day_start_hour
        if same_day_as is not None and moment.date() > same_day_as.date():
            offset += 24 * (moment.date() - same_day_as.date()).days
        return offset

    def _draw_legend(self, c, x: float, y: float) -> None:
        """Draw legend for colors."""
        c.setFont("Helvetica-Bold", 8)
        c.setFillColorRGB(0, 0, 0)
        c.drawString(x, y, "Legend:")

        items = [(status, status.value.title()) for status in BlockStatus]
        items.append(("external", "External"))

        c.setFont("Helvetica", 7)
        current_x = x + 45
        for key, label in items:
            c.setFillColorRGB(*COLORS.get(key, (0.5, 0.5, 0.5)))
            c.rect(current_x, y - 2, 12, 10, fill=1, stroke=1)
            c.setFillColorRGB(0, 0, 0)
            c.drawString(current_x + 15, y, label)
            current_x += 75

    def _draw_summary_page(
        self,
        c,
        result: SchedulingResult,
        tasks_map: dict[str, Task],
    ) -> None:
        """Draw summary page with unschedulable tasks and conflicts."""
        c.setFont("Helvetica-Bold", 16)
        c.drawString(self.margin, self.page_height - self.margin - 20, "Schedule Summary")

        y = self.page_height - self.margin - 50
        c.setFont("Helvetica", 10)
        c.drawString(self.margin, y, result.message or "")
        y -= 25

        summary = result.get_summary()
        c.setFont("Helvetica-Bold", 12)
        c.drawString(self.margin, y, "Overview")
        y -= 18
        c.setFont("Helvetica", 10)
        for line in [
            f"Blocks: {summary['total_blocks']}",
            f"Scheduled Hours: {summary['scheduled_minutes'] / 60:.1f}",
            f"Tasks Processed: {summary['tasks_processed']} of {summary['tasks_considered']}",
            f"Conflicts Repaired: {summary['conflicts']}",
        ]:
            c.drawString(self.margin + 20, y, line)
            y -= 15

        y -= 15
        c.setFont("Helvetica-Bold", 12)
        c.drawString(self.margin, y, "Unschedulable Tasks")
        y -= 18
        c.setFont("Helvetica", 9)
        if not result.unschedulable:
            c.drawString(self.margin + 20, y, "None")
            y -= 14
        for entry in result.unschedulable:
            if y < self.margin + 20:
                c.showPage()
                y = self.page_height - self.margin - 20
                c.setFont("Helvetica", 9)
            task = tasks_map.get(entry.task_id)
            title = task.title if task else entry.task_id
            c.drawString(
                self.margin + 20,
                y,
                f"{title[:50]}: needs {entry.required_minutes} min, "
                f"placed {entry.scheduled_minutes}, short {entry.shortfall_minutes} "
                f"({entry.reason})",
            )
            y -= 14

        y -= 15
        c.setFont("Helvetica-Bold", 12)
        c.drawString(self.margin, y, "Conflicts")
        y -= 18
        c.setFont("Helvetica", 9)
        if not result.conflicts:
            c.drawString(self.margin + 20, y, "None")
        for conflict in result.conflicts:
            if y < self.margin + 20:
                c.showPage()
                y = self.page_height - self.margin - 20
                c.setFont("Helvetica", 9)
            c.drawString(
                self.margin + 20,
                y,
                f"{conflict.overlap_start.strftime('%a %H:%M')}-"
                f"{conflict.overlap_end.strftime('%H:%M')} "
                f"({conflict.overlap_minutes} min): {conflict.resolution}",
            )
            y -= 14

        c.showPage()
