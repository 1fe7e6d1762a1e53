"""Output generation for schedules (PDF, text agenda)."""

from taskplanner.output.agenda_generator import AgendaGenerator
from taskplanner.output.pdf_generator import PDFGenerator

__all__ = [
    "AgendaGenerator",
    "PDFGenerator",
]
